from flask import current_app

from partnerhub.errors import NotFoundError, StateConflictError, ValidationError
from partnerhub.extensions import db
from partnerhub.models import Partner

APPROVAL_DECISIONS = frozenset({"approved", "rejected"})


class PartnerService:
    @staticmethod
    def list_applications(status=None):
        query = Partner.query.order_by(Partner.created_at.desc(), Partner.id.desc())
        if status:
            query = query.filter_by(approval_status=status)
        return query.all()

    @staticmethod
    def update_status(partner_id, approval_status):
        """Approve or reject a pending application. Decisions are final."""
        approval_status = (approval_status or "").strip().lower()
        if approval_status not in APPROVAL_DECISIONS:
            raise ValidationError('Approval status must be either "approved" or "rejected".')

        partner = db.session.get(Partner, partner_id)
        if not partner:
            raise NotFoundError("Partner application not found.")

        updated = (
            Partner.query.filter_by(id=partner.id, approval_status="pending")
            .update({Partner.approval_status: approval_status}, synchronize_session=False)
        )
        if not updated:
            db.session.rollback()
            raise StateConflictError("Application already processed.")
        db.session.commit()
        current_app.logger.info("Partner application %s %s", partner.id, approval_status)

        db.session.refresh(partner)
        return partner
