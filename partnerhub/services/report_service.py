from flask import current_app

from partnerhub.errors import NotFoundError, StateConflictError, ValidationError
from partnerhub.extensions import db
from partnerhub.models import Booking, Report, User
from partnerhub.models.base import utcnow

MIN_REASON_LENGTH = 10
REVIEW_STATUSES = frozenset({"reviewed", "resolved", "rejected"})
CLOSED_STATUSES = frozenset({"resolved", "rejected"})


def _lookup(model, raw_id):
    try:
        return db.session.get(model, int(raw_id))
    except (TypeError, ValueError):
        return None


class ReportService:
    @staticmethod
    def create_report(reporter, reported_user_id, reason, description=None, booking_id=None):
        reason = (reason or "").strip()
        if not reported_user_id or not reason:
            raise ValidationError("reportedUserId and reason are required.")
        if len(reason) < MIN_REASON_LENGTH:
            raise ValidationError(f"Reason must be at least {MIN_REASON_LENGTH} characters.")

        reported = _lookup(User, reported_user_id)
        if reported and reported.id == reporter.id:
            raise ValidationError("Cannot report yourself.")
        if not reported:
            raise NotFoundError("Reported user not found.")

        booking = None
        if booking_id:
            booking = _lookup(Booking, booking_id)
            if not booking:
                raise NotFoundError("Booking not found.")

        report = Report(
            reporter_id=reporter.id,
            reported_user_id=reported.id,
            booking_id=booking.id if booking else None,
            reason=reason,
            description=(description or "").strip() or None,
            status="pending",
        )
        db.session.add(report)
        db.session.commit()
        current_app.logger.info("Report %s filed by user %s against user %s", report.id, reporter.id, reported.id)
        return report

    @staticmethod
    def list_reports(status=None):
        query = Report.query.order_by(Report.created_at.desc(), Report.id.desc())
        if status:
            query = query.filter_by(status=status)
        return query.all()

    @staticmethod
    def review_report(report_id, status, admin_notes=None):
        status = (status or "").strip().lower()
        if status not in REVIEW_STATUSES:
            raise ValidationError("Status must be one of reviewed, resolved or rejected.")

        report = db.session.get(Report, report_id)
        if not report:
            raise NotFoundError("Report not found.")

        values = {Report.status: status}
        if admin_notes is not None:
            values[Report.admin_notes] = (admin_notes or "").strip() or None
        if status in CLOSED_STATUSES:
            values[Report.resolved_at] = utcnow()

        updated = (
            Report.query.filter(Report.id == report.id, Report.status.in_(("pending", "reviewed")))
            .update(values, synchronize_session=False)
        )
        if not updated:
            db.session.rollback()
            raise StateConflictError("Report has already been closed.")
        db.session.commit()
        current_app.logger.info("Report %s marked %s", report.id, status)

        db.session.refresh(report)
        return report
