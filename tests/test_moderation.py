from datetime import timedelta

import pytest

from partnerhub.errors import NotFoundError, StateConflictError, ValidationError
from partnerhub.models.base import utcnow
from partnerhub.services import BookingService, PartnerService, ReportService

REASON = "Repeatedly rude during the session"


def test_approving_an_application_opens_bookings(make_user, make_partner):
    partner = make_partner(approval_status="pending")

    partner = PartnerService.update_status(partner.id, "approved")

    assert partner.approval_status == "approved"
    day = (utcnow().date() + timedelta(days=2)).isoformat()
    booking = BookingService.create_booking(make_user(), partner.id, day, "10:00", "11:00")
    assert booking.status == "pending"


@pytest.mark.parametrize("first,second", [("approved", "rejected"), ("rejected", "approved"), ("approved", "approved")])
def test_application_decision_is_final(make_partner, first, second):
    partner = make_partner(approval_status="pending")
    PartnerService.update_status(partner.id, first)

    with pytest.raises(StateConflictError) as excinfo:
        PartnerService.update_status(partner.id, second)

    assert excinfo.value.status_code == 400
    assert PartnerService.list_applications(first)[0].id == partner.id


def test_application_decision_is_validated(make_partner):
    partner = make_partner(approval_status="pending")

    with pytest.raises(ValidationError):
        PartnerService.update_status(partner.id, "pending")
    with pytest.raises(NotFoundError):
        PartnerService.update_status(9999, "approved")


def test_list_applications_filters_by_status(make_partner):
    pending = make_partner(approval_status="pending")
    make_partner()

    assert len(PartnerService.list_applications()) == 2
    assert [p.id for p in PartnerService.list_applications("pending")] == [pending.id]


def test_report_is_filed_against_another_user(make_user, make_partner, make_booking):
    reporter = make_user()
    partner = make_partner()
    booking = make_booking(reporter, partner)

    report = ReportService.create_report(reporter, partner.user_id, f"  {REASON} ", "Details", booking.id)

    assert report.status == "pending"
    assert report.reason == REASON
    assert report.booking_id == booking.id
    assert report.reported_user_id == partner.user_id


def test_report_validation(make_user):
    reporter = make_user()
    other = make_user()

    with pytest.raises(ValidationError):
        ReportService.create_report(reporter, None, REASON)
    with pytest.raises(ValidationError):
        ReportService.create_report(reporter, other.id, "too short")
    with pytest.raises(ValidationError):
        ReportService.create_report(reporter, reporter.id, REASON)
    with pytest.raises(NotFoundError):
        ReportService.create_report(reporter, 9999, REASON)
    with pytest.raises(NotFoundError):
        ReportService.create_report(reporter, other.id, REASON, booking_id=9999)


def test_closed_report_cannot_be_reviewed_again(make_user):
    report = ReportService.create_report(make_user(), make_user().id, REASON)

    report = ReportService.review_report(report.id, "reviewed", "Looking into it")
    assert report.resolved_at is None
    report = ReportService.review_report(report.id, "resolved")
    assert report.resolved_at is not None
    assert report.admin_notes == "Looking into it"

    with pytest.raises(StateConflictError):
        ReportService.review_report(report.id, "rejected")


def test_admin_partner_endpoints(client, login, make_user, make_partner):
    partner = make_partner(approval_status="pending")
    partner_id = partner.id
    partner_user = partner.user

    login(partner_user)
    assert client.get("/api/v1/admin/partners").status_code == 403

    login(make_user(role="admin"))
    body = client.get("/api/v1/admin/partners?status=pending").get_json()
    assert body["count"] == 1
    assert body["data"][0]["approvalStatus"] == "pending"

    resp = client.patch(f"/api/v1/admin/partners/{partner_id}", json={"approvalStatus": "approved"})
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "approved"

    resp = client.patch(f"/api/v1/admin/partners/{partner_id}", json={"approvalStatus": "rejected"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Application already processed."


def test_report_endpoints(client, login, make_user):
    reporter = make_user()
    reported = make_user()
    reported_id = reported.id
    admin = make_user(role="admin")

    login(reporter)
    resp = client.post("/api/v1/reports", json={"reportedUserId": reported_id, "reason": REASON})
    assert resp.status_code == 201
    report_id = resp.get_json()["report"]["id"]

    resp = client.post("/api/v1/reports", json={"reportedUserId": reported_id, "reason": "short"})
    assert resp.status_code == 400

    login(admin)
    body = client.get("/api/v1/admin/reports?status=pending").get_json()
    assert [r["id"] for r in body["data"]] == [report_id]

    resp = client.patch(f"/api/v1/admin/reports/{report_id}", json={"status": "rejected", "adminNotes": "No evidence"})
    assert resp.status_code == 200
    assert resp.get_json()["report"]["status"] == "rejected"
    assert client.get("/api/v1/admin/reports?status=pending").get_json()["count"] == 0
