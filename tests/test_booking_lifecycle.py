from datetime import date, timedelta

import pytest

from models import AuditLog, Booking
from services.booking_lifecycle import TERMINAL, TRANSITIONS, can_transition

IN_A_WEEK = (date.today() + timedelta(days=7)).isoformat()


def _book(client, headers, hostel_id, key=None, **overrides):
    body = {"hostelId": hostel_id, "preferredDate": IN_A_WEEK, "preferredTime": "10:00"}
    body.update(overrides)
    if key:
        headers = dict(headers, **{"Idempotency-Key": key})
    return client.post("/api/bookings", json=body, headers=headers)


@pytest.mark.parametrize("current,requested,ok", [
    ("pending", "confirmed", True),
    ("pending", "cancelled", True),
    ("pending", "completed", False),
    ("confirmed", "completed", True),
    ("confirmed", "cancelled", True),
    ("confirmed", "pending", False),
    ("cancelled", "confirmed", False),
    ("completed", "cancelled", False),
])
def test_transition_table(current, requested, ok):
    assert can_transition(current, requested) is ok


def test_terminal_states_have_no_exits():
    assert TERMINAL == {"cancelled", "completed"}
    assert all(not TRANSITIONS[state] for state in TERMINAL)


def test_student_creates_pending_booking(client, world, login):
    resp = _book(client, login("student@example.com"), world["hostel_id"], message="Is water constant?")
    assert resp.status_code == 201

    booking = resp.get_json()
    assert booking["status"] == "pending"
    assert booking["studentId"] == world["student_id"]
    assert booking["hostel"]["id"] == world["hostel_id"]
    assert booking["preferredDate"] == IN_A_WEEK


def test_only_students_can_book(client, world, login):
    for email in ("agent@example.com", "admin@example.com"):
        assert _book(client, login(email), world["hostel_id"]).status_code == 403
    assert _book(client, {}, world["hostel_id"]).status_code == 401


def test_booking_unknown_or_unavailable_hostel(client, world, factory, login):
    headers = login("student@example.com")
    assert _book(client, headers, "missing").status_code == 404

    closed = factory.hostel(world["agent_id"], world["location_id"], availability=False)
    resp = _book(client, headers, closed)
    assert resp.status_code == 409


def test_booking_date_in_the_past_is_rejected(client, world, login):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    resp = _book(client, login("student@example.com"), world["hostel_id"], preferredDate=yesterday)
    assert resp.status_code == 400


def test_idempotent_create_replays_first_booking(app, client, world, login):
    headers = login("student@example.com")
    first = _book(client, headers, world["hostel_id"], key="req-1")
    again = _book(client, headers, world["hostel_id"], key="req-1")

    assert first.status_code == 201
    assert again.status_code == 200
    assert again.get_json()["id"] == first.get_json()["id"]
    with app.app_context():
        assert Booking.query.count() == 1

    # a different key is a different request
    assert _book(client, headers, world["hostel_id"], key="req-2").status_code == 201


def test_idempotency_key_is_scoped_per_student(client, world, login):
    first = _book(client, login("student@example.com"), world["hostel_id"], key="same")
    other = _book(client, login("student2@example.com"), world["hostel_id"], key="same")
    assert other.status_code == 201
    assert other.get_json()["id"] != first.get_json()["id"]


def test_overlong_idempotency_key_is_rejected(client, world, login):
    resp = _book(client, login("student@example.com"), world["hostel_id"], key="k" * 129)
    assert resp.status_code == 400


def test_lifecycle_between_the_two_parties(app, client, world, login):
    student = login("student@example.com")
    agent = login("agent@example.com")
    outsider = login("agent2@example.com")

    booking_id = _book(client, student, world["hostel_id"]).get_json()["id"]

    resp = client.patch(f"/api/bookings/{booking_id}", json={"status": "confirmed"}, headers=agent)
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "confirmed"

    resp = client.patch(f"/api/bookings/{booking_id}", json={"status": "cancelled"}, headers=outsider)
    assert resp.status_code == 403

    resp = client.patch(f"/api/bookings/{booking_id}", json={"status": "cancelled"}, headers=student)
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "cancelled"

    resp = client.patch(f"/api/bookings/{booking_id}", json={"status": "completed"}, headers=agent)
    assert resp.status_code == 409
    assert resp.get_json()["details"] == {"current": "cancelled", "requested": "completed"}

    with app.app_context():
        assert AuditLog.query.filter_by(action="BOOKING_UPDATE", entity_id=booking_id).count() == 2


def test_student_cannot_confirm_own_booking(client, world, factory, login):
    booking_id = factory.booking(world["student_id"], world["hostel_id"])
    resp = client.patch(f"/api/bookings/{booking_id}", json={"status": "confirmed"},
                        headers=login("student@example.com"))
    assert resp.status_code == 403
    assert factory.get(Booking, booking_id).status == "pending"


def test_agent_cannot_skip_confirmation(client, world, factory, login):
    booking_id = factory.booking(world["student_id"], world["hostel_id"])
    resp = client.patch(f"/api/bookings/{booking_id}", json={"status": "completed"},
                        headers=login("agent@example.com"))
    assert resp.status_code == 409


def test_admin_cannot_update_bookings(client, world, factory, login):
    booking_id = factory.booking(world["student_id"], world["hostel_id"])
    resp = client.patch(f"/api/bookings/{booking_id}", json={"status": "cancelled"},
                        headers=login("admin@example.com"))
    assert resp.status_code == 403


def test_other_student_cannot_touch_booking(client, world, factory, login):
    booking_id = factory.booking(world["student_id"], world["hostel_id"])
    headers = login("student2@example.com")
    assert client.patch(f"/api/bookings/{booking_id}", json={"status": "cancelled"},
                        headers=headers).status_code == 403
    assert client.get(f"/api/bookings/{booking_id}", headers=headers).status_code == 403


def test_setting_same_status_is_a_no_op(client, world, factory, login):
    booking_id = factory.booking(world["student_id"], world["hostel_id"], status="confirmed")
    resp = client.patch(f"/api/bookings/{booking_id}", json={"status": "confirmed"},
                        headers=login("agent@example.com"))
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "confirmed"


def test_invalid_status_and_empty_patch(client, world, factory, login):
    booking_id = factory.booking(world["student_id"], world["hostel_id"])
    headers = login("agent@example.com")
    assert client.patch(f"/api/bookings/{booking_id}", json={"status": "approved"},
                        headers=headers).status_code == 400
    assert client.patch(f"/api/bookings/{booking_id}", json={}, headers=headers).status_code == 400


def test_missing_booking_is_404(client, world, login):
    resp = client.patch("/api/bookings/nope", json={"status": "cancelled"},
                        headers=login("agent@example.com"))
    assert resp.status_code == 404


def test_student_reschedules_only_while_pending(client, world, factory, login):
    headers = login("student@example.com")
    pending_id = factory.booking(world["student_id"], world["hostel_id"])
    confirmed_id = factory.booking(world["student_id"], world["hostel_id"], status="confirmed")
    later = (date.today() + timedelta(days=10)).isoformat()

    resp = client.patch(f"/api/bookings/{pending_id}",
                        json={"preferredDate": later, "preferredTime": "14:30"}, headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["preferredDate"] == later
    assert resp.get_json()["preferredTime"] == "14:30"

    resp = client.patch(f"/api/bookings/{confirmed_id}", json={"preferredTime": "16:00"}, headers=headers)
    assert resp.status_code == 409


def test_agent_cannot_reschedule(client, world, factory, login):
    booking_id = factory.booking(world["student_id"], world["hostel_id"])
    resp = client.patch(f"/api/bookings/{booking_id}", json={"preferredTime": "16:00"},
                        headers=login("agent@example.com"))
    assert resp.status_code == 403


def test_listing_is_scoped_to_the_caller(client, world, factory, login):
    mine = factory.booking(world["student_id"], world["hostel_id"])
    theirs = factory.booking(world["other_student_id"], world["hostel_id"])
    other_hostel = factory.hostel(world["other_agent_id"], world["location_id"], title="Other")
    elsewhere = factory.booking(world["other_student_id"], other_hostel)

    def ids(email, **params):
        resp = client.get("/api/bookings", query_string=params, headers=login(email))
        assert resp.status_code == 200
        return {b["id"] for b in resp.get_json()}

    assert ids("student@example.com") == {mine}
    assert ids("agent@example.com") == {mine, theirs}
    assert ids("admin@example.com") == {mine, theirs, elsewhere}


def test_listing_filters_by_status(client, world, factory, login):
    factory.booking(world["student_id"], world["hostel_id"])
    confirmed = factory.booking(world["student_id"], world["hostel_id"], status="confirmed")
    resp = client.get("/api/bookings", query_string={"status": "confirmed"},
                      headers=login("student@example.com"))
    assert [b["id"] for b in resp.get_json()] == [confirmed]


def test_get_booking_for_parties_and_admin(client, world, factory, login):
    booking_id = factory.booking(world["student_id"], world["hostel_id"])
    for email in ("student@example.com", "agent@example.com", "admin@example.com"):
        resp = client.get(f"/api/bookings/{booking_id}", headers=login(email))
        assert resp.status_code == 200
        assert resp.get_json()["id"] == booking_id
    assert client.get(f"/api/bookings/{booking_id}", headers=login("agent2@example.com")).status_code == 403


def test_replayed_key_for_another_hostel_conflicts(client, world, factory, login):
    headers = login("student@example.com")
    other_hostel = factory.hostel(world["agent_id"], world["location_id"], title="Annex")
    first = _book(client, headers, world["hostel_id"], key="req-1")
    assert first.status_code == 201

    resp = _book(client, headers, other_hostel, key="req-1")
    assert resp.status_code == 409
    assert resp.get_json()["details"] == {"hostelId": world["hostel_id"]}


def test_null_status_is_rejected(client, world, factory, login):
    booking_id = factory.booking(world["student_id"], world["hostel_id"])
    resp = client.patch(f"/api/bookings/{booking_id}", json={"status": None},
                        headers=login("agent@example.com"))
    assert resp.status_code == 400
    assert factory.get(Booking, booking_id).status == "pending"
