import random

import pytest

from app.exceptions import ConflictException, NotFoundException, ValidationException
from app.models.participant import Participant, ParticipantStatus
from app.models.present import Present, PresentStatus
from app.services import presents as present_service
from app.services.assignments import create_assignments


@pytest.fixture
def assigned_event(db_session, active_event, make_participants):
    participants = make_participants(active_event, 3)
    create_assignments(db_session, active_event.id, rng=random.Random(3))
    return active_event, [p.id for p in participants]


def _present_of(db_session, giver_id) -> Present:
    return db_session.query(Present).filter(Present.giver_id == giver_id).one()


def test_submit_then_deliver(db_session, assigned_event):
    _, ids = assigned_event
    giver_id = ids[0]

    present = present_service.mark_submitted(db_session, giver_id, description="A scarf")
    assert present.status == PresentStatus.SUBMITTED
    assert present.submitted_at is not None
    assert present.delivered_at is None
    assert present.description == "A scarf"
    assert present.giver.status == ParticipantStatus.GIFT_SUBMITTED

    present = present_service.mark_delivered(db_session, giver_id)
    assert present.status == PresentStatus.DELIVERED
    assert present.delivered_at is not None
    assert present.delivered_at >= present.submitted_at
    assert present.receiver.status == ParticipantStatus.GIFT_DELIVERED


def test_deliver_before_submit_is_rejected(db_session, assigned_event):
    _, ids = assigned_event

    with pytest.raises(ValidationException):
        present_service.mark_delivered(db_session, ids[0])

    db_session.expire_all()
    present = _present_of(db_session, ids[0])
    assert present.status == PresentStatus.NOT_SUBMITTED
    assert present.delivered_at is None


def test_double_submit_is_a_conflict(db_session, assigned_event):
    _, ids = assigned_event
    present_service.mark_submitted(db_session, ids[0])

    with pytest.raises(ConflictException):
        present_service.mark_submitted(db_session, ids[0])


def test_unknown_participant_has_no_present(db_session, assigned_event):
    with pytest.raises(NotFoundException):
        present_service.mark_submitted(db_session, "nobody")


def test_participant_status_never_goes_back(db_session, assigned_event):
    _, ids = assigned_event
    first = _present_of(db_session, ids[0])
    receiver_id = first.receiver_id

    present_service.mark_submitted(db_session, ids[0])
    present_service.mark_delivered(db_session, ids[0])

    # the receiver now hands in their own present; they stay GIFT_DELIVERED
    present_service.mark_submitted(db_session, receiver_id)
    db_session.expire_all()
    receiver = db_session.get(Participant, receiver_id)
    assert receiver.status == ParticipantStatus.GIFT_DELIVERED
    assert _present_of(db_session, receiver_id).status == PresentStatus.SUBMITTED


def test_advance_status_is_monotonic():
    p = Participant(status=ParticipantStatus.GIFT_DELIVERED)
    assert p.advance_status(ParticipantStatus.GIFT_SUBMITTED) is False
    assert p.status == ParticipantStatus.GIFT_DELIVERED

    p = Participant(status=ParticipantStatus.REGISTERED)
    assert p.advance_status(ParticipantStatus.ASSIGNED) is True
    assert p.status == ParticipantStatus.ASSIGNED


def test_set_present_status_follows_state_machine(db_session, assigned_event):
    _, ids = assigned_event
    present_id = _present_of(db_session, ids[1]).id

    with pytest.raises(ValidationException):
        present_service.set_present_status(db_session, present_id, PresentStatus.DELIVERED)

    present = present_service.set_present_status(db_session, present_id, PresentStatus.SUBMITTED, "Book")
    assert present.status == PresentStatus.SUBMITTED
    assert present.description == "Book"

    with pytest.raises(ConflictException):
        present_service.set_present_status(db_session, present_id, PresentStatus.NOT_SUBMITTED)


def test_update_description_any_time(db_session, assigned_event):
    _, ids = assigned_event
    present_id = _present_of(db_session, ids[2]).id

    present = present_service.update_description(db_session, present_id, "Chocolate")
    assert present.description == "Chocolate"
    assert present.status == PresentStatus.NOT_SUBMITTED


def test_present_stats(db_session, assigned_event):
    event, ids = assigned_event
    present_service.mark_submitted(db_session, ids[0])
    present_service.mark_submitted(db_session, ids[1])
    present_service.mark_delivered(db_session, ids[1])

    stats = present_service.present_stats(db_session, event.id)
    assert stats == {
        "total_participants": 3,
        "submitted_count": 2,
        "delivered_count": 1,
        "pending_count": 1,
    }


def test_presents_api(client, db_session, admin_headers, user_headers, assigned_event):
    event, ids = assigned_event

    r = client.post("/api/presents", json={"action": "mark_submitted", "participant_id": ids[0]},
                    headers=user_headers())
    assert r.status_code == 403

    r = client.post("/api/presents", json={"action": "mark_submitted"}, headers=admin_headers)
    assert r.status_code == 400

    r = client.post("/api/presents",
                    json={"action": "mark_submitted", "participant_id": ids[0], "description": "Socks"},
                    headers=admin_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["present"]["status"] == "SUBMITTED"
    assert body["participant"]["status"] == "GIFT_SUBMITTED"

    r = client.post("/api/presents", json={"action": "mark_delivered", "participant_id": ids[2]},
                    headers=admin_headers)
    assert r.status_code == 400
    assert "submitted" in r.json()["error"]

    listing = client.get("/api/presents", headers=admin_headers).json()
    assert len(listing["presents"]) == 3
    assert listing["stats"]["submitted_count"] == 1
    assert listing["event"]["id"] == event.id

    submitted = next(p for p in listing["presents"] if p["giver_id"] == ids[0])
    r = client.patch("/api/presents", json={"present_id": submitted["id"], "status": "NOT_SUBMITTED"},
                     headers=admin_headers)
    assert r.status_code == 409

    r = client.patch("/api/presents", json={"present_id": submitted["id"], "status": "DELIVERED"},
                     headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["present"]["status"] == "DELIVERED"


def test_own_presents_for_unregistered_user(client, user_headers, active_event):
    r = client.get("/api/presents", headers=user_headers("dora"))
    assert r.status_code == 200
    body = r.json()
    assert body["is_admin"] is False
    assert body["participant"] is None
    assert body["message"] == "You are not registered for this event"
