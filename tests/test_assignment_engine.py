import random

import pytest

from app.exceptions import NotFoundException
from app.models.assignment import Assignment
from app.models.event import Event
from app.models.participant import Participant, ParticipantStatus
from app.models.present import Present, PresentStatus
from app.services import assignments as assignment_service
from app.services.assignments import AssignmentError, build_gift_cycle, create_assignments


def _follow_cycle(pairs):
    gives_to = dict(pairs)
    start = pairs[0][0]
    seen = [start]
    current = gives_to[start]
    while current != start:
        seen.append(current)
        current = gives_to[current]
    return seen


@pytest.mark.parametrize("n", [2, 3, 4, 7, 25])
def test_build_gift_cycle_is_single_cycle_derangement(n):
    ids = [f"p{i}" for i in range(n)]
    for seed in range(20):
        pairs = build_gift_cycle(ids, random.Random(seed))
        givers = [g for g, _ in pairs]
        receivers = [r for _, r in pairs]

        assert len(pairs) == n
        assert sorted(givers) == sorted(ids)
        assert sorted(receivers) == sorted(ids)
        assert all(g != r for g, r in pairs)
        assert len(_follow_cycle(pairs)) == n


def test_build_gift_cycle_same_seed_same_result():
    ids = ["a", "b", "c", "d", "e"]
    assert build_gift_cycle(ids, random.Random(42)) == build_gift_cycle(ids, random.Random(42))


def test_build_gift_cycle_does_not_mutate_input():
    ids = ["a", "b", "c"]
    build_gift_cycle(ids, random.Random(1))
    assert ids == ["a", "b", "c"]


@pytest.mark.parametrize("ids", [[], ["only"]])
def test_build_gift_cycle_needs_two_participants(ids):
    with pytest.raises(AssignmentError):
        build_gift_cycle(ids)


def test_build_gift_cycle_rejects_duplicate_ids():
    with pytest.raises(AssignmentError):
        build_gift_cycle(["a", "a", "b"])


def test_create_assignments_persists_cycle(db_session, active_event, make_participants):
    participants = make_participants(active_event, 5)
    ids = {p.id for p in participants}

    count = create_assignments(db_session, active_event.id, rng=random.Random(7))
    assert count == 5

    assignments = db_session.query(Assignment).filter(Assignment.event_id == active_event.id).all()
    assert len(assignments) == 5
    assert {a.giver_id for a in assignments} == ids
    assert {a.receiver_id for a in assignments} == ids
    assert all(a.giver_id != a.receiver_id for a in assignments)
    assert len(_follow_cycle([(a.giver_id, a.receiver_id) for a in assignments])) == 5

    presents = db_session.query(Present).all()
    assert len(presents) == 5
    assert all(p.status == PresentStatus.NOT_SUBMITTED for p in presents)
    assert {p.assignment_id for p in presents} == {a.id for a in assignments}
    for a in assignments:
        assert a.present.giver_id == a.giver_id
        assert a.present.receiver_id == a.receiver_id

    db_session.expire_all()
    event = db_session.get(Event, active_event.id)
    assert event.are_assignments_created is True
    statuses = {p.status for p in db_session.query(Participant).all()}
    assert statuses == {ParticipantStatus.ASSIGNED}


def test_create_assignments_runs_only_once(db_session, active_event, make_participants):
    make_participants(active_event, 3)
    create_assignments(db_session, active_event.id)

    with pytest.raises(AssignmentError) as exc:
        create_assignments(db_session, active_event.id)
    assert exc.value.status_code == 409
    assert db_session.query(Assignment).count() == 3
    assert db_session.query(Present).count() == 3


def test_create_assignments_latch_rejects_concurrent_run(db_session, active_event, make_participants, monkeypatch):
    """Another run set the latch after our pre-checks passed."""
    make_participants(active_event, 3)
    db_session.query(Event).filter(Event.id == active_event.id).update(
        {Event.are_assignments_created: True}, synchronize_session=False
    )
    db_session.commit()

    def _stale_checks(db, event_id):
        return None

    def _must_not_load(db, event_id):
        raise AssertionError("write phase must stop at the latch")

    monkeypatch.setattr(assignment_service, "_check_preconditions", _stale_checks)
    monkeypatch.setattr(assignment_service, "_event_participants", _must_not_load)

    with pytest.raises(AssignmentError):
        create_assignments(db_session, active_event.id)

    assert db_session.query(Assignment).count() == 0
    assert {p.status for p in db_session.query(Participant).all()} == {ParticipantStatus.REGISTERED}


def test_create_assignments_needs_two_participants(db_session, active_event, make_participants):
    make_participants(active_event, 1)

    with pytest.raises(AssignmentError):
        create_assignments(db_session, active_event.id)

    db_session.expire_all()
    assert db_session.get(Event, active_event.id).are_assignments_created is False
    assert db_session.query(Assignment).count() == 0


def test_create_assignments_unknown_event(db_session):
    with pytest.raises(NotFoundException):
        create_assignments(db_session, "does-not-exist")


def test_create_assignments_rolls_back_on_failure(db_session, active_event, make_participants, monkeypatch):
    make_participants(active_event, 4)

    def _boom(ids, rng=None):
        raise RuntimeError("pairing failed")

    monkeypatch.setattr(assignment_service, "build_gift_cycle", _boom)
    with pytest.raises(RuntimeError):
        create_assignments(db_session, active_event.id)

    db_session.expire_all()
    assert db_session.get(Event, active_event.id).are_assignments_created is False
    assert db_session.query(Assignment).count() == 0
    assert db_session.query(Present).count() == 0
    assert {p.status for p in db_session.query(Participant).all()} == {ParticipantStatus.REGISTERED}

    # retry succeeds once the failure is gone
    monkeypatch.undo()
    assert create_assignments(db_session, active_event.id) == 4


def test_end_to_end_three_participants(client, admin_headers, user_headers):
    class_resp = client.post("/api/classes", json={"name": "6b"}, headers=user_headers("alice"))
    assert class_resp.status_code == 201, class_resp.text
    class_id = class_resp.json()["data"]["id"]

    # first registration bootstraps the default event
    for name in ("alice", "bob", "carol"):
        r = client.post("/api/register", json={"class_id": class_id, "interests": f"{name} likes books"},
                        headers=user_headers(name))
        assert r.status_code == 201, r.text
        assert r.json()["created"] is True

    run = client.post("/api/assignments", json={}, headers=admin_headers)
    assert run.status_code == 201, run.text
    assert run.json()["assignment_count"] == 3

    listing = client.get("/api/assignments", headers=admin_headers).json()
    assert listing["total"] == 3
    pairs = [(a["giver"]["user"]["email"], a["receiver"]["user"]["email"]) for a in listing["assignments"]]
    assert all(g != r for g, r in pairs)
    assert sorted(g for g, _ in pairs) == sorted(r for _, r in pairs)

    own = client.get("/api/assignments", headers=user_headers("alice")).json()
    assert own["is_admin"] is False
    assert own["participant"]["user"]["email"] == "alice@example.com"
    assert own["receiver"]["user"]["email"] in {"bob@example.com", "carol@example.com"}
    assert own["present_given"]["status"] == "NOT_SUBMITTED"

    again = client.post("/api/assignments", json={}, headers=admin_headers)
    assert again.status_code == 409
    assert "already" in again.json()["error"]


def test_create_assignments_requires_admin(client, user_headers):
    r = client.post("/api/assignments", json={}, headers=user_headers())
    assert r.status_code == 403
