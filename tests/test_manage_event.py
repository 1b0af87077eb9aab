import sys

import pytest
from sqlalchemy.orm import sessionmaker

import manage_event
from app.models.assignment import Assignment
from app.models.event import Event
from app.models.school_class import SchoolClass
from app.models.user import User, UserRole


@pytest.fixture
def run_cli(db_session, monkeypatch):
    monkeypatch.setattr(manage_event, "SessionLocal", sessionmaker(bind=db_session.get_bind()))

    def _run(*argv):
        monkeypatch.setattr(sys, "argv", ["manage_event.py", *argv])
        manage_event.main()
    return _run


def test_create_class(run_cli, db_session, capsys):
    run_cli("create-class", " 7c ")
    assert "✅ Created class 7c" in capsys.readouterr().out
    assert db_session.query(SchoolClass).filter(SchoolClass.name == "7c").count() == 1

    with pytest.raises(SystemExit):
        run_cli("create-class", "7c")
    assert "already exists" in capsys.readouterr().out


def test_grant_and_revoke_admin(run_cli, db_session, make_user):
    user = make_user("rita")
    user_id = user.id

    run_cli("grant-admin", "--user-id", user_id)
    db_session.expire_all()
    assert db_session.get(User, user_id).role == UserRole.admin

    run_cli("revoke-admin", "--email", db_session.get(User, user_id).email)
    db_session.expire_all()
    assert db_session.get(User, user_id).role == UserRole.user


def test_grant_admin_unknown_user(run_cli, capsys):
    with pytest.raises(SystemExit):
        run_cli("grant-admin", "--email", "nobody@example.com")
    assert "User not found" in capsys.readouterr().out


def test_create_assignments_and_status(run_cli, db_session, active_event, make_participants, capsys):
    event_id = active_event.id
    make_participants(active_event, 4)

    run_cli("create-assignments", "--seed", "7")
    assert "✅ Created 4 assignments" in capsys.readouterr().out

    db_session.expire_all()
    assert db_session.get(Event, event_id).are_assignments_created is True
    assert db_session.query(Assignment).filter(Assignment.event_id == event_id).count() == 4

    run_cli("status", "--event-id", event_id)
    out = capsys.readouterr().out
    assert "Assignments created: True" in out
    assert "Participants: 4" in out
    assert "ASSIGNED: 4" in out
    assert "NOT_SUBMITTED: 4" in out


def test_create_assignments_reports_engine_errors(run_cli, active_event, make_participants, capsys):
    make_participants(active_event, 1)

    with pytest.raises(SystemExit):
        run_cli("create-assignments")
    assert "Need at least 2 participants" in capsys.readouterr().out


def test_create_assignments_without_event(run_cli, capsys):
    with pytest.raises(SystemExit):
        run_cli("create-assignments")
    assert "No active event found" in capsys.readouterr().out
