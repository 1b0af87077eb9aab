#!/usr/bin/env python3
"""
Admin utility script for the Wichtelaktion database.

Usage examples:
    # Make a user an admin (by email or user ID)
    python manage_event.py grant-admin --email teacher@school.example
    python manage_event.py grant-admin --user-id abc123

    # Take admin rights away again
    python manage_event.py revoke-admin --email teacher@school.example

    # Create a class participants can pick when registering
    python manage_event.py create-class "5a"

    # Draw the gift assignments for the active event (or a given one)
    python manage_event.py create-assignments
    python manage_event.py create-assignments --event-id abc123 --seed 42

    # Show the state of the active event (or a given one)
    python manage_event.py status

Environment:
    DATABASE_URL - database connection string (defaults to the local SQLite file)

"""

import argparse
import os
import random
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv

load_dotenv()

from app.core.logging_config import setup_logging
from app.db import SessionLocal
from app.exceptions import AppException
from app.models.participant import Participant, ParticipantStatus
from app.models.present import Present, PresentStatus
from app.models.school_class import SchoolClass
from app.models.user import User, UserRole
from app.services import audit
from app.services.assignments import create_assignments as run_assignment_engine
from app.services.events import resolve_event


def get_user(db, email=None, user_id=None):
    """Get user by email or ID."""
    if email:
        user = db.query(User).filter(User.email == email.strip().lower()).first()
    elif user_id:
        user = db.query(User).filter(User.id == user_id).first()
    else:
        print("ERROR: pass --email or --user-id")
        sys.exit(1)

    if not user:
        print(f"ERROR: User not found (email={email}, id={user_id})")
        print("Users are created on their first sign-in; ask them to log in once.")
        sys.exit(1)

    return user


def set_role(args, role):
    db = SessionLocal()
    try:
        user = get_user(db, email=args.email, user_id=args.user_id)
        if user.role == role:
            print(f"{user.email} already has role {role.value}")
            return
        user.role = role
        db.commit()
        audit.log_role_change(user.id, role.value, user_id="cli")
        print(f"✅ {user.email} is now {role.value}")
    finally:
        db.close()


def grant_admin(args):
    """Grant the admin role to a user."""
    set_role(args, UserRole.admin)


def revoke_admin(args):
    """Set a user back to the regular role."""
    set_role(args, UserRole.user)


def create_class(args):
    """Create a school class."""
    name = args.name.strip()
    if not name:
        print("ERROR: Class name is required")
        sys.exit(1)

    db = SessionLocal()
    try:
        if db.query(SchoolClass).filter(SchoolClass.name == name).first():
            print(f"ERROR: Class {name!r} already exists")
            sys.exit(1)
        school_class = SchoolClass(name=name)
        db.add(school_class)
        db.commit()
        print(f"✅ Created class {school_class.name} ({school_class.id})")
    finally:
        db.close()


def create_assignments(args):
    """Run the assignment engine once for an event."""
    db = SessionLocal()
    try:
        event = resolve_event(db, args.event_id)
        if not event:
            print("ERROR: No active event found; pass --event-id")
            sys.exit(1)
        rng = random.Random(args.seed) if args.seed is not None else None
        try:
            count = run_assignment_engine(db, event.id, rng=rng, actor_id="cli")
        except AppException as e:
            print(f"ERROR: {e.detail}")
            sys.exit(1)
        print(f"✅ Created {count} assignments for {event.name}")
    finally:
        db.close()


def show_status(args):
    """Print the state of an event."""
    db = SessionLocal()
    try:
        event = resolve_event(db, args.event_id)
        if not event:
            print("No active event.")
            return

        participants = db.query(Participant).filter(Participant.event_id == event.id).all()
        presents = (db.query(Present)
                    .join(Participant, Present.giver_id == Participant.id)
                    .filter(Participant.event_id == event.id)
                    .all())

        print(f"Event: {event.name} ({event.id})")
        print(f"   Active: {event.is_active}")
        print(f"   Registration open: {event.is_registration_open}")
        print(f"   Registration deadline: {event.registration_deadline.isoformat()}")
        print(f"   Assignments created: {event.are_assignments_created}")
        print(f"   Participants: {len(participants)}")
        for status in ParticipantStatus:
            count = sum(1 for p in participants if p.status == status)
            print(f"      {status.value}: {count}")
        print(f"   Presents: {len(presents)}")
        for status in PresentStatus:
            count = sum(1 for p in presents if p.status == status)
            print(f"      {status.value}: {count}")
    finally:
        db.close()


def main():
    setup_logging("WARNING")

    parser = argparse.ArgumentParser(description="Manage the Wichtelaktion")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Grant admin command
    grant_parser = subparsers.add_parser("grant-admin", help="Give a user the admin role")
    grant_parser.add_argument("--email", help="User email")
    grant_parser.add_argument("--user-id", help="User ID")
    grant_parser.set_defaults(func=grant_admin)

    # Revoke admin command
    revoke_parser = subparsers.add_parser("revoke-admin", help="Set a user back to the user role")
    revoke_parser.add_argument("--email", help="User email")
    revoke_parser.add_argument("--user-id", help="User ID")
    revoke_parser.set_defaults(func=revoke_admin)

    # Create class command
    class_parser = subparsers.add_parser("create-class", help="Create a school class")
    class_parser.add_argument("name", help="Class name, e.g. 5a")
    class_parser.set_defaults(func=create_class)

    # Create assignments command
    assign_parser = subparsers.add_parser("create-assignments", help="Draw gift assignments")
    assign_parser.add_argument("--event-id", help="Event ID (default: active event)")
    assign_parser.add_argument("--seed", type=int, help="Seed for a reproducible draw")
    assign_parser.set_defaults(func=create_assignments)

    # Status command
    status_parser = subparsers.add_parser("status", help="Show event status")
    status_parser.add_argument("--event-id", help="Event ID (default: active event)")
    status_parser.set_defaults(func=show_status)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
