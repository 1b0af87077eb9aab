"""Audit logging helper functions for key domain events.

Standard key=value single-line logs so they are easy to index.
"""
from __future__ import annotations
import logging
from typing import Optional, Any

from app.utils.datetime import utc_now

_logger = logging.getLogger("app.audit")


def _emit(event: str, user_id: Optional[str] = None, **data: Any):
    payload = {"ts": utc_now().isoformat(), "event": event}
    if user_id:
        payload["user_id"] = user_id
    payload.update(data)
    parts = [f"{k}={repr(v)}" for k, v in payload.items()]
    _logger.info("AUDIT " + " ".join(parts))

# Public convenience wrappers

def log_event_change(action: str, event_id: str, user_id: Optional[str] = None, **data: Any):
    _emit(f"event.{action}", user_id=user_id, event_id=event_id, **data)

def log_assignments_created(event_id: str, assignment_count: int, user_id: Optional[str] = None):
    _emit("assignments.create", user_id=user_id, event_id=event_id, assignment_count=assignment_count)

def log_present_transition(present_id: str, from_status: str, to_status: str, user_id: Optional[str] = None):
    _emit("present.transition", user_id=user_id, present_id=present_id, from_status=from_status, to_status=to_status)

def log_role_change(target_user_id: str, role: str, user_id: Optional[str] = None):
    _emit("user.role", user_id=user_id, target_user_id=target_user_id, role=role)

def log_registration(participant_id: str, event_id: str, created: bool, user_id: Optional[str] = None):
    _emit("participant.register", user_id=user_id, participant_id=participant_id, event_id=event_id, created=created)
