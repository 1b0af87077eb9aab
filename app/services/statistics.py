"""
Dashboard statistics for the admin area.
Read-only aggregation over users, classes, participants and presents.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Any, Optional

from sqlalchemy.orm import Session, selectinload

from app.core.settings import settings
from app.models.participant import Participant, ParticipantStatus
from app.models.present import Present, PresentStatus
from app.models.school_class import SchoolClass
from app.models.user import User
from app.utils.datetime import day_range, ensure_aware_utc, utc_now

logger = logging.getLogger("app.statistics")

RECENT_ACTIVITY_LIMIT = 10


def registrations_by_date(created: list[datetime], days: int, now: Optional[datetime] = None) -> list[Dict[str, Any]]:
    """Daily registration counts for the last ``days`` days (inclusive of today) with a running total."""
    now = now or utc_now()
    counts: Dict[str, int] = {}
    for ts in created:
        key = ensure_aware_utc(ts).date().isoformat()
        counts[key] = counts.get(key, 0) + 1

    series = []
    cumulative = 0
    for day in day_range((now - timedelta(days=days)).date(), now.date()):
        count = counts.get(day.isoformat(), 0)
        cumulative += count
        series.append({
            "date": day.isoformat(),
            "date_formatted": day.strftime("%b %d"),
            "count": count,
            "cumulative": cumulative,
        })
    return series


def growth_metrics(created: list[datetime], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Registrations in the last 7 days against the 7 days before."""
    now = now or utc_now()
    week_ago = now - timedelta(days=7)
    two_weeks_ago = now - timedelta(days=14)
    stamps = [ensure_aware_utc(ts) for ts in created]

    last_week = sum(1 for ts in stamps if ts >= week_ago)
    previous_week = sum(1 for ts in stamps if two_weeks_ago <= ts < week_ago)

    if previous_week > 0:
        rate = (last_week - previous_week) / previous_week * 100
    else:
        rate = 100.0 if last_week > 0 else 0.0

    return {
        "last_week_registrations": last_week,
        "previous_week_registrations": previous_week,
        "growth_rate": round(rate, 2),
    }


def get_statistics(db: Session, event_id: Optional[str] = None, days: Optional[int] = None) -> Dict[str, Any]:
    days = days or settings.statistics_days
    now = utc_now()

    q = db.query(Participant).options(
        selectinload(Participant.user),
        selectinload(Participant.school_class),
    )
    if event_id:
        q = q.filter(Participant.event_id == event_id)
    participants = q.order_by(Participant.created_at.asc(), Participant.id).all()

    classes = db.query(SchoolClass).order_by(SchoolClass.name).all()
    total_users = db.query(User).count()

    present_q = db.query(Present)
    if event_id:
        present_q = present_q.join(Participant, Present.giver_id == Participant.id).filter(
            Participant.event_id == event_id
        )
    presents = present_q.all()

    total_participants = len(participants)
    total_classes = len(classes)

    per_class: Dict[str, int] = {c.id: 0 for c in classes}
    for p in participants:
        if p.class_id in per_class:
            per_class[p.class_id] += 1
    participants_by_class = [{"class_name": c.name, "count": per_class[c.id]} for c in classes]

    created = [p.created_at for p in participants]

    recent_activity = [
        {
            "id": p.id,
            "user_name": p.user.display_name,
            "user_email": p.user.email,
            "class_name": p.school_class.name if p.school_class else "No Class",
            "registered_at": p.created_at,
        }
        for p in reversed(participants[-RECENT_ACTIVITY_LIMIT:])
    ]

    stats = {
        "total_participants": total_participants,
        "total_classes": total_classes,
        "total_users": total_users,
        "registered_count": sum(1 for p in participants if p.status == ParticipantStatus.REGISTERED),
        "assigned_count": sum(1 for p in participants if p.status != ParticipantStatus.REGISTERED),
        "submitted_presents": sum(
            1 for p in presents if p.status in (PresentStatus.SUBMITTED, PresentStatus.DELIVERED)
        ),
        "delivered_presents": sum(1 for p in presents if p.status == PresentStatus.DELIVERED),
        "average_participants_per_class": round(total_participants / total_classes) if total_classes else 0,
    }

    logger.info(f"Statistics computed: {total_participants} participants, {total_classes} classes")
    return {
        "stats": stats,
        "participants_by_class": participants_by_class,
        "registrations_by_date": registrations_by_date(created, days, now),
        "class_distribution": [c for c in participants_by_class if c["count"] > 0],
        "recent_activity": recent_activity,
        "growth_metrics": growth_metrics(created, now),
    }
