"""Keep the local ``users`` table in step with the identity provider.

Every authenticated request carries a verified identity (uid, e-mail, names,
avatar). ``sync_user`` maps it onto exactly one local user row:

1. match by external id and refresh the mutable fields,
2. else match by e-mail and attach the new external id (the provider account
   was recreated or linked differently),
3. else insert a new row.

Two first-time requests for the same person can race on the unique e-mail
constraint. The loser rolls back and runs the lookup again, which then finds
the winner's row.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictException, UnauthorizedException
from app.models.user import User, UserRole

logger = logging.getLogger("app.identity")

MAX_SYNC_ATTEMPTS = 3


@dataclass(frozen=True)
class ExternalIdentity:
    uid: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None
    role_claim: Optional[str] = None


def identity_from_token(decoded_token: dict) -> ExternalIdentity:
    """Build an identity from a verified Firebase ID token."""
    uid = decoded_token.get("uid") or decoded_token.get("user_id")
    email = decoded_token.get("email")
    if not uid or not email:
        raise UnauthorizedException("Token is missing uid or email")

    first_name = decoded_token.get("given_name")
    last_name = decoded_token.get("family_name")
    if not first_name and not last_name and decoded_token.get("name"):
        parts = decoded_token["name"].strip().split(" ", 1)
        first_name = parts[0] or None
        last_name = parts[1] if len(parts) > 1 else None

    return ExternalIdentity(
        uid=uid,
        email=email.strip().lower(),
        first_name=first_name,
        last_name=last_name,
        image_url=decoded_token.get("picture"),
        role_claim=decoded_token.get("role"),
    )


def _apply_profile(user: User, identity: ExternalIdentity) -> None:
    user.email = identity.email
    user.first_name = identity.first_name
    user.last_name = identity.last_name
    user.image_url = identity.image_url


def _lookup_or_create(db: Session, identity: ExternalIdentity) -> User:
    user = db.query(User).filter(User.external_id == identity.uid).first()
    if user:
        _apply_profile(user, identity)
        return user

    user = db.query(User).filter(User.email == identity.email).first()
    if user:
        logger.info(f"Re-linking user {user.id} to external id {identity.uid}")
        user.external_id = identity.uid
        _apply_profile(user, identity)
        return user

    # Roles from the provider are only honoured when the row is first created;
    # afterwards the stored role is authoritative.
    role = UserRole.admin if identity.role_claim == UserRole.admin.value else UserRole.user
    user = User(external_id=identity.uid, role=role)
    _apply_profile(user, identity)
    db.add(user)
    return user


def sync_user(db: Session, identity: ExternalIdentity) -> User:
    for attempt in range(1, MAX_SYNC_ATTEMPTS + 1):
        try:
            user = _lookup_or_create(db, identity)
            db.commit()
            db.refresh(user)
            return user
        except IntegrityError:
            db.rollback()
            logger.warning(
                f"Identity sync conflict for {identity.email} (attempt {attempt}/{MAX_SYNC_ATTEMPTS}); retrying lookup"
            )
    raise ConflictException("User profile is being created by another request, please retry")
