from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth as firebase_auth
from sqlalchemy.orm import Session
import logging

from app.core.settings import settings
from app.db import get_db
from app.exceptions import ForbiddenException, UnauthorizedException
from app.models.user import User, UserRole
from app.services.identity_sync import ExternalIdentity, identity_from_token, sync_user

logger = logging.getLogger("app.auth")

security = HTTPBearer(auto_error=False)

MOCK_ADMIN_TOKEN = "mock-admin-token"
MOCK_USER_PREFIX = "mock-user-"


def _mock_identity(token: str) -> ExternalIdentity | None:
    """Development tokens; they still go through the normal sync path."""
    if not settings.allow_mock_tokens:
        return None
    if token == MOCK_ADMIN_TOKEN:
        return ExternalIdentity(
            uid="mock-admin",
            email="admin@example.com",
            first_name="Admin",
            last_name="One",
            role_claim=UserRole.admin.value,
        )
    if token.startswith(MOCK_USER_PREFIX) and len(token) > len(MOCK_USER_PREFIX):
        slug = token[len(MOCK_USER_PREFIX):].lower()
        return ExternalIdentity(
            uid=f"mock-{slug}",
            email=f"{slug}@example.com",
            first_name=slug.title(),
            last_name="Test",
        )
    return None


def verify_token(token: str) -> ExternalIdentity:
    identity = _mock_identity(token)
    if identity:
        return identity
    try:
        decoded_token = firebase_auth.verify_id_token(token)
    except Exception:
        raise UnauthorizedException("Invalid or expired token")
    return identity_from_token(decoded_token)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Authorization header missing or invalid")
    identity = verify_token(credentials.credentials)
    return sync_user(db, identity)


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.admin:
        logger.info(f"Non-admin {user.id} denied admin operation")
        raise ForbiddenException("Admin privileges required")
    return user
