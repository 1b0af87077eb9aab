from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.exceptions import NotFoundException, ValidationException
from app.models.user import User
from app.schemas.user import UserListOut, UserOut, UserProfileOut, UserRoleUpdate
from app.services import audit
from app.services.auth import get_current_user, require_admin
from app.utils.pagination import PageParams

router = APIRouter()


@router.get("/me", response_model=UserProfileOut)
def get_me(current_user: User = Depends(get_current_user)):
    # get_current_user handles token verification & user sync
    return {"user": current_user, "is_admin": current_user.is_admin}


@router.post("", response_model=UserProfileOut)
def sync_me(current_user: User = Depends(get_current_user)):
    """Explicit profile sync, called by the frontend right after sign-in."""
    return {"user": current_user, "is_admin": current_user.is_admin}


@router.get("", response_model=UserListOut)
def list_users(
    pagination: PageParams = Depends(),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    q = db.query(User)
    total = q.count()
    users = (q.order_by(User.created_at.desc(), User.id)
              .offset(pagination.offset)
              .limit(pagination.limit)
              .all())
    return {"results": users, "total": total, "page": pagination.page, "limit": pagination.limit}


@router.put("/{user_id}/role", response_model=UserOut)
def set_user_role(
    user_id: str,
    payload: UserRoleUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundException("User not found")
    if user.id == admin.id and payload.role != user.role:
        raise ValidationException("Admins cannot change their own role")
    user.role = payload.role
    db.commit()
    db.refresh(user)
    audit.log_role_change(user.id, user.role.value, user_id=admin.id)
    return user
