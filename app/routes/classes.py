from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
import logging

from app.db import get_db
from app.exceptions import ConflictException
from app.models.school_class import SchoolClass
from app.models.user import User
from app.schemas.school_class import ClassCreate, ClassCreatedOut, ClassListOut
from app.services.auth import get_current_user
from app.utils.pagination import PageParams

logger = logging.getLogger("app.routes.classes")

router = APIRouter(prefix="/api/classes", tags=["Classes"])


@router.get("", response_model=ClassListOut)
def list_classes(
    pagination: PageParams = Depends(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = db.query(SchoolClass)
    total = q.count()
    classes = (q.options(selectinload(SchoolClass.participants))
                .order_by(SchoolClass.name)
                .offset(pagination.offset)
                .limit(pagination.limit)
                .all())
    return {"results": classes, "total": total, "page": pagination.page, "limit": pagination.limit}


@router.post("", response_model=ClassCreatedOut, status_code=status.HTTP_201_CREATED)
def create_class(
    payload: ClassCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if db.query(SchoolClass).filter(SchoolClass.name == payload.name).first():
        raise ConflictException("Class already exists")

    school_class = SchoolClass(name=payload.name)
    db.add(school_class)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictException("Class already exists")
    db.refresh(school_class)
    logger.info(f"Class {school_class.name!r} created by {current_user.id}")
    return {"success": True, "message": "Class created successfully!", "data": school_class}
