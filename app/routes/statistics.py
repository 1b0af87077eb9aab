from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.user import User
from app.schemas.statistics import StatisticsOut
from app.services.auth import require_admin
from app.services.statistics import get_statistics

router = APIRouter(prefix="/api/statistics", tags=["Statistics"])


@router.get("", response_model=StatisticsOut)
def statistics(
    event_id: Optional[str] = Query(None, description="Restrict participant figures to one event"),
    days: Optional[int] = Query(None, ge=1, le=365, description="Length of the registration series"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return {"success": True, "data": get_statistics(db, event_id=event_id, days=days)}
