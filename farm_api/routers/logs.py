from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..error_logger import ErrorLogger
from .. import schemas

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("", response_model=list[schemas.ErrorLogOut])
def list_logs(
    limit: int = Query(default=100, ge=1, le=1000),
    level: schemas.LogLevel | None = Query(default=None),
    source: str | None = Query(default=None),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
):
    return ErrorLogger.get_logs(
        db,
        limit=limit,
        level=level,
        source=source,
        start=start_date,
        end=end_date,
    )
