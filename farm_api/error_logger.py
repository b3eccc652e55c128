"""
Leveled log sink backed by the ``error_logs`` table.

Writes go through their own short-lived session so a caller's failed
transaction never takes the log entry down with it. When the database
write fails the entry is printed through the stdlib logger instead.
Nothing in here raises to the caller.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import Request
from sqlalchemy.orm import Session, sessionmaker

from . import models

logger = logging.getLogger(__name__)

LEVELS = {
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "debug": logging.DEBUG,
}


def _jsonable(details: Any) -> Any:
    if details is None:
        return None
    return json.loads(json.dumps(details, default=str))


class ErrorLogger:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def log(
        self,
        level: str,
        message: str,
        source: str,
        details: Any = None,
        request: Optional[Request] = None,
    ) -> None:
        if level not in LEVELS:
            level = "info"

        logger.debug("[%s] [%s] %s", level.upper(), source, message)

        try:
            entry = models.ErrorLog(
                level=level,
                message=message,
                source=source,
                details=_jsonable(details),
                user_id=None,
                ip_address=None,
                user_agent=None,
            )
            if request is not None:
                entry.user_id = getattr(request.state, "user_id", None)
                entry.ip_address = request.client.host if request.client else None
                entry.user_agent = request.headers.get("user-agent")

            with self._session_factory() as db:
                db.add(entry)
                db.commit()
        except Exception as exc:  # the sink must never break the caller
            logger.error("Failed to write log entry to database, using console fallback: %s", exc)
            self._console_log(level, message, source, details)

    @staticmethod
    def _console_log(level: str, message: str, source: str, details: Any = None) -> None:
        line = f"[{source}] {message}"
        if details is not None:
            line = f"{line} {details}"
        logger.log(LEVELS[level], line)

    def info(self, message: str, source: str, details: Any = None, request: Optional[Request] = None) -> None:
        self.log("info", message, source, details, request)

    def warn(self, message: str, source: str, details: Any = None, request: Optional[Request] = None) -> None:
        self.log("warn", message, source, details, request)

    def error(self, message: str, source: str, details: Any = None, request: Optional[Request] = None) -> None:
        self.log("error", message, source, details, request)

    def debug(self, message: str, source: str, details: Any = None, request: Optional[Request] = None) -> None:
        self.log("debug", message, source, details, request)

    @staticmethod
    def get_logs(
        db: Session,
        limit: int = 100,
        level: Optional[str] = None,
        source: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[models.ErrorLog]:
        q = db.query(models.ErrorLog)
        if level:
            q = q.filter(models.ErrorLog.level == level)
        if source:
            q = q.filter(models.ErrorLog.source == source)
        if start is not None:
            q = q.filter(models.ErrorLog.timestamp >= start)
        if end is not None:
            q = q.filter(models.ErrorLog.timestamp <= end)
        return (
            q.order_by(models.ErrorLog.timestamp.desc(), models.ErrorLog.id.desc())
            .limit(limit)
            .all()
        )


def get_error_logger(request: Request) -> ErrorLogger:
    return request.app.state.error_logger
