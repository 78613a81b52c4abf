"""
Health endpoints for habitscore.

Liveness without dependencies, readiness probing the database and the
tables the score engine reads and writes.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from habitscore.core.database import check_connection, get_engine

logger = logging.getLogger("habitscore")

root_router = APIRouter(tags=["health"])

REQUIRED_TABLES = [
    "app_users",
    "habits",
    "habit_completions",
    "daily_scores",
]


def _not_ready(detail: str) -> JSONResponse:
    return JSONResponse(status_code=503, content={"status": "error", "detail": detail})


@root_router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@root_router.get("/readyz")
def readyz():
    """Readiness check: DB connectivity + required tables."""
    if not check_connection():
        return _not_ready("database unreachable")

    try:
        inspector = inspect(get_engine())
        missing = [t for t in REQUIRED_TABLES if not inspector.has_table(t)]
    except SQLAlchemyError as e:
        logger.error(f"[readyz] schema inspection failed: {e}")
        return _not_ready("database unreachable")

    if missing:
        detail = f"missing tables: {', '.join(missing)}"
        logger.warning(f"[readyz] {detail}")
        return _not_ready(detail)
    return {"status": "ok"}
