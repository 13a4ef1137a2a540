"""
Health check endpoints for monitoring system status.
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from socialnet import realtime
from socialnet.db import get_session

router = APIRouter(prefix="/health", tags=["health"])

COUNTED_TABLES = ("accounts", "posts", "comments", "direct_messages", "notifications")


def check_database_health() -> Dict[str, str]:
    """
    Check database connectivity.

    Returns:
        Dict with status and optional error details
    """
    try:
        with get_session() as db:
            if db.execute(text("SELECT 1")).scalar() == 1:
                return {"status": "ok"}
            return {"status": "down", "error": "Unexpected query result"}
    except SQLAlchemyError as e:
        return {"status": "down", "error": f"Database error: {e}"}


@router.get("/")
async def health_check() -> Dict[str, Any]:
    """
    Overall service health.

    Returns:
        Dict containing:
        - status: "ok" | "down"
        - db: database health status
        - realtime: number of open websocket connections
        - version: API version
        - timestamp: current UTC timestamp
    """
    db_health = check_database_health()
    return {
        "status": "down" if db_health["status"] == "down" else "ok",
        "db": db_health,
        "realtime": {"connections": realtime.hub.connection_count()},
        "version": "1.0.0",
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/db")
async def database_health() -> Dict[str, Any]:
    """Database health plus row counts of the main tables."""
    health_status = check_database_health()
    try:
        with get_session() as db:
            health_status.update({
                "tables": {
                    name: db.execute(text(f"SELECT COUNT(*) FROM {name}")).scalar()
                    for name in COUNTED_TABLES
                },
                "timestamp": datetime.utcnow().isoformat(),
            })
    except SQLAlchemyError as e:
        health_status["error"] = f"Extended check failed: {e}"
    return health_status
