"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running, reports
which storage backend is active and how many live subscribers are
connected, and (for the database backend) that Postgres is reachable.
"""

from fastapi import APIRouter, Request
from sqlalchemy import text

from agora import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health and dependency connectivity."""
    memory = request.app.state.memory_storage
    checks = {
        "server": "ok",
        "version": __version__,
        "storage": "memory" if memory is not None else "database",
        "subscribers": request.app.state.broadcaster.subscriber_count,
    }

    if memory is None:
        from agora.db.engine import engine

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = "ok"
        except Exception as e:
            checks["database"] = f"error: {e}"

    status = "healthy" if checks.get("database", "ok") == "ok" else "degraded"
    return {"status": status, **checks}
