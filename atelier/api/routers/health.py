# atelier/api/routers/health.py
import redis
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from atelier.data.database import get_db
from atelier.utils.logging import get_logger
from atelier.utils.retry import redis_retry
from atelier.utils.settings import REDIS_URL

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@redis_retry()
def ping_broker() -> bool:
    client = redis.Redis.from_url(REDIS_URL, socket_connect_timeout=1, socket_timeout=1)
    return bool(client.ping())


@router.get("/health")
def health(db: Session = Depends(get_db)):
    checks = {"database": "ok", "broker": "ok"}

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")
        checks["database"] = "error"

    try:
        ping_broker()
    except redis.RedisError as e:
        logger.warning(f"Health check: broker unreachable ({e})")
        checks["broker"] = "error"

    # the broker only carries notifications, orders still work without it
    healthy = checks["database"] == "ok"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"status": "ok" if all(v == "ok" for v in checks.values()) else "degraded", **checks},
    )
