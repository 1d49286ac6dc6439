import os
import time
from datetime import datetime, timezone
from typing import Any

import psutil
import structlog
from fastapi import APIRouter, Response, status
from sqlalchemy.exc import SQLAlchemyError

from infra.config.config import get_config
from infra.db.session import ping_database
from infra.utils.formatters import format_bytes, format_duration

logger = structlog.stdlib.get_logger(__name__)

router = APIRouter(prefix="/stats", tags=["Stats"])

_start_time: float = time.time()
_current_process: psutil.Process = psutil.Process(os.getpid())


@router.get(
    "/health",
    response_model=dict[str, Any],
    status_code=status.HTTP_200_OK,
    summary="Get application liveness and database reachability",
)
async def get_health(response: Response):
    config = get_config()
    payload: dict[str, Any] = {
        "status": "UP",
        "app_name": config.APP_NAME,
        "version": config.VERSION,
        "uptime": format_duration(time.time() - _start_time),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    try:
        memory_info = _current_process.memory_info()
        payload["ram"] = format_bytes(memory_info.rss)
        payload["cpu_percent"] = _current_process.cpu_percent(interval=None)
    except psutil.Error as e:
        logger.warning(f"Could not read process stats: {e}")

    try:
        await ping_database()
        payload["database"] = "UP"
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Database ping failed: {e}")
        payload["status"] = "DEGRADED"
        payload["database"] = "DOWN"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return payload
