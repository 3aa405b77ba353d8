"""Security event log: one JSON line per event on the acrossmedia.security logger."""
import json
import logging
from datetime import datetime, timezone
from fastapi import Request

security_logger = logging.getLogger("acrossmedia.security")


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def client_user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "")


def log_security_event(event_type: str, details: dict, request: Request | None = None) -> dict:
    event = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "type": event_type,
        "ip": client_ip(request) if request else None,
        "userAgent": client_user_agent(request) if request else None,
        "details": details,
    }
    security_logger.warning("SECURITY EVENT: %s", json.dumps(event, default=str))
    return event
