"""
Audit trail - one audit_logs row per /api request.

The caller is taken from the bearer token when it decodes; requests with a
missing or bad token are still recorded, just without a user.
The row is written after the response has been sent, in its own session.
"""

import json
import time
from typing import Any, Dict, Optional

import jwt
from fastapi import Request
from starlette.background import BackgroundTask
from starlette.responses import Response

from trading_road.core.config import settings
from trading_road.core.logging_config import get_logger
from trading_road.core.security import decode_token
from trading_road.db.session import SessionLocal
from trading_road.models.audit_log import AuditLog

logger = get_logger(__name__)

TRUNCATED_SUFFIX = "... (truncated)"
MULTIPART_PLACEHOLDER = "(multipart/form-data omitted)"


def truncate_body(body: bytes, limit: Optional[int] = None) -> Optional[str]:
    if not body:
        return None
    limit = limit if limit is not None else settings.AUDIT_LOG_BODY_LIMIT
    text = body.decode("utf-8", errors="replace")
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATED_SUFFIX


def caller_from_headers(authorization: Optional[str]) -> Dict[str, Any]:
    """user_id / employee_id / role from a Bearer header, empty when it does not decode"""
    if not authorization:
        return {}
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        return {}
    try:
        claims = decode_token(parts[1])
    except jwt.InvalidTokenError:
        return {}
    return {
        "user_id": claims.get("user_id"),
        "employee_id": claims.get("employee_id"),
        "role": claims.get("role"),
    }


def error_message_from(body: bytes) -> Optional[str]:
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return None


async def write_audit_log(entry: Dict[str, Any]) -> None:
    try:
        async with SessionLocal() as db:
            db.add(AuditLog(**entry))
            await db.commit()
    except Exception as e:
        logger.error(f"Failed to write audit log for {entry.get('method')} {entry.get('endpoint')}: {e}")


def route_template(request: Request) -> str:
    """The matched route with its placeholders, mounted under the full prefix.

    Routes inside nested routers may report a path relative to their own
    router, so the unmatched head of the URL is put back in front of it.
    """
    route = request.scope.get("route")
    route_path = getattr(route, "path", None)
    if not route_path:
        return request.url.path

    tail = [segment for segment in route_path.split("/") if segment]
    segments = [segment for segment in request.url.path.split("/") if segment]
    head = segments[:len(segments) - len(tail)]
    return "/" + "/".join(head + tail)


def _build_entry(request: Request, request_body: Optional[str], started: float) -> Dict[str, Any]:
    return {
        **caller_from_headers(request.headers.get("authorization")),
        "action": f"{request.method} {route_template(request)}",
        "endpoint": request.url.path,
        "method": request.method,
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
        "request_body": request_body,
        "duration_ms": int((time.perf_counter() - started) * 1000),
    }


async def audit_log_middleware(request: Request, call_next) -> Response:
    if not settings.AUDIT_LOG_ENABLED or not request.url.path.startswith(settings.API_PREFIX):
        return await call_next(request)

    started = time.perf_counter()

    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" in content_type:
        request_body = MULTIPART_PLACEHOLDER
    else:
        request_body = truncate_body(await request.body())

    try:
        response = await call_next(request)
    except Exception as e:
        # The error handler answers 500; record it before the exception moves on
        entry = _build_entry(request, request_body, started)
        entry.update(status_code=500, error_message=f"internal server error: {e}")
        await write_audit_log(entry)
        raise

    body = b"".join([chunk async for chunk in response.body_iterator])

    entry = _build_entry(request, request_body, started)
    entry.update(
        status_code=response.status_code,
        response_body=truncate_body(body),
        error_message=error_message_from(body) if response.status_code >= 400 else None,
    )

    return Response(
        content=body,
        status_code=response.status_code,
        headers=dict(response.headers),
        background=BackgroundTask(write_audit_log, entry),
    )
