"""
Where: lambda_gateway/middleware.py
What: Request id binding and structured access logging.
Why: Every log line and every default invocation payload carries the ids of
     the request that caused it.
"""

import logging
import time

from fastapi import Request

from .core.request_context import (
    REQUEST_ID_HEADER,
    TRACE_HEADER,
    bind_request,
    new_trace_id,
    parse_trace_id,
    unbind_request,
)

logger = logging.getLogger("gateway.access")


def _incoming_trace_id(request: Request) -> str:
    header = request.headers.get(TRACE_HEADER)
    if not header:
        return new_trace_id()
    try:
        return parse_trace_id(header)
    except ValueError as exc:
        logger.warning(f"Ignoring malformed {TRACE_HEADER}: {exc}")
        return new_trace_id()


async def trace_propagation_middleware(request: Request, call_next):
    started = time.perf_counter()
    ids = bind_request(_incoming_trace_id(request))

    try:
        response = await call_next(request)
        response.headers[TRACE_HEADER] = ids.trace_header
        response.headers[REQUEST_ID_HEADER] = ids.request_id

        route = request.scope.get("route")
        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "route": getattr(route, "name", None),
                "status": response.status_code,
                "latency_ms": round((time.perf_counter() - started) * 1000, 2),
                "client_ip": request.client.host if request.client else None,
            },
        )
        return response
    finally:
        unbind_request()
