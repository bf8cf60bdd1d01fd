"""
Per-request identifiers.

The middleware binds a trace root (from X-Amzn-Trace-Id, or freshly
generated) and a request id to ContextVars; log records and the default
invocation payload read them back. Only the Root segment of the trace header
is kept: the gateway starts no segments of its own, so Parent and Sampled
have nothing to feed.
"""

import secrets
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Optional

TRACE_HEADER = "X-Amzn-Trace-Id"
REQUEST_ID_HEADER = "x-amzn-RequestId"

_trace_id_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)
_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


@dataclass(frozen=True)
class RequestIds:
    trace_id: str
    request_id: str

    @property
    def trace_header(self) -> str:
        """Value echoed back in X-Amzn-Trace-Id."""
        return f"Root={self.trace_id}"


def new_trace_id() -> str:
    """X-Ray style root id: 1-<epoch hex>-<96 random bits>."""
    return f"1-{int(time.time()):08x}-{secrets.token_hex(12)}"


def parse_trace_id(header: str) -> str:
    """
    Extract the Root id from an X-Amzn-Trace-Id header.

    A bare id ("1-5759e988-bd86...") is accepted as the root.

    Raises:
        ValueError: header carries no Root
    """
    for part in header.split(";"):
        key, sep, value = part.partition("=")
        if sep and key.strip() == "Root" and value.strip():
            return value.strip()

    bare = header.strip()
    if bare and "=" not in bare and "-" in bare:
        return bare
    raise ValueError(f"Trace header has no Root: {header!r}")


def bind_request(trace_id: str) -> RequestIds:
    """Bind the trace id and a new request id to the current context."""
    ids = RequestIds(trace_id=trace_id, request_id=str(uuid.uuid4()))
    _trace_id_var.set(ids.trace_id)
    _request_id_var.set(ids.request_id)
    return ids


def unbind_request() -> None:
    _trace_id_var.set(None)
    _request_id_var.set(None)


def get_trace_id() -> Optional[str]:
    return _trace_id_var.get()


def get_request_id() -> Optional[str]:
    return _request_id_var.get()
