"""
Gateway Utility Module
"""

import json
import logging
from typing import Any, Dict, Mapping

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ..models.result import RemoteResult

logger = logging.getLogger("gateway.utils")


def encode_payload(payload: Any) -> bytes:
    """
    Serialize an invocation payload.

    bytes are sent as-is, everything else is JSON encoded.
    """
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    return json.dumps(jsonable_encoder(payload)).encode("utf-8")


def parse_invoke_response(response: Mapping[str, Any]) -> RemoteResult:
    """
    Parse a boto3 Lambda invoke response into a RemoteResult.

    Args:
        response: dict returned by lambda_client.invoke()

    Returns:
        RemoteResult with the payload JSON-decoded where possible
    """
    body = response.get("Payload")
    if body is None:
        raw = b""
    elif isinstance(body, (bytes, bytearray)):
        raw = bytes(body)
    else:
        raw = body.read()

    payload: Any = None
    is_json = False
    if raw:
        try:
            payload = json.loads(raw)
            is_json = True
        except (json.JSONDecodeError, UnicodeDecodeError):
            payload = raw.decode("utf-8", errors="replace")
            logger.warning(
                "Lambda payload is not JSON. Returning as text.",
                extra={"snippet": payload[:200]},
            )

    return RemoteResult(
        status_code=response.get("StatusCode", 200),
        payload=payload,
        raw=raw,
        function_error=response.get("FunctionError"),
        executed_version=response.get("ExecutedVersion"),
        is_json=is_json,
    )


def render_remote_result(result: RemoteResult) -> Response:
    """Default success response: HTTP 200 carrying the remote payload."""
    if result.is_json:
        return JSONResponse(status_code=200, content=result.payload)
    return Response(status_code=200, content=result.raw)


def render_hook_response(value: Any) -> Response:
    """
    Turn a complete-hook return value into a response.

    A Response passes through verbatim; str, bytes and other values are
    wrapped in a 200 response.
    """
    if isinstance(value, Response):
        return value
    if isinstance(value, str):
        return PlainTextResponse(value)
    if isinstance(value, (bytes, bytearray)):
        return Response(content=bytes(value), media_type="application/octet-stream")
    return JSONResponse(status_code=200, content=jsonable_encoder(value))


def error_response(status_code: int = 500) -> JSONResponse:
    """Generic error body; details stay in the logs."""
    content: Dict[str, Any] = {"message": "Internal Server Error"}
    return JSONResponse(status_code=status_code, content=content)
