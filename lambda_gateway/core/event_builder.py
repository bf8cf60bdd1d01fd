import base64
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from ..models.context import RequestContext

logger = logging.getLogger("gateway.event_builder")


class EventBuilder(ABC):
    @abstractmethod
    def build(self, context: RequestContext) -> Any:
        """
        Build an invocation payload from a RequestContext.
        """
        pass

    def __call__(self, context: RequestContext) -> Any:
        return self.build(context)


def _decode_body(context: RequestContext) -> Tuple[Any, bool]:
    """
    Decode the request body for the payload.

    JSON bodies are embedded as objects, text as a string, and compressed or
    binary bodies as base64 (second element True).
    """
    body = context.body
    if not body:
        return None, False

    if "gzip" in context.headers.get("content-encoding", "").lower():
        return base64.b64encode(body).decode("utf-8"), True

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        return base64.b64encode(body).decode("utf-8"), True

    if "json" in context.headers.get("content-type", "").lower():
        try:
            return json.loads(text), False
        except json.JSONDecodeError:
            logger.warning(
                "Request declared JSON but body did not parse. Forwarding as text.",
                extra={"route_id": context.route_id},
            )
    return text, False


class DefaultPayloadBuilder(EventBuilder):
    """
    Default payload: the inbound request namespaced under "request", so the
    remote function can reconstruct it.
    """

    def build(self, context: RequestContext) -> Dict[str, Any]:
        body, is_base64 = _decode_body(context)

        return {
            "request": {
                "method": context.method,
                "path": context.path,
                "params": context.path_params,
                "headers": context.headers,
                "query": context.query_params,
                "multiValueQuery": context.multi_query_params,
                "body": body,
                "isBase64Encoded": is_base64,
                "requestId": context.request_id,
                "traceId": context.trace_id,
            }
        }
