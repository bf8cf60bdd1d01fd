"""
Invocation Pipeline - Service Layer

Per-request flow: RequestContext -> payload -> Lambda -> HTTP response.

    Idle -> Setup -> Invoking -> Completing -> Responded

Setup failure skips invocation. With a `complete` hook, every outcome
(including errors) is handed to it and its return value is the response.
Without one, any error becomes a generic 500. No request-time error leaves
the pipeline.
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import Response

from ..core.event_builder import DefaultPayloadBuilder, EventBuilder
from ..core.exceptions import GatewayError, InvocationError, SetupError
from ..core.hooks import call_hook
from ..core.request_context import get_request_id, get_trace_id
from ..core.utils import encode_payload, error_response, render_hook_response, render_remote_result
from ..models.context import RequestContext
from ..models.result import RemoteResult
from ..models.route import RouteLambdaConfig
from .deployment_cache import DeploymentCache
from .lambda_invoker import LambdaInvoker

logger = logging.getLogger("gateway.pipeline")


class InvocationPipeline:
    """
    FastAPI endpoint bound to one lambda route.
    """

    def __init__(
        self,
        route_id: str,
        config: RouteLambdaConfig,
        cache: DeploymentCache,
        invoker: LambdaInvoker,
        payload_builder: Optional[EventBuilder] = None,
    ):
        self.route_id = route_id
        self.config = config
        self.cache = cache
        self.invoker = invoker
        self.payload_builder = payload_builder or DefaultPayloadBuilder()

    async def handle(self, request: Request) -> Response:
        """Endpoint bound to the route via app.add_api_route."""
        context = await RequestContext.from_request(
            request, self.route_id, get_request_id(), get_trace_id()
        )
        return await self.process_request(context)

    async def process_request(self, context: RequestContext) -> Response:
        """
        Run setup, invocation and completion for one request.
        """
        error: Optional[GatewayError] = None
        result: Optional[RemoteResult] = None

        try:
            payload = await self._build_payload(context)
            result = await self._invoke(payload)
        except (SetupError, InvocationError) as e:
            error = e

        return await self._finalize(error, result, context)

    async def _build_payload(self, context: RequestContext) -> bytes:
        try:
            if self.config.setup is not None:
                payload = await call_hook(self.config.setup, context)
            else:
                payload = self.payload_builder.build(context)
            # A setup hook may report failure by returning the error.
            if isinstance(payload, Exception):
                raise payload
            return encode_payload(payload)
        except Exception as e:
            logger.warning(
                f"Setup failed for {self.route_id}: {e}",
                exc_info=True,
                extra={"route_id": self.route_id, "error_type": type(e).__name__},
            )
            raise SetupError(self.route_id, e) from e

    async def _invoke(self, payload: bytes) -> RemoteResult:
        handle = self.cache.get(self.route_id)
        target = handle.invoke_target if handle else self.config.name or self.route_id

        try:
            if handle is not None:
                return await self.invoker.invoke_handle(handle, payload)
            if not self.config.name:
                raise RuntimeError(f"No deployed function or name for {self.route_id}")
            return await self.invoker.invoke_function(self.config.name, payload)
        except InvocationError:
            raise
        except Exception as e:
            logger.error(
                f"Unexpected invocation failure for {self.route_id}",
                exc_info=True,
                extra={"route_id": self.route_id, "function_name": target},
            )
            raise InvocationError(target, e) from e

    async def _finalize(
        self,
        error: Optional[GatewayError],
        result: Optional[RemoteResult],
        context: RequestContext,
    ) -> Response:
        if self.config.complete is not None:
            try:
                value = await call_hook(self.config.complete, error, result, context)
                return render_hook_response(value)
            except Exception:
                logger.exception(
                    f"Complete hook failed for {self.route_id}",
                    extra={"route_id": self.route_id},
                )
                return error_response(500)

        if error is not None:
            logger.error(
                f"Request to {self.route_id} failed: {error}",
                extra={"route_id": self.route_id, "error_type": type(error).__name__},
            )
            return error_response(500)

        if result is None:
            return error_response(500)
        return render_remote_result(result)
