"""
Lambda Invoker Service

Sends RequestResponse invocations through a boto3 Lambda client: either the
client bound to a deployed FunctionHandle or a default client built from the
plugin's credentials (ambient credentials when none are configured).
"""

import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from ..core.exceptions import InvocationError
from ..core.utils import parse_invoke_response
from ..models.function import FunctionHandle
from ..models.plugin import PlatformConfig
from ..models.result import RemoteResult
from .lambda_client import LambdaClientFactory

logger = logging.getLogger("gateway.lambda_invoker")


class LambdaInvoker:
    def __init__(
        self,
        client_factory: LambdaClientFactory,
        platform: Optional[PlatformConfig] = None,
    ):
        """
        Args:
            client_factory: LambdaClientFactory instance
            platform: credentials/region for the default client
        """
        self.client_factory = client_factory
        self.platform = platform
        self._default_client: Any = None

    @property
    def default_client(self) -> Any:
        if self._default_client is None:
            self._default_client = self.client_factory.create_client(self.platform)
        return self._default_client

    async def invoke_function(
        self, function_name: str, payload: bytes, client: Any = None
    ) -> RemoteResult:
        """
        Invoke a Lambda function synchronously.

        The blocking boto3 call runs in the threadpool: the request waits,
        the event loop does not.

        Args:
            function_name: name or ARN of the function
            payload: serialized invocation payload
            client: boto3 client to use; defaults to the shared default client

        Returns:
            RemoteResult

        Raises:
            InvocationError: platform error, timeout, or function error
        """
        client = client or self.default_client
        logger.info(f"Invoking {function_name}", extra={"function_name": function_name})

        try:
            response = await run_in_threadpool(
                client.invoke,
                FunctionName=function_name,
                InvocationType="RequestResponse",
                Payload=payload,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                f"Lambda invocation failed for function '{function_name}'",
                extra={
                    "function_name": function_name,
                    "error_type": type(e).__name__,
                    "error_detail": str(e),
                },
            )
            raise InvocationError(function_name, e) from e

        result = parse_invoke_response(response)
        if result.is_logic_error:
            logger.error(
                f"Lambda function '{function_name}' reported an error",
                extra={
                    "function_name": function_name,
                    "function_error": result.function_error,
                },
            )
            raise InvocationError(function_name, payload=result.payload)

        return result

    async def invoke_handle(self, handle: FunctionHandle, payload: bytes) -> RemoteResult:
        """Invoke a deployed function through its own client."""
        return await self.invoke_function(handle.invoke_target, payload, client=handle.client)
