import logging
from typing import Any, Optional

import boto3
from botocore.config import Config

from ..config import GatewayConfig
from ..models.plugin import PlatformConfig

logger = logging.getLogger("gateway.lambda_client")


class LambdaClientFactory:
    """
    Lambda client factory for centralized timeout/retry handling.
    """

    def __init__(self, config: GatewayConfig):
        self.config = config

    def _client_config(self) -> Config:
        return Config(
            read_timeout=self.config.LAMBDA_INVOKE_TIMEOUT,
            connect_timeout=self.config.LAMBDA_CONNECT_TIMEOUT,
            retries={"max_attempts": self.config.LAMBDA_MAX_ATTEMPTS, "mode": "standard"},
        )

    def create_client(self, platform: Optional[PlatformConfig] = None) -> Any:
        """
        Create a boto3 Lambda client.

        Args:
            platform: explicit credentials/region. When None the default boto3
                credential chain is used (ambient credentials).
        """
        if platform is not None:
            kwargs = platform.client_kwargs()
        else:
            kwargs = {}
            if self.config.LAMBDA_REGION:
                kwargs["region_name"] = self.config.LAMBDA_REGION
            if self.config.LAMBDA_ENDPOINT_URL:
                kwargs["endpoint_url"] = self.config.LAMBDA_ENDPOINT_URL

        logger.debug(
            "Creating Lambda client",
            extra={
                "region": kwargs.get("region_name"),
                "endpoint_url": kwargs.get("endpoint_url"),
                "ambient_credentials": "aws_access_key_id" not in kwargs,
            },
        )
        return boto3.client("lambda", config=self._client_config(), **kwargs)
