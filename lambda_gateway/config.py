"""
Gateway configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewayConfig(BaseSettings):
    """
    Configuration management for the Lambda Gateway.
    """

    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    LOG_CONFIG_PATH: str = Field(
        default="config/gateway_log.yaml", description="Logging dictConfig YAML path"
    )

    # Server settings
    UVICORN_BIND_ADDR: str = Field(default="0.0.0.0:8000", description="Listen address")

    # Path settings
    ROUTING_CONFIG_PATH: str = Field(
        default="config/routing.yml", description="Routing definition file path"
    )

    # Deployment (plugin level)
    LAMBDA_ROLE: str = Field(default="", description="Execution role ARN used for deployments")
    LAMBDA_REGION: Optional[str] = Field(
        default=None, description="Region; enables publishing when set"
    )
    LAMBDA_ACCESS_KEY_ID: Optional[str] = Field(default=None, description="Access key id")
    LAMBDA_SECRET_ACCESS_KEY: Optional[str] = Field(default=None, description="Secret access key")
    LAMBDA_SESSION_TOKEN: Optional[str] = Field(default=None, description="Session token")
    LAMBDA_ENDPOINT_URL: Optional[str] = Field(
        default=None, description="Lambda API endpoint override (e.g. LocalStack)"
    )
    DEFAULT_RUNTIME: str = Field(default="python3.12", description="Runtime for deployed code")
    DEPLOY_WAIT: bool = Field(
        default=True, description="Wait until a published function becomes active"
    )

    # Invocation
    LAMBDA_INVOKE_TIMEOUT: float = Field(
        default=30.0, description="Lambda invoke timeout (seconds)"
    )
    LAMBDA_CONNECT_TIMEOUT: float = Field(default=5.0, description="Connect timeout (seconds)")
    LAMBDA_MAX_ATTEMPTS: int = Field(default=1, description="botocore retry attempts for invoke")

    # FastAPI settings
    root_path: str = Field(default="", description="API root path (for proxy)")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )


# Load config as a singleton.
# pydantic-settings reads environment variables during instantiation.
try:
    config = GatewayConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
