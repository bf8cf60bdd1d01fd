"""
Lambda Gateway.

Routes FastAPI requests to AWS Lambda functions, optionally bundling and
deploying the function code before the server starts.
"""

from .core.exceptions import (
    ConfigurationError,
    DeploymentError,
    GatewayError,
    InvocationError,
    SetupError,
)
from .models import (
    DeploySpec,
    PlatformConfig,
    PluginConfig,
    RemoteResult,
    RequestContext,
    RouteDefinition,
    RouteLambdaConfig,
)

__all__ = [
    "ConfigurationError",
    "DeploySpec",
    "DeploymentError",
    "GatewayError",
    "InvocationError",
    "PlatformConfig",
    "PluginConfig",
    "RemoteResult",
    "RequestContext",
    "RouteDefinition",
    "RouteLambdaConfig",
    "SetupError",
]
