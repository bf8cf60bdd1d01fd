"""
Core logic package.

Provides shared logic such as the error taxonomy, payload construction,
hook resolution and logging.
"""

from .exceptions import (
    ConfigurationError,
    DeploymentError,
    GatewayError,
    InvocationError,
    SetupError,
)

__all__ = [
    "ConfigurationError",
    "DeploymentError",
    "GatewayError",
    "InvocationError",
    "SetupError",
]
