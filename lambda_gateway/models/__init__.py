"""
Data model definitions package.

Aggregates models for use in other modules.
"""

from .context import RequestContext
from .function import Artifact, BundleResult, FunctionHandle
from .plugin import PlatformConfig, PluginConfig
from .result import RegistrationResult, RemoteResult
from .route import DeploySpec, RouteDefinition, RouteLambdaConfig

__all__ = [
    "Artifact",
    "BundleResult",
    "DeploySpec",
    "FunctionHandle",
    "PlatformConfig",
    "PluginConfig",
    "RegistrationResult",
    "RemoteResult",
    "RequestContext",
    "RouteDefinition",
    "RouteLambdaConfig",
]
