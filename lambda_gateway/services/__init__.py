"""
Services package.

Provides the handler lifecycle: validation, bundling, deployment cache,
invocation and registration.
"""

from .bundler import Bundler
from .deployment_cache import DeploymentCache
from .lambda_invoker import LambdaInvoker
from .pipeline import InvocationPipeline
from .registrar import PluginRegistrar, register_lambda_routes
from .route_loader import RouteLoader
from .validator import validate_route_config

__all__ = [
    "Bundler",
    "DeploymentCache",
    "InvocationPipeline",
    "LambdaInvoker",
    "PluginRegistrar",
    "RouteLoader",
    "register_lambda_routes",
    "validate_route_config",
]
