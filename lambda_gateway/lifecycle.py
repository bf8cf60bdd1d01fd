"""
Where: lambda_gateway/lifecycle.py
What: Gateway startup/shutdown orchestration.
Why: Route registration (validation, deployment, binding) must finish, or
     abort startup, before the server accepts connections.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from fastapi import FastAPI

from .config import GatewayConfig
from .models.plugin import PluginConfig
from .models.route import RouteDefinition
from .services.bundler import Bundler
from .services.deployment_cache import DeploymentCache
from .services.lambda_client import LambdaClientFactory
from .services.lambda_invoker import LambdaInvoker
from .services.registrar import register_lambda_routes
from .services.route_loader import RouteLoader

logger = logging.getLogger("gateway.main")


@asynccontextmanager
async def manage_lifespan(
    app: FastAPI,
    gateway_config: GatewayConfig,
    routes: Optional[List[RouteDefinition]] = None,
    plugin: Optional[PluginConfig] = None,
    bundler: Optional[Bundler] = None,
    invoker: Optional[LambdaInvoker] = None,
) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    client_factory = LambdaClientFactory(gateway_config)

    if plugin is None:
        plugin = PluginConfig.from_settings(gateway_config)
    if routes is None:
        routes = RouteLoader(gateway_config.ROUTING_CONFIG_PATH).load_routes()
    if bundler is None:
        bundler = Bundler(client_factory, gateway_config)
    if invoker is None:
        invoker = LambdaInvoker(client_factory, plugin.config)

    cache = DeploymentCache()

    logger.info(
        "Registering lambda routes",
        extra={"routes": len(routes), "publishing_enabled": plugin.can_publish},
    )
    result = await register_lambda_routes(app, routes, plugin, bundler, invoker, cache=cache)
    if not result.ok:
        logger.critical(f"Gateway startup aborted: {result.error}")
    result.raise_for_error()

    app.state.plugin = plugin
    app.state.deployment_cache = cache
    app.state.lambda_invoker = invoker
    app.state.registration = result

    logger.info("Gateway initialized.")
    try:
        yield
    finally:
        logger.info("Gateway shutting down.")
