"""
Lambda Gateway - routes HTTP requests to AWS Lambda functions

Routes come from routing.yml (or are passed to create_app). Routes that
declare `deploy` are bundled and published before the server starts.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI

from .config import GatewayConfig, config
from .core.logging_config import setup_logging
from .exceptions import register_exception_handlers
from .lifecycle import manage_lifespan
from .middleware import trace_propagation_middleware
from .models.plugin import PluginConfig
from .models.route import RouteDefinition
from .services.bundler import Bundler
from .services.lambda_invoker import LambdaInvoker

logger = logging.getLogger("gateway.main")


def create_app(
    routes: Optional[List[RouteDefinition]] = None,
    plugin: Optional[PluginConfig] = None,
    gateway_config: GatewayConfig = config,
    bundler: Optional[Bundler] = None,
    invoker: Optional[LambdaInvoker] = None,
) -> FastAPI:
    """
    Assemble the gateway application.

    Args:
        routes: route definitions; loaded from ROUTING_CONFIG_PATH when None
        plugin: plugin config; built from settings when None
        gateway_config: GatewayConfig instance
        bundler: Bundler override (tests)
        invoker: LambdaInvoker override (tests)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with manage_lifespan(
            app,
            gateway_config,
            routes=routes,
            plugin=plugin,
            bundler=bundler,
            invoker=invoker,
        ):
            yield

    app = FastAPI(
        title="Lambda Gateway",
        version="1.0.0",
        lifespan=lifespan,
        root_path=gateway_config.root_path,
    )
    app.middleware("http")(trace_propagation_middleware)
    register_exception_handlers(app)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


setup_logging(config.LOG_CONFIG_PATH)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    host, _, port = config.UVICORN_BIND_ADDR.rpartition(":")
    uvicorn.run(app, host=host or "0.0.0.0", port=int(port or 8000))
