"""
Plugin registrar.

Runs once at startup, before the server accepts connections:

1. validate every lambda route (any failure: nothing is bound)
2. bundle/publish every route that declares `deploy` and cache the handles
   (any failure: nothing is bound)
3. bind an InvocationPipeline per lambda route; pass other routes through

Errors are returned in a RegistrationResult, never raised; the composition
root decides whether to abort startup.
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Tuple

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from ..core.exceptions import ConfigurationError, DeploymentError
from ..core.function_name import function_name_for_route, normalize_function_name
from ..models.function import BundleResult
from ..models.plugin import PluginConfig
from ..models.result import RegistrationResult
from ..models.route import RouteDefinition, RouteLambdaConfig
from .bundler import Bundler
from .deployment_cache import DeploymentCache
from .lambda_invoker import LambdaInvoker
from .pipeline import InvocationPipeline
from .validator import validate_route_config

logger = logging.getLogger("gateway.registrar")

ValidatedRoute = Tuple[RouteDefinition, RouteLambdaConfig]


def deploy_function_name(route_id: str, config: RouteLambdaConfig) -> str:
    """Name under which a route's code is published."""
    if config.deploy is not None and config.deploy.function_name:
        return config.deploy.function_name
    if config.name:
        return normalize_function_name(config.name).name
    return function_name_for_route(route_id)


class PluginRegistrar:
    def __init__(
        self,
        app: FastAPI,
        plugin: PluginConfig,
        bundler: Bundler,
        invoker: LambdaInvoker,
        cache: Optional[DeploymentCache] = None,
    ):
        self.app = app
        self.plugin = plugin
        self.bundler = bundler
        self.invoker = invoker
        self.cache = cache if cache is not None else DeploymentCache()

    def validate(self, routes: Iterable[RouteDefinition]) -> List[ValidatedRoute]:
        """
        Validate all lambda routes.

        Raises:
            ConfigurationError: first invalid route
        """
        validated: List[ValidatedRoute] = []
        seen = set()

        for route in routes:
            if not route.is_lambda:
                continue

            route_id = route.route_id
            if route_id in seen:
                raise ConfigurationError(route_id, "route is declared more than once")
            seen.add(route_id)

            config = validate_route_config(route_id, route.lambda_config)

            if config.deploy is not None:
                if self.plugin.can_publish and not self.plugin.role:
                    raise ConfigurationError(route_id, "plugin 'role' is required to deploy")
                if not self.plugin.can_publish and not config.name:
                    raise ConfigurationError(
                        route_id,
                        "deploy without platform config needs a 'name' to invoke",
                    )

            validated.append((route, config))

        return validated

    async def _deploy(self, route_id: str, config: RouteLambdaConfig) -> BundleResult:
        function_name = deploy_function_name(route_id, config)
        logger.info(
            f"Deploying {route_id} as {function_name}",
            extra={"route_id": route_id, "function_name": function_name},
        )
        return await run_in_threadpool(
            self.bundler.bundle, config.deploy, function_name, self.plugin
        )

    async def deploy_all(self, validated: List[ValidatedRoute]) -> List[str]:
        """
        Deploy every route that declares `deploy`, concurrently.

        Returns:
            route ids whose handle was cached

        Raises:
            DeploymentError: first failing route, in declaration order
        """
        targets = [(route, config) for route, config in validated if config.deploy is not None]
        if not targets:
            return []

        outcomes = await asyncio.gather(
            *(self._deploy(route.route_id, config) for route, config in targets),
            return_exceptions=True,
        )

        deployed: List[str] = []
        for (route, config), outcome in zip(targets, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(
                    f"Deployment failed for {route.route_id}: {outcome}",
                    exc_info=outcome,
                    extra={"route_id": route.route_id, "error_type": type(outcome).__name__},
                )
                raise DeploymentError(route.route_id, outcome) from outcome

            if outcome.handle is not None:
                self.cache.put(route.route_id, outcome.handle)
                deployed.append(route.route_id)
            else:
                logger.warning(
                    f"{route.route_id} packaged but not published; "
                    f"invoking '{config.name}' by name",
                    extra={"route_id": route.route_id, "function_name": config.name},
                )
        return deployed

    def bind(
        self, routes: Iterable[RouteDefinition], validated: List[ValidatedRoute]
    ) -> RegistrationResult:
        """Attach every route to the app; lambda routes get an InvocationPipeline."""
        result = RegistrationResult()
        configs = {route.route_id: config for route, config in validated}

        for route in routes:
            if not route.is_lambda:
                self.app.add_api_route(route.path, route.endpoint, methods=[route.method])
                result.passthrough.append(route.route_id)
                continue

            pipeline = InvocationPipeline(
                route.route_id, configs[route.route_id], self.cache, self.invoker
            )
            self.app.add_api_route(
                route.path, pipeline.handle, methods=[route.method], name=route.route_id
            )
            result.registered.append(route.route_id)

        return result

    async def register(self, routes: Iterable[RouteDefinition]) -> RegistrationResult:
        """
        Validate, deploy and bind all routes.
        """
        routes = list(routes)

        try:
            validated = self.validate(routes)
            deployed = await self.deploy_all(validated)
        except (ConfigurationError, DeploymentError) as e:
            return RegistrationResult(error=e)

        result = self.bind(routes, validated)
        result.deployed = deployed
        self.cache.freeze()

        logger.info(
            f"Registered {len(result.registered)} lambda routes "
            f"({len(deployed)} deployed, {len(result.passthrough)} passthrough)",
            extra={"routes": result.registered, "deployed": deployed},
        )
        return result


async def register_lambda_routes(
    app: FastAPI,
    routes: Iterable[RouteDefinition],
    plugin: PluginConfig,
    bundler: Bundler,
    invoker: LambdaInvoker,
    cache: Optional[DeploymentCache] = None,
) -> RegistrationResult:
    """Convenience wrapper around PluginRegistrar.register."""
    registrar = PluginRegistrar(app, plugin, bundler, invoker, cache=cache)
    return await registrar.register(routes)
