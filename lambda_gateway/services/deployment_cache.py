"""
Deployment cache.

Maps route identity to the handle of the function published for it.
Single writer (the registrar, during startup), many readers (pipelines,
per request). Writes stop at freeze(), before the server accepts traffic,
so no locking is needed.
"""

import logging
from typing import Dict, Iterator, Optional

from ..models.function import FunctionHandle

logger = logging.getLogger("gateway.deployment_cache")


class DeploymentCache:
    def __init__(self):
        self._handles: Dict[str, FunctionHandle] = {}
        self._frozen = False

    def put(self, route_id: str, handle: FunctionHandle) -> None:
        """
        Store the handle for a route.

        Raises:
            RuntimeError: the cache is frozen or the route was already deployed
        """
        if self._frozen:
            raise RuntimeError(f"Deployment cache is frozen; cannot store {route_id}")
        if route_id in self._handles:
            raise RuntimeError(f"Route {route_id} already has a deployed function")

        self._handles[route_id] = handle
        logger.info(
            f"Cached deployed function for {route_id}",
            extra={"route_id": route_id, "function_arn": handle.function_arn},
        )

    def get(self, route_id: str) -> Optional[FunctionHandle]:
        return self._handles.get(route_id)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, route_id: object) -> bool:
        return route_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[str]:
        return iter(self._handles)
