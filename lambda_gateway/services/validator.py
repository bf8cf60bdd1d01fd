"""
Route lambda configuration validator.

Runs synchronously at registration; a failure is fatal to startup and is
never turned into an HTTP response.
"""

import logging
from typing import Any

from pydantic import ValidationError

from ..core.exceptions import ConfigurationError
from ..models.route import RouteLambdaConfig

logger = logging.getLogger("gateway.validator")


def _format_errors(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


def validate_route_config(route_id: str, raw: Any) -> RouteLambdaConfig:
    """
    Validate and normalize a route's lambda configuration.

    Args:
        route_id: route identity, used in error messages
        raw: a RouteLambdaConfig or a mapping

    Returns:
        Normalized RouteLambdaConfig (hooks resolved to callables)

    Raises:
        ConfigurationError: invalid or incomplete configuration
    """
    if isinstance(raw, RouteLambdaConfig):
        return raw

    if not isinstance(raw, dict):
        raise ConfigurationError(route_id, f"expected a mapping, got {type(raw).__name__}")

    try:
        normalized = RouteLambdaConfig.model_validate(raw)
    except ValidationError as e:
        detail = _format_errors(e)
        logger.error(
            f"Lambda configuration rejected for {route_id}",
            extra={"route_id": route_id, "error_detail": detail},
        )
        raise ConfigurationError(route_id, detail) from e

    return normalized
