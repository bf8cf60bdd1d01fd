"""
Where: lambda_gateway/core/function_name.py
What: Normalize Lambda FunctionName values used by route configuration.
Why: Reject unusable names at registration instead of at the first request.
"""

import re
from dataclasses import dataclass

_FULL_ARN_PATTERN = re.compile(
    r"^arn:[^:]+:lambda:[^:]+:\d{12}:function:(?P<name>[^:]+)(?::(?P<qualifier>[^:]+))?$"
)
_PARTIAL_ARN_PATTERN = re.compile(r"^\d{12}:function:(?P<name>[^:]+)(?::(?P<qualifier>[^:]+))?$")
_NAME_WITH_QUALIFIER_PATTERN = re.compile(r"^(?P<name>[^:]+):(?P<qualifier>[^:]+)$")
_VALID_NAME = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
_INVALID_CHARS = re.compile(r"[^A-Za-z0-9_-]+")

MAX_FUNCTION_NAME_LENGTH = 64


@dataclass(frozen=True)
class NormalizedFunctionName:
    original: str
    name: str
    qualifier: str | None = None


def normalize_function_name(function_name: str) -> NormalizedFunctionName:
    """
    Normalize a FunctionName.

    Supported inputs:
    - function name (`my-function`)
    - function name with qualifier (`my-function:prod`)
    - full ARN (`arn:aws:lambda:region:account:function:my-function[:qualifier]`)
    - partial ARN (`account:function:my-function[:qualifier]`)

    Raises:
        ValueError: empty value or a name Lambda would reject
    """
    normalized = function_name.strip()
    if not normalized:
        raise ValueError("FunctionName is required")

    match = (
        _FULL_ARN_PATTERN.match(normalized)
        or _PARTIAL_ARN_PATTERN.match(normalized)
        or _NAME_WITH_QUALIFIER_PATTERN.match(normalized)
    )
    if match:
        result = NormalizedFunctionName(
            original=normalized,
            name=match.group("name"),
            qualifier=match.group("qualifier"),
        )
    else:
        result = NormalizedFunctionName(original=normalized, name=normalized)

    if not _VALID_NAME.match(result.name):
        raise ValueError(f"Invalid FunctionName: {function_name!r}")
    return result


def function_name_for_route(route_id: str, prefix: str = "gateway") -> str:
    """
    Derive a Lambda-safe function name from a route identity.

    Example: "GET /users/{id}" -> "gateway-get-users-id"
    """
    slug = _INVALID_CHARS.sub("-", route_id.lower()).strip("-")
    name = f"{prefix}-{slug}" if slug else prefix
    return name[:MAX_FUNCTION_NAME_LENGTH].rstrip("-")
