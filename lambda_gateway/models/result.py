"""
Invocation and registration result models.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from pydantic import BaseModel

from ..core.exceptions import GatewayError


class RemoteResult(BaseModel):
    """
    Decoded result of a Lambda invocation.

    `payload` is the JSON-decoded function result when the bytes are JSON,
    otherwise the decoded text (or None for an empty payload).
    """

    status_code: int = 200
    payload: Any = None
    raw: bytes = b""
    function_error: Optional[str] = None
    executed_version: Optional[str] = None
    is_json: bool = False

    @property
    def is_logic_error(self) -> bool:
        """Returns True if the function itself reported an error (X-Amz-Function-Error)."""
        return self.function_error is not None


@dataclass
class RegistrationResult:
    """
    Outcome of registering the configured routes.

    The composition root decides what to do with `error`; the lifespan
    raises it to abort startup.
    """

    registered: List[str] = field(default_factory=list)
    deployed: List[str] = field(default_factory=list)
    passthrough: List[str] = field(default_factory=list)
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is None:
            return
        cause = getattr(self.error, "cause", None)
        if cause is not None:
            raise self.error from cause
        raise self.error
