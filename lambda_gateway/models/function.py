"""
Deployed function models.

Plain dataclasses rather than Pydantic models: a handle carries a live boto3
client that is neither validated nor serialized.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class Artifact:
    """A packaged deployment archive."""

    zip_bytes: bytes = field(repr=False)
    handler: str
    code_sha256: str
    files: Tuple[str, ...] = ()

    @property
    def size(self) -> int:
        return len(self.zip_bytes)


@dataclass(frozen=True)
class FunctionHandle:
    """
    Live handle to a published function.

    Invocations through the handle reuse its client and target the ARN of
    the function created at registration.
    """

    function_name: str
    function_arn: str
    client: Any = field(repr=False, compare=False)
    version: str = "$LATEST"
    code_sha256: Optional[str] = None

    @property
    def invoke_target(self) -> str:
        return self.function_arn or self.function_name


@dataclass(frozen=True)
class BundleResult:
    artifact: Artifact
    handle: Optional[FunctionHandle] = None
