"""
Route domain models.

Defines the declarative lambda configuration a route carries, and the
route definition handed to the registrar.
"""

import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.function_name import normalize_function_name
from ..core.hooks import resolve_hook


class DeploySpec(BaseModel):
    """
    Deploy-before-serve instructions.

    `source` is the entry module and `export` the handler callable inside it;
    the remaining fields are runtime metadata passed to the platform.
    """

    model_config = ConfigDict(extra="forbid")

    source: Path
    export: str
    function_name: Optional[str] = None
    runtime: Optional[str] = None
    timeout: int = Field(default=3, ge=1, le=900)
    memory_size: int = Field(default=128, ge=128, le=10240)
    environment: Dict[str, str] = Field(default_factory=dict)
    description: str = ""
    include: List[Path] = Field(default_factory=list)

    @field_validator("source")
    @classmethod
    def _source_readable(cls, value: Path) -> Path:
        if not value.is_file():
            raise ValueError(f"source is not a file: {value}")
        if not os.access(value, os.R_OK):
            raise ValueError(f"source is not readable: {value}")
        return value

    @field_validator("export")
    @classmethod
    def _export_identifier(cls, value: str) -> str:
        if not value or not value.isidentifier():
            raise ValueError("export must be a non-empty Python identifier")
        return value

    @field_validator("function_name")
    @classmethod
    def _function_name_valid(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            normalize_function_name(value)
        return value

    @field_validator("include")
    @classmethod
    def _include_exists(cls, value: List[Path]) -> List[Path]:
        for path in value:
            if not path.exists():
                raise ValueError(f"include path does not exist: {path}")
        return value

    @property
    def handler(self) -> str:
        """Lambda handler string, e.g. "index.handler"."""
        return f"{self.source.stem}.{self.export}"


class RouteLambdaConfig(BaseModel):
    """
    Normalized lambda configuration of a single route.

    Hooks given as "module:attribute" strings are resolved to callables.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    name: Optional[str] = None
    setup: Optional[Callable[..., Any]] = None
    complete: Optional[Callable[..., Any]] = None
    deploy: Optional[DeploySpec] = None

    @field_validator("name")
    @classmethod
    def _name_usable(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not value.strip():
            raise ValueError("name must be a non-empty string")
        normalize_function_name(value)
        return value.strip()

    @field_validator("setup", "complete", mode="before")
    @classmethod
    def _resolve_hook(cls, value: Any) -> Any:
        try:
            return resolve_hook(value)
        except ImportError as e:
            raise ValueError(f"cannot import hook {value!r}: {e}") from e

    @model_validator(mode="after")
    def _name_or_deploy(self) -> "RouteLambdaConfig":
        if not self.name and self.deploy is None:
            raise ValueError("either 'name' or 'deploy' is required")
        return self


class RouteDefinition(BaseModel):
    """
    A route handed to the registrar.

    Lambda routes carry a raw `lambda` config (validated at registration);
    other routes carry a plain endpoint and are bound untouched.
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    method: str = "GET"
    path: str
    lambda_config: Any = Field(default=None, alias="lambda")
    endpoint: Optional[Callable[..., Any]] = None

    @field_validator("method")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def _lambda_or_endpoint(self) -> "RouteDefinition":
        if self.lambda_config is None and self.endpoint is None:
            raise ValueError(f"route {self.route_id} needs either 'lambda' or 'endpoint'")
        return self

    @property
    def route_id(self) -> str:
        return f"{self.method} {self.path}"

    @property
    def is_lambda(self) -> bool:
        return self.lambda_config is not None
