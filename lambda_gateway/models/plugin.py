"""
Plugin-level configuration models.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from ..config import GatewayConfig


class PlatformConfig(BaseModel):
    """Client credentials/region used for deployments."""

    model_config = ConfigDict(extra="forbid")

    region: str
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    session_token: Optional[str] = None
    endpoint_url: Optional[str] = None

    def client_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for boto3.client("lambda", ...)."""
        kwargs: Dict[str, Any] = {"region_name": self.region}
        if self.access_key_id:
            kwargs["aws_access_key_id"] = self.access_key_id
        if self.secret_access_key:
            kwargs["aws_secret_access_key"] = self.secret_access_key
        if self.session_token:
            kwargs["aws_session_token"] = self.session_token
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        return kwargs


class PluginConfig(BaseModel):
    """
    Process-wide plugin configuration.

    Without `config`, publishing is disabled; invocation by name still works
    with ambient credentials.
    """

    role: str = ""
    config: Optional[PlatformConfig] = None

    @property
    def can_publish(self) -> bool:
        return self.config is not None

    @classmethod
    def from_settings(cls, settings: "GatewayConfig") -> "PluginConfig":
        platform = None
        if settings.LAMBDA_REGION:
            platform = PlatformConfig(
                region=settings.LAMBDA_REGION,
                access_key_id=settings.LAMBDA_ACCESS_KEY_ID,
                secret_access_key=settings.LAMBDA_SECRET_ACCESS_KEY,
                session_token=settings.LAMBDA_SESSION_TOKEN,
                endpoint_url=settings.LAMBDA_ENDPOINT_URL,
            )
        return cls(role=settings.LAMBDA_ROLE, config=platform)
