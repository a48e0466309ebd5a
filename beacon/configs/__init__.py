from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .auth import AuthConfig
from .database import DatabaseConfig
from .push import PushConfig


class BeaconConfig(BaseSettings):
    """Application settings.

    Every field can be overridden from the environment with the ``BEACON_``
    prefix, nested groups joined by ``_`` (e.g. ``BEACON_Push_MaxConcurrency``).
    """

    model_config = SettingsConfigDict(
        env_prefix="BEACON_",
        env_nested_delimiter="_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    Env: str = Field(default="dev", description="Deployment environment name")
    Host: str = Field(default="0.0.0.0", description="Bind host")
    Port: int = Field(default=48200, description="Bind port")
    Debug: bool = Field(default=False, description="Reload on change and verbose logs")
    LogLevel: str = Field(default="INFO", description="Root log level")

    Database: DatabaseConfig = Field(default_factory=lambda: DatabaseConfig(), description="Database configuration")
    Push: PushConfig = Field(default_factory=lambda: PushConfig(), description="Web Push configuration")
    Auth: AuthConfig = Field(default_factory=lambda: AuthConfig(), description="Session resolution configuration")


configs = BeaconConfig()

__all__ = ["BeaconConfig", "configs"]
