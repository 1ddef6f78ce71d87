"""Configuration for the MCP server."""

from pathlib import Path

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from convolut_mcp.mcp_server.errors import ConfigurationError

API_KEY_ENV_VAR = "CONVOLUT_API_KEY"


class Config(BaseSettings):
    """MCP server configuration, read from ``CONVOLUT_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CONVOLUT_",
        env_file=".env",
        extra="ignore",
    )

    api_key: SecretStr
    base_url: str = "https://api.convolut.app/v1"
    request_timeout: float = Field(default=10.0, gt=0)
    health_timeout: float = Field(default=5.0, gt=0)
    max_redirects: int = Field(default=5, ge=0)
    api_key_header: str = "api_key"
    user_agent: str = "convolut-mcp-client/1.0.0"
    log_level: str = "INFO"
    log_file: Path | None = None
    server_name: str = "convolut-mcp-server"
    server_version: str = "1.0.0"

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: SecretStr) -> SecretStr:
        """Reject blank keys."""
        if not v.get_secret_value().strip():
            raise ValueError(f"{API_KEY_ENV_VAR} must not be empty")
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL and drop the trailing slash."""
        if not v.startswith(("https://", "http://")):
            raise ValueError("base_url must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls, **overrides) -> "Config":
        """Load configuration, turning validation failures into ConfigurationError."""
        try:
            return cls(**overrides)
        except ValidationError as e:
            missing = [
                err for err in e.errors() if err["type"] == "missing"
            ]
            if any(err["loc"] == ("api_key",) for err in missing):
                raise ConfigurationError(
                    f"{API_KEY_ENV_VAR} environment variable is required"
                ) from e
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration: {problems}") from e

    @property
    def health_url(self) -> str:
        """Health endpoint lives beside the versioned API root."""
        root = self.base_url
        if root.endswith("/v1"):
            root = root[: -len("/v1")]
        return f"{root}/health"

    def __repr__(self) -> str:
        return f"Config(base_url='{self.base_url}')"


__all__ = ["API_KEY_ENV_VAR", "Config"]
