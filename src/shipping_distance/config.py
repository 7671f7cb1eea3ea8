"""Application configuration and settings management."""

from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SHIPDIST_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Distance Rate Shipping API"
    api_prefix: str = "/api"
    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Timeout applied to every outbound provider and geocoding request.",
    )
    default_provider: str = Field(
        default="google",
        description="Provider slug used when a request does not name one.",
    )
    log_level: str = Field(default="INFO", description="Root log level for the API process.")
    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Reference coordinates used when validating provider credentials.
    test_origin_lat: float = -6.178784361374902
    test_origin_lng: float = 106.82303292695315
    test_destination_lat: float = -6.181472315327319
    test_destination_lng: float = 106.8170462364319

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> str:
        return str(value or "INFO").strip().upper()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> tuple[str, ...]:
        """Accept a comma-separated string from the environment."""
        if isinstance(value, str):
            return tuple(item.strip() for item in value.split(",") if item.strip())
        return tuple(str(item) for item in value or ())


settings = Settings()
