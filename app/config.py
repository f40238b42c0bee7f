"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="null",
    )

    # Application
    app_name: str = Field(default="MediBook Gateway", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_v1_prefix: str = Field(default="/api/v1", alias="API_V1_PREFIX")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Backend API
    backend_api_url: str = Field(default="http://localhost:8000", alias="BACKEND_API_URL")
    backend_timeout_seconds: float = Field(default=10.0, alias="BACKEND_TIMEOUT_SECONDS")

    # Session cookies
    access_token_cookie_max_age: int = Field(
        default=60 * 15,
        alias="ACCESS_TOKEN_COOKIE_MAX_AGE",
        description="Lifetime of the access_token cookie in seconds",
    )

    # Slots
    slot_hold_minutes: int = Field(default=5, alias="SLOT_HOLD_MINUTES")

    # Edge guard
    protected_path_prefixes_str: str = Field(
        default="/patient,/doctor,/admin",
        alias="PROTECTED_PATH_PREFIXES",
    )
    login_path: str = Field(default="/login", alias="LOGIN_PATH")

    @property
    def protected_path_prefixes(self) -> list[str]:
        """Get protected path prefixes as a list."""
        return [p.strip() for p in self.protected_path_prefixes_str.split(",") if p.strip()]

    # Redis
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_username: str = Field(default="default", alias="REDIS_USERNAME")
    redis_password: str = Field(default="", alias="REDIS_PASSWORD")
    redis_decode_responses: bool = Field(default=True, alias="REDIS_DECODE_RESPONSES")

    # Notification markers
    notification_marker_ttl_days: int = Field(default=30, alias="NOTIFICATION_MARKER_TTL_DAYS")

    # CORS
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as a list."""
        if isinstance(self.cors_origins_str, str):
            return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]
        return [self.cors_origins_str]

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance
settings = get_settings()
