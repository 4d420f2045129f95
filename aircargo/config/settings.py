from typing import Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """PostgreSQL connection settings (``DB_*``)"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "air_cargo"
    url_override: Optional[str] = Field(
        default=None,
        validation_alias="DB_URL",
        description="Complete async SQLAlchemy URL, used verbatim when set.",
    )
    serverless: bool = Field(
        default=False,
        description="Open a fresh connection per session instead of pooling.",
    )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def url(self) -> str:
        if self.url_override:
            return self.url_override
        credentials = ":".join(
            (quote_plus(self.username), quote_plus(self.password.get_secret_value()))
        )
        return f"postgresql+asyncpg://{credentials}@{self.host}:{self.port}/{self.database}"


class BookingConfig(BaseSettings):
    """Booking reference allocation (``BOOKING_*``)"""

    ref_id_prefix: str = "BOOK"
    ref_id_sequence_width: int = Field(default=6, ge=1, le=12)
    ref_id_allocation_attempts: int = Field(
        default=3,
        ge=1,
        description="Allocation retries when a concurrent creation took the same reference.",
    )

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Service settings read from the environment and ``.env``"""

    app_name: str = "Air Cargo Booking & Tracking API"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    log_file: str = "logs/app.log"
    booking_log_file: str = Field(
        default="logs/bookings.log",
        description="JSON lines for booking lifecycle events.",
    )

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    booking: BookingConfig = Field(default_factory=BookingConfig)

    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
