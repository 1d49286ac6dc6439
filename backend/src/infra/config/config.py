from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from infra.utils.version import get_version


class LoggingConfig(BaseModel):
    LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    JSON_FORMAT: bool = False
    LIBRARY_LOG_LEVELS: dict[str, str | int] = Field(default_factory=dict)


class DatabaseConfig(BaseModel):
    DRIVER: Literal["postgres", "sqlite"] = "postgres"
    SQLITE_PATH: str = "./site_admin.db"

    USER: str | None = None
    PASSWORD: str | None = None
    HOST: str | None = None
    PORT: int | None = None
    DATABASE: str | None = None
    ECHO: bool = False
    POOL_SIZE: int = 10
    MAX_OVERFLOW: int = 20
    POOL_TIMEOUT: int = 30
    POOL_RECYCLE: int = 1800

    @model_validator(mode="after")
    def validate_required_postgres_fields(self) -> "DatabaseConfig":
        if self.DRIVER == "sqlite":
            return self

        required_fields = {
            "USER": self.USER,
            "PASSWORD": self.PASSWORD,
            "HOST": self.HOST,
            "PORT": self.PORT,
            "DATABASE": self.DATABASE,
        }
        missing_fields = [field_name for field_name, value in required_fields.items() if value in (None, "")]

        if missing_fields:
            raise ValueError(
                f"DATABASE_CONFIG fields required when DRIVER=postgres: {', '.join(missing_fields)}"
            )

        return self


class HealthConfig(BaseModel):
    COMPONENT_WEIGHTS: dict[Literal["domain", "ssl", "content", "performance"], float] = Field(
        default_factory=lambda: {"domain": 1.0, "ssl": 1.0, "content": 1.0, "performance": 1.0}
    )
    SCORING_VERSION: int = Field(default=1, ge=1)

    RESPONSE_TIME_WARNING_MS: int = Field(default=1_500, gt=0)
    RESPONSE_TIME_CRITICAL_MS: int = Field(default=3_000, gt=0)
    MIN_UPTIME_PERCENT: float = Field(default=95.0, ge=0, le=100)
    ERROR_CRITICAL_THRESHOLD: int = Field(default=5, ge=0)
    SSL_WARNING_DAYS: int = Field(default=30, ge=0)
    SSL_CRITICAL_DAYS: int = Field(default=7, ge=0)

    PROBE_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    PLATFORM_DOMAIN: str = "sites.example.com"

    ENABLE_SCHEDULED_CHECKS: bool = True
    CHECK_INTERVAL_SECONDS: int = Field(default=300, gt=0)

    RECENT_ISSUES_LIMIT: int = Field(default=50, gt=0)
    ATTENTION_ISSUES_LIMIT: int = Field(default=5, gt=0)

    @field_validator("COMPONENT_WEIGHTS")
    @classmethod
    def validate_weights(cls, weights: dict[str, float]) -> dict[str, float]:
        if any(weight < 0 for weight in weights.values()):
            raise ValueError("HEALTH_CONFIG component weights must be non-negative")

        if sum(weights.values()) <= 0:
            raise ValueError("HEALTH_CONFIG component weights must have a positive sum")

        return weights

    @model_validator(mode="after")
    def validate_threshold_order(self) -> "HealthConfig":
        if self.RESPONSE_TIME_WARNING_MS > self.RESPONSE_TIME_CRITICAL_MS:
            raise ValueError("RESPONSE_TIME_WARNING_MS must not exceed RESPONSE_TIME_CRITICAL_MS")

        if self.SSL_CRITICAL_DAYS > self.SSL_WARNING_DAYS:
            raise ValueError("SSL_CRITICAL_DAYS must not exceed SSL_WARNING_DAYS")

        return self


class BulkConfig(BaseModel):
    CHUNK_SIZE: int = Field(default=50, ge=1)
    MAX_ATTEMPTS: int = Field(default=3, ge=1)
    RETRY_BASE_DELAY_MS: int = Field(default=1_000, ge=0)
    RETRY_BACKOFF: Literal["fixed", "exponential"] = "exponential"
    RETRY_MAX_DELAY_MS: int = Field(default=30_000, ge=0)
    INTER_CHUNK_DELAY_MS: int = Field(default=100, ge=0)


class Config(BaseSettings):
    APP_NAME: str = "py-site-admin"
    VERSION: str = get_version()
    ENVIRONMENT: Literal["loc", "dev", "pre", "pro"] = "dev"
    ROOT_PATH: str = "/py-site-admin"

    HOST: str = "0.0.0.0"
    PORT: int = 8080

    LOGGING_CONFIG: LoggingConfig = LoggingConfig()
    DATABASE_CONFIG: DatabaseConfig
    HEALTH_CONFIG: HealthConfig = HealthConfig()
    BULK_CONFIG: BulkConfig = BulkConfig()

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_nested_delimiter="__",
    )


@lru_cache
def get_config() -> Config:
    return Config()  # type: ignore
