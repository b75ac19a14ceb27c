from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROVISIONER_BACKENDS = ("api", "local")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Household Expenses"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True  # Set to False in production

    # Security
    log_user_emails: bool = False  # Set to False in production for GDPR compliance

    # Master database
    master_database_url: str = "sqlite+aiosqlite:///./data/master.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10
    run_migrations_on_startup: bool = True

    # Tenant provisioning
    database_provisioner: str = "local"  # api, local
    provisioner_api_url: str = "https://api.turso.tech/v1"
    provisioner_organization: str = ""
    provisioner_api_token: str | None = None
    provisioner_region: str = "default"  # Placement group for new databases
    provisioner_timeout_seconds: float = 30.0
    provisioner_max_retries: int = 3
    provisioner_retry_backoff_seconds: float = 1.0
    # Formatted with hostname= and name= to build the SQLAlchemy URL of a new tenant.
    # No default: it depends on the platform. Required when DATABASE_PROVISIONER=api.
    tenant_database_url_template: str | None = None
    local_tenant_directory: str = "./data/families"

    # Shutdown
    shutdown_grace_period: int = 30

    # Auth
    session_ttl_hours: int = 24
    min_password_length: int = 8
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1
    session_cleanup_interval_seconds: int = 3600  # 0 disables the cleanup loop

    # Rate limiting (slowapi limit strings)
    login_rate_limit: str = "10/minute"
    register_rate_limit: str = "5/minute"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    @field_validator("session_ttl_hours")
    @classmethod
    def validate_session_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("SESSION_TTL_HOURS must be positive")
        return v

    @field_validator("database_provisioner")
    @classmethod
    def validate_provisioner(cls, v: str) -> str:
        if v not in PROVISIONER_BACKENDS:
            raise ValueError(
                f"DATABASE_PROVISIONER must be one of {', '.join(PROVISIONER_BACKENDS)}"
            )
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Validate CORS origins - reject wildcards when credentials are used."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    @model_validator(mode="after")
    def validate_api_provisioner(self) -> "Settings":
        if self.database_provisioner != "api":
            return self
        missing = [
            name.upper()
            for name in (
                "provisioner_api_token",
                "provisioner_organization",
                "tenant_database_url_template",
            )
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(f"{', '.join(missing)} required when DATABASE_PROVISIONER=api")
        return self

    @property
    def is_testing(self) -> bool:
        return self.app_env == "testing"


@lru_cache
def get_settings() -> Settings:
    return Settings()
