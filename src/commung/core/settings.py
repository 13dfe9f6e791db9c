"""Service configuration for Commung.

Every option can be set through an environment variable (the field alias)
or a ``.env`` file in the working directory.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration shared by the API, scripts and migrations."""

    app_name: str = Field(default="Commung", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Signs session JWTs; override outside local development
    secret_key: str = Field(default="change-me-in-production", alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    session_expire_days: int = Field(default=30, alias="SESSION_EXPIRE_DAYS")

    database_url: str = Field(default="sqlite:///./commung.db", alias="DATABASE_URL")
    sql_echo: bool = Field(default=False, alias="SQL_ECHO")

    # Communities are served from <slug>.<console_domain> unless they own a custom domain
    console_domain: str = Field(default="commu.ng", alias="CONSOLE_DOMAIN")

    upload_dir: str = Field(default="uploads", alias="UPLOAD_DIR")
    upload_url_prefix: str = Field(default="/uploads", alias="UPLOAD_URL_PREFIX")
    max_image_bytes: int = Field(default=10 * 1024 * 1024, alias="MAX_IMAGE_BYTES")

    max_reply_depth: int = Field(default=10, alias="MAX_REPLY_DEPTH")
    reply_max_visual_indent: int = Field(default=3, alias="REPLY_MAX_VISUAL_INDENT")

    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def database_url_sync(self) -> str:
        """Return ``database_url`` with async Postgres drivers swapped for psycopg.

        Alembic and the request handlers both run synchronously.
        """
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url


settings = Settings()
