from pydantic import Field, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class RequestConfig(BaseSettings):
    BASE_URL: str | None = Field(
        description="Base URL seeded into builders created by echo()",
        default=None,
    )

    DEFAULT_HEADERS: dict[str, str] = Field(
        description="Headers seeded into builders created by echo(), as a JSON object",
        default_factory=dict,
    )

    DEFAULT_TIMEOUT: PositiveFloat = Field(
        description="Transport timeout in seconds used by HttpClient",
        default=30.0,
    )


class LoggingConfig(BaseSettings):
    """
    Configuration for logging
    """

    LOG_LEVEL: str = Field(
        description="Logging level, default to INFO.",
        default="INFO",
    )

    LOG_FILE: str | None = Field(
        description="File path for log output.",
        default=None,
    )

    LOG_FILE_MAX_SIZE: PositiveInt = Field(
        description="Maximum file size for file rotation retention, the unit is megabytes (MB)",
        default=20,
    )

    LOG_FILE_BACKUP_COUNT: PositiveInt = Field(
        description="Maximum file backup count file rotation retention",
        default=5,
    )

    LOG_FORMAT: str = Field(
        description="Format string for log messages",
        default=(
            "%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] "
            "[%(filename)s:%(lineno)d] %(trace_id)s - %(message)s"
        ),
    )

    LOG_DATEFORMAT: str | None = Field(
        description="Date format string for log timestamps",
        default=None,
    )

    LOG_TZ: str | None = Field(
        description="Timezone for log timestamps (e.g., 'America/New_York')",
        default="UTC",
    )


class EchoConfig(RequestConfig, LoggingConfig):
    model_config = SettingsConfigDict(
        env_prefix="ECHO_",
        # read from dotenv format config file
        env_file=".env",
        env_file_encoding="utf-8",
        # ignore extra attributes
        extra="ignore",
    )


echo_config: EchoConfig = EchoConfig()

__all__ = ["EchoConfig", "echo_config"]
