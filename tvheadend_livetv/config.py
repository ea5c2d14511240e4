import logging
from pathlib import Path

from pydantic import ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tvheadend_livetv.errors import ConfigurationUnavailableError


logger = logging.getLogger(__name__)


class TvheadendSettings(BaseSettings):
    """Connection and recording settings for the TVHeadend backend.

    Loaded from TVH_* environment variables (or a .env file). Values are read
    again on every adapter operation through the configured provider.
    """

    # Connection
    host: str = "localhost"
    port: int = 9981
    use_ssl: bool = False
    ignore_certificate_errors: bool = False
    webroot: str = "/"
    request_timeout_sec: float = 30.0

    # Authentication
    allow_anonymous_access: bool = False
    username: str = ""
    password: str = ""
    auth_token: str = ""

    # Streaming
    streaming_profile: str = "pass"
    buffer_ms: int = 500
    fallback_max_streaming_bitrate: int = 30000000
    analyze_duration_ms: int = 500
    supports_transcoding: bool = True
    supports_probing: bool = False
    supports_direct_play: bool = False
    supports_direct_stream: bool = False
    is_infinite_stream: bool = True
    ignore_dts: bool = False

    # Recording
    priority: int = 5
    pre_padding_seconds: int = 5
    post_padding_seconds: int = 5
    recording_profile: str = "default"

    epg_event_limit: int = 10000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="TVH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("host")
    @classmethod
    def validate_host(cls, value: str) -> str:
        """Reject empty hosts and hosts given with a scheme."""
        value = value.strip()
        if not value:
            raise ValueError("host must not be empty")
        if "://" in value:
            raise ValueError(f"host must not include a scheme: {value}")
        return value

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        if not 1 <= value <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return value

    @field_validator("webroot", mode="before")
    @classmethod
    def parse_webroot(cls, value):
        """Treat a missing web root as the server root."""
        if value is None:
            return "/"
        return value

    @field_validator("request_timeout_sec")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout_sec must be > 0")
        return value

    @field_validator(
        "pre_padding_seconds",
        "post_padding_seconds",
        "buffer_ms",
        "analyze_duration_ms",
        "fallback_max_streaming_bitrate",
    )
    @classmethod
    def validate_non_negative_ints(cls, value: int, info) -> int:
        """Ensure durations and bitrates are non-negative."""
        if value < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return value

    @field_validator("epg_event_limit")
    @classmethod
    def validate_event_limit(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("epg_event_limit must be > 0")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate logging level name."""
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @model_validator(mode="after")
    def validate_authentication(self):
        """Validate cross-field authentication configuration."""
        if not self.allow_anonymous_access and not (self.username and self.password):
            logger.warning(
                "Anonymous access disabled but no username/password configured - "
                "TVHeadend will likely reject API requests"
            )

        if self.ignore_certificate_errors and not self.use_ssl:
            logger.warning("ignore_certificate_errors has no effect without use_ssl")

        return self

    @property
    def scheme(self) -> str:
        return "https" if self.use_ssl else "http"

    def log_summary(self) -> None:
        """Log the loaded configuration without credentials."""
        logger.info("Configuration loaded:")
        logger.info("  Server: %s://%s:%s%s", self.scheme, self.host, self.port, self.webroot)
        logger.info("  Anonymous Access: %s", self.allow_anonymous_access)
        logger.info("  Username: %s", self.username or "not set")
        logger.info("  Auth Token: %s", "configured" if self.auth_token else "not set")
        logger.info("  Streaming Profile: %s", self.streaming_profile)
        logger.info("  Recording Profile: %s", self.recording_profile)
        logger.info(
            "  Padding: pre=%ss post=%ss priority=%s",
            self.pre_padding_seconds,
            self.post_padding_seconds,
            self.priority,
        )
        logger.info("  Request Timeout: %ss", self.request_timeout_sec)


_settings: TvheadendSettings | None = None
_env_file_stamp: tuple[int, int] | None = None


def _current_env_file_stamp() -> tuple[int, int] | None:
    """Modification time and size of the .env file, or None when there is none."""
    env_file = TvheadendSettings.model_config.get("env_file")
    if not isinstance(env_file, (str, Path)):
        return None
    try:
        stat = Path(env_file).stat()
    except OSError:
        return None
    return stat.st_mtime_ns, stat.st_size


def reload_settings() -> TvheadendSettings:
    """
    Re-read settings from the environment and replace the current snapshot.

    Raises:
        ConfigurationUnavailableError: If the environment holds invalid values
    """
    global _settings, _env_file_stamp
    stamp = _current_env_file_stamp()
    try:
        loaded = TvheadendSettings()
    except ValidationError as exc:
        logger.error("Invalid TVHeadend configuration: %s", exc)
        raise ConfigurationUnavailableError(f"Plugin configuration is not available: {exc}") from exc

    loaded.log_summary()
    _settings = loaded
    _env_file_stamp = stamp
    return loaded


def get_settings() -> TvheadendSettings:
    """
    Get the current settings snapshot

    Loaded on first use and re-read whenever the .env file changes, so an
    edited file reaches the next operation without a restart.
    """
    if _settings is None or _current_env_file_stamp() != _env_file_stamp:
        return reload_settings()
    return _settings


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
