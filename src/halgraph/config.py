"""Configuration management for the HAL graph client."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .constants import DEFAULT_MAX_RATE_LIMIT_RETRIES, DEFAULT_TIMEOUT, HAL_MEDIA_TYPE


@dataclass
class HALConfig:
    """HAL server connection configuration."""

    base_url: str | None = None  # Relative hrefs are joined onto this
    username: str | None = None
    password: str | None = None
    token: str | None = None  # Bearer token, alternative to basic auth
    timeout: int = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    max_connections: int = 50  # Maximum total connections
    max_keepalive: int = 20  # Maximum keep-alive connections
    accept: str = HAL_MEDIA_TYPE
    max_rate_limit_retries: int = DEFAULT_MAX_RATE_LIMIT_RETRIES

    def __post_init__(self) -> None:
        if bool(self.username) != bool(self.password):
            raise ValueError("Both username and password are required for basic authentication")
        if self.username and self.token:
            raise ValueError("Configure either basic authentication or a bearer token, not both")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"
    file: Path | None = None

    @property
    def json_logs(self) -> bool:
        return self.format == "json"


@dataclass
class AppConfig:
    """
    Complete configuration for halgraph.

    This combines all configuration sections.
    """

    hal: HALConfig = field(default_factory=HALConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML config file

        Returns:
            AppConfig instance
        """
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid configuration file structure in {config_path}: "
                f"expected dictionary, got {type(data).__name__}"
            )

        logging_data = dict(data.get("logging") or {})
        if logging_data.get("file"):
            logging_data["file"] = Path(logging_data["file"])

        try:
            hal = HALConfig(**(data.get("hal") or {}))
            logging = LoggingConfig(**logging_data)
        except TypeError as e:
            raise ValueError(f"Unknown configuration key in {config_path}: {e}") from e

        return cls(hal=hal, logging=logging)

    def to_file(self, config_path: Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            config_path: Path to save config file
        """
        data = {
            "hal": {k: v for k, v in self.hal.__dict__.items() if v is not None},
            "logging": {
                k: str(v) if isinstance(v, Path) else v
                for k, v in self.logging.__dict__.items()
                if v is not None
            },
        }

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Create configuration from environment variables.

        Environment variables:
            HAL_BASE_URL: Base URL for relative hrefs
            HAL_USERNAME / HAL_PASSWORD: Basic auth credentials
            HAL_TOKEN: Bearer token
            HAL_TIMEOUT: Request timeout in seconds (default: 30)
            HAL_VERIFY_SSL: Set to 'false' to disable certificate checks
            LOG_LEVEL: Logging level (default: INFO)
            LOG_FORMAT: 'json' or 'console' (default: console)

        Returns:
            AppConfig instance

        Raises:
            ValueError: If only one of HAL_USERNAME / HAL_PASSWORD is set
        """
        verify_ssl_str = os.environ.get("HAL_VERIFY_SSL", "true").lower()

        hal_config = HALConfig(
            base_url=os.environ.get("HAL_BASE_URL") or None,
            username=os.environ.get("HAL_USERNAME") or None,
            password=os.environ.get("HAL_PASSWORD") or None,
            token=os.environ.get("HAL_TOKEN") or None,
            timeout=int(os.environ.get("HAL_TIMEOUT", str(DEFAULT_TIMEOUT))),
            verify_ssl=verify_ssl_str not in ("false", "0", "no", "off"),
        )

        logging_config = LoggingConfig(
            level=os.environ.get("LOG_LEVEL", "INFO"),
            format=os.environ.get("LOG_FORMAT", "console"),
        )

        return cls(hal=hal_config, logging=logging_config)


def load_config(config_file: Path | None = None) -> AppConfig:
    """
    Load configuration from file or environment variables.

    Args:
        config_file: Optional path to YAML config file

    Returns:
        AppConfig instance

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist
    """
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
        return AppConfig.from_file(config_file)
    return AppConfig.from_env()
