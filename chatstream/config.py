"""Configuration management for the chat client."""

import logging
import os
from typing import Any

import yaml
from dotenv import load_dotenv

BASE_URL_ENV = "CHATSTREAM_BASE_URL"
LOG_LEVEL_ENV = "CHATSTREAM_LOG_LEVEL"


class Configuration:
    """Manages configuration and environment variables for the chat client."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for deployment overrides
        self.config_path = config_path or os.path.join(
            os.path.dirname(__file__), "config.yaml"
        )
        self._config = self._load_yaml_config()

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary.

        Returns:
            The complete configuration dictionary.
        """
        return self._config

    def get_client_config(self) -> dict[str, Any]:
        """Get backend location settings.

        Returns:
            Dictionary with ``base_url`` and ``session_param``.

        Raises:
            ValueError: If a required key is missing or empty.
        """
        client_config = self._config.get("client", {})

        required_keys = ["base_url", "session_param"]
        for key in required_keys:
            if key not in client_config:
                raise ValueError(
                    f"client.{key} must be explicitly configured in config.yaml"
                )

        base_url = os.getenv(BASE_URL_ENV) or client_config["base_url"]
        if not isinstance(base_url, str) or not base_url.startswith(
            ("http://", "https://")
        ):
            raise ValueError(
                f"client.base_url must be an http(s) URL, got {base_url!r}"
            )

        session_param = client_config["session_param"]
        if not isinstance(session_param, str) or not session_param:
            raise ValueError("client.session_param must be a non-empty string")

        # Return a new dict so callers never mutate the loaded YAML
        return {**client_config, "base_url": base_url.rstrip("/")}

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP timeout configuration.

        Returns:
            HTTP client configuration dictionary with validated values.

        Raises:
            ValueError: If required HTTP client parameters are missing or invalid.
        """
        http_config = self._config.get("http_client", {})

        required_keys = [
            "connect_timeout", "read_timeout", "write_timeout", "pool_timeout",
            "health_timeout", "modify_code_timeout",
        ]
        for key in required_keys:
            if key not in http_config:
                raise ValueError(
                    f"http_client.{key} must be explicitly configured in config.yaml"
                )

        for key in required_keys:
            value = http_config[key]
            if key == "read_timeout" and value is None:
                continue
            if not isinstance(value, int | float) or value <= 0:
                raise ValueError(f"http_client.{key} must be a positive number")

        return {**http_config}

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML.

        Returns:
            Logging configuration dictionary with a resolved ``level``.
        """
        logging_config = {**self._config.get("logging", {})}
        level = os.getenv(LOG_LEVEL_ENV) or logging_config.get("level", "INFO")
        level = str(level).upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"logging.level '{level}' is not a valid log level")
        logging_config["level"] = level
        return logging_config
