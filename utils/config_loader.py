#!/usr/bin/env python3
"""Configuration loader for the LivePoll server.

This module provides a centralized configuration management system. It loads
defaults, merges ``config/server_config.json`` over them and finally applies
environment overrides (a ``.env`` file is read with python-dotenv).

Key Features:
- Hierarchical configuration management
- Default configuration values
- JSON file-based configuration
- Deep merging of configuration updates
- Configuration validation
- Environment variable overrides (HOST, PORT, LOG_LEVEL, CORS_ORIGINS, APP_ENV)
"""
import os
import json
import copy
import logging
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .path_config import get_server_config_file

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "to_file": True
    },
    "server": {
        "host": "0.0.0.0",
        "port": 3000,
        "cors_origins": "*",
        "environment": "development"
    },
    "polls": {
        "default_time_limit": 60,
        "max_time_limit": 3600
    },
    "chat": {
        "max_messages": None,
        "max_message_length": 1000
    },
    "health_check": {
        "enabled": True,
        "interval": 60
    }
}

class ConfigManager:
    def __init__(self, config_dir: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize the configuration manager.
        Args:
            config_dir: Directory holding server_config.json. Defaults to the app config dir.
            environ: Environment to read overrides from. Defaults to os.environ after loading .env.
        """
        self._config_dir = config_dir
        self._config: Dict[str, Any] = {}
        self._load_defaults()
        self._load_config_files()
        self._load_env_overrides(environ)

    def _load_defaults(self) -> None:
        """Load default configuration values."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)

    def _load_config_files(self) -> None:
        """Load configuration from the JSON file in the config directory."""
        filepath = get_server_config_file(self._config_dir)
        if not os.path.exists(filepath):
            logger.debug(f"No config file at {filepath}, using defaults")
            return
        try:
            with open(filepath, 'r') as f:
                file_config = json.load(f)
            self._validate_config(file_config)
            self._merge_config(self._config, file_config)
            logger.debug(f"Loaded config from {filepath}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading config file {filepath}: {e}")

    def _load_env_overrides(self, environ: Optional[Mapping[str, str]]) -> None:
        """Apply environment variable overrides."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        if environ.get("HOST"):
            self.set("server", "host", environ["HOST"])
        if environ.get("PORT"):
            try:
                self.set("server", "port", int(environ["PORT"]))
            except ValueError:
                logger.error(f"Ignoring invalid PORT value: {environ['PORT']!r}")
        if environ.get("LOG_LEVEL"):
            self.set("logging", "level", environ["LOG_LEVEL"].upper())
        if environ.get("CORS_ORIGINS"):
            origins = environ["CORS_ORIGINS"].strip()
            if origins != "*":
                origins = [origin.strip() for origin in origins.split(",") if origin.strip()]
            self.set("server", "cors_origins", origins)
        if environ.get("APP_ENV"):
            self.set("server", "environment", environ["APP_ENV"])

    def _merge_config(self, base: Dict, update: Dict) -> None:
        """
        Recursively merge two configuration dictionaries.
        Args:
            base: Base configuration dictionary
            update: Dictionary with updates to merge
        """
        for key, value in update.items():
            if (
                key in base and
                isinstance(base[key], dict) and
                isinstance(value, dict)
            ):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate a configuration file before it is merged."""
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a JSON object")
        if "server" in config:
            self._validate_server_config(config["server"])
        if "polls" in config:
            self._validate_polls_config(config["polls"])
        if "chat" in config:
            self._validate_chat_config(config["chat"])

    def _validate_server_config(self, config: Dict[str, Any]) -> None:
        """Validate server configuration"""
        if "port" in config and not isinstance(config["port"], int):
            raise ValueError("Server port must be an integer")

    def _validate_polls_config(self, config: Dict[str, Any]) -> None:
        """Validate poll time limits"""
        for key in ("default_time_limit", "max_time_limit"):
            if key in config and (not isinstance(config[key], int) or config[key] <= 0):
                raise ValueError(f"polls.{key} must be a positive integer")

    def _validate_chat_config(self, config: Dict[str, Any]) -> None:
        """Validate chat limits"""
        max_messages = config.get("max_messages")
        if max_messages is not None and (not isinstance(max_messages, int) or max_messages <= 0):
            raise ValueError("chat.max_messages must be a positive integer or null")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.
        Args:
            section: Configuration section
            key: Configuration key
            default: Default value if not found
        Returns:
            Configuration value or default
        """
        try:
            return self._config[section][key]
        except KeyError:
            return default

    def set(self, section: str, key: str, value: Any) -> None:
        """
        Set a configuration value.
        Args:
            section: Configuration section
            key: Configuration key
            value: Value to set
        """
        if section not in self._config:
            self._config[section] = {}
        self._config[section][key] = value

    @property
    def config(self) -> Dict[str, Any]:
        """Get the complete configuration dictionary."""
        return copy.deepcopy(self._config)


# Create a global configuration instance
config = ConfigManager()
