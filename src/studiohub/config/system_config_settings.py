# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import logging
import os
from pathlib import Path

from studiohub.config.config_manager import ConfigManager
from studiohub.lib.types import FileNameStr


class SystemConfigSettings:
    """Provides dynamically reloaded hub configuration via class methods."""
    _cfg        = ConfigManager()
    _logger     = logging.getLogger("SystemConfigSettings")

    _DEFAULT_HOST: str                      = "127.0.0.1"
    _DEFAULT_PORT: int                      = 35888
    _DEFAULT_POLL_TIMEOUT: int              = 30
    _DEFAULT_EXECUTE_TIMEOUT: int           = 30
    _DEFAULT_HEARTBEAT_TIMEOUT: int         = 35
    _DEFAULT_SWEEP_INTERVAL: int            = 10
    _DEFAULT_MAX_LOGS: int                  = 500
    _DEFAULT_MAX_EVENTS: int                = 100
    _DEFAULT_LOG_LEVEL: str                 = "INFO"
    _DEFAULT_LOG_DIR: str                   = "logs"
    _DEFAULT_LOG_FILENAME: str              = "studiohub.log"

    _PORT_ENV_VAR: str                      = "STUDIO_HUB_PORT"

    @classmethod
    def _config_path(cls, *path: str) -> str:
        """Return dotted path for logging."""
        return ".".join(path)

    @classmethod
    def _get_str(cls, default: str, *path: str) -> str:
        value = cls._cfg.get(*path)
        if value is None:
            cls._logger.error(
                "Missing configuration value for '%s'; using default '%s'",
                cls._config_path(*path),
                default,
            )
            return default
        if not isinstance(value, str):
            coerced = str(value)
            cls._logger.error(
                "Non-string configuration value for '%s': %r; using coerced '%s'",
                cls._config_path(*path),
                value,
                coerced,
            )
            return coerced
        if value == "":
            cls._logger.error(
                "Empty configuration value for '%s'; using default '%s'",
                cls._config_path(*path),
                default,
            )
            return default
        return value

    @classmethod
    def _get_int(cls, default: int, *path: str) -> int:
        value = cls._cfg.get(*path)
        if value is None:
            cls._logger.error(
                "Missing configuration value for '%s'; using default %d",
                cls._config_path(*path),
                default,
            )
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            cls._logger.error(
                "Invalid integer configuration value for '%s': %r; using default %d",
                cls._config_path(*path),
                value,
                default,
            )
            return default

    @classmethod
    def _get_bool(cls, default: bool, *path: str) -> bool:
        value = cls._cfg.get(*path)
        if isinstance(value, bool):
            return value
        if value is None:
            return default

        text = str(value).strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off"):
            return False

        cls._logger.error(
            "Invalid boolean configuration value for '%s': %r; using default %s",
            cls._config_path(*path),
            value,
            default,
        )
        return default

    # ── Hub ──────────────────────────────────────────────────────────────────

    @classmethod
    def host(cls) -> str:
        return cls._get_str(cls._DEFAULT_HOST, "Hub", "host")

    @classmethod
    def port(cls) -> int:
        """Listening port; the STUDIO_HUB_PORT environment variable wins over the file."""
        env_port = os.environ.get(cls._PORT_ENV_VAR)
        if env_port:
            try:
                return int(env_port)
            except ValueError:
                cls._logger.error(
                    "Invalid %s environment value %r; falling back to configuration",
                    cls._PORT_ENV_VAR,
                    env_port,
                )
        return cls._get_int(cls._DEFAULT_PORT, "Hub", "port")

    @classmethod
    def poll_timeout(cls) -> int:
        return cls._get_int(cls._DEFAULT_POLL_TIMEOUT, "Hub", "poll_timeout")

    @classmethod
    def execute_timeout(cls) -> int:
        return cls._get_int(cls._DEFAULT_EXECUTE_TIMEOUT, "Hub", "execute_timeout")

    @classmethod
    def heartbeat_timeout(cls) -> int:
        return cls._get_int(cls._DEFAULT_HEARTBEAT_TIMEOUT, "Hub", "heartbeat_timeout")

    @classmethod
    def sweep_interval(cls) -> int:
        return cls._get_int(cls._DEFAULT_SWEEP_INTERVAL, "Hub", "sweep_interval")

    @classmethod
    def max_logs(cls) -> int:
        return cls._get_int(cls._DEFAULT_MAX_LOGS, "Hub", "max_logs")

    @classmethod
    def max_events(cls) -> int:
        return cls._get_int(cls._DEFAULT_MAX_EVENTS, "Hub", "max_events")

    # ── Logging ──────────────────────────────────────────────────────────────

    @classmethod
    def log_level(cls) -> str:
        return cls._get_str(cls._DEFAULT_LOG_LEVEL, "logging", "log_level")

    @classmethod
    def log_dir(cls) -> str:
        return cls._get_str(cls._DEFAULT_LOG_DIR, "logging", "log_dir")

    @classmethod
    def log_filename(cls) -> FileNameStr:
        return FileNameStr(cls._get_str(cls._DEFAULT_LOG_FILENAME, "logging", "log_filename"))

    @classmethod
    def log_to_console(cls) -> bool:
        return cls._get_bool(False, "logging", "log_to_console")

    @classmethod
    def initialize_directories(cls) -> None:
        """
        Create necessary directories if they do not exist.
        """
        Path(cls.log_dir()).mkdir(parents=True, exist_ok=True)

    @classmethod
    def reload(cls) -> None:
        """
        Reload the configuration settings.
        """
        cls._cfg.reload()
        cls.initialize_directories()
