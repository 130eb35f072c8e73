# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from studiohub.lib.types import FileNameStr, PathLike

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class LoggerConfigurator:
    """
    Configure hub logging to a file (and optionally console),
    with optional rotation and a standardized startup banner.
    """

    def __init__(self,
                 log_dir: PathLike,
                 log_filename: FileNameStr,
                 level: str = 'INFO', to_console: bool = False, rotate: bool = True
    ) -> None:
        """
        Initialize the LoggerConfigurator.

        Args:
            log_dir (str): Directory path where log files will be stored. Created if missing.
            log_filename (str): Name of the log file (e.g. 'studiohub.log').
            level (str): Logging level name ('DEBUG', 'INFO', etc.).
            to_console (bool): If True, also output logs to stderr.
            rotate (bool): If True, use RotatingFileHandler (10MB max, 5 backups).
        """
        self.log_dir = Path(log_dir)
        self.log_filename = log_filename
        self.level = getattr(logging, level.upper(), logging.INFO)
        self.to_console = to_console
        self.rotate = rotate

        self.__setup()

    @property
    def log_file(self) -> Path:
        return self.log_dir / self.log_filename

    def __setup(self) -> None:
        """
        Internal method to configure the root logger.
        """
        self.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = self.log_file
        root = logging.getLogger()

        # Re-running setup against the same file must not duplicate output
        for existing in root.handlers:
            if getattr(existing, "baseFilename", None) == os.path.abspath(log_file):
                root.setLevel(self.level)
                return

        if self.rotate:
            # Rotate after ~10MB, keep up to 5 old log files
            handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,
                backupCount=5
            )
        else:
            handler = logging.FileHandler(log_file)

        fmt = logging.Formatter(LOG_FORMAT)
        handler.setFormatter(fmt)

        root.setLevel(self.level)
        root.addHandler(handler)

        if self.to_console:
            console = logging.StreamHandler(sys.stderr)
            console.setFormatter(fmt)
            root.addHandler(console)

        # Startup banner to mark the beginning of a new run
        root.info("==== Studio Hub Starting ====")
