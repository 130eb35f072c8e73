# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import os

from studiohub.config.log_config import LoggerConfigurator
from studiohub.config.system_config_settings import SystemConfigSettings


class StartUp:
    """
    Class to handle the startup process of the Studio Hub application.
    It prepares the log directory and configures logging.
    """

    @classmethod
    def initialize(cls) -> None:
        """
        Initialize the system configuration settings and set up logging.
        This method should be called at the start of the application.
        """
        SystemConfigSettings.initialize_directories()

        # Enable console logging in Docker (check for container environment)
        in_docker = os.path.exists('/.dockerenv') or os.environ.get('DOCKER_CONTAINER', False)

        LoggerConfigurator(SystemConfigSettings.log_dir(),
                           SystemConfigSettings.log_filename(),
                           SystemConfigSettings.log_level(),
                           to_console=bool(in_docker) or SystemConfigSettings.log_to_console())
