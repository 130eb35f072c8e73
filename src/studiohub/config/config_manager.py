# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import json
import os
import shutil
from pathlib import Path
from typing import Any, TypeVar

T = TypeVar("T")

CONFIG_ENV_VAR = "STUDIO_HUB_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "settings" / "system.json"


class ConfigManager:
    """
    JSON-backed hub settings.

    The file is chosen in this order: the explicit ``config_path`` argument,
    the ``STUDIO_HUB_CONFIG`` environment variable, then the packaged
    ``studiohub/settings/system.json``. A missing file is seeded from a
    sibling ``<name>.template`` when one exists.
    """

    def __init__(self, config_path: str | None = None) -> None:
        self._config_path = config_path or os.environ.get(CONFIG_ENV_VAR) or str(DEFAULT_CONFIG_PATH)
        self._config_data: dict[str, Any] = {}
        self._load()

    def get_config_path(self) -> str:
        return self._config_path

    def _load(self) -> None:
        path = Path(os.path.realpath(self._config_path))

        if not path.exists():
            template = path.with_name(f"{path.name}.template")
            if template.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy(template, path)
            else:
                raise FileNotFoundError(f"Config file not found: {self._config_path}")

        with path.open(encoding="utf-8") as f:
            self._config_data = json.load(f)

    def get(self, *keys: str, fallback: T | None = None) -> T | None:
        """
        Walk nested sections, e.g. ``get("Hub", "port")``.

        Returns ``fallback`` as soon as a key is absent or the current
        node is not a mapping.
        """
        node: Any = self._config_data
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return fallback
            node = node[key]
        return node

    def reload(self) -> None:
        self._load()

    def as_dict(self) -> dict[str, Any]:
        """Shallow copy of the whole document."""
        return dict(self._config_data)

    def save(self, new_config: dict[str, Any]) -> None:
        """Replace the whole document and write it back."""
        self._config_data = new_config
        with open(self._config_path, "w", encoding="utf-8") as f:
            json.dump(self._config_data, f, indent=4)
