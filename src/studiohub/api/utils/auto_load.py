# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import importlib
import logging
import traceback
from collections.abc import Iterator
from pathlib import Path

from fastapi import FastAPI

ROUTER_FILENAME = "router.py"


class RouterRegistrar:
    """
    Mounts every ``router`` exported by a ``router.py`` below ``studiohub/api/routes``.

    A module may opt out with ``__skip_autoregister__ = True``. Import failures
    do not abort startup; they are kept in ``errors`` and logged once at the end.
    """

    PACKAGE_NAME = "studiohub"

    def __init__(self, base_dir: Path | None = None) -> None:
        self.logger = logging.getLogger(__name__)
        self.package_root = self._find_package_root(base_dir or Path(__file__).resolve())
        self.routes_path = self.package_root / "api" / "routes"
        if not self.routes_path.is_dir():
            raise RuntimeError(f"Routes directory not found: {self.routes_path}")

        self.registered: list[str] = []
        self.errors: list[tuple[str, str]] = []

    def _find_package_root(self, start: Path) -> Path:
        for candidate in (start, *start.parents):
            if candidate.name == self.PACKAGE_NAME:
                return candidate
        msg = f"Could not find '{self.PACKAGE_NAME}' above {start}"
        self.logger.error(msg)
        raise RuntimeError(msg)

    def discover(self) -> Iterator[str]:
        """Yield dotted module names of router files, in a stable order."""
        for router_file in sorted(self.routes_path.rglob(ROUTER_FILENAME)):
            relative = router_file.relative_to(self.package_root.parent).with_suffix("")
            yield ".".join(relative.parts)

    def register(self, app: FastAPI) -> list[str]:
        for module_path in self.discover():
            try:
                module = importlib.import_module(module_path)
            except Exception:
                self.errors.append((module_path, traceback.format_exc()))
                continue

            if getattr(module, "__skip_autoregister__", False):
                self.logger.debug(f"Skipping {module_path}")
                continue

            router = getattr(module, "router", None)
            if router is None:
                self.logger.debug(f"No router exported by {module_path}")
                continue

            app.include_router(router)
            self.registered.append(module_path)
            self.logger.debug(f"Registered router: {module_path}")

        for module_path, tb in self.errors:
            self.logger.error(f"Failed to register router from '{module_path}':\n{tb}")
        self.logger.info(f"Registered {len(self.registered)} router(s), {len(self.errors)} failure(s)")
        return self.registered
