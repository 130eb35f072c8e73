# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from studiohub.version import __version__

__all__ = ["__version__"]
