"""Version and name of the installed ``acc-workflows`` distribution."""

from __future__ import annotations

import importlib.metadata

__all__ = ("__project__", "__version__")

__version__ = importlib.metadata.version("acc-workflows")
"""Installed version."""
__project__ = importlib.metadata.metadata("acc-workflows")["Name"]
"""Distribution name."""
