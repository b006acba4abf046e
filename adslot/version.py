"""
adslot.version — semantic version string.

Resolution order for `compute_version()`:
  1) ADSLOT_VERSION environment override (hermetic builds, containers)
  2) installed distribution metadata
  3) BASE_VERSION
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata as importlib_metadata

# Bump when the settlement arithmetic or persisted layout changes.
BASE_VERSION = "0.1.0"


@lru_cache(maxsize=1)
def compute_version() -> str:
    override = os.getenv("ADSLOT_VERSION")
    if override:
        return override.strip()
    try:
        return importlib_metadata.version("adslot")
    except importlib_metadata.PackageNotFoundError:
        return BASE_VERSION


__version__ = compute_version()

__all__ = ["BASE_VERSION", "compute_version", "__version__"]
