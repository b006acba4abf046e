"""
adslot.tests helpers

- Deterministic test defaults (hash seed, Hypothesis profile).
- Hypothesis profiles: "local" (fast, default) and "ci" (deeper), chosen by
  HYPOTHESIS_PROFILE or the CI environment variable.
"""

from __future__ import annotations

import os

from hypothesis import settings

os.environ.setdefault("PYTHONHASHSEED", "0")

settings.register_profile("local", settings(max_examples=60, deadline=None))
settings.register_profile("ci", settings(max_examples=200, deadline=None))
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE") or ("ci" if os.environ.get("CI") else "local"))
