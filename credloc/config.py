"""
Environment defaults for the credloc addon.

mitmproxy options (--set credloc_...) override these at runtime.
"""

from __future__ import annotations

import os


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in (
        "1",
        "true",
        "yes",
    )


# Path to the credentials config JSON; empty means the addon stays idle
CONFIG_PATH: str = os.environ.get("CREDLOC_CONFIG", "")

# Reply 403 when no credential resolves
ENFORCE: bool = _env_flag("CREDLOC_ENFORCE")

VERBOSE: bool = _env_flag("CREDLOC_VERBOSE")
