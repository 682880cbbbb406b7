"""Author lookup for version records."""

from __future__ import annotations

import os

UNKNOWN_USER = "unknown"


def current_user() -> str:
    return os.environ.get("USER") or os.environ.get("USERNAME") or UNKNOWN_USER
