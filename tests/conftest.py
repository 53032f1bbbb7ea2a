from __future__ import annotations

import faulthandler
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

faulthandler.enable()  # Ensure crashes emit tracebacks.

from sheetbind.fields import resolve_fields


@pytest.fixture(autouse=True)
def _fresh_field_cache() -> None:
    """Start every test with an empty descriptor cache."""

    resolve_fields.cache_clear()
    yield
    resolve_fields.cache_clear()
