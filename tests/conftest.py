from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from ctp.cache import TemplateCache  # noqa: E402


@pytest.fixture()
def cache(tmp_path: Path) -> TemplateCache:
    return TemplateCache(tmp_path / "templates")
