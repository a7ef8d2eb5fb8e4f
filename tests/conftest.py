from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

import pytest

# Settings are read once, on first import of the app, so the test environment
# has to be in place before any test module imports ella.main.
_DB_PATH = Path(tempfile.mkdtemp(prefix="ella-tests-")) / "transcripts.db"
os.environ.setdefault("SQLITE_PATH", str(_DB_PATH))
os.environ.setdefault("TYPING_DELAY_MIN_SECONDS", "0")
os.environ.setdefault("TYPING_DELAY_MAX_SECONDS", "0")


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def guest_walkthrough(fixtures_dir: Path) -> dict:
    return json.loads((fixtures_dir / "guest_walkthrough.json").read_text(encoding="utf-8"))
