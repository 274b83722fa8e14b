from __future__ import annotations

import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
_SRC = _REPO_ROOT / "src"
if _SRC.exists():
    sys.path.insert(0, str(_SRC))

from factories import make_field, make_template  # noqa: E402
from form_engine.schema_generator import clear_validator_cache  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_engine(monkeypatch):
    for name in (
        "FORM_ENGINE_DEBUG",
        "FORM_ENGINE_LOG_LEVEL",
        "FORM_ENGINE_SCHEMA_CACHE_SIZE",
        "FORM_ENGINE_PHONE_MIN_LENGTH",
        "FORM_ENGINE_DEFAULT_OPTION_COUNT",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_validator_cache()
    yield
    clear_validator_cache()


@pytest.fixture
def scenario_a():
    return make_template(
        [
            make_field("Name", "text", width="full", required=True),
            make_field("Age", "number", width="half", validation={"min": 0, "max": 120}),
            make_field("Email", "email", width="half", required=True),
        ]
    )
