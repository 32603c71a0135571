# test_config.py
import json
import pathlib
import sys
from pathlib import Path

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from config import get_settings  # noqa: E402

CONFIG_JSON = Path(__file__).resolve().parents[2] / "config.json"


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults_from_config(monkeypatch):
    monkeypatch.delenv("INVOICE_NUMBER_MAX_ATTEMPTS", raising=False)
    settings = get_settings()
    expected = json.loads(CONFIG_JSON.read_text())
    assert settings.invoice_number_max_attempts == expected["invoice_number_max_attempts"]
    assert settings.default_invoice_prefix == expected["default_invoice_prefix"]


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DEFAULT_INVOICE_PREFIX", "BILL")
    monkeypatch.setenv("INVOICE_NUMBER_MAX_ATTEMPTS", "3")
    settings = get_settings()
    assert settings.default_invoice_prefix == "BILL"
    assert settings.invoice_number_max_attempts == 3


def test_missing_key_uses_default(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    original = CONFIG_JSON.read_text()
    monkeypatch.setattr(
        Path,
        "read_text",
        lambda self, *a, **kw: json.dumps(
            {k: v for k, v in json.loads(original).items() if k != "log_level"}
        ),
    )
    assert get_settings().log_level == "INFO"


def test_settings_are_cached():
    assert get_settings() is get_settings()
