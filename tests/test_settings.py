from __future__ import annotations

import pytest

from greeting_server.app.settings import Settings


def test_hf_token_is_read_without_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HF_TOKEN", "hf_plain")
    monkeypatch.delenv("GREETING_HF_TOKEN", raising=False)
    assert Settings(_env_file=None).hf_token == "hf_plain"


def test_prefixed_settings_override_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GREETING_TRANSPORT", "http")
    monkeypatch.setenv("GREETING_PORT", "9001")
    monkeypatch.setenv("GREETING_GREETING_LANGUAGES", "English, korean")

    settings = Settings(_env_file=None)
    assert settings.transport == "http"
    assert settings.port == 9001
    assert settings.greeting_languages == ["english", "korean"]


def test_invalid_transport_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GREETING_TRANSPORT", "carrier-pigeon")
    with pytest.raises(ValueError):
        Settings(_env_file=None)
