import pytest
from pydantic import ValidationError

from config import Settings


def test_env_overrides_defaults(monkeypatch):
    monkeypatch.setenv("WIKIPEDIA_TIMEOUT", "4.5")
    monkeypatch.setenv("QUIZ_GENERATION_TIMEOUT", "30")
    monkeypatch.setenv("COMPLETION_PROVIDER", "Gemini")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings()
    assert settings.wikipedia_timeout == 4.5
    assert settings.quiz_generation_timeout == 30
    assert settings.completion_provider == "gemini"
    assert settings.log_level == "DEBUG"


def test_google_api_key_is_accepted_for_gemini(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
    assert Settings().gemini_api_key == "g-key"


def test_bad_value_names_the_variable(monkeypatch):
    monkeypatch.setenv("WIKIPEDIA_TIMEOUT", "ten")
    with pytest.raises(ValidationError) as exc_info:
        Settings()
    assert "wikipedia_timeout" in str(exc_info.value)
