from template_forms import config
from template_forms.config import Settings, get_settings


def test_defaults():
    s = Settings()
    assert s.max_template_chars == 200_000
    assert s.required_by_default is True
    assert (s.derived_array, s.row_total_field, s.grand_total_field) == ("items", "total", "grand_total")
    assert s.log_level == "INFO"


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("TEMPLATE_FORMS_MAX_TEMPLATE_CHARS", "50")
    monkeypatch.setenv("TEMPLATE_FORMS_LOG_LEVEL", "debug")
    monkeypatch.setenv("TEMPLATE_FORMS_SESSION_TTL_SEC", "not-a-number")
    get_settings.cache_clear()
    s = get_settings()
    assert s.max_template_chars == 50
    assert s.log_level == "DEBUG"
    assert s.session_ttl_sec == 3600


def test_env_helpers_are_not_exported():
    assert config.__all__ == ["Settings", "get_settings"]
