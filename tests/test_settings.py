from pathlib import Path

from quartiles.settings import (
    EDITABLE_FIELDS, Settings, effective_log_level, get_editable_settings, update_settings,
)


def _fresh_settings() -> Settings:
    """Create a fresh Settings instance for testing."""
    return Settings()


def test_defaults(monkeypatch):
    for name in ("DICTIONARY_DIR", "DICTIONARY_NAME", "TICK_MS", "DEBUG"):
        monkeypatch.delenv(name, raising=False)
    cfg = _fresh_settings()
    assert cfg.DICTIONARY_DIR == cfg.BASE_DIR / "dict"
    assert cfg.DICTIONARY_NAME == "english"
    assert cfg.TICK_MS == 5
    assert cfg.DEBUG is False


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("TICK_MS", "12")
    monkeypatch.setenv("DEBUG", "yes")
    monkeypatch.setenv("DICTIONARY_DIR", str(tmp_path))
    monkeypatch.setenv("DICTIONARY_NAME", "scrabble")
    cfg = _fresh_settings()
    assert cfg.TICK_MS == 12
    assert cfg.DEBUG is True
    assert cfg.DICTIONARY_DIR == tmp_path
    assert isinstance(cfg.DICTIONARY_DIR, Path)
    assert cfg.DICTIONARY_NAME == "scrabble"


def test_environment_bool_false(monkeypatch):
    monkeypatch.setenv("DEBUG", "0")
    assert _fresh_settings().DEBUG is False


def test_editable_fields_exist_on_settings():
    """All editable fields must be actual attributes on Settings."""
    cfg = _fresh_settings()
    for field_name in EDITABLE_FIELDS:
        assert hasattr(cfg, field_name), f"{field_name} not found on Settings"


def test_get_editable_settings():
    cfg = _fresh_settings()
    result = get_editable_settings(cfg)
    assert set(result.keys()) == set(EDITABLE_FIELDS.keys())
    assert result["TICK_MS"] == cfg.TICK_MS
    assert result["MAX_PUZZLES"] == cfg.MAX_PUZZLES


def test_update_int_field():
    cfg = _fresh_settings()
    errors = update_settings(cfg, TICK_MS=7)
    assert errors == {}
    assert cfg.TICK_MS == 7


def test_update_int_from_string():
    cfg = _fresh_settings()
    errors = update_settings(cfg, MAX_PUZZLES="10")
    assert errors == {}
    assert cfg.MAX_PUZZLES == 10


def test_update_bool_field():
    cfg = _fresh_settings()
    original = cfg.DEBUG
    errors = update_settings(cfg, DEBUG=not original)
    assert errors == {}
    assert cfg.DEBUG is (not original)


def test_update_bool_from_string():
    cfg = _fresh_settings()
    errors = update_settings(cfg, DEBUG="true")
    assert errors == {}
    assert cfg.DEBUG is True

    errors = update_settings(cfg, DEBUG="false")
    assert errors == {}
    assert cfg.DEBUG is False


def test_update_log_level():
    cfg = _fresh_settings()
    errors = update_settings(cfg, LOG_LEVEL="warning")
    assert errors == {}
    assert cfg.LOG_LEVEL == "WARNING"

    errors = update_settings(cfg, LOG_LEVEL="chatty")
    assert "LOG_LEVEL" in errors
    assert cfg.LOG_LEVEL == "WARNING"


def test_effective_log_level():
    cfg = _fresh_settings()
    cfg.LOG_LEVEL = "warning"
    assert effective_log_level(cfg) == "WARNING"
    cfg.DEBUG = True
    assert effective_log_level(cfg) == "DEBUG"


def test_update_multiple_fields():
    cfg = _fresh_settings()
    errors = update_settings(cfg, TICK_MS=10, HIGHLIGHT_MS=0, MAX_PUZZLES=3)
    assert errors == {}
    assert cfg.TICK_MS == 10
    assert cfg.HIGHLIGHT_MS == 0
    assert cfg.MAX_PUZZLES == 3


def test_update_invalid_int_returns_error():
    cfg = _fresh_settings()
    errors = update_settings(cfg, TICK_MS="fast")
    assert "TICK_MS" in errors
    assert cfg.TICK_MS == 5


def test_update_negative_int_returns_error():
    cfg = _fresh_settings()
    errors = update_settings(cfg, TICK_MS=-1)
    assert "TICK_MS" in errors
    assert cfg.TICK_MS == 5


def test_update_non_editable_field_returns_error():
    cfg = _fresh_settings()
    original = cfg.PORT
    errors = update_settings(cfg, PORT=original + 1)
    assert "PORT" in errors
    assert cfg.PORT == original


def test_update_unknown_field_returns_error():
    cfg = _fresh_settings()
    errors = update_settings(cfg, NONEXISTENT_FIELD=42)
    assert "NONEXISTENT_FIELD" in errors


def test_update_partial_error():
    """Valid fields update even when invalid fields are present."""
    cfg = _fresh_settings()
    errors = update_settings(cfg, MAX_PUZZLES=25, BAD_FIELD="nope")
    assert "BAD_FIELD" in errors
    assert cfg.MAX_PUZZLES == 25
