import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Settings:
    BASE_DIR: Path = field(default_factory=lambda: Path(__file__).resolve().parent.parent)

    DICTIONARY_DIR: Path = field(init=False)
    DICTIONARY_NAME: str = "english"

    TICK_MS: int = 5
    HIGHLIGHT_MS: int = 400
    MAX_PUZZLES: int = 64

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    PORT: int = 10001

    def __post_init__(self):
        self.DICTIONARY_DIR = self.BASE_DIR / "dict"

        # Override from environment
        for fld in self.__dataclass_fields__:
            env_val = os.environ.get(fld)
            if env_val is not None:
                setattr(self, fld, _coerce(getattr(self, fld), env_val))


# Fields that may be changed while the service is running
EDITABLE_FIELDS: dict[str, type] = {
    "TICK_MS": int,
    "HIGHLIGHT_MS": int,
    "MAX_PUZZLES": int,
    "LOG_LEVEL": str,
    "DEBUG": bool,
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _coerce(current, value):
    if isinstance(current, bool):
        if isinstance(value, bool):
            return value
        return str(value).lower() in ("1", "true", "yes")
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    if isinstance(current, Path):
        return Path(value)
    return str(value)


def get_editable_settings(cfg: Settings) -> dict:
    return {name: getattr(cfg, name) for name in EDITABLE_FIELDS}


def update_settings(cfg: Settings, **values) -> dict[str, str]:
    """Apply editable values to ``cfg``. Returns {field: error} for the ones rejected."""
    errors: dict[str, str] = {}
    for name, value in values.items():
        if name not in EDITABLE_FIELDS:
            if hasattr(cfg, name):
                errors[name] = "not editable"
            else:
                errors[name] = "unknown setting"
            continue
        try:
            coerced = _coerce(getattr(cfg, name), value)
        except (TypeError, ValueError) as e:
            errors[name] = f"invalid {EDITABLE_FIELDS[name].__name__}: {e}"
            continue
        if isinstance(coerced, int) and not isinstance(coerced, bool) and coerced < 0:
            errors[name] = "must not be negative"
            continue
        if name == "LOG_LEVEL":
            coerced = coerced.upper()
            if coerced not in LOG_LEVELS:
                errors[name] = f"must be one of {', '.join(LOG_LEVELS)}"
                continue
        setattr(cfg, name, coerced)
    return errors


def effective_log_level(cfg: Settings) -> str:
    return "DEBUG" if cfg.DEBUG else cfg.LOG_LEVEL.upper()


settings = Settings()
