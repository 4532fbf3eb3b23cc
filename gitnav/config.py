"""Global configuration management for gitnav."""

from __future__ import annotations

import json
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict

from platformdirs import user_config_dir

DEFAULT_CONFIG_DIR = Path(user_config_dir("gitnav", appauthor=False))
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "gitnav_config_dir_override",
    default=None,
)
DEFAULT_UNTRACKED = "all"
SUPPORTED_UNTRACKED: tuple[str, ...] = ("all", "normal", "no")


@dataclass
class Config:
    max_age_seconds: int | None = None
    untracked_files: str = DEFAULT_UNTRACKED
    show_header: bool = True
    diff_color: bool = True

    @property
    def max_age(self) -> timedelta | None:
        if self.max_age_seconds is None:
            return None
        return timedelta(seconds=self.max_age_seconds)


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def _coerce_max_age(raw: object) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _coerce_untracked(raw: object) -> str:
    value = str(raw or DEFAULT_UNTRACKED).strip().lower()
    if value not in SUPPORTED_UNTRACKED:
        return DEFAULT_UNTRACKED
    return value


def load_config() -> Config:
    config_file = _resolve_config_file()
    if not config_file.exists():
        return Config()
    raw = json.loads(config_file.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        return Config()
    return Config(
        max_age_seconds=_coerce_max_age(raw.get("max_age_seconds")),
        untracked_files=_coerce_untracked(raw.get("untracked_files")),
        show_header=bool(raw.get("show_header", True)),
        diff_color=bool(raw.get("diff_color", True)),
    )


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    if config.max_age_seconds is not None:
        data["max_age_seconds"] = int(config.max_age_seconds)
    data["untracked_files"] = config.untracked_files
    data["show_header"] = bool(config.show_header)
    data["diff_color"] = bool(config.diff_color)
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def set_config_dir(path: Path | str | None) -> None:
    global CONFIG_DIR, CONFIG_FILE
    if path is None:
        CONFIG_DIR = DEFAULT_CONFIG_DIR
    else:
        dir_path = Path(path).expanduser().resolve()
        if dir_path.exists() and not dir_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {dir_path}")
        CONFIG_DIR = dir_path
    CONFIG_FILE = CONFIG_DIR / "config.json"


def set_max_age(value: int | None) -> None:
    if value is not None and value <= 0:
        raise ValueError("max age must be a positive number of seconds")
    config = load_config()
    config.max_age_seconds = value
    save_config(config)


def set_untracked_files(value: str) -> None:
    normalized = (value or "").strip().lower()
    if normalized not in SUPPORTED_UNTRACKED:
        allowed = ", ".join(SUPPORTED_UNTRACKED)
        raise ValueError(f"Unsupported untracked mode '{value}'. Allowed: {allowed}")
    config = load_config()
    config.untracked_files = normalized
    save_config(config)


def set_show_header(value: bool) -> None:
    config = load_config()
    config.show_header = bool(value)
    save_config(config)


def set_diff_color(value: bool) -> None:
    config = load_config()
    config.diff_color = bool(value)
    save_config(config)
