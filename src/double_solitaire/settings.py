"""Engine configuration: defaults, JSON settings file and environment overrides."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

STOCK_MODE_COLUMNS = "columns"
STOCK_MODE_WASTE = "waste"
STOCK_MODES = (STOCK_MODE_COLUMNS, STOCK_MODE_WASTE)

SETTINGS_ENV = "DOUBLE_SOLITAIRE_SETTINGS"
DECKS_ENV = "DOUBLE_SOLITAIRE_DECKS"
STOCK_MODE_ENV = "DOUBLE_SOLITAIRE_STOCK_MODE"


@dataclass(frozen=True)
class GameSettings:
    """Immutable engine options. Double solitaire is played with two decks."""

    number_of_decks: int = 2
    tableau_columns: int = 10
    stock_mode: str = STOCK_MODE_COLUMNS
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not isinstance(self.number_of_decks, int) or self.number_of_decks < 1:
            raise ValueError(f"number_of_decks must be a positive integer, got {self.number_of_decks!r}")
        if not isinstance(self.tableau_columns, int) or self.tableau_columns < 2:
            raise ValueError(f"tableau_columns must be an integer of at least 2, got {self.tableau_columns!r}")
        if self.stock_mode not in STOCK_MODES:
            raise ValueError(f"stock_mode must be one of {STOCK_MODES}, got {self.stock_mode!r}")
        needed = self.tableau_columns * (self.tableau_columns + 1) // 2
        if needed > 52 * self.number_of_decks:
            raise ValueError(
                f"{self.number_of_decks} deck(s) cannot fill {self.tableau_columns} tableau columns"
            )


def _settings_dir() -> str:
    # Prefer %APPDATA% on Windows, else ~/.double_solitaire
    base = os.environ.get("APPDATA")
    if base:
        return os.path.join(base, "DoubleSolitaire")
    return os.path.join(os.path.expanduser("~"), ".double_solitaire")


def _settings_path() -> str:
    return os.path.join(_settings_dir(), "settings.json")


def settings_from_mapping(raw: Mapping[str, Any], base: Optional[GameSettings] = None) -> GameSettings:
    base = base or GameSettings()
    if not isinstance(raw, Mapping):
        raise TypeError("Settings must be an object mapping option names to values")
    known = {"number_of_decks", "tableau_columns", "stock_mode", "log_level"}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown settings key(s): {', '.join(unknown)}")
    log_level = raw.get("log_level", base.log_level)
    if not isinstance(log_level, str):
        raise TypeError(f"log_level must be a string, got {log_level!r}")
    return replace(
        base,
        number_of_decks=raw.get("number_of_decks", base.number_of_decks),
        tableau_columns=raw.get("tableau_columns", base.tableau_columns),
        stock_mode=raw.get("stock_mode", base.stock_mode),
        log_level=log_level.upper(),
    )


def _apply_env_overrides(settings: GameSettings) -> GameSettings:
    decks = os.environ.get(DECKS_ENV, "").strip()
    mode = os.environ.get(STOCK_MODE_ENV, "").strip().lower()
    if decks:
        try:
            count = int(decks)
        except ValueError as exc:
            raise ValueError(f"{DECKS_ENV} must be an integer, got {decks!r}") from exc
        settings = replace(settings, number_of_decks=count)
    if mode:
        settings = replace(settings, stock_mode=mode)
    return settings


def load_settings(path: Optional[str] = None) -> GameSettings:
    """
    Read settings from ``path``, else $DOUBLE_SOLITAIRE_SETTINGS, else the
    per-user settings file. A missing default file means defaults; a missing
    explicit file or malformed JSON raises.
    """
    explicit = path or os.environ.get(SETTINGS_ENV)
    target = explicit or _settings_path()
    settings = GameSettings()
    if explicit or os.path.isfile(target):
        try:
            with open(target, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError as exc:
            raise FileNotFoundError(f"Settings file not found at {target}") from exc
        except json.JSONDecodeError as exc:
            raise ValueError(f"Settings file {target} is not valid JSON: {exc}") from exc
        settings = settings_from_mapping(raw, settings)
    return _apply_env_overrides(settings)


def configure_logging(settings: Optional[GameSettings] = None) -> None:
    settings = settings or GameSettings()
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {settings.log_level!r}")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
