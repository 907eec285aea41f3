"""Metadata for the playable double solitaire variants."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from double_solitaire.modes.double_solitaire import DoubleSolitaireGame
from double_solitaire.settings import STOCK_MODE_COLUMNS, STOCK_MODE_WASTE, GameSettings


@dataclass(frozen=True)
class GameMetadata:
    """Description metadata for a solitaire variant."""

    key: str
    label: str
    stock_mode: str


_GAME_METADATA: Tuple[GameMetadata, ...] = (
    GameMetadata(
        key="double_solitaire",
        label="Double Solitaire",
        stock_mode=STOCK_MODE_COLUMNS,
    ),
    GameMetadata(
        key="double_solitaire_waste",
        label="Double Solitaire (Waste Pile)",
        stock_mode=STOCK_MODE_WASTE,
    ),
)


GAME_REGISTRY: Dict[str, GameMetadata] = {meta.key: meta for meta in _GAME_METADATA}


def create_game(
    game_id: str,
    settings: Optional[GameSettings] = None,
    *,
    seed=None,
    start: bool = True,
) -> DoubleSolitaireGame:
    meta = GAME_REGISTRY.get(game_id)
    if meta is None:
        raise KeyError(f"Unknown solitaire game id: {game_id}")
    settings = replace(settings or GameSettings(), stock_mode=meta.stock_mode)
    game = DoubleSolitaireGame(settings, seed=seed)
    if start:
        game.start_new_game()
    return game
