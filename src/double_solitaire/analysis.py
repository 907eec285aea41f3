"""Canonical state hashing and stalemate / loop detection.

The detector looks exactly one ply ahead: every available move is replayed on
an independent clone of the game and the resulting state is compared with the
states already visited. When no move leads anywhere new, the player can only
cycle and the game is declared over.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List

from double_solitaire.settings import STOCK_MODE_WASTE

if TYPE_CHECKING:
    from double_solitaire.modes.double_solitaire import DoubleSolitaireGame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameStatus:
    """Result of :func:`check_game_state`."""

    game_over: bool
    loop_detected: bool
    moves_available: int
    won: bool = False


def _sigs(pile) -> List[str]:
    return [c.signature() for c in pile]


def state_hash(game: "DoubleSolitaireGame") -> str:
    """Return the canonical fingerprint of ``game``.

    Cards are reduced to rank, suit and orientation, so two equal cards from
    different physical decks are interchangeable.
    """

    state: Dict[str, object] = {
        "stock": _sigs(game.stock),
        "tableau": [_sigs(col) for col in game.tableau],
    }
    if game.stock_mode == STOCK_MODE_WASTE:
        state["waste"] = _sigs(game.waste)
    state["foundations"] = [
        {"suit": suit, "piles": [_sigs(slot) for slot in game.foundations[suit]]}
        for suit in sorted(game.foundations)
    ]
    return json.dumps(state, separators=(",", ":"))


def check_game_state(game: "DoubleSolitaireGame") -> GameStatus:
    """Record the current state in the game's history and decide whether play can go on."""

    current = state_hash(game)
    seen = set(game.state_history)
    logger.debug(
        "Current hash: %s... history size: %d, new: %s", current[:20], len(seen), current not in seen
    )
    game.state_history.add(current)

    moves = game.get_available_moves()
    logger.debug("Available moves: %d", len(moves))
    for i, move in enumerate(moves):
        logger.debug("  move %d: %s", i, move.describe())

    if game.is_won():
        return GameStatus(game_over=True, loop_detected=False, moves_available=len(moves), won=True)

    if not moves:
        logger.warning("Stalemate: no moves available (%d card(s) left in stock)", len(game.stock))
        return GameStatus(game_over=True, loop_detected=False, moves_available=0)

    for i, move in enumerate(moves):
        simulation = game.clone()
        if not simulation.apply_move(move):
            raise RuntimeError(f"Enumerated move '{move.describe()}' was rejected during simulation")
        future = state_hash(simulation)
        repeated = future in seen
        logger.debug("Loop check move %d (%s) -> %s... seen: %s", i, move.kind.value, future[:20], repeated)
        if not repeated:
            return GameStatus(game_over=False, loop_detected=False, moves_available=len(moves))

    logger.warning("Loop detected: all %d move(s) lead to previously seen states", len(moves))
    return GameStatus(game_over=True, loop_detected=True, moves_available=len(moves))
