import pytest

from double_solitaire import common as C
from double_solitaire.modes.double_solitaire import DoubleSolitaireGame
from double_solitaire.settings import GameSettings


@pytest.fixture
def make_card():
    def _make(suit: str, rank: int, face_up: bool = True, deck: int = 1) -> C.Card:
        return C.Card(suit, rank, deck, face_up)

    return _make


@pytest.fixture
def blank_game() -> DoubleSolitaireGame:
    """A game that was never dealt: every pile starts empty."""
    return DoubleSolitaireGame(seed=7)


@pytest.fixture
def waste_game() -> DoubleSolitaireGame:
    return DoubleSolitaireGame(GameSettings(stock_mode="waste"), seed=7)
