# common.py - shared card model for the double solitaire engine
import random
import uuid
from typing import List, Optional

# ---------- Suits & ranks ----------
HEARTS = "hearts"
DIAMONDS = "diamonds"
CLUBS = "clubs"
SPADES = "spades"

SUITS = [HEARTS, DIAMONDS, CLUBS, SPADES]
SUIT_SYMBOLS = {HEARTS: "♥", DIAMONDS: "♦", CLUBS: "♣", SPADES: "♠"}

ACE = 1
KING = 13
RANKS = list(range(ACE, KING + 1))
RANK_TO_TEXT = {1: "A", 11: "J", 12: "Q", 13: "K"}
for _r in range(2, 11):
    RANK_TO_TEXT[_r] = str(_r)

RED = "red"
BLACK = "black"

CARDS_PER_DECK = len(SUITS) * len(RANKS)


def is_red(suit):
    return suit in (HEARTS, DIAMONDS)


# ---------- Cards & Piles ----------
class Card:
    __slots__ = ("suit", "rank", "deck", "face_up", "id")

    def __init__(self, suit, rank, deck=1, face_up=False, card_id=None):
        self.suit = suit   # one of SUITS
        self.rank = rank   # 1..13
        self.deck = deck   # which physical deck (1..N)
        self.face_up = face_up
        self.id = card_id or f"{suit}-{rank}-{deck}-{uuid.uuid4().hex[:9]}"

    def color(self):
        return RED if is_red(self.suit) else BLACK

    def rank_label(self):
        return RANK_TO_TEXT[self.rank]

    def suit_symbol(self):
        return SUIT_SYMBOLS.get(self.suit, "")

    def signature(self):
        """Hash key for the card: ignores deck tag and id on purpose."""
        return f"{self.rank}:{self.suit}:{'U' if self.face_up else 'D'}"

    def copy(self):
        return Card(self.suit, self.rank, self.deck, self.face_up, card_id=self.id)

    def __repr__(self):
        return f"{self.rank_label()}{self.suit_symbol()}{'↑' if self.face_up else '↓'}"


Pile = List[Card]


def copy_pile(pile: Pile) -> Pile:
    return [c.copy() for c in pile]


class Deck:
    """N standard decks combined, drawn from the end of ``cards``."""

    def __init__(self, number_of_decks: int = 2, rng: Optional[random.Random] = None):
        self.number_of_decks = number_of_decks
        self.rng = rng or random.Random()
        self.cards: List[Card] = []
        self.reset()

    def reset(self):
        self.cards = [
            Card(suit, rank, deck_num)
            for deck_num in range(1, self.number_of_decks + 1)
            for suit in SUITS
            for rank in RANKS
        ]

    def shuffle(self):
        # random.shuffle is an in-place Fisher-Yates
        self.rng.shuffle(self.cards)

    def draw(self) -> Card:
        if not self.cards:
            raise IndexError("draw from an empty deck")
        return self.cards.pop()

    @property
    def is_empty(self) -> bool:
        return not self.cards

    @property
    def count(self) -> int:
        return len(self.cards)

    def __len__(self):
        return len(self.cards)


def make_deck(number_of_decks=2, shuffle=True, rng=None):
    d = Deck(number_of_decks, rng=rng)
    if shuffle:
        d.shuffle()
    return d
