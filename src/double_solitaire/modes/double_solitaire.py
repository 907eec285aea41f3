# double_solitaire.py - two-deck solitaire with two foundation slots per suit
import functools
import logging
import random
import threading
from typing import Dict, Iterator, List, Optional, Set

from double_solitaire import analysis
from double_solitaire import common as C
from double_solitaire import mechanics as M
from double_solitaire.moves import (
    CardLocation,
    FoundationRef,
    Move,
    MoveKind,
    PileRef,
    Placement,
    StockRef,
    TableauRef,
    WasteRef,
)
from double_solitaire.settings import STOCK_MODE_WASTE, GameSettings

logger = logging.getLogger(__name__)


def _locked(fn):
    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return fn(self, *args, **kwargs)
    return wrapper


def _index_of(pile: C.Pile, card: C.Card) -> int:
    for i, c in enumerate(pile):
        if c is card:
            return i
    return -1


class DoubleSolitaireGame:
    """
    Double Solitaire
    - Two decks, 10 tableau columns; column c is dealt c+1 cards whose
      orientation alternates (even columns start face up, odd start face down).
    - Two foundation slots per suit, each built up A->K.
    - Tableau builds down in alternating colours; only Kings on empty columns.
      Any face-up valid run may move together.
    - Face-down tops are never flipped automatically; flipping is its own move.
    - Stock deals one card onto each column 1..9 that is neither empty nor a
      complete King-headed run. Alternate mode: single card to a waste pile
      with unlimited recycling.
    - Cards above an Ace may come back from a foundation onto the tableau.
    """

    def __init__(self, settings: Optional[GameSettings] = None, seed=None, rng: Optional[random.Random] = None):
        self.settings = settings or GameSettings()
        self.rng = rng or random.Random(seed)
        self.stock: C.Pile = []
        self.waste: C.Pile = []
        self.foundations: Dict[str, List[C.Pile]] = self._empty_foundations()
        self.tableau: List[C.Pile] = [[] for _ in range(self.settings.tableau_columns)]
        self.state_history: Set[str] = set()
        self._lock = threading.RLock()

    @property
    def stock_mode(self) -> str:
        return self.settings.stock_mode

    @property
    def total_cards(self) -> int:
        return C.CARDS_PER_DECK * self.settings.number_of_decks

    def _empty_foundations(self) -> Dict[str, List[C.Pile]]:
        # One ascent track per deck for every suit
        return {suit: [[] for _ in range(self.settings.number_of_decks)] for suit in C.SUITS}

    # ---------- Setup ----------
    @_locked
    def start_new_game(self):
        deck = C.make_deck(self.settings.number_of_decks, shuffle=True, rng=self.rng)
        self.stock = deck.cards
        self.waste = []
        self.foundations = self._empty_foundations()
        self.tableau = [[] for _ in range(self.settings.tableau_columns)]
        self.state_history = set()
        self.deal()

    @_locked
    def deal(self):
        if any(self.tableau):
            raise RuntimeError("Tableau is already dealt; call start_new_game() for a fresh deal")
        for col in range(len(self.tableau)):
            first_face_up = col % 2 == 0
            for n in range(col + 1):
                card = self.stock.pop()
                card.face_up = (n % 2 == 0) if first_face_up else (n % 2 == 1)
                self.tableau[col].append(card)
        for c in self.stock:
            c.face_up = False
        logger.debug("Dealt %d tableau columns, %d cards left in stock", len(self.tableau), len(self.stock))

    # ---------- Stock ----------
    def _stock_deal_targets(self) -> Iterator[int]:
        # Column 0 never receives stock cards
        for i in range(1, len(self.tableau)):
            pile = self.tableau[i]
            if not pile or M.is_complete_column(pile):
                continue
            yield i

    @_locked
    def draw_from_stock(self) -> List[Placement]:
        if self.stock_mode == STOCK_MODE_WASTE:
            self._draw_to_waste()
            return []
        placements: List[Placement] = []
        for i in self._stock_deal_targets():
            if not self.stock:
                break
            card = self.stock.pop()
            card.face_up = True
            self.tableau[i].append(card)
            placements.append(Placement(card, i))
        logger.debug("Stock pass placed %d card(s), %d left", len(placements), len(self.stock))
        return placements

    def _draw_to_waste(self):
        if self.stock:
            card = self.stock.pop()
            card.face_up = True
            self.waste.append(card)
            return
        if not self.waste:
            return
        self.stock = list(reversed(self.waste))
        for c in self.stock:
            c.face_up = False
        self.waste = []
        logger.debug("Recycled waste into stock (%d cards)", len(self.stock))

    def get_potential_stock_moves(self) -> List[Move]:
        if self.stock_mode == STOCK_MODE_WASTE:
            return [Move.stock_draw()] if (self.stock or self.waste) else []
        if not self.stock:
            return []
        # The whole multi-column deal counts as one move
        for _ in self._stock_deal_targets():
            return [Move.stock_deal()]
        return []

    # ---------- Validation ----------
    def is_valid_tableau_move(self, card: C.Card, target_index: int) -> bool:
        return M.is_valid_tableau_move(card, self.tableau[target_index])

    def is_valid_sub_stack(self, pile: C.Pile, start_index: int) -> bool:
        return M.is_valid_sub_stack(pile, start_index)

    def is_valid_foundation_move(self, card: C.Card, slot_index: Optional[int] = None) -> bool:
        slots = self.foundations[card.suit]
        if slot_index is not None:
            if not 0 <= slot_index < len(slots):
                return False
            return M.can_build_foundation(card, slots[slot_index])
        return M.first_open_slot(card, slots) is not None

    def _foundation_slot_holding(self, card: C.Card, slot: Optional[int] = None) -> Optional[int]:
        slots = self.foundations[card.suit]
        candidates = [slot] if slot is not None else range(len(slots))
        for i in candidates:
            if slots[i] and slots[i][-1].id == card.id:
                return i
        return None

    def _cards_to_move(self, card: C.Card, source: PileRef, allow_run: bool) -> Optional[List[C.Card]]:
        """Cards that would leave ``source`` if ``card`` is picked up, or None if it can't be."""
        if isinstance(source, TableauRef):
            pile = self.tableau[source.index]
            idx = _index_of(pile, card)
            if idx < 0 or not card.face_up:
                return None
            if idx == len(pile) - 1:
                return [card]
            if not allow_run:
                return None
            run = pile[idx:]
            if not M.is_valid_sub_stack(pile, idx) or not all(c.face_up for c in run):
                return None
            return run
        if isinstance(source, FoundationRef):
            if card.suit != source.suit or self._foundation_slot_holding(card, source.slot) is None:
                return None
            return [card]
        if isinstance(source, WasteRef):
            if self.waste and self.waste[-1] is card:
                return [card]
        return None

    # ---------- Moves ----------
    @_locked
    def move_card_to_tableau(self, card: C.Card, source: PileRef, target_index: int) -> bool:
        if not self.is_valid_tableau_move(card, target_index):
            return False
        if isinstance(source, TableauRef) and source.index == target_index:
            return False
        run = self._cards_to_move(card, source, allow_run=True)
        if run is None:
            logger.debug("Rejected %r from %s: not a movable run", card, source)
            return False
        self.remove_from_source(card, source, len(run))
        self.tableau[target_index].extend(run)
        return True

    @_locked
    def move_card_to_foundation(self, card: C.Card, source: PileRef, slot_index: Optional[int] = None) -> bool:
        # Runs never enter a foundation
        if self._cards_to_move(card, source, allow_run=False) is None:
            return False
        slots = self.foundations[card.suit]
        if slot_index is None:
            slot_index = M.first_open_slot(card, slots)
            if slot_index is None:
                return False
        elif not 0 <= slot_index < len(slots) or not M.can_build_foundation(card, slots[slot_index]):
            return False
        self.remove_from_source(card, source, 1)
        slots[slot_index].append(card)
        return True

    @_locked
    def remove_from_source(self, card: C.Card, source: PileRef, count: int = 1):
        if isinstance(source, TableauRef):
            pile = self.tableau[source.index]
            idx = _index_of(pile, card)
            if idx > -1:
                del pile[idx:idx + count]
            # No auto-flip: the exposed card waits for flip_top_card
        elif isinstance(source, FoundationRef):
            slot = self._foundation_slot_holding(card, source.slot)
            if slot is not None:
                self.foundations[card.suit][slot].pop()
        elif isinstance(source, WasteRef):
            if self.waste and self.waste[-1] is card:
                self.waste.pop()

    @_locked
    def flip_top_card(self, tableau_index: int) -> bool:
        pile = self.tableau[tableau_index]
        if pile and not pile[-1].face_up:
            pile[-1].face_up = True
            return True
        return False

    @_locked
    def auto_move_to_foundation(self, card: C.Card) -> bool:
        location = self.find_card(card.id)
        if location is None or not isinstance(location.pile, TableauRef):
            return False
        pile = self.tableau[location.pile.index]
        if pile[-1] is not card:
            return False
        return self.move_card_to_foundation(card, location.pile)

    # ---------- Lookup ----------
    def find_card(self, card_id: str) -> Optional[CardLocation]:
        """Locate a card in the tableau, the stock, or on top of a foundation slot or the waste."""
        for i, pile in enumerate(self.tableau):
            for c in pile:
                if c.id == card_id:
                    return CardLocation(TableauRef(i), c)
        for suit, slots in self.foundations.items():
            for slot_index, slot in enumerate(slots):
                if slot and slot[-1].id == card_id:
                    return CardLocation(FoundationRef(suit, slot_index), slot[-1])
        if self.waste and self.waste[-1].id == card_id:
            return CardLocation(WasteRef(), self.waste[-1])
        for c in self.stock:
            if c.id == card_id:
                return CardLocation(StockRef(), c)
        return None

    def find_card_by_id(self, card_id: str) -> Optional[C.Card]:
        """Any card by id, buried and stock cards included."""
        for pile in self.tableau:
            for c in pile:
                if c.id == card_id:
                    return c
        for slots in self.foundations.values():
            for slot in slots:
                for c in slot:
                    if c.id == card_id:
                        return c
        for c in self.waste:
            if c.id == card_id:
                return c
        for c in self.stock:
            if c.id == card_id:
                return c
        return None

    # ---------- Analysis ----------
    @_locked
    def get_available_moves(self) -> List[Move]:
        moves: List[Move] = list(self.get_potential_stock_moves())

        # Foundation tops back onto the tableau (Aces stay put)
        for suit, slots in self.foundations.items():
            for slot_index, slot in enumerate(slots):
                if not slot or slot[-1].rank == C.ACE:
                    continue
                card = slot[-1]
                for target in range(len(self.tableau)):
                    if self.is_valid_tableau_move(card, target):
                        moves.append(Move.to_tableau(card, FoundationRef(suit, slot_index), target))

        if self.waste:
            card = self.waste[-1]
            if self.is_valid_foundation_move(card):
                moves.append(Move.to_foundation(card, WasteRef()))
            for target in range(len(self.tableau)):
                if self.is_valid_tableau_move(card, target):
                    moves.append(Move.to_tableau(card, WasteRef(), target))

        for i, pile in enumerate(self.tableau):
            if not pile:
                continue
            top = pile[-1]
            if not top.face_up:
                # A hidden top must be flipped before the column can do anything else
                moves.append(Move.flip(i))
                continue
            if self.is_valid_foundation_move(top):
                moves.append(Move.to_foundation(top, TableauRef(i)))
            for j in M.movable_run_starts(pile):
                card = pile[j]
                for target in range(len(self.tableau)):
                    if target != i and self.is_valid_tableau_move(card, target):
                        moves.append(Move.to_tableau(card, TableauRef(i), target))
        return moves

    @_locked
    def apply_move(self, move: Move) -> bool:
        """Replay an enumerated move on this game, matching its card by id."""
        if move.kind in (MoveKind.STOCK_DEAL, MoveKind.STOCK_DRAW):
            placements = self.draw_from_stock()
            return bool(placements) or self.stock_mode == STOCK_MODE_WASTE
        if move.kind == MoveKind.FLIP_CARD:
            return self.flip_top_card(move.source.index)
        card = self.find_card_by_id(move.card.id)
        if card is None:
            raise KeyError(f"Card {move.card.id} referenced by '{move.describe()}' is not on the table")
        if move.kind == MoveKind.FOUNDATION:
            return self.move_card_to_foundation(card, move.source)
        if move.kind == MoveKind.TABLEAU:
            return self.move_card_to_tableau(card, move.source, move.target_index)
        raise ValueError(f"Unknown move kind: {move.kind}")

    def get_game_state_hash(self) -> str:
        return analysis.state_hash(self)

    @_locked
    def check_game_state(self) -> analysis.GameStatus:
        return analysis.check_game_state(self)

    def card_count(self) -> int:
        count = len(self.stock) + len(self.waste) + sum(len(p) for p in self.tableau)
        for slots in self.foundations.values():
            count += sum(len(s) for s in slots)
        return count

    def is_won(self) -> bool:
        return all(len(slot) == C.KING for slots in self.foundations.values() for slot in slots)

    # ---------- Simulation ----------
    @_locked
    def clone(self) -> "DoubleSolitaireGame":
        twin = DoubleSolitaireGame(self.settings, rng=random.Random())
        twin.rng.setstate(self.rng.getstate())
        twin.stock = C.copy_pile(self.stock)
        twin.waste = C.copy_pile(self.waste)
        twin.foundations = {suit: [C.copy_pile(s) for s in slots] for suit, slots in self.foundations.items()}
        twin.tableau = [C.copy_pile(p) for p in self.tableau]
        twin.state_history = set(self.state_history)
        return twin
