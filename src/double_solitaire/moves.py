"""Pile references and move descriptors passed between the engine and its callers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from double_solitaire.common import Card


@dataclass(frozen=True)
class TableauRef:
    index: int


@dataclass(frozen=True)
class FoundationRef:
    suit: str
    slot: Optional[int] = None


@dataclass(frozen=True)
class WasteRef:
    pass


@dataclass(frozen=True)
class StockRef:
    pass


PileRef = Union[TableauRef, FoundationRef, WasteRef, StockRef]


class MoveKind(str, Enum):
    STOCK_DEAL = "stock_deal"
    STOCK_DRAW = "stock_draw"
    FOUNDATION = "foundation"
    TABLEAU = "tableau"
    FLIP_CARD = "flip_card"


@dataclass(frozen=True)
class Move:
    """
    One enumerated action. ``kind`` names the destination type, as in
    ``TABLEAU`` for any move ending on a tableau column.
    """

    kind: MoveKind
    source: Optional[PileRef] = None
    target_index: Optional[int] = None
    card: Optional[Card] = None

    @staticmethod
    def stock_deal() -> "Move":
        return Move(MoveKind.STOCK_DEAL)

    @staticmethod
    def stock_draw() -> "Move":
        return Move(MoveKind.STOCK_DRAW)

    @staticmethod
    def flip(column: int) -> "Move":
        return Move(MoveKind.FLIP_CARD, source=TableauRef(column))

    @staticmethod
    def to_foundation(card: Card, source: PileRef) -> "Move":
        return Move(MoveKind.FOUNDATION, source=source, card=card)

    @staticmethod
    def to_tableau(card: Card, source: PileRef, target_index: int) -> "Move":
        return Move(MoveKind.TABLEAU, source=source, target_index=target_index, card=card)

    def describe(self) -> str:
        desc = self.kind.value
        if self.card is not None:
            desc += f" ({self.card.rank_label()}{self.card.suit_symbol()})"
        if isinstance(self.source, TableauRef):
            desc += f" from T{self.source.index}"
        elif isinstance(self.source, FoundationRef):
            desc += f" from F[{self.source.suit}][{self.source.slot}]"
        elif isinstance(self.source, WasteRef):
            desc += " from waste"
        if self.target_index is not None:
            desc += f" to T{self.target_index}"
        return desc


@dataclass(frozen=True)
class Placement:
    """A card dealt from the stock onto a tableau column."""

    card: Card
    target_index: int


@dataclass(frozen=True)
class CardLocation:
    pile: PileRef
    card: Card
