from typing import List, Optional, Sequence

from double_solitaire import common as C


def can_stack_tableau(upper: C.Card, lower: Optional[C.Card]) -> bool:
    """True when ``upper`` may sit on ``lower`` (``None`` meaning an empty column)."""
    if lower is None:
        return upper.rank == C.KING
    return upper.color() != lower.color() and upper.rank == lower.rank - 1


def is_valid_tableau_move(card: C.Card, target_pile: Sequence[C.Card]) -> bool:
    top = target_pile[-1] if target_pile else None
    return can_stack_tableau(card, top)


def is_valid_sub_stack(pile: Sequence[C.Card], start_index: int) -> bool:
    """
    Every adjacent pair from start_index to the top must alternate colour and
    descend by one. Orientation is not checked here.
    """
    for i in range(start_index, len(pile) - 1):
        current, nxt = pile[i], pile[i + 1]
        if current.color() == nxt.color() or current.rank != nxt.rank + 1:
            return False
    return True


def can_build_foundation(card: C.Card, slot: Sequence[C.Card]) -> bool:
    if not slot:
        return card.rank == C.ACE
    return card.rank == slot[-1].rank + 1


def first_open_slot(card: C.Card, slots: Sequence[Sequence[C.Card]]) -> Optional[int]:
    """Lowest slot index that accepts ``card``, or None."""
    for i, slot in enumerate(slots):
        if can_build_foundation(card, slot):
            return i
    return None


def first_face_up_index(pile: Sequence[C.Card]) -> int:
    for i, c in enumerate(pile):
        if c.face_up:
            return i
    return -1


def is_complete_column(pile: Sequence[C.Card]) -> bool:
    """
    A column that starts (at index 0, nothing hidden beneath) with a face-up
    King and runs down validly to its top. The stock deal leaves these alone.
    """
    if first_face_up_index(pile) != 0:
        return False
    return pile[0].rank == C.KING and is_valid_sub_stack(pile, 0)


def movable_run_starts(pile: Sequence[C.Card]) -> List[int]:
    """Indices whose run to the top is a valid sub stack and entirely face up."""
    starts = []
    for j in range(len(pile) - 1, -1, -1):
        if not pile[j].face_up:
            break
        if not is_valid_sub_stack(pile, j):
            break
        starts.append(j)
    starts.reverse()
    return starts
