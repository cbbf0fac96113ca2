from __future__ import annotations

import functools
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .cards import Card

HIGH_CARD = 1
ONE_PAIR = 2
TWO_PAIR = 3
THREE_OF_A_KIND = 4
STRAIGHT = 5
FLUSH = 6
FULL_HOUSE = 7
FOUR_OF_A_KIND = 8
STRAIGHT_FLUSH = 9
ROYAL_FLUSH = 10

CATEGORY_NAMES = {
    HIGH_CARD: "High Card",
    ONE_PAIR: "One Pair",
    TWO_PAIR: "Two Pair",
    THREE_OF_A_KIND: "Three of a Kind",
    STRAIGHT: "Straight",
    FLUSH: "Flush",
    FULL_HOUSE: "Full House",
    FOUR_OF_A_KIND: "Four of a Kind",
    STRAIGHT_FLUSH: "Straight Flush",
    ROYAL_FLUSH: "Royal Flush",
}

TIEBREAK_WIDTH = 5


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class HandRank:
    """Category ordinal (1 = high card ... 10 = royal flush) plus tie-break values."""

    category: int
    tiebreak: Tuple[int, ...]

    @property
    def name(self) -> str:
        return CATEGORY_NAMES[self.category]

    def key(self) -> Tuple[int, ...]:
        # Missing tie-break slots compare as zero.
        padded = self.tiebreak + (0,) * (TIEBREAK_WIDTH - len(self.tiebreak))
        return (self.category,) + padded

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HandRank):
            return NotImplemented
        return self.key() == other.key()

    def __lt__(self, other: "HandRank") -> bool:
        if not isinstance(other, HandRank):
            return NotImplemented
        return self.key() < other.key()

    def __hash__(self) -> int:
        return hash(self.key())


def compare_ranks(a: HandRank, b: HandRank) -> int:
    """Return 1 if ``a`` wins, -1 if ``b`` wins, 0 on an exact tie."""
    if a == b:
        return 0
    return 1 if a > b else -1


def evaluate_hand(hole: Sequence[Card], community: Sequence[Card]) -> HandRank:
    if not community:
        raise ValueError("No community cards; use preflop_strength for starting hands")
    return evaluate_best(list(hole) + list(community))


def evaluate_best(cards: Sequence[Card]) -> HandRank:
    """Best hand over 5-7 cards (Texas Hold'em)."""
    if not 5 <= len(cards) <= 7:
        raise ValueError(f"Expected 5 to 7 cards, got {len(cards)}")
    return evaluate_cards(cards)


def evaluate_cards(cards: Iterable[Card]) -> HandRank:
    """Classify 1-7 cards. With fewer than five only made sets can be detected."""
    cards = list(cards)
    if not cards or len(cards) > 7:
        raise ValueError(f"Expected 1 to 7 cards, got {len(cards)}")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards in hand")

    values = sorted((card.rank for card in cards), reverse=True)
    counts = Counter(values)
    groups = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    suit_counts = Counter(card.suit for card in cards)
    flush_suit = next((suit for suit, count in suit_counts.items() if count >= 5), None)

    flush_values: List[int] = []
    if flush_suit is not None:
        flush_values = sorted((card.rank for card in cards if card.suit == flush_suit), reverse=True)
        high = straight_high(flush_values)
        if high == 14:
            return HandRank(ROYAL_FLUSH, (14,))
        if high is not None:
            return HandRank(STRAIGHT_FLUSH, (high,))

    quads = [value for value, count in groups if count == 4]
    trips = [value for value, count in groups if count == 3]
    pairs = [value for value, count in groups if count == 2]

    if quads:
        kickers = [value for value in values if value != quads[0]][:1]
        return HandRank(FOUR_OF_A_KIND, (quads[0], *kickers))
    if trips and (len(trips) > 1 or pairs):
        return HandRank(FULL_HOUSE, (trips[0], max(trips[1:] + pairs)))
    if flush_suit is not None:
        return HandRank(FLUSH, tuple(flush_values[:5]))

    high = straight_high(values)
    if high is not None:
        return HandRank(STRAIGHT, (high,))
    if trips:
        kickers = [value for value in values if value != trips[0]][:2]
        return HandRank(THREE_OF_A_KIND, (trips[0], *kickers))
    if len(pairs) >= 2:
        top = pairs[:2]
        kickers = [value for value in values if value not in top][:1]
        return HandRank(TWO_PAIR, (*top, *kickers))
    if pairs:
        kickers = [value for value in values if value != pairs[0]][:3]
        return HandRank(ONE_PAIR, (pairs[0], *kickers))
    return HandRank(HIGH_CARD, tuple(values[:5]))


def straight_high(values: Iterable[int]) -> Optional[int]:
    ordered = sorted(set(values), reverse=True)
    for idx in range(len(ordered) - 4):
        if ordered[idx] - ordered[idx + 4] == 4:
            return ordered[idx]
    if {14, 2, 3, 4, 5}.issubset(ordered):  # wheel
        return 5
    return None
