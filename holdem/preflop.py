from __future__ import annotations

from typing import Dict, List, Sequence

from .cards import VALUE_RANK, Card

# Standard starting-hand groupings, strongest first.
HAND_RANGES: Dict[str, List[str]] = {
    "premium": ["AA", "KK", "QQ", "AKs", "AKo"],
    "strong": ["JJ", "TT", "AQs", "AQo", "AJs", "KQs"],
    "playable": ["99", "88", "77", "AJo", "ATs", "KJs", "KQo", "QJs"],
    "speculative": ["66", "55", "44", "33", "22", "A9s", "A8s", "KTs", "QTs", "JTs", "T9s", "98s", "87s", "76s"],
    "marginal": ["ATo", "KJo", "QJo", "JTo", "A7s", "A6s", "A5s", "A4s", "A3s", "A2s"],
}

# Opening-raise frequency per chart position and hand category.
PREFLOP_CHART: Dict[str, Dict[str, float]] = {
    "UTG": {"premium": 1.0, "strong": 1.0, "playable": 0.5, "speculative": 0.0, "marginal": 0.0},
    "HJ": {"premium": 1.0, "strong": 1.0, "playable": 1.0, "speculative": 0.2, "marginal": 0.0},
    "CO": {"premium": 1.0, "strong": 1.0, "playable": 1.0, "speculative": 0.8, "marginal": 0.2},
    "BTN/SB/BB": {"premium": 1.0, "strong": 1.0, "playable": 1.0, "speculative": 1.0, "marginal": 0.8},
}


def _check_hole(hole: Sequence[Card]) -> None:
    if len(hole) != 2:
        raise ValueError(f"Starting hand must be 2 cards, got {len(hole)}")


def preflop_strength(hole: Sequence[Card]) -> float:
    """Closed-form strength in [0, 1] for a two-card starting hand."""
    _check_hole(hole)
    first, second = hole
    high = max(first.rank, second.rank)
    low = min(first.rank, second.rank)
    suited = first.suit == second.suit
    gap = high - low

    if high == low:
        if high >= 12:
            return 0.95
        if high >= 10:
            return 0.85
        if high >= 7:
            return 0.70
        return 0.60

    if high == 14 and low >= 12:
        return 0.88 if suited else 0.82
    if high == 14 and low >= 10:
        return 0.75 if suited else 0.68
    if high == 13 and low >= 11:
        return 0.78 if suited else 0.72

    if suited and gap <= 1 and high >= 8:
        return 0.65
    if suited and gap <= 2 and high >= 9:
        return 0.60
    if suited and high >= 10:
        return 0.55
    if gap <= 1 and high >= 9:
        return 0.50

    if high >= 12:
        return 0.45
    if high >= 10:
        return 0.40
    return 0.25


def hand_notation(hole: Sequence[Card]) -> str:
    """Shorthand such as ``"QQ"``, ``"AKs"`` or ``"JTo"``."""
    _check_hole(hole)
    high, low = sorted(hole, key=lambda card: card.rank, reverse=True)
    if high.rank == low.rank:
        return VALUE_RANK[high.rank] * 2
    return VALUE_RANK[high.rank] + VALUE_RANK[low.rank] + ("s" if high.suit == low.suit else "o")


def hand_category(hole: Sequence[Card]) -> str:
    notation = hand_notation(hole)
    for category, hands in HAND_RANGES.items():
        if notation in hands:
            return category
    return "junk"


def preflop_chart_action(position: str, hole: Sequence[Card]) -> str:
    """Opening advice from the chart: ``"Raise"``, ``"Fold"`` or ``"Mix (N% Raise)"``."""
    frequencies = PREFLOP_CHART.get(position)
    if frequencies is None:
        return "Fold"
    frequency = frequencies.get(hand_category(hole), 0.0)
    if frequency >= 1.0:
        return "Raise"
    if frequency <= 0.0:
        return "Fold"
    return f"Mix ({round(frequency * 100)}% Raise)"
