from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

RANKS = "23456789TJQKA"
SUITS = "shdc"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS, start=2)}
VALUE_RANK = {idx: rank for rank, idx in RANK_VALUE.items()}
RED_SUITS = frozenset("hd")
SUIT_SYMBOLS = {"s": "♠", "h": "♥", "d": "♦", "c": "♣"}


@dataclass(frozen=True)
class Card:
    rank: int
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in VALUE_RANK:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{VALUE_RANK[self.rank]}{self.suit}"

    @property
    def color(self) -> str:
        return "red" if self.suit in RED_SUITS else "black"

    @property
    def pretty(self) -> str:
        return f"{VALUE_RANK[self.rank]}{SUIT_SYMBOLS[self.suit]}"

    def __str__(self) -> str:
        return self.label


def full_deck() -> List[Card]:
    return [Card(rank, suit) for suit in SUITS for rank in range(2, 15)]


def build_deck(rng: Optional[random.Random] = None) -> List[Card]:
    """Return a freshly shuffled 52-card deck (Fisher-Yates via ``Random.shuffle``)."""
    rng = rng or random.Random()
    deck = full_deck()
    rng.shuffle(deck)
    return deck


def deal(deck: List[Card], count: int) -> List[Card]:
    if len(deck) < count:
        raise ValueError("Not enough cards left in deck")
    cards = deck[:count]
    del deck[:count]
    return cards


def burn(deck: List[Card]) -> Card:
    return deal(deck, 1)[0]


def deck_excluding(known: Iterable[Card]) -> List[Card]:
    """Unshuffled deck minus ``known``; always ``52 - len(known)`` cards."""
    known_set = set()
    for card in known:
        if card in known_set:
            raise ValueError(f"Duplicate card: {card.label}")
        known_set.add(card)
    return [card for card in full_deck() if card not in known_set]


def parse_label(label: str) -> Card:
    text = label.strip()
    if text.startswith("10"):
        text = "T" + text[2:]
    if len(text) != 2:
        raise ValueError(f"Invalid card label: {label}")
    rank, suit = text[0].upper(), text[1].lower()
    if rank not in RANK_VALUE:
        raise ValueError(f"Invalid rank: {text[0]}")
    return Card(RANK_VALUE[rank], suit)


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]
