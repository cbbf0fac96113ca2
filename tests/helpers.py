from __future__ import annotations

import random
from typing import Iterable, List, Optional, Sequence, Tuple

from holdem.cards import Card, full_deck, parse_cards
from holdem.game import ActionListener, GameEngine, HandContext
from holdem.models import ActionType, TableConfig


class FixedRandom(random.Random):
    """Random source whose uniform draws always return ``value``."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def create_engine(
    *,
    seats: int = 4,
    starting_stack: int = 1_000,
    sb: int = 10,
    bb: int = 20,
    controlled_seat: Optional[int] = None,
    listener: Optional[ActionListener] = None,
    seed: int = 42,
) -> GameEngine:
    """Instantiate a game engine with a populated table and no Monte Carlo work."""
    config = TableConfig(
        seats=seats,
        starting_stack=starting_stack,
        sb=sb,
        bb=bb,
        equity_iterations=0,
        policy_iterations=0,
        advisor_iterations=0,
    )
    engine = GameEngine(config, rng=random.Random(seed), listener=listener)
    for idx in range(seats):
        engine.seat_player(f"Player{idx}", controlled=idx == controlled_seat)
    return engine


def rigged_deck(labels: Sequence[str]) -> List[Card]:
    """Deck that deals ``labels`` first, followed by every other card."""
    top = parse_cards(labels)
    return top + [card for card in full_deck() if card not in top]


def rig_deck(monkeypatch, labels: Sequence[str]) -> None:
    deck = rigged_deck(labels)
    monkeypatch.setattr("holdem.game.build_deck", lambda rng=None: list(deck))


def set_stacks(engine: GameEngine, stacks: Sequence[int]) -> None:
    for seat, stack in zip(engine.seats, stacks):
        assert seat is not None
        seat.stack = stack


def total_chips(engine: GameEngine) -> int:
    return sum(seat.stack for seat in engine.seats if seat) + (engine.hand.pot if engine.hand else 0)


def perform_actions(engine: GameEngine, actions: Iterable[Tuple[int, ActionType, Optional[int]]]) -> None:
    """Apply a scripted sequence of actions (seat, action, amount)."""
    for seat_idx, action, amount in actions:
        engine.apply_action(seat_idx, action, amount)


def auto_complete_hand(engine: GameEngine) -> None:
    """Advance the current hand with straightforward actions until completion."""
    while not engine.is_hand_complete():
        actor = engine.next_actor()
        if actor is None:
            break
        window = engine.legal_actions(actor)
        if ActionType.CHECK in window.legal:
            engine.apply_action(actor, ActionType.CHECK)
        elif ActionType.CALL in window.legal:
            engine.apply_action(actor, ActionType.CALL)
        else:
            engine.apply_action(actor, ActionType.FOLD)


def start_hand(engine: GameEngine) -> HandContext:
    ctx = engine.start_hand()
    assert ctx is not None
    return ctx
