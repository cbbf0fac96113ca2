from __future__ import annotations

import logging
import random
from dataclasses import asdict, dataclass, field, fields
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from holdem.game import GameEngine, HandContext
from holdem.models import ActionType, Elimination, TableConfig
from holdem.ranges import RangeGrid

from .bots import ROSTER, Profile, act, fallback_action

LOGGER = logging.getLogger("holdem_session")

CONTROLLED_NAME = "You"

LEVEL_BUY_INS = {1: 10, 2: 50, 3: 200, 4: 1000, 5: 5000}
CHIPS_PER_BUY_IN = 1_000
BANKRUPTCY_FLOOR = 10
BANKRUPTCY_RESET = 50

ControlledStrategy = Callable[[GameEngine, int], Tuple[ActionType, Optional[int]]]


@dataclass
class Bankroll:
    """Session currency outside the table; chips convert at the level's buy-in per 1000."""

    bankroll: float = 50.0
    hands_played: int = 0
    level: int = 1
    total_winnings: float = 0.0

    def level_buy_in(self) -> int:
        return LEVEL_BUY_INS.get(self.level, LEVEL_BUY_INS[1])

    def level_ratio(self) -> float:
        return self.level_buy_in() / CHIPS_PER_BUY_IN

    def buy_in(self) -> bool:
        if self.bankroll < BANKRUPTCY_FLOOR:
            LOGGER.info("Bankroll at %.2f; resetting to %s", self.bankroll, BANKRUPTCY_RESET)
            self.bankroll = float(BANKRUPTCY_RESET)
        cost = self.level_buy_in()
        if self.bankroll < cost:
            return False
        self.bankroll -= cost
        return True

    def cash_out(self, chips: int) -> float:
        value = chips * self.level_ratio()
        self.bankroll += value
        self.total_winnings += value - self.level_buy_in()
        return value

    def record_hand(self) -> None:
        self.hands_played += 1

    def snapshot(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_snapshot(cls, data: Dict[str, float]) -> "Bankroll":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass
class SessionSummary:
    hands_played: int
    final_stack: int
    session_over: bool
    placement: Optional[int]
    eliminations: List[Elimination] = field(default_factory=list)
    bankroll: Optional[Dict[str, float]] = None


def advisor_strategy(engine: GameEngine, seat_idx: int) -> Tuple[ActionType, Optional[int]]:
    """Play whatever the advisor recommends, with the engine's default sizing."""
    return engine.optimal_action(seat_idx).action, None


class SessionRunner:
    """Drives hands for the controlled seat against the scripted roster."""

    def __init__(
        self,
        config: TableConfig,
        seed: Optional[int] = None,
        strategy: Optional[ControlledStrategy] = None,
        bankroll: Optional[Bankroll] = None,
        roster: Optional[Sequence[Profile]] = None,
        max_actions_per_hand: int = 500,
    ) -> None:
        self.rng = random.Random(seed)
        self.engine = GameEngine(config, rng=self.rng, listener=self._observe)
        self.strategy = strategy or advisor_strategy
        self.bankroll = bankroll
        self.max_actions_per_hand = max_actions_per_hand
        self.ranges: Dict[int, RangeGrid] = {}

        self.engine.seat_player(CONTROLLED_NAME, controlled=True)
        profiles = list(roster if roster is not None else ROSTER)
        for profile in profiles[: config.seats - 1]:
            seat = self.engine.seat_player(profile.name, traits=profile.traits, archetype=profile.archetype.value)
            self.ranges[seat.seat] = RangeGrid()

    def _observe(self, seat_idx: int, action: ActionType, amount: int) -> None:
        grid = self.ranges.get(seat_idx)
        if grid is not None:
            grid.apply_action(action, self.engine.phase)

    def play_hand(self) -> HandContext:
        for grid in self.ranges.values():
            grid.reset()
        ctx = self.engine.start_hand()

        actions = 0
        while not self.engine.is_hand_complete():
            actor = self.engine.next_actor()
            if actor is None:
                raise RuntimeError(f"{ctx.hand_id} stalled with no seat to act")
            actions += 1
            if actions > self.max_actions_per_hand:
                raise RuntimeError(f"{ctx.hand_id} exceeded {self.max_actions_per_hand} actions")
            seat = self.engine.seats[actor]
            if seat is not None and seat.controlled:
                self._act_controlled(actor)
            else:
                act(self.engine, actor, self.rng)

        if self.bankroll is not None:
            self.bankroll.record_hand()
        LOGGER.info(
            "%s finished: winners=%s board=%s",
            ctx.hand_id,
            [self.engine.seats[idx].name for idx in ctx.winners if self.engine.seats[idx]],
            " ".join(card.label for card in ctx.community) or "-",
        )
        return ctx

    def _act_controlled(self, seat_idx: int) -> None:
        action, amount = self.strategy(self.engine, seat_idx)
        result = self.engine.perform_action(seat_idx, action, amount)
        if result.ok:
            return
        fallback = fallback_action(self.engine, seat_idx)
        LOGGER.warning("Controlled %s rejected (%s); playing %s", action.value, result.reason, fallback.action.value)
        result = self.engine.perform_action(seat_idx, fallback.action)
        if not result.ok:
            self.engine.perform_action(seat_idx, ActionType.FOLD)

    def run(self, max_hands: int) -> SessionSummary:
        if self.bankroll is not None and not self.bankroll.buy_in():
            raise RuntimeError(f"Bankroll cannot cover the level {self.bankroll.level} buy-in")

        played = 0
        while played < max_hands and self.engine.can_start_hand():
            self.play_hand()
            played += 1

        controlled = self.engine.controlled_seat
        final_stack = controlled.stack if controlled else 0
        if self.bankroll is not None:
            self.bankroll.cash_out(final_stack)

        LOGGER.info(
            "Session stopped after %s hands: stack=%s placement=%s",
            played,
            final_stack,
            self.engine.controlled_placement,
        )
        return SessionSummary(
            hands_played=played,
            final_stack=final_stack,
            session_over=self.engine.session_over,
            placement=self.engine.controlled_placement,
            eliminations=list(self.engine.eliminations),
            bankroll=self.bankroll.snapshot() if self.bankroll is not None else None,
        )
