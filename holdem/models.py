from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .cards import Card


class Phase(str, Enum):
    WAITING = "WAITING"
    PRE_FLOP = "PRE_FLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"
    SESSION_OVER = "SESSION_OVER"


class ActionType(str, Enum):
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    BET = "BET"
    RAISE = "RAISE"
    ALL_IN = "ALL_IN"


AGGRESSIVE_ACTIONS = frozenset({ActionType.BET, ActionType.RAISE, ActionType.ALL_IN})


class IllegalActionError(ValueError):
    """Raised when an action breaks the betting rules; table state is untouched."""


@dataclass
class TableConfig:
    seats: int = 9
    starting_stack: int = 1_000
    sb: int = 10
    bb: int = 20
    # Monte Carlo budgets: street updates, per-decision policy, advisory.
    equity_iterations: int = 500
    policy_iterations: int = 150
    advisor_iterations: int = 500
    bet_pot_fraction: float = 0.6
    raise_pot_fraction: float = 0.7


@dataclass(frozen=True)
class Traits:
    tightness: float = 0.5
    aggression: float = 0.5
    bluff_frequency: float = 0.0

    def __post_init__(self) -> None:
        for name in ("tightness", "aggression", "bluff_frequency"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")


@dataclass
class PlayerSeat:
    seat: int
    name: str
    stack: int
    controlled: bool = False
    traits: Traits = field(default_factory=Traits)
    archetype: Optional[str] = None
    hole_cards: List[Card] = field(default_factory=list)
    current_bet: int = 0
    total_committed: int = 0
    folded: bool = False
    all_in: bool = False
    has_acted: bool = False
    eliminated: bool = False
    equity: float = 0.0
    win_probability: float = 0.0

    def reset_for_hand(self) -> None:
        self.hole_cards.clear()
        self.current_bet = 0
        self.total_committed = 0
        self.folded = self.eliminated
        self.all_in = False
        self.has_acted = False
        self.equity = 0.0
        self.win_probability = 0.0

    def reset_for_round(self) -> None:
        self.current_bet = 0
        self.has_acted = False

    @property
    def in_hand(self) -> bool:
        return not self.folded and not self.eliminated

    @property
    def can_act(self) -> bool:
        return self.in_hand and not self.all_in


@dataclass
class SidePot:
    amount: int
    eligible: List[int]


@dataclass
class PotResult:
    amount: int
    winners: List[int]
    hand_name: Optional[str]
    payouts: Dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    action: Optional[ActionType] = None
    amount: int = 0
    reason: Optional[str] = None


@dataclass
class SeatActionWindow:
    legal: List[ActionType]
    call_amount: Optional[int]
    min_bet: Optional[int]
    min_raise: Optional[int]
    stack: int


@dataclass(frozen=True)
class Elimination:
    seat: int
    name: str
    placement: int
