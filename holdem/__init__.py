"""Hold'em rules, hand evaluation and equity primitives used by the opponent session runner."""

from .advisor import Recommendation, calculate_outs, get_optimal_action
from .cards import RANKS, SUITS, Card, build_deck, deal, parse_cards
from .equity import EquityResult, calculate_equity, hand_strength
from .evaluator import HandRank, evaluate_best, evaluate_hand
from .game import GameEngine, HandContext
from .models import ActionResult, ActionType, IllegalActionError, Phase, PlayerSeat, TableConfig, Traits
from .preflop import preflop_chart_action, preflop_strength
from .ranges import RangeGrid, estimate_opponent_range

__all__ = [
    "Card",
    "RANKS",
    "SUITS",
    "build_deck",
    "deal",
    "parse_cards",
    "HandRank",
    "evaluate_best",
    "evaluate_hand",
    "EquityResult",
    "calculate_equity",
    "hand_strength",
    "preflop_chart_action",
    "preflop_strength",
    "Recommendation",
    "calculate_outs",
    "get_optimal_action",
    "RangeGrid",
    "estimate_opponent_range",
    "GameEngine",
    "HandContext",
    "ActionResult",
    "ActionType",
    "IllegalActionError",
    "Phase",
    "PlayerSeat",
    "TableConfig",
    "Traits",
]
