from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .cards import Card, deck_excluding
from .equity import hand_strength
from .evaluator import STRAIGHT, evaluate_cards
from .models import ActionType, Phase

# Share of the time a raise is assumed to take the pot down immediately.
FOLD_EQUITY = 0.3
RAISE_POT_FRACTION = 0.75


@dataclass
class Recommendation:
    action: ActionType
    confidence: str
    equity: float
    pot_odds: float
    ev: Dict[str, Optional[float]]
    explanation: str = ""


@dataclass
class Outs:
    total: int
    breakdown: Dict[str, int] = field(default_factory=dict)
    cards: Dict[str, List[Card]] = field(default_factory=dict)
    overcards: List[Card] = field(default_factory=list)


def pot_odds(pot: int, call_amount: int) -> float:
    """Break-even equity for calling: cost over the resulting pot."""
    if call_amount <= 0:
        return 0.0
    return call_amount / (pot + call_amount)


def calculate_ev(
    action: ActionType,
    equity: float,
    pot: float,
    call_amount: float,
    raise_amount: float = 0,
) -> float:
    action = ActionType(action)
    if action == ActionType.FOLD:
        return 0.0
    if action == ActionType.CHECK:
        return equity * pot
    if action == ActionType.CALL:
        return equity * (pot + call_amount) - call_amount
    # Aggressive lines assume one caller whenever the opponent does not fold.
    invested = call_amount + raise_amount
    final_pot = pot + invested * 2
    return FOLD_EQUITY * pot + (1 - FOLD_EQUITY) * (equity * final_pot - invested)


def get_optimal_action(
    hole: Sequence[Card],
    community: Sequence[Card],
    pot: int,
    current_bet: int,
    seat_bet: int,
    stack: int,
    position: str,
    opponents: int,
    iterations: int = 500,
    rng: Optional[random.Random] = None,
) -> Recommendation:
    call_amount = max(current_bet - seat_bet, 0)
    equity = hand_strength(hole, community, opponents, iterations, rng=rng)
    odds = pot_odds(pot, call_amount)

    ev_check = calculate_ev(ActionType.CHECK, equity, pot, 0) if call_amount == 0 else None
    ev_call = calculate_ev(ActionType.CALL, equity, pot, call_amount) if call_amount > 0 else None
    ev_raise = None
    if stack > call_amount:
        raise_amount = min(pot * RAISE_POT_FRACTION, stack - call_amount)
        ev_raise = calculate_ev(ActionType.RAISE, equity, pot, call_amount, raise_amount)

    best, best_ev = ActionType.FOLD, 0.0
    if ev_check is not None:
        best, best_ev = ActionType.CHECK, ev_check
    if ev_call is not None and ev_call > best_ev:
        best, best_ev = ActionType.CALL, ev_call
    if ev_raise is not None and ev_raise > best_ev and ev_raise > 0:
        best = ActionType.BET if current_bet == 0 else ActionType.RAISE
        best_ev = ev_raise

    margin = abs(best_ev)
    if margin > pot * 0.3:
        confidence = "High"
    elif margin > pot * 0.1:
        confidence = "Medium"
    else:
        confidence = "Low"

    recommendation = Recommendation(
        action=best,
        confidence=confidence,
        equity=equity,
        pot_odds=odds,
        ev={"fold": 0.0, "check": ev_check, "call": ev_call, "raise": ev_raise},
    )
    recommendation.explanation = generate_explanation(recommendation, call_amount, position)
    return recommendation


def generate_explanation(recommendation: Recommendation, call_amount: int, position: str) -> str:
    equity_pct = f"{recommendation.equity * 100:.1f}"
    odds_pct = f"{recommendation.pot_odds * 100:.1f}"
    action = recommendation.action

    if action == ActionType.FOLD:
        text = f"Your hand has {equity_pct}% equity, which doesn't justify calling ${call_amount}."
        if recommendation.pot_odds > 0:
            text += f" You'd need {odds_pct}% equity to break even."
        return text
    if action == ActionType.CALL:
        return (
            f"Your {equity_pct}% equity justifies calling ${call_amount}. "
            f"Pot odds put the break-even point at {odds_pct}% equity."
        )
    if action in (ActionType.BET, ActionType.RAISE):
        text = f"Your strong hand ({equity_pct}% equity) should be played aggressively for value."
        if position == "late":
            text += " Late position also lets you take control of the pot."
        return text
    if action == ActionType.CHECK:
        return f"With {equity_pct}% equity, checking lets you see the next card or showdown for free."
    return f"Based on your {equity_pct}% equity, {action.value} is the favored play."


def calculate_outs(hole: Sequence[Card], community: Sequence[Card]) -> Outs:
    """Unseen cards that lift the hand to a better category than the board alone.

    An out must pair a hole card or complete a straight or better; cards that only
    improve the kicker above the board are reported as overcards.
    """
    hole = list(hole)
    board = list(community)
    if not 3 <= len(board) <= 4:
        return Outs(total=0)

    current = evaluate_cards(hole + board)
    hole_ranks = {card.rank for card in hole}
    top_board = max(card.rank for card in board)
    cards: Dict[str, List[Card]] = {}
    overcards: List[Card] = []

    for card in deck_excluding(hole + board):
        improved = evaluate_cards(hole + board + [card])
        if improved.category > current.category:
            board_only = evaluate_cards(board + [card])
            if improved > board_only and (card.rank in hole_ranks or improved.category >= STRAIGHT):
                cards.setdefault(improved.name, []).append(card)
        elif improved > current and card.rank > top_board:
            overcards.append(card)

    breakdown = {name: len(hits) for name, hits in cards.items()}
    return Outs(total=sum(breakdown.values()), breakdown=breakdown, cards=cards, overcards=overcards)


def is_board_paired(community: Sequence[Card]) -> bool:
    ranks = [card.rank for card in community]
    return len(set(ranks)) < len(ranks)


def is_flush_possible(community: Sequence[Card]) -> bool:
    suits = [card.suit for card in community]
    return any(suits.count(suit) >= 3 for suit in set(suits))


def classify_outs(outs: Outs, community: Sequence[Card]) -> Dict[str, List]:
    clean: List[Card] = []
    dirty: List[Card] = []
    notes: List[str] = []

    flush = outs.cards.get("Flush", [])
    if flush:
        clean.extend(flush)
        notes.append(f"{len(flush)} flush outs (clean)")

    straight = outs.cards.get("Straight", [])
    if straight:
        if is_board_paired(community) or is_flush_possible(community):
            dirty.extend(straight)
            notes.append(f"{len(straight)} straight outs (dirty - board paired or flush possible)")
        else:
            clean.extend(straight)
            notes.append(f"{len(straight)} straight outs (clean)")

    for name, label in (("One Pair", "pair"), ("Three of a Kind", "trips")):
        hits = outs.cards.get(name, [])
        if hits:
            clean.extend(hits)
            notes.append(f"{len(hits)} {label} outs")

    return {"clean": clean, "dirty": dirty, "explanation": notes}


def implied_odds(pot: int, call_amount: int, player_stack: int, opponent_stack: int, outs: int) -> float:
    if outs == 0 or call_amount == 0:
        return 0.0
    return call_amount / (pot + min(player_stack, opponent_stack))


def rule_of_two_and_four(outs: int, phase: Phase) -> int:
    """Rough percentage to hit: outs x4 with two cards to come, x2 with one."""
    if phase == Phase.FLOP:
        return outs * 4
    if phase == Phase.TURN:
        return outs * 2
    return 0
