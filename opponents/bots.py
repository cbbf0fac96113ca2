from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

from holdem.advisor import pot_odds
from holdem.equity import hand_strength
from holdem.game import GameEngine
from holdem.models import ActionResult, ActionType, Traits

LOGGER = logging.getLogger("holdem_bots")


class Archetype(str, Enum):
    ROCK = "rock"
    MANIAC = "maniac"
    STATION = "station"
    TAG = "tag"
    LAG = "lag"
    NIT = "nit"
    SHARK = "shark"
    GAMBLER = "gambler"


@dataclass(frozen=True)
class Profile:
    name: str
    archetype: Archetype
    traits: Traits


ROSTER: List[Profile] = [
    Profile("Rocky (Rock)", Archetype.ROCK, Traits(tightness=0.9, aggression=0.2, bluff_frequency=0.05)),
    Profile("Mad Max (Maniac)", Archetype.MANIAC, Traits(tightness=0.2, aggression=0.95, bluff_frequency=0.8)),
    Profile("Steve (Station)", Archetype.STATION, Traits(tightness=0.1, aggression=0.1, bluff_frequency=0.0)),
    Profile("Pro Phil (TAG)", Archetype.TAG, Traits(tightness=0.7, aggression=0.8, bluff_frequency=0.3)),
    Profile("Larry (LAG)", Archetype.LAG, Traits(tightness=0.4, aggression=0.8, bluff_frequency=0.6)),
    Profile("Nitty Nick", Archetype.NIT, Traits(tightness=0.85, aggression=0.1, bluff_frequency=0.0)),
    Profile("Shark Sam", Archetype.SHARK, Traits(tightness=0.6, aggression=0.7, bluff_frequency=0.4)),
    Profile("Gary (Gambler)", Archetype.GAMBLER, Traits(tightness=0.5, aggression=0.9, bluff_frequency=0.9)),
]

POSITION_ADJUSTMENT: Dict[str, float] = {"early": -0.05, "middle": 0.0, "late": 0.05}

# Bluffs only make sense against a few opponents.
MAX_BLUFF_OPPONENTS = 3
MANIAC_BLUFF_POT_MULTIPLIER = 1.5


@dataclass(frozen=True)
class BotDecision:
    action: ActionType
    amount: Optional[int] = None
    bluffing: bool = False


@dataclass(frozen=True)
class PolicyFailure:
    reason: str


FALLBACKS: Dict[ActionType, List[ActionType]] = {
    ActionType.BET: [ActionType.CHECK, ActionType.FOLD],
    ActionType.RAISE: [ActionType.CALL, ActionType.CHECK, ActionType.FOLD],
    ActionType.ALL_IN: [ActionType.CALL, ActionType.FOLD],
    ActionType.CALL: [ActionType.FOLD],
    ActionType.CHECK: [ActionType.FOLD],
}


def choose_action(engine: GameEngine, seat_idx: int, rng: random.Random) -> Union[BotDecision, PolicyFailure]:
    """Trait-driven decision for a scripted seat; never raises."""
    ctx = engine.hand
    seat = engine.seats[seat_idx]
    if ctx is None or seat is None:
        return PolicyFailure("No live hand for this seat")
    if len(seat.hole_cards) != 2:
        return PolicyFailure("Missing hole cards")

    opponents = engine.live_opponents(seat_idx)
    try:
        strength = hand_strength(
            seat.hole_cards, ctx.community, opponents, engine.config.policy_iterations, rng=rng
        )
        position = engine.position_of(seat_idx)
    except ValueError as exc:
        return PolicyFailure(str(exc))

    traits = seat.traits
    adjusted = strength + POSITION_ADJUSTMENT[position]
    to_call = max(ctx.current_bet - seat.current_bet, 0)
    odds = pot_odds(ctx.pot, to_call)
    threshold = traits.tightness * 0.6
    bluffing = opponents <= MAX_BLUFF_OPPONENTS and rng.random() < traits.bluff_frequency and adjusted < 0.5
    aggressive = ActionType.BET if ctx.current_bet == 0 else ActionType.RAISE

    LOGGER.debug(
        "%s: strength=%.2f adjusted=%.2f threshold=%.2f to_call=%s bluffing=%s",
        seat.name,
        strength,
        adjusted,
        threshold,
        to_call,
        bluffing,
    )

    if seat.archetype == Archetype.STATION.value and to_call > 0 and adjusted > 0.2:
        return BotDecision(ActionType.CALL)

    if bluffing and seat.archetype == Archetype.MANIAC.value:
        return BotDecision(aggressive, int(ctx.pot * MANIAC_BLUFF_POT_MULTIPLIER), bluffing=True)

    if to_call > 0:
        if adjusted > threshold + 0.2:
            if rng.random() < traits.aggression:
                return BotDecision(aggressive)
            return BotDecision(ActionType.CALL)
        if adjusted > threshold or odds < 0.2:
            return BotDecision(ActionType.CALL)
        if bluffing and rng.random() < traits.aggression:
            return BotDecision(aggressive, bluffing=True)
        return BotDecision(ActionType.FOLD)

    if adjusted > threshold:
        if rng.random() < traits.aggression:
            return BotDecision(aggressive)
        return BotDecision(ActionType.CHECK)
    if bluffing:
        return BotDecision(aggressive, bluffing=True)
    return BotDecision(ActionType.CHECK)


def fallback_action(engine: GameEngine, seat_idx: int) -> BotDecision:
    ctx = engine.hand
    seat = engine.seats[seat_idx]
    if ctx is not None and seat is not None and seat.current_bet >= ctx.current_bet:
        return BotDecision(ActionType.CHECK)
    return BotDecision(ActionType.FOLD)


def act(engine: GameEngine, seat_idx: int, rng: random.Random) -> ActionResult:
    """Decide and apply an action for a scripted seat, degrading to safer actions on rejection."""
    decision = choose_action(engine, seat_idx, rng)
    if isinstance(decision, PolicyFailure):
        LOGGER.warning("Policy failed for seat %s: %s", seat_idx, decision.reason)
        decision = fallback_action(engine, seat_idx)

    result = engine.perform_action(seat_idx, decision.action, decision.amount)
    if result.ok:
        return result

    for alternative in FALLBACKS.get(decision.action, []):
        LOGGER.warning(
            "Seat %s %s rejected (%s); trying %s",
            seat_idx,
            decision.action.value,
            result.reason,
            alternative.value,
        )
        result = engine.perform_action(seat_idx, alternative)
        if result.ok:
            return result
    return result
