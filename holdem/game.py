from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .advisor import Recommendation, get_optimal_action, pot_odds
from .cards import Card, build_deck, burn, cards_to_labels, deal
from .equity import calculate_equity
from .evaluator import HandRank, evaluate_hand
from .models import (
    ActionResult,
    ActionType,
    Elimination,
    IllegalActionError,
    Phase,
    PlayerSeat,
    PotResult,
    SeatActionWindow,
    SidePot,
    TableConfig,
    Traits,
)

LOGGER = logging.getLogger("holdem_engine")

# GameEngine keeps all table state in memory. Presentation and persistence only
# observe it: through the listener hook, table_state() and session_snapshot().

ActionListener = Callable[[int, ActionType, int], None]

STREET_AFTER = {
    Phase.PRE_FLOP: (Phase.FLOP, 3),
    Phase.FLOP: (Phase.TURN, 1),
    Phase.TURN: (Phase.RIVER, 1),
}


def _require_whole_chips(amount: object) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise IllegalActionError("Amount must be a whole number of chips")


@dataclass
class HandContext:
    # All mutable info about the current hand: deck, board, pot and payouts.
    hand_id: str
    button: int
    deck: List[Card]
    sb_seat: Optional[int] = None
    bb_seat: Optional[int] = None
    community: List[Card] = field(default_factory=list)
    phase: Phase = Phase.PRE_FLOP
    pot: int = 0
    current_bet: int = 0
    last_raise_size: int = 0
    last_aggressor: Optional[int] = None
    current_actor: Optional[int] = None
    betting_round: int = 0
    side_pots: List[SidePot] = field(default_factory=list)
    results: List[PotResult] = field(default_factory=list)
    winners: List[int] = field(default_factory=list)
    showdown_ranks: Dict[int, HandRank] = field(default_factory=dict)


class GameEngine:
    """No-Limit Texas Hold'em engine for one controlled seat and scripted opponents."""

    def __init__(
        self,
        config: TableConfig,
        rng: Optional[random.Random] = None,
        listener: Optional[ActionListener] = None,
    ) -> None:
        self.config = config
        self.rng = rng or random.Random()
        self.listener = listener
        self.seats: List[Optional[PlayerSeat]] = [None] * config.seats
        self.button: Optional[int] = None
        self.hand_counter = 0
        self.hand: Optional[HandContext] = None
        self.session_over = False
        self.controlled_placement: Optional[int] = None
        self.eliminations: List[Elimination] = []

    # Seat management -------------------------------------------------

    def seat_player(
        self,
        name: str,
        *,
        controlled: bool = False,
        traits: Optional[Traits] = None,
        archetype: Optional[str] = None,
    ) -> PlayerSeat:
        display = name.strip()
        if not display:
            raise ValueError("NAME_REQUIRED")
        if controlled and self.controlled_seat is not None:
            raise ValueError("Controlled seat already assigned")

        for idx in range(self.config.seats):
            if self.seats[idx] is None:
                seat = PlayerSeat(
                    seat=idx,
                    name=display,
                    stack=self.config.starting_stack,
                    controlled=controlled,
                    traits=traits or Traits(),
                    archetype=archetype,
                )
                self.seats[idx] = seat
                return seat

        raise RuntimeError("Table is full")

    @property
    def controlled_seat(self) -> Optional[PlayerSeat]:
        return next((seat for seat in self._occupied() if seat.controlled), None)

    def _occupied(self) -> List[PlayerSeat]:
        return [seat for seat in self.seats if seat is not None]

    def _contenders(self) -> List[PlayerSeat]:
        return [seat for seat in self._occupied() if not seat.eliminated and seat.stack > 0]

    def _live(self) -> List[PlayerSeat]:
        return [seat for seat in self._occupied() if seat.in_hand]

    def _next_seat(self, start: int, predicate: Callable[[PlayerSeat], bool]) -> Optional[int]:
        count = self.config.seats
        for offset in range(1, count + 1):
            idx = (start + offset) % count
            seat = self.seats[idx]
            if seat is not None and predicate(seat):
                return idx
        return None

    def _rotation_from(self, start: int, predicate: Callable[[PlayerSeat], bool]) -> List[int]:
        # Seats matching predicate, beginning with the first one after start.
        count = self.config.seats
        ordered = []
        for offset in range(1, count + 1):
            idx = (start + offset) % count
            seat = self.seats[idx]
            if seat is not None and predicate(seat):
                ordered.append(idx)
        return ordered

    # Hand lifecycle --------------------------------------------------

    @property
    def phase(self) -> Phase:
        if self.session_over:
            return Phase.SESSION_OVER
        if self.hand is None:
            return Phase.WAITING
        return self.hand.phase

    def can_start_hand(self) -> bool:
        if self.session_over:
            return False
        if self.hand is not None and not self.is_hand_complete():
            return False
        return len(self._contenders()) >= 2

    def start_hand(self) -> HandContext:
        if self.hand is not None and not self.is_hand_complete():
            raise RuntimeError("Hand already in progress")
        self._check_eliminations()
        if self.session_over:
            raise RuntimeError("Session is over")
        if len(self._contenders()) < 2:
            raise RuntimeError("Not enough active players to start a hand")

        for seat in self._occupied():
            seat.reset_for_hand()

        # Move button
        if self.button is None:
            self.button = self._contenders()[0].seat
        else:
            self.button = self._next_seat(self.button, lambda s: not s.eliminated)
        assert self.button is not None

        hand_id = f"H-{time.strftime('%Y%m%d')}-{self.hand_counter:05d}"
        self.hand_counter += 1

        ctx = HandContext(hand_id=hand_id, button=self.button, deck=build_deck(self.rng))
        self.hand = ctx

        self._deal_hole_cards(ctx)
        self._post_blinds(ctx)
        self._progress(ctx, ctx.bb_seat)
        return ctx

    def _deal_hole_cards(self, ctx: HandContext) -> None:
        ordered = self._rotation_from(ctx.button, lambda s: s.in_hand)
        for _ in range(2):
            for seat_idx in ordered:
                seat = self.seats[seat_idx]
                assert seat is not None
                seat.hole_cards.extend(deal(ctx.deck, 1))

    def _post_blinds(self, ctx: HandContext) -> None:
        ctx.sb_seat = self._next_seat(ctx.button, lambda s: not s.eliminated)
        assert ctx.sb_seat is not None
        ctx.bb_seat = self._next_seat(ctx.sb_seat, lambda s: not s.eliminated)
        assert ctx.bb_seat is not None
        sb_player = self.seats[ctx.sb_seat]
        bb_player = self.seats[ctx.bb_seat]
        assert sb_player and bb_player

        self._post_blind(ctx, sb_player, self.config.sb)
        self._post_blind(ctx, bb_player, self.config.bb)
        ctx.current_bet = max(sb_player.current_bet, bb_player.current_bet)
        ctx.last_raise_size = 0

    def _post_blind(self, ctx: HandContext, seat: PlayerSeat, blind: int) -> None:
        self._commit_chips(seat, min(blind, seat.stack), ctx)
        if seat.stack == 0:
            # Short blind: all-in immediately, nothing left to decide.
            seat.all_in = True
            seat.has_acted = True

    def _commit_chips(self, seat: PlayerSeat, amount: int, ctx: HandContext) -> int:
        amount = min(amount, seat.stack)
        seat.stack -= amount
        seat.current_bet += amount
        seat.total_committed += amount
        ctx.pot += amount
        return amount

    def next_actor(self) -> Optional[int]:
        if not self.hand or self.hand.phase == Phase.SHOWDOWN:
            return None
        return self.hand.current_actor

    def is_hand_complete(self) -> bool:
        return bool(self.hand and self.hand.phase == Phase.SHOWDOWN and self.hand.pot == 0)

    # Betting round ---------------------------------------------------

    def is_betting_complete(self) -> bool:
        if not self.hand or self.hand.phase == Phase.SHOWDOWN:
            return False
        live = self._live()
        for seat in live:
            if seat.stack == 0 and not seat.all_in:
                seat.all_in = True
                seat.has_acted = True

        if len(live) <= 1:
            return True
        pending = [seat for seat in live if not seat.all_in]
        if len(pending) <= 1 and all(seat.current_bet >= self.hand.current_bet for seat in pending):
            # Nobody left to bet against.
            return True
        if any(not seat.has_acted for seat in pending):
            return False
        return all(seat.current_bet == self.hand.current_bet for seat in pending)

    def _progress(self, ctx: HandContext, last_seat: Optional[int]) -> None:
        if len(self._live()) <= 1:
            self._award_uncontested(ctx)
            return
        if not self.is_betting_complete():
            start = last_seat if last_seat is not None else ctx.button
            ctx.current_actor = self._next_seat(start, lambda s: s.can_act)
            return
        # Keep dealing while fewer than two seats can still bet.
        while True:
            self.advance_phase()
            if ctx.phase == Phase.SHOWDOWN:
                return
            if sum(1 for seat in self._live() if seat.can_act) >= 2:
                ctx.current_actor = self._next_seat(ctx.button, lambda s: s.can_act)
                return

    def advance_phase(self) -> None:
        ctx = self.hand
        if ctx is None or ctx.phase == Phase.SHOWDOWN:
            raise RuntimeError("Hand not in progress")
        if not self.is_betting_complete():
            raise RuntimeError("Betting round still open")

        ctx.current_actor = None
        if ctx.phase == Phase.RIVER:
            self._resolve_showdown(ctx)
            return

        next_phase, count = STREET_AFTER[ctx.phase]
        burn(ctx.deck)
        ctx.community.extend(deal(ctx.deck, count))
        ctx.phase = next_phase
        ctx.betting_round += 1
        ctx.current_bet = 0
        ctx.last_raise_size = 0
        ctx.last_aggressor = None
        for seat in self._occupied():
            seat.reset_for_round()
        self._update_equity(ctx)

    def _update_equity(self, ctx: HandContext) -> None:
        iterations = self.config.equity_iterations
        if iterations <= 0 or not ctx.community:
            return
        live = [seat for seat in self._live() if len(seat.hole_cards) == 2]
        for seat in live:
            estimate = calculate_equity(
                seat.hole_cards, ctx.community, len(live) - 1, iterations, rng=self.rng
            )
            seat.equity = estimate.equity
            seat.win_probability = estimate.win_rate

    # Action handling -------------------------------------------------

    def legal_actions(self, seat_idx: int) -> SeatActionWindow:
        ctx = self._require_hand()
        seat = self._require_seat(seat_idx)

        legal: List[ActionType] = [ActionType.FOLD]
        to_call = ctx.current_bet - seat.current_bet
        call_amount = None
        min_bet = None
        min_raise = None
        if to_call <= 0:
            legal.append(ActionType.CHECK)
        elif seat.stack > 0:
            call_amount = min(to_call, seat.stack)
            legal.append(ActionType.CALL)
        if seat.stack > 0:
            if ctx.current_bet == 0:
                min_bet = min(self.config.bb, seat.stack)
                legal.append(ActionType.BET)
            elif seat.stack > to_call:
                min_raise = ctx.last_raise_size or self.config.bb
                legal.append(ActionType.RAISE)
            legal.append(ActionType.ALL_IN)

        return SeatActionWindow(
            legal=legal,
            call_amount=call_amount,
            min_bet=min_bet,
            min_raise=min_raise,
            stack=seat.stack,
        )

    def perform_action(self, seat_idx: int, action: ActionType, amount: Optional[int] = None) -> ActionResult:
        """Apply an action, reporting rule violations instead of raising."""
        try:
            return self.apply_action(seat_idx, action, amount)
        except IllegalActionError as exc:
            return ActionResult(ok=False, reason=str(exc))

    def apply_action(self, seat_idx: int, action: ActionType, amount: Optional[int] = None) -> ActionResult:
        ctx = self._require_hand()
        seat = self._require_seat(seat_idx)
        if seat.all_in:
            raise IllegalActionError("Seat is all-in")
        if ctx.current_actor != seat_idx:
            raise IllegalActionError("Not this seat's turn")
        try:
            action = ActionType(action)
        except ValueError:
            raise IllegalActionError(f"Unsupported action {action}") from None

        # Every branch validates before moving chips, so a rejection leaves state as is.
        if action == ActionType.FOLD:
            seat.folded = True
            seat.has_acted = True
            seat.current_bet = 0
            result = ActionResult(ok=True, action=ActionType.FOLD)
        elif action == ActionType.CHECK:
            if seat.current_bet != ctx.current_bet:
                raise IllegalActionError("Cannot check when facing a bet")
            seat.has_acted = True
            result = ActionResult(ok=True, action=ActionType.CHECK)
        elif action == ActionType.CALL:
            result = self._call(ctx, seat)
        elif action == ActionType.BET:
            result = self._bet(ctx, seat, amount)
        elif action == ActionType.RAISE:
            result = self._raise(ctx, seat, amount)
        else:
            result = self._all_in(ctx, seat)

        self._notify(seat_idx, result)
        self._progress(ctx, seat_idx)
        return result

    def _call(self, ctx: HandContext, seat: PlayerSeat) -> ActionResult:
        to_call = ctx.current_bet - seat.current_bet
        if to_call <= 0:
            raise IllegalActionError("Nothing to call")
        if to_call >= seat.stack:
            return self._all_in(ctx, seat)
        self._commit_chips(seat, to_call, ctx)
        seat.has_acted = True
        return ActionResult(ok=True, action=ActionType.CALL, amount=to_call)

    def _bet(self, ctx: HandContext, seat: PlayerSeat, amount: Optional[int]) -> ActionResult:
        if ctx.current_bet > 0:
            raise IllegalActionError("Cannot bet when facing a bet")
        if amount is None:
            amount = max(self.config.bb, int(ctx.pot * self.config.bet_pot_fraction))
        _require_whole_chips(amount)
        if amount <= 0:
            raise IllegalActionError("Bet must be positive")
        if amount >= seat.stack:
            return self._all_in(ctx, seat)
        if amount < self.config.bb:
            raise IllegalActionError("Bet below minimum")

        self._commit_chips(seat, amount, ctx)
        ctx.current_bet = seat.current_bet
        ctx.last_raise_size = amount
        ctx.last_aggressor = seat.seat
        seat.has_acted = True
        self._reopen_action(seat)
        return ActionResult(ok=True, action=ActionType.BET, amount=amount)

    def _raise(self, ctx: HandContext, seat: PlayerSeat, amount: Optional[int]) -> ActionResult:
        if ctx.current_bet == 0:
            raise IllegalActionError("Nothing to raise; bet instead")
        to_call = max(ctx.current_bet - seat.current_bet, 0)
        min_raise = ctx.last_raise_size or self.config.bb
        if amount is None:
            amount = max(min_raise, int(ctx.pot * self.config.raise_pot_fraction))
        _require_whole_chips(amount)
        if amount <= 0:
            raise IllegalActionError("Raise must be positive")
        if to_call + amount >= seat.stack:
            return self._all_in(ctx, seat)
        if amount < min_raise:
            raise IllegalActionError("Raise below minimum")

        committed = self._commit_chips(seat, to_call + amount, ctx)
        ctx.current_bet = seat.current_bet
        ctx.last_raise_size = amount
        ctx.last_aggressor = seat.seat
        seat.has_acted = True
        self._reopen_action(seat)
        return ActionResult(ok=True, action=ActionType.RAISE, amount=committed)

    def _all_in(self, ctx: HandContext, seat: PlayerSeat) -> ActionResult:
        if seat.stack <= 0:
            raise IllegalActionError("No chips left to commit")
        previous_bet = ctx.current_bet
        committed = self._commit_chips(seat, seat.stack, ctx)
        seat.all_in = True
        seat.has_acted = True
        if seat.current_bet > previous_bet:
            increment = seat.current_bet - previous_bet
            ctx.current_bet = seat.current_bet
            ctx.last_aggressor = seat.seat
            if increment >= (ctx.last_raise_size or self.config.bb):
                ctx.last_raise_size = increment
            self._reopen_action(seat)
        return ActionResult(ok=True, action=ActionType.ALL_IN, amount=committed)

    def _reopen_action(self, aggressor: PlayerSeat) -> None:
        for seat in self._live():
            if seat is not aggressor:
                seat.has_acted = False

    def _notify(self, seat_idx: int, result: ActionResult) -> None:
        if self.listener is None or result.action is None:
            return
        try:
            self.listener(seat_idx, result.action, result.amount)
        except Exception:  # noqa: BLE001
            LOGGER.exception("Action listener failed for seat %s", seat_idx)

    def _require_hand(self) -> HandContext:
        if not self.hand or self.hand.phase == Phase.SHOWDOWN:
            raise IllegalActionError("Hand not in progress")
        return self.hand

    def _require_seat(self, seat_idx: int) -> PlayerSeat:
        if not 0 <= seat_idx < self.config.seats:
            raise IllegalActionError("Seat not active")
        seat = self.seats[seat_idx]
        if seat is None or not seat.in_hand:
            raise IllegalActionError("Seat not active")
        return seat

    # Settlement ------------------------------------------------------

    def build_side_pots(self) -> List[SidePot]:
        """One pot per distinct commitment level; folded seats are never eligible."""
        committed = sorted(
            (seat for seat in self._occupied() if seat.total_committed > 0),
            key=lambda seat: seat.total_committed,
        )
        pots: List[SidePot] = []
        previous = 0
        carry = 0
        for idx, seat in enumerate(committed):
            level = seat.total_committed
            if level > previous:
                contributors = committed[idx:]
                amount = (level - previous) * len(contributors) + carry
                eligible = sorted(s.seat for s in contributors if not s.folded)
                if eligible:
                    pots.append(SidePot(amount=amount, eligible=eligible))
                    carry = 0
                elif pots:
                    # Only folded seats reached this level; the chips stay with the pot below.
                    pots[-1].amount += amount
                    carry = 0
                else:
                    carry = amount
            previous = level
        return pots

    def _award_uncontested(self, ctx: HandContext) -> None:
        winner = self._live()[0]
        amount = ctx.pot
        winner.stack += amount
        ctx.pot = 0
        ctx.results.append(PotResult(amount=amount, winners=[winner.seat], hand_name=None, payouts={winner.seat: amount}))
        ctx.winners = [winner.seat]
        ctx.phase = Phase.SHOWDOWN
        ctx.current_actor = None
        LOGGER.info("%s: %s wins %s uncontested", ctx.hand_id, winner.name, amount)
        self._check_eliminations()

    def _resolve_showdown(self, ctx: HandContext) -> None:
        ctx.phase = Phase.SHOWDOWN
        live = self._live()
        ctx.showdown_ranks = {seat.seat: evaluate_hand(seat.hole_cards, ctx.community) for seat in live}

        ctx.side_pots = self.build_side_pots()
        if not ctx.side_pots:
            ctx.side_pots = [SidePot(amount=ctx.pot, eligible=sorted(seat.seat for seat in live))]

        # Odd chips go to the earliest winners left of the button, not by seat index.
        order = self._rotation_from(ctx.button, lambda s: s.in_hand)
        for pot in ctx.side_pots:
            contenders = [seat_idx for seat_idx in order if seat_idx in pot.eligible]
            if not contenders:
                continue
            best = max(ctx.showdown_ranks[seat_idx] for seat_idx in contenders)
            winners = [seat_idx for seat_idx in contenders if ctx.showdown_ranks[seat_idx] == best]
            share, remainder = divmod(pot.amount, len(winners))
            payouts: Dict[int, int] = {}
            for idx, seat_idx in enumerate(winners):
                payout = share + (1 if idx < remainder else 0)
                seat = self.seats[seat_idx]
                assert seat is not None
                seat.stack += payout
                payouts[seat_idx] = payout
            ctx.pot -= pot.amount
            ctx.results.append(PotResult(amount=pot.amount, winners=winners, hand_name=best.name, payouts=payouts))
            LOGGER.info(
                "%s: pot of %s to %s with %s",
                ctx.hand_id,
                pot.amount,
                ", ".join(self.seats[i].name for i in winners if self.seats[i]),
                best.name,
            )

        paid = {seat_idx for result in ctx.results for seat_idx in result.winners}
        if paid:
            top = max(ctx.showdown_ranks[seat_idx] for seat_idx in paid)
            ctx.winners = [seat_idx for seat_idx in order if seat_idx in paid and ctx.showdown_ranks[seat_idx] == top]
        self._check_eliminations()

    def _check_eliminations(self) -> None:
        if self.hand is not None and not self.is_hand_complete():
            return
        for seat in self._occupied():
            if seat.eliminated or seat.stack > 0:
                continue
            remaining = sum(1 for s in self._occupied() if not s.eliminated)
            if seat.controlled:
                if not self.session_over:
                    self.session_over = True
                    self.controlled_placement = remaining
                    LOGGER.info("%s is out of chips; session over in place %s", seat.name, remaining)
                continue
            seat.eliminated = True
            seat.folded = True
            self.eliminations.append(Elimination(seat=seat.seat, name=seat.name, placement=remaining))
            LOGGER.info("Eliminated: %s in seat %s (place %s)", seat.name, seat.seat, remaining)

        controlled = self.controlled_seat
        if controlled and not self.session_over and controlled.stack > 0:
            if not any(not seat.controlled and not seat.eliminated for seat in self._occupied()):
                self.session_over = True
                self.controlled_placement = 1
                LOGGER.info("%s outlasted every opponent", controlled.name)

    # Queries ---------------------------------------------------------

    def position_of(self, seat_idx: int) -> str:
        """Early, middle or late, counted over non-eliminated seats from the button."""
        button = self.hand.button if self.hand else self.button
        if button is None:
            raise RuntimeError("No button assigned yet")
        rotation = [button] + [idx for idx in self._rotation_from(button, lambda s: not s.eliminated) if idx != button]
        if seat_idx not in rotation:
            raise ValueError(f"Seat {seat_idx} is not in the rotation")
        relative = rotation.index(seat_idx)
        if 1 <= relative <= 3:
            return "early"
        if relative == 0 or relative >= len(rotation) - 2:
            return "late"
        return "middle"

    def live_opponents(self, seat_idx: int) -> int:
        return sum(1 for seat in self._live() if seat.seat != seat_idx)

    def pot_odds(self, seat_idx: int) -> float:
        ctx = self._require_hand()
        seat = self._require_seat(seat_idx)
        return pot_odds(ctx.pot, max(ctx.current_bet - seat.current_bet, 0))

    def optimal_action(self, seat_idx: Optional[int] = None) -> Recommendation:
        if seat_idx is None:
            controlled = self.controlled_seat
            if controlled is None:
                raise RuntimeError("No controlled seat")
            seat_idx = controlled.seat
        ctx = self._require_hand()
        seat = self._require_seat(seat_idx)
        return get_optimal_action(
            seat.hole_cards,
            ctx.community,
            pot=ctx.pot,
            current_bet=ctx.current_bet,
            seat_bet=seat.current_bet,
            stack=seat.stack,
            position=self.position_of(seat_idx),
            opponents=self.live_opponents(seat_idx),
            iterations=self.config.advisor_iterations,
            rng=self.rng,
        )

    def table_state(self) -> Dict[str, object]:
        ctx = self.hand
        return {
            "hand_id": ctx.hand_id if ctx else None,
            "phase": self.phase.value,
            "pot": ctx.pot if ctx else 0,
            "current_bet": ctx.current_bet if ctx else 0,
            "community": cards_to_labels(ctx.community) if ctx else [],
            "button": ctx.button if ctx else self.button,
            "next_actor": ctx.current_actor if ctx else None,
            "seats": [
                {
                    "seat": seat.seat,
                    "name": seat.name,
                    "stack": seat.stack,
                    "current_bet": seat.current_bet,
                    "folded": seat.folded,
                    "all_in": seat.all_in,
                    "eliminated": seat.eliminated,
                    "controlled": seat.controlled,
                    "equity": seat.equity,
                }
                for seat in self._occupied()
            ],
        }

    def session_snapshot(self) -> Dict[str, object]:
        controlled = self.controlled_seat
        return {
            "hands_played": self.hand_counter,
            "controlled_stack": controlled.stack if controlled else 0,
            "session_over": self.session_over,
            "placement": self.controlled_placement,
            "eliminated": [entry.name for entry in self.eliminations],
        }
