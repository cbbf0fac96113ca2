import random

import pytest

from holdem.cards import parse_cards
from holdem.game import GameEngine
from holdem.models import ActionType, IllegalActionError, Phase, TableConfig, Traits

from .helpers import auto_complete_hand, create_engine, rig_deck, start_hand, total_chips


def test_start_hand_assigns_button_blinds_and_first_actor():
    engine = create_engine()
    ctx = start_hand(engine)
    assert ctx.button == 0
    assert (ctx.sb_seat, ctx.bb_seat) == (1, 2)
    assert engine.seats[1].current_bet == 10
    assert engine.seats[2].current_bet == 20
    assert ctx.pot == 30
    assert ctx.current_bet == 20
    assert ctx.phase == Phase.PRE_FLOP
    assert engine.next_actor() == 3
    assert all(len(seat.hole_cards) == 2 for seat in engine.seats)
    assert len(ctx.deck) == 52 - 8


def test_hand_id_and_button_rotate_between_hands():
    engine = create_engine()
    first = start_hand(engine)
    auto_complete_hand(engine)
    second = start_hand(engine)
    assert first.hand_id.endswith("-00000")
    assert second.hand_id.endswith("-00001")
    assert second.button == 1
    assert (second.sb_seat, second.bb_seat) == (2, 3)


def test_heads_up_deal_order_and_board(monkeypatch):
    engine = create_engine(seats=2)
    rig_deck(monkeypatch, ["Kc", "Ks", "Qd", "Qh", "9c", "2h", "3d", "4c", "9d", "5s", "9h", "6h"])
    start_hand(engine)
    assert engine.seats[1].hole_cards == parse_cards(["Kc", "Qd"])
    assert engine.seats[0].hole_cards == parse_cards(["Ks", "Qh"])
    # Small blind is first to act before the flop.
    assert engine.next_actor() == 1

    auto_complete_hand(engine)
    assert engine.hand.community == parse_cards(["2h", "3d", "4c", "5s", "6h"])


def test_split_pot_results_in_equal_awards(monkeypatch):
    engine = create_engine(seats=2)
    rig_deck(monkeypatch, ["Kc", "Ks", "Qd", "Qh", "9c", "2h", "3d", "4c", "9d", "5s", "9h", "6h"])
    ctx = start_hand(engine)
    auto_complete_hand(engine)

    assert engine.is_hand_complete()
    assert engine.seats[0].stack == 1_000
    assert engine.seats[1].stack == 1_000
    assert len(ctx.results) == 1
    assert ctx.results[0].payouts == {0: 20, 1: 20}
    assert ctx.results[0].hand_name == "Straight"
    assert sorted(ctx.winners) == [0, 1]


def test_odd_chip_goes_to_first_winner_left_of_button(monkeypatch):
    engine = create_engine(seats=3, sb=5, bb=10)
    rig_deck(
        monkeypatch,
        ["2c", "2d", "2h", "3c", "3d", "3h", "4c", "As", "Ks", "Qs", "4d", "Js", "4h", "Ts"],
    )
    start_hand(engine)
    engine.apply_action(0, ActionType.CALL)
    engine.apply_action(1, ActionType.FOLD)
    engine.apply_action(2, ActionType.CHECK)
    assert engine.hand.phase == Phase.FLOP
    auto_complete_hand(engine)

    assert engine.seats[0].stack == 1_002
    assert engine.seats[1].stack == 995
    assert engine.seats[2].stack == 1_003
    assert total_chips(engine) == 3_000


def test_fold_to_single_player_awards_uncontested_pot():
    engine = create_engine(seats=3)
    ctx = start_hand(engine)
    engine.apply_action(0, ActionType.FOLD)
    engine.apply_action(1, ActionType.FOLD)
    assert engine.is_hand_complete()
    assert ctx.winners == [2]
    assert ctx.results[0].hand_name is None
    assert engine.seats[2].stack == 1_010
    assert engine.seats[1].stack == 990
    assert ctx.community == []


def test_round_completion_requires_every_live_seat_to_act():
    engine = create_engine()
    ctx = start_hand(engine)
    engine.apply_action(3, ActionType.CALL)
    engine.apply_action(0, ActionType.CALL)
    engine.apply_action(1, ActionType.CALL)
    assert not engine.is_betting_complete()
    assert engine.next_actor() == 2
    engine.apply_action(2, ActionType.CHECK)
    assert ctx.phase == Phase.FLOP
    assert ctx.betting_round == 1
    assert len(ctx.community) == 3
    assert ctx.current_bet == 0
    assert all(seat.current_bet == 0 for seat in engine.seats)
    # First live seat left of the button opens post-flop action.
    assert engine.next_actor() == 1


def test_raise_reopens_action_for_earlier_callers():
    engine = create_engine()
    ctx = start_hand(engine)
    engine.apply_action(3, ActionType.CALL)
    engine.apply_action(0, ActionType.RAISE, 40)
    assert ctx.current_bet == 60
    assert ctx.last_raise_size == 40
    assert ctx.last_aggressor == 0
    assert not engine.seats[3].has_acted
    engine.apply_action(1, ActionType.FOLD)
    engine.apply_action(2, ActionType.CALL)
    assert engine.next_actor() == 3
    engine.apply_action(3, ActionType.CALL)
    assert ctx.phase == Phase.FLOP
    assert ctx.pot == 190


def test_bet_uses_default_sizing_when_amount_missing():
    engine = create_engine()
    ctx = start_hand(engine)
    for seat_idx in (3, 0, 1):
        engine.apply_action(seat_idx, ActionType.CALL)
    engine.apply_action(2, ActionType.CHECK)
    actor = engine.next_actor()
    result = engine.apply_action(actor, ActionType.BET)
    assert result.ok
    # 0.6 of an 80 pot.
    assert result.amount == 48
    assert ctx.current_bet == 48
    assert ctx.last_raise_size == 48


def test_all_in_short_of_full_raise_keeps_last_raise_size():
    engine = create_engine(seats=3)
    engine.seats[1].stack = 50
    ctx = start_hand(engine)
    engine.apply_action(0, ActionType.RAISE, 20)
    assert ctx.current_bet == 40
    result = engine.apply_action(1, ActionType.ALL_IN)
    assert result.amount == 40
    assert ctx.current_bet == 50
    assert ctx.last_raise_size == 20
    assert engine.seats[1].all_in


def test_all_in_run_out_deals_remaining_streets():
    engine = create_engine(seats=2)
    ctx = start_hand(engine)
    engine.apply_action(1, ActionType.ALL_IN)
    engine.apply_action(0, ActionType.CALL)
    assert engine.is_hand_complete()
    assert len(ctx.community) == 5
    assert total_chips(engine) == 2_000


def test_listener_sees_every_committed_action():
    seen = []
    engine = create_engine(seats=3, listener=lambda seat, action, amount: seen.append((seat, action, amount)))
    start_hand(engine)
    engine.apply_action(0, ActionType.RAISE, 20)
    engine.perform_action(1, ActionType.CHECK)
    engine.apply_action(1, ActionType.FOLD)
    assert seen == [(0, ActionType.RAISE, 40), (1, ActionType.FOLD, 0)]


def test_failing_listener_does_not_break_the_engine():
    def broken(seat, action, amount):
        raise RuntimeError("display crashed")

    engine = create_engine(seats=3, listener=broken)
    ctx = start_hand(engine)
    result = engine.apply_action(0, ActionType.CALL)
    assert result.ok
    assert engine.next_actor() == 1
    assert ctx.pot == 50


def test_legal_actions_window():
    engine = create_engine()
    start_hand(engine)
    window = engine.legal_actions(3)
    assert window.legal == [ActionType.FOLD, ActionType.CALL, ActionType.RAISE, ActionType.ALL_IN]
    assert window.call_amount == 20
    assert window.min_raise == 20
    assert window.min_bet is None
    assert window.stack == 1_000


def test_position_of_uses_non_eliminated_rotation():
    engine = create_engine(seats=6)
    start_hand(engine)
    assert engine.position_of(0) == "late"
    assert [engine.position_of(idx) for idx in (1, 2, 3)] == ["early"] * 3
    assert engine.position_of(4) == "late"
    assert engine.position_of(5) == "late"

    engine = create_engine(seats=8)
    start_hand(engine)
    assert engine.position_of(4) == "middle"
    assert engine.position_of(5) == "middle"
    assert engine.position_of(6) == "late"


def test_queries_do_not_change_state():
    engine = create_engine()
    start_hand(engine)
    before = engine.table_state()
    engine.legal_actions(3)
    engine.pot_odds(3)
    engine.position_of(3)
    engine.live_opponents(3)
    assert engine.table_state() == before
    assert engine.pot_odds(3) == pytest.approx(20 / 50)
    assert engine.live_opponents(3) == 3


def test_table_state_and_session_snapshot():
    engine = create_engine(controlled_seat=0)
    start_hand(engine)
    state = engine.table_state()
    assert state["phase"] == "PRE_FLOP"
    assert state["pot"] == 30
    assert state["next_actor"] == 3
    assert [seat["name"] for seat in state["seats"]] == ["Player0", "Player1", "Player2", "Player3"]
    snapshot = engine.session_snapshot()
    assert snapshot == {
        "hands_played": 1,
        "controlled_stack": 1_000,
        "session_over": False,
        "placement": None,
        "eliminated": [],
    }


def test_optimal_action_for_controlled_seat():
    engine = create_engine(controlled_seat=3)
    start_hand(engine)
    recommendation = engine.optimal_action()
    assert recommendation.action in (ActionType.FOLD, ActionType.CALL, ActionType.RAISE)
    assert recommendation.pot_odds == pytest.approx(20 / 50)
    assert recommendation.explanation


def test_equity_is_refreshed_on_each_street():
    config = TableConfig(seats=3, equity_iterations=50, policy_iterations=0, advisor_iterations=0)
    engine = GameEngine(config, rng=random.Random(1))
    for name in ("A", "B", "C"):
        engine.seat_player(name)
    engine.start_hand()
    assert all(seat.equity == 0.0 for seat in engine.seats)
    engine.apply_action(0, ActionType.CALL)
    engine.apply_action(1, ActionType.CALL)
    engine.apply_action(2, ActionType.CHECK)
    assert engine.hand.phase == Phase.FLOP
    assert all(0.0 <= seat.equity <= 1.0 for seat in engine.seats)
    assert sum(seat.equity for seat in engine.seats) > 0


def test_seat_player_validation():
    engine = GameEngine(TableConfig(seats=2))
    with pytest.raises(ValueError, match="NAME_REQUIRED"):
        engine.seat_player("  ")
    engine.seat_player("You", controlled=True, traits=Traits())
    with pytest.raises(ValueError, match="Controlled seat already assigned"):
        engine.seat_player("Also me", controlled=True)
    engine.seat_player("Bot")
    with pytest.raises(RuntimeError, match="Table is full"):
        engine.seat_player("Overflow")


def test_start_hand_requires_two_players():
    engine = GameEngine(TableConfig(seats=3))
    engine.seat_player("Solo")
    assert not engine.can_start_hand()
    with pytest.raises(RuntimeError, match="Not enough active players"):
        engine.start_hand()


def test_start_hand_rejects_hand_in_progress():
    engine = create_engine()
    start_hand(engine)
    assert not engine.can_start_hand()
    with pytest.raises(RuntimeError, match="Hand already in progress"):
        engine.start_hand()


def test_advance_phase_rejects_open_betting():
    engine = create_engine()
    start_hand(engine)
    with pytest.raises(RuntimeError, match="Betting round still open"):
        engine.advance_phase()


def test_actions_after_hand_complete_are_rejected():
    engine = create_engine(seats=2)
    start_hand(engine)
    auto_complete_hand(engine)
    with pytest.raises(IllegalActionError, match="Hand not in progress"):
        engine.apply_action(0, ActionType.CHECK)
