import random

import pytest

from holdem.cards import parse_cards
from holdem.equity import calculate_equity, hand_strength


def test_made_royal_flush_never_loses():
    result = calculate_equity(
        parse_cards(["As", "Ks"]), parse_cards(["Qs", "Js", "Ts", "2c", "3d"]), opponents=3, iterations=200,
        rng=random.Random(1),
    )
    assert result.win_rate == 1.0
    assert result.tie_rate == 0.0
    assert result.equity == 1.0
    assert result.iterations == 200


def test_equity_combines_wins_and_half_ties():
    result = calculate_equity(
        parse_cards(["2c", "3d"]), parse_cards(["Ah", "Kh", "Qh", "Jh", "Th"]), iterations=50, rng=random.Random(2)
    )
    # The board is a royal flush every opponent shares.
    assert result.tie_rate == 1.0
    assert result.equity == pytest.approx(0.5)


def test_stronger_starting_hand_has_more_equity():
    aces = calculate_equity(parse_cards(["Ah", "Ad"]), [], iterations=2_000, rng=random.Random(3))
    trash = calculate_equity(parse_cards(["7c", "2d"]), [], iterations=2_000, rng=random.Random(3))
    assert aces.equity > 0.75
    assert trash.equity < 0.45
    assert aces.equity > trash.equity


def test_equity_drops_as_opponents_are_added():
    hole = parse_cards(["Ah", "Ad"])
    heads_up = calculate_equity(hole, [], opponents=1, iterations=2_000, rng=random.Random(4))
    multiway = calculate_equity(hole, [], opponents=5, iterations=2_000, rng=random.Random(4))
    assert multiway.equity < heads_up.equity


def test_seeded_runs_are_reproducible_with_workers():
    hole = parse_cards(["Jh", "Th"])
    board = parse_cards(["9h", "8c", "2h"])
    first = calculate_equity(hole, board, opponents=2, iterations=400, rng=random.Random(11), workers=4)
    second = calculate_equity(hole, board, opponents=2, iterations=400, rng=random.Random(11), workers=4)
    assert first == second
    assert first.iterations == 400


def test_zero_opponents_always_wins():
    result = calculate_equity(parse_cards(["7c", "2d"]), [], opponents=0, iterations=10, rng=random.Random(0))
    assert result.equity == 1.0


def test_equity_input_validation():
    with pytest.raises(ValueError, match="Duplicate card"):
        calculate_equity(parse_cards(["As", "Ks"]), parse_cards(["As", "2c", "3d"]), iterations=10)
    with pytest.raises(ValueError, match="Hand must be 2 cards"):
        calculate_equity(parse_cards(["As", "Ks", "Qs"]), [], iterations=10)
    with pytest.raises(ValueError, match="Board cannot exceed 5 cards"):
        calculate_equity(parse_cards(["As", "Ks"]), parse_cards(["2c", "3c", "4c", "5c", "6c", "7c"]))
    with pytest.raises(ValueError, match="Iterations must be positive"):
        calculate_equity(parse_cards(["As", "Ks"]), [], iterations=0)
    with pytest.raises(ValueError, match="Not enough cards"):
        calculate_equity(parse_cards(["As", "Ks"]), [], opponents=30, iterations=10)


def test_hand_strength_sources():
    hole = parse_cards(["Ah", "Ad"])
    assert hand_strength(hole, [], opponents=3, iterations=100) == 0.95
    board = parse_cards(["Ac", "7d", "2s"])
    assert hand_strength(hole, board, opponents=1, iterations=0) == pytest.approx(0.4)
    simulated = hand_strength(hole, board, opponents=1, iterations=200, rng=random.Random(8))
    assert 0.8 < simulated <= 1.0
