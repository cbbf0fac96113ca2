from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .cards import Card, deck_excluding
from .evaluator import evaluate_cards, evaluate_hand
from .preflop import preflop_strength


@dataclass(frozen=True)
class EquityResult:
    win_rate: float
    tie_rate: float
    equity: float
    iterations: int


def calculate_equity(
    hole: Sequence[Card],
    community: Sequence[Card],
    opponents: int = 1,
    iterations: int = 1_000,
    rng: Optional[random.Random] = None,
    workers: int = 1,
) -> EquityResult:
    """Monte Carlo win/tie estimate against ``opponents`` random hands.

    Each iteration completes the board and deals two cards per opponent from the
    deck minus known cards. With ``workers > 1`` the iterations are split over a
    thread pool; every worker gets its own generator seeded from ``rng`` so the
    estimate is reproducible for a fixed source.
    """
    hero = list(hole)
    board = list(community)
    if len(hero) != 2:
        raise ValueError("Hand must be 2 cards")
    if len(board) > 5:
        raise ValueError("Board cannot exceed 5 cards")
    if opponents < 0:
        raise ValueError("Opponent count cannot be negative")
    if iterations <= 0:
        raise ValueError("Iterations must be positive")

    deck = deck_excluding(hero + board)
    if (5 - len(board)) + 2 * opponents > len(deck):
        raise ValueError("Not enough cards left for that many opponents")

    rng = rng or random.Random()
    if workers <= 1:
        wins, ties = _simulate(hero, board, deck, opponents, iterations, rng)
    else:
        chunks = _split(iterations, workers)
        seeds = [rng.getrandbits(64) for _ in chunks]
        wins = ties = 0
        with ThreadPoolExecutor(max_workers=len(chunks)) as pool:
            futures = [
                pool.submit(_simulate, hero, board, deck, opponents, count, random.Random(seed))
                for count, seed in zip(chunks, seeds)
            ]
            for future in futures:
                chunk_wins, chunk_ties = future.result()
                wins += chunk_wins
                ties += chunk_ties

    return EquityResult(
        win_rate=wins / iterations,
        tie_rate=ties / iterations,
        equity=(wins + 0.5 * ties) / iterations,
        iterations=iterations,
    )


def _split(iterations: int, workers: int) -> List[int]:
    workers = min(workers, iterations)
    share, remainder = divmod(iterations, workers)
    return [share + (1 if idx < remainder else 0) for idx in range(workers)]


def _simulate(
    hero: List[Card],
    board: List[Card],
    deck: List[Card],
    opponents: int,
    iterations: int,
    rng: random.Random,
) -> Tuple[int, int]:
    missing = 5 - len(board)
    draw = missing + 2 * opponents
    wins = ties = 0
    for _ in range(iterations):
        drawn = rng.sample(deck, draw)
        runout = board + drawn[:missing]
        hero_rank = evaluate_cards(hero + runout)
        beaten = tied = False
        for idx in range(opponents):
            start = missing + 2 * idx
            villain_rank = evaluate_cards(drawn[start : start + 2] + runout)
            if villain_rank > hero_rank:
                beaten = True
                break
            if villain_rank == hero_rank:
                tied = True
        if beaten:
            continue
        if tied:
            ties += 1
        else:
            wins += 1
    return wins, ties


def hand_strength(
    hole: Sequence[Card],
    community: Sequence[Card],
    opponents: int,
    iterations: int,
    rng: Optional[random.Random] = None,
) -> float:
    """Strength in [0, 1]: starting-hand table preflop, simulated equity after."""
    if not community:
        return preflop_strength(hole)
    if iterations <= 0:
        return evaluate_hand(hole, community).category / 10
    return calculate_equity(hole, community, opponents, iterations, rng=rng).equity
