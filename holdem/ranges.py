from __future__ import annotations

from typing import Dict, List

from .models import AGGRESSIVE_ACTIONS, ActionType, Phase

GRID_RANKS = "AKQJT98765432"

EARLY_RANGE = ["AA", "KK", "QQ", "JJ", "TT", "AKs", "AKo", "AQs"]
MIDDLE_RANGE = EARLY_RANGE + ["99", "88", "AQo", "AJs", "KQs", "KQo"]
LATE_RANGE = MIDDLE_RANGE + ["77", "66", "AJo", "ATs", "KJs", "QJs", "JTs", "T9s", "98s"]

NUT_RANGE = ["AA", "KK", "QQ", "JJ", "AKs", "AKo"]
SPECULATIVE = ["66", "55", "44", "33", "22", "T9s", "98s", "87s"]
CALLING_EXTRAS = ["55", "44", "33", "22", "A9s", "A8s", "KTs", "QTs"]


def estimate_opponent_range(position: str, action: ActionType, bet_size: int = 0, pot: int = 0) -> List[str]:
    """Likely holdings for an opponent given seat position and the action taken."""
    if position == "early":
        hands = list(EARLY_RANGE)
    elif position == "middle":
        hands = list(MIDDLE_RANGE)
    else:
        hands = list(LATE_RANGE)

    if action in AGGRESSIVE_ACTIONS:
        if bet_size > pot * 0.66:
            return [hand for hand in hands if hand in NUT_RANGE]
        return [hand for hand in hands if hand not in SPECULATIVE]
    if action == ActionType.CALL:
        return hands + [hand for hand in CALLING_EXTRAS if hand not in hands]
    return hands


class RangeGrid:
    """13x13 starting-hand weights narrowed as an opponent's actions come in.

    Rows and columns run A..2; above the diagonal is suited, below offsuit.
    """

    def __init__(self) -> None:
        self.weights: List[List[float]] = []
        self.reset()

    def reset(self) -> None:
        self.weights = [[1.0] * 13 for _ in range(13)]

    @staticmethod
    def label(row: int, col: int) -> str:
        if row == col:
            return GRID_RANKS[row] * 2
        if row < col:
            return GRID_RANKS[row] + GRID_RANKS[col] + "s"
        return GRID_RANKS[col] + GRID_RANKS[row] + "o"

    def cells(self) -> List[Dict[str, object]]:
        result = []
        for row in range(13):
            for col in range(13):
                kind = "pair" if row == col else ("suited" if row < col else "offsuit")
                result.append(
                    {
                        "row": row,
                        "col": col,
                        "label": self.label(row, col),
                        "weight": self.weights[row][col],
                        "type": kind,
                    }
                )
        return result

    def weight_of(self, notation: str) -> float:
        high, low = GRID_RANKS.index(notation[0]), GRID_RANKS.index(notation[1])
        if len(notation) == 2 or notation[2] == "s":
            return self.weights[high][low]
        return self.weights[low][high]

    def apply_action(self, action: ActionType, phase: Phase) -> None:
        for row in range(13):
            for col in range(13):
                # 26 for AA down to 2 for 22.
                rough_strength = 26 - (row + col)
                if action in AGGRESSIVE_ACTIONS:
                    if rough_strength < 14:
                        self.weights[row][col] *= 0.2
                elif action == ActionType.CALL:
                    if rough_strength < 8:
                        self.weights[row][col] *= 0.1
                    # Premium pairs usually raise preflop.
                    if phase == Phase.PRE_FLOP and row == col and row < 2:
                        self.weights[row][col] *= 0.5
