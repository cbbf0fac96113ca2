"""Scripted opponents and the session runner that plays them against the controlled seat."""

from .bots import ROSTER, Archetype, BotDecision, PolicyFailure, Profile, act, choose_action
from .session import Bankroll, SessionRunner, SessionSummary, advisor_strategy

__all__ = [
    "ROSTER",
    "Archetype",
    "BotDecision",
    "PolicyFailure",
    "Profile",
    "act",
    "choose_action",
    "Bankroll",
    "SessionRunner",
    "SessionSummary",
    "advisor_strategy",
]
