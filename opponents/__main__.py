from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from holdem.models import TableConfig

from .session import Bankroll, SessionRunner


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Play a Hold'em session against the scripted roster")
    parser.add_argument("--seats", type=int, default=9)
    parser.add_argument("--starting-stack", type=int, default=1_000)
    parser.add_argument("--sb", type=int, default=10)
    parser.add_argument("--bb", type=int, default=20)
    parser.add_argument("--hands", type=int, default=50, help="Stop after this many hands")
    parser.add_argument("--seed", type=int, default=None, help="Seed for shuffles, simulations and bluffs")
    parser.add_argument("--equity-iterations", type=int, default=500)
    parser.add_argument("--policy-iterations", type=int, default=150)
    parser.add_argument("--advisor-iterations", type=int, default=500)
    parser.add_argument("--level", type=int, default=1, help="Bankroll stake level (1-5)")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = TableConfig(
        seats=args.seats,
        starting_stack=args.starting_stack,
        sb=args.sb,
        bb=args.bb,
        equity_iterations=args.equity_iterations,
        policy_iterations=args.policy_iterations,
        advisor_iterations=args.advisor_iterations,
    )
    bankroll = Bankroll(level=args.level)
    runner = SessionRunner(config, seed=args.seed, bankroll=bankroll)
    try:
        summary = runner.run(args.hands)
    except RuntimeError as exc:
        print(f"Session not started: {exc}")
        return 1

    placement = summary.placement if summary.placement is not None else "-"
    print(f"Hands played: {summary.hands_played}")
    print(f"Final stack:  {summary.final_stack}")
    print(f"Placement:    {placement}")
    for entry in summary.eliminations:
        print(f"  out: {entry.name} (place {entry.placement})")
    print(f"Bankroll:     ${bankroll.bankroll:.2f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
