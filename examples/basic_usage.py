#!/usr/bin/env python3
"""Programmatic ballot example.

Drives `BallotEngine` directly, with no settings file and no persistence:

* register the voters given with `--voters` and give each a proposal
* let every voter vote for their own proposal, then tally
* print every emitted event and the winner

`--log-level` sets the root level of the JSON logs (WARNING by default).
"""

from __future__ import annotations

import argparse
import json
from typing import Sequence

from ballot_workflow.ballot.engine import BallotEngine
from ballot_workflow.logging import configure_logging
from ballot_workflow.workflow.events import EventLog


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a two-voter ballot (programmatic example).")
    parser.add_argument("--admin", default="owner", help="Administrator identity")
    parser.add_argument("--voters", default="alice,bob", help="Comma-separated voter identities")
    parser.add_argument("--log-level", default="WARNING", help="Root logging level")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)

    voters = [v.strip() for v in args.voters.split(",") if v.strip()]
    events = EventLog()
    engine = BallotEngine(args.admin, sink=events)

    for voter in voters:
        engine.register_voter(args.admin, voter)
    engine.open_proposals_registration(args.admin)
    for n, voter in enumerate(voters, start=1):
        engine.submit_proposal(voter, f"Proposal {n}")
    engine.close_proposals_registration(args.admin)
    engine.open_voting_session(args.admin)
    for n, voter in enumerate(voters, start=1):
        engine.cast_vote(voter, n)
    engine.close_voting_session(args.admin)
    winner = engine.tally_votes(args.admin)

    for event in events.events:
        print(json.dumps(event.to_json()))
    print(f"Winning proposal: {winner}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
