"""CLI entrypoint for a local ballot.

Each invocation loads the persisted ballot, applies exactly one operation on
behalf of the caller given with `--as`, and saves the result.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from ballot_workflow import __version__
from ballot_workflow.ballot.engine import BallotEngine
from ballot_workflow.ballot.errors import BallotError
from ballot_workflow.ballot.store import BallotStateStore
from ballot_workflow.config import BallotSettings
from ballot_workflow.logging import configure_logging
from ballot_workflow.workflow.events import EventLog

logger = logging.getLogger(__name__)

# Commands that only read state; nothing is saved after them.
_READ_ONLY_COMMANDS = {"status", "show-voter", "show-proposal"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ballot",
        description="Single-session ballot: register voters, collect proposals, vote, tally",
    )
    parser.add_argument("--version", action="version", version=f"ballot-workflow {__version__}")
    parser.add_argument(
        "--as",
        dest="caller",
        default=None,
        help="Identity performing the operation (defaults to BALLOT_ADMINISTRATOR)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show the current phase and, once tallied, the winner")

    register = subparsers.add_parser("register-voter", help="Register a voter (administrator)")
    register.add_argument("identity", help="Identity of the voter to register")

    subparsers.add_parser(
        "open-proposals", help="Close voter registration and open proposals (administrator)"
    )

    submit = subparsers.add_parser("submit-proposal", help="Submit a proposal (voter)")
    submit.add_argument("description", help="Proposal description (must not be empty)")

    subparsers.add_parser("close-proposals", help="Close proposals registration (administrator)")
    subparsers.add_parser("open-voting", help="Open the voting session (administrator)")

    vote = subparsers.add_parser("vote", help="Vote for a proposal (voter)")
    vote.add_argument("proposal_id", type=int, help="Id of the proposal to vote for")

    subparsers.add_parser("close-voting", help="Close the voting session (administrator)")
    subparsers.add_parser("tally", help="Tally votes and record the winner (administrator)")

    show_voter = subparsers.add_parser("show-voter", help="Show a voter record (voter)")
    show_voter.add_argument("identity", help="Identity of the voter to show")

    show_proposal = subparsers.add_parser("show-proposal", help="Show a proposal (voter)")
    show_proposal.add_argument("proposal_id", type=int, help="Id of the proposal to show")

    return parser


def _run_command(engine: BallotEngine, caller: str, args: argparse.Namespace) -> str:
    command = args.command

    if command == "status":
        line = f"Status: {engine.status.title} ({engine.status.value})"
        if engine.winning_proposal_id is not None:
            line += f"\nWinning proposal: {engine.winning_proposal_id}"
        return line

    if command == "register-voter":
        voter = engine.register_voter(caller, args.identity)
        return f"Registered voter {voter.identity}"

    if command == "open-proposals":
        return f"Status: {engine.open_proposals_registration(caller).title}"

    if command == "submit-proposal":
        proposal = engine.submit_proposal(caller, args.description)
        return f"Registered proposal #{proposal.id}: {proposal.description}"

    if command == "close-proposals":
        return f"Status: {engine.close_proposals_registration(caller).title}"

    if command == "open-voting":
        return f"Status: {engine.open_voting_session(caller).title}"

    if command == "vote":
        voter = engine.cast_vote(caller, args.proposal_id)
        return f"{voter.identity} voted for proposal #{voter.voted_proposal_id}"

    if command == "close-voting":
        return f"Status: {engine.close_voting_session(caller).title}"

    if command == "tally":
        winner = engine.tally_votes(caller)
        return f"Winning proposal: {winner}"

    if command == "show-voter":
        voter = engine.get_voter(caller, args.identity)
        return voter.model_dump_json(indent=2)

    if command == "show-proposal":
        proposal = engine.get_proposal(caller, args.proposal_id)
        return proposal.model_dump_json(indent=2)

    raise ValueError(f"Unknown command: {command}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = BallotSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    caller = settings.administrator if args.caller is None else args.caller.strip()
    if not caller:
        print("--as needs a non-blank identity", file=sys.stderr)
        return 2

    events = EventLog()
    store = BallotStateStore(settings.state_path)

    try:
        engine = store.load_engine(administrator=settings.administrator, sink=events)
        output = _run_command(engine, caller, args)

        if args.command not in _READ_ONLY_COMMANDS:
            store.save(engine.snapshot())
            logger.info(
                "Ballot persisted",
                extra={
                    "path": str(store.path),
                    "command": args.command,
                    "events": [event.to_json() for event in events.events],
                },
            )
        print(output)
        return 0

    except BallotError as e:
        logger.warning(str(e), extra={"command": args.command, "error": e.code})
        print(str(e), file=sys.stderr)
        return 3

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
