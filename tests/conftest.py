"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from ballot_workflow.ballot.engine import BallotEngine
from ballot_workflow.workflow.events import EventLog
from ballot_workflow.workflow.state_machine import WorkflowStatus

ADMIN = "owner"
VOTER_A = "voter-a"
VOTER_B = "voter-b"
OUTSIDER = "outsider"


def advance_to(engine: BallotEngine, target: WorkflowStatus) -> BallotEngine:
    """Drive a fresh engine to ``target`` through the standard scenario.

    voter-a and voter-b are registered, each submits one proposal
    ("Proposal 1" -> id 1, "Proposal 2" -> id 2), and each votes for their own.
    """

    steps: list[tuple[WorkflowStatus, Callable[[], object]]] = [
        (WorkflowStatus.REGISTERING_VOTERS, lambda: None),
        (WorkflowStatus.PROPOSALS_REGISTRATION_STARTED, lambda: _open_proposals(engine)),
        (
            WorkflowStatus.PROPOSALS_REGISTRATION_ENDED,
            lambda: engine.close_proposals_registration(ADMIN),
        ),
        (WorkflowStatus.VOTING_SESSION_STARTED, lambda: _open_voting(engine)),
        (WorkflowStatus.VOTING_SESSION_ENDED, lambda: engine.close_voting_session(ADMIN)),
        (WorkflowStatus.VOTES_TALLIED, lambda: engine.tally_votes(ADMIN)),
    ]

    engine.register_voter(ADMIN, VOTER_A)
    engine.register_voter(ADMIN, VOTER_B)
    for status, step in steps:
        step()
        if status == target:
            break
    assert engine.status == target
    return engine


def _open_proposals(engine: BallotEngine) -> None:
    engine.open_proposals_registration(ADMIN)
    engine.submit_proposal(VOTER_A, "Proposal 1")
    engine.submit_proposal(VOTER_B, "Proposal 2")


def _open_voting(engine: BallotEngine) -> None:
    engine.open_voting_session(ADMIN)
    engine.cast_vote(VOTER_A, 1)
    engine.cast_vote(VOTER_B, 2)


@pytest.fixture
def events() -> EventLog:
    """Provide an event sink that records everything."""
    return EventLog()


@pytest.fixture
def engine(events: EventLog) -> BallotEngine:
    """Provide a fresh engine owned by ADMIN."""
    return BallotEngine(ADMIN, sink=events)


@pytest.fixture
def engine_at(events: EventLog) -> Callable[[WorkflowStatus], BallotEngine]:
    """Provide a factory for engines already driven to a given phase."""

    def _build(target: WorkflowStatus) -> BallotEngine:
        return advance_to(BallotEngine(ADMIN, sink=events), target)

    return _build


@pytest.fixture
def ballot_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point settings at a temporary state file with ADMIN as administrator."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BALLOT_ADMINISTRATOR", ADMIN)
    monkeypatch.setenv("BALLOT_STATE_PATH", str(tmp_path / "ballot_state" / "ballot.json"))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    return tmp_path / "ballot_state" / "ballot.json"


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Undo `configure_logging` calls made by CLI tests."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
