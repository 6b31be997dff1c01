"""End-to-end ballot scenario and concurrency checks."""

from __future__ import annotations

import logging
import threading

import pytest
from conftest import ADMIN, VOTER_A, VOTER_B

from ballot_workflow.ballot.engine import BallotEngine
from ballot_workflow.ballot.errors import AlreadyVoted
from ballot_workflow.workflow.events import (
    BallotEvent,
    EventLog,
    ProposalRegistered,
    Voted,
    VoterRegistered,
    WorkflowStatusChange,
)
from ballot_workflow.workflow.state_machine import WorkflowStatus as S


def test_full_workflow(engine: BallotEngine, events: EventLog) -> None:
    engine.register_voter(ADMIN, VOTER_A)
    engine.register_voter(ADMIN, VOTER_B)
    engine.open_proposals_registration(ADMIN)
    assert engine.submit_proposal(VOTER_A, "Proposal 1").id == 1
    assert engine.submit_proposal(VOTER_B, "Proposal 2").id == 2
    engine.close_proposals_registration(ADMIN)
    engine.open_voting_session(ADMIN)
    engine.cast_vote(VOTER_A, 1)
    engine.cast_vote(VOTER_B, 2)
    engine.close_voting_session(ADMIN)

    assert engine.tally_votes(ADMIN) == 1
    assert engine.winning_proposal_id == 1

    voter_a = engine.get_voter(VOTER_A, VOTER_A)
    assert voter_a.has_voted is True
    assert voter_a.voted_proposal_id == 1
    assert engine.get_proposal(VOTER_A, 1).vote_count == 1
    assert engine.get_proposal(VOTER_B, 2).vote_count == 1

    assert events.events == [
        VoterRegistered(voter=VOTER_A),
        VoterRegistered(voter=VOTER_B),
        WorkflowStatusChange(S.REGISTERING_VOTERS, S.PROPOSALS_REGISTRATION_STARTED),
        ProposalRegistered(proposal_id=1),
        ProposalRegistered(proposal_id=2),
        WorkflowStatusChange(S.PROPOSALS_REGISTRATION_STARTED, S.PROPOSALS_REGISTRATION_ENDED),
        WorkflowStatusChange(S.PROPOSALS_REGISTRATION_ENDED, S.VOTING_SESSION_STARTED),
        Voted(voter=VOTER_A, proposal_id=1),
        Voted(voter=VOTER_B, proposal_id=2),
        WorkflowStatusChange(S.VOTING_SESSION_STARTED, S.VOTING_SESSION_ENDED),
        WorkflowStatusChange(S.VOTING_SESSION_ENDED, S.VOTES_TALLIED),
    ]


def test_concurrent_votes_are_each_applied_exactly_once(engine: BallotEngine) -> None:
    voters = [f"voter-{i}" for i in range(40)]
    for voter in voters:
        engine.register_voter(ADMIN, voter)
    engine.open_proposals_registration(ADMIN)
    engine.submit_proposal(voters[0], "Proposal 1")
    engine.submit_proposal(voters[1], "Proposal 2")
    engine.close_proposals_registration(ADMIN)
    engine.open_voting_session(ADMIN)

    rejected: list[str] = []
    barrier = threading.Barrier(len(voters))

    def vote(voter: str, choice: int) -> None:
        barrier.wait()
        engine.cast_vote(voter, choice)
        try:
            engine.cast_vote(voter, choice)
        except AlreadyVoted:
            rejected.append(voter)

    threads = [
        threading.Thread(target=vote, args=(voter, 1 + i % 2)) for i, voter in enumerate(voters)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(rejected) == sorted(voters)
    assert engine.get_proposal(voters[0], 1).vote_count == 20
    assert engine.get_proposal(voters[0], 2).vote_count == 20


def test_failing_sink_does_not_fail_a_committed_operation(
    caplog: pytest.LogCaptureFixture,
) -> None:
    seen: list[BallotEvent] = []

    def flaky(event: BallotEvent) -> None:
        seen.append(event)
        if isinstance(event, VoterRegistered):
            raise RuntimeError("observer down")

    engine = BallotEngine(ADMIN, sink=flaky)
    with caplog.at_level(logging.ERROR, logger="ballot_workflow.ballot.engine"):
        voter = engine.register_voter(ADMIN, VOTER_A)

    assert voter.identity == VOTER_A
    assert list(engine.snapshot().voters) == [VOTER_A]
    assert "Event sink failed" in caplog.text

    # The engine keeps emitting after a sink failure.
    engine.open_proposals_registration(ADMIN)
    assert engine.status == S.PROPOSALS_REGISTRATION_STARTED
    assert seen[-1] == WorkflowStatusChange(
        previous_status=S.REGISTERING_VOTERS, new_status=S.PROPOSALS_REGISTRATION_STARTED
    )
