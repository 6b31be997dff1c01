"""Ballot engine, records and persistence."""

from ballot_workflow.ballot.engine import BallotEngine
from ballot_workflow.ballot.errors import (
    AlreadyRegistered,
    AlreadyVoted,
    BallotError,
    EmptyProposal,
    NotAdministrator,
    NotVoter,
    ProposalNotFound,
    VoterNotFound,
    WrongPhase,
)
from ballot_workflow.ballot.models import BallotState, Proposal, Voter
from ballot_workflow.ballot.store import BallotStateStore

__all__ = [
    "AlreadyRegistered",
    "AlreadyVoted",
    "BallotEngine",
    "BallotError",
    "BallotState",
    "BallotStateStore",
    "EmptyProposal",
    "NotAdministrator",
    "NotVoter",
    "Proposal",
    "ProposalNotFound",
    "Voter",
    "VoterNotFound",
    "WrongPhase",
]
