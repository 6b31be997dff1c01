from __future__ import annotations

from enum import Enum


class WorkflowStatus(int, Enum):
    """Ballot lifecycle phases, in the only order they may be visited.

    The integer values are observable (events, API, persisted state).
    """

    REGISTERING_VOTERS = 0
    PROPOSALS_REGISTRATION_STARTED = 1
    PROPOSALS_REGISTRATION_ENDED = 2
    VOTING_SESSION_STARTED = 3
    VOTING_SESSION_ENDED = 4
    VOTES_TALLIED = 5

    @property
    def title(self) -> str:
        return _TITLES[self]


_TITLES: dict[WorkflowStatus, str] = {
    WorkflowStatus.REGISTERING_VOTERS: "RegisteringVoters",
    WorkflowStatus.PROPOSALS_REGISTRATION_STARTED: "ProposalsRegistrationStarted",
    WorkflowStatus.PROPOSALS_REGISTRATION_ENDED: "ProposalsRegistrationEnded",
    WorkflowStatus.VOTING_SESSION_STARTED: "VotingSessionStarted",
    WorkflowStatus.VOTING_SESSION_ENDED: "VotingSessionEnded",
    WorkflowStatus.VOTES_TALLIED: "VotesTallied",
}


ALLOWED_TRANSITIONS: dict[WorkflowStatus, set[WorkflowStatus]] = {
    WorkflowStatus.REGISTERING_VOTERS: {WorkflowStatus.PROPOSALS_REGISTRATION_STARTED},
    WorkflowStatus.PROPOSALS_REGISTRATION_STARTED: {WorkflowStatus.PROPOSALS_REGISTRATION_ENDED},
    WorkflowStatus.PROPOSALS_REGISTRATION_ENDED: {WorkflowStatus.VOTING_SESSION_STARTED},
    WorkflowStatus.VOTING_SESSION_STARTED: {WorkflowStatus.VOTING_SESSION_ENDED},
    WorkflowStatus.VOTING_SESSION_ENDED: {WorkflowStatus.VOTES_TALLIED},
    # Terminal.
    WorkflowStatus.VOTES_TALLIED: set(),
}


class IllegalTransitionError(ValueError):
    pass


def predecessor(status: WorkflowStatus) -> WorkflowStatus:
    """Return the only phase from which ``status`` may be entered."""

    for source, targets in ALLOWED_TRANSITIONS.items():
        if status in targets:
            return source
    raise IllegalTransitionError(f"{status.title} has no predecessor")


def transition(*, current: WorkflowStatus, to: WorkflowStatus) -> WorkflowStatus:
    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal transition: {current.title} -> {to.title}")
    return to
