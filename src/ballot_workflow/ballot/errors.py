"""Rejections raised by the ballot engine.

Every error rejects a single operation as a whole: the engine validates all
preconditions before mutating anything, so state is unchanged when one of these
is raised. Hosts are expected to surface the message verbatim.
"""

from __future__ import annotations

from ballot_workflow.workflow.state_machine import WorkflowStatus


class BallotError(Exception):
    """Base class for every rejected ballot operation."""

    code = "ballot_error"


class NotAdministrator(BallotError):
    code = "not_administrator"

    def __init__(self, caller: str) -> None:
        super().__init__("Caller is not the administrator")
        self.caller = caller


class NotVoter(BallotError):
    code = "not_voter"

    def __init__(self, caller: str) -> None:
        super().__init__("Caller is not a registered voter")
        self.caller = caller


class WrongPhase(BallotError):
    code = "wrong_phase"

    def __init__(self, *, required: WorkflowStatus, current: WorkflowStatus) -> None:
        super().__init__(
            f"Operation requires phase {required.title} (current phase: {current.title})"
        )
        self.required = required
        self.current = current


class AlreadyRegistered(BallotError):
    code = "already_registered"

    def __init__(self, identity: str) -> None:
        super().__init__(f"Voter already registered: {identity!r}")
        self.identity = identity


class EmptyProposal(BallotError):
    code = "empty_proposal"

    def __init__(self) -> None:
        super().__init__("Proposal description must not be empty")


class ProposalNotFound(BallotError):
    code = "proposal_not_found"

    def __init__(self, proposal_id: int) -> None:
        super().__init__(f"Proposal not found: {proposal_id}")
        self.proposal_id = proposal_id


class AlreadyVoted(BallotError):
    code = "already_voted"

    def __init__(self, identity: str) -> None:
        super().__init__(f"Voter has already voted: {identity!r}")
        self.identity = identity


class VoterNotFound(BallotError):
    code = "voter_not_found"

    def __init__(self, identity: str) -> None:
        super().__init__(f"Voter not found: {identity!r}")
        self.identity = identity
