"""The ballot engine.

A single-owner, single-session state machine:

    RegisteringVoters -> ProposalsRegistrationStarted -> ProposalsRegistrationEnded
    -> VotingSessionStarted -> VotingSessionEnded -> VotesTallied

Every public method runs inside one critical section and validates all of its
preconditions (authorization first, then phase, then arguments) before touching
state. Events are emitted to the injected sink after the mutation, still under
the lock, so observers see them in operation order. A sink that raises is
logged and does not undo or fail the operation.
"""

from __future__ import annotations

import logging
import threading
from typing import NoReturn

from ballot_workflow.workflow.events import (
    BallotEvent,
    EventSink,
    ProposalRegistered,
    Voted,
    VoterRegistered,
    WorkflowStatusChange,
    discard,
)
from ballot_workflow.workflow.state_machine import WorkflowStatus, predecessor, transition

from .errors import (
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
from .models import GENESIS_PROPOSAL_ID, BallotState, Proposal, Voter, genesis_proposal

logger = logging.getLogger(__name__)


class BallotEngine:
    """Owns the voter registry, the proposal list, the phase and the winner."""

    def __init__(self, administrator: str, *, sink: EventSink | None = None) -> None:
        if not administrator:
            raise ValueError("administrator identity is required")
        self._administrator = administrator
        self._sink: EventSink = sink if sink is not None else discard
        self._lock = threading.RLock()

        self._status = WorkflowStatus.REGISTERING_VOTERS
        self._voters: dict[str, Voter] = {}
        self._proposals: list[Proposal] = []
        self._winning_proposal_id: int | None = None

    @classmethod
    def from_state(cls, state: BallotState, *, sink: EventSink | None = None) -> BallotEngine:
        """Rebuild an engine from a snapshot (e.g. one loaded from disk)."""

        engine = cls(state.administrator, sink=sink)
        engine._status = state.status
        engine._voters = dict(state.voters)
        engine._proposals = list(state.proposals)
        engine._winning_proposal_id = state.winning_proposal_id
        return engine

    # Public state

    @property
    def administrator(self) -> str:
        return self._administrator

    @property
    def status(self) -> WorkflowStatus:
        with self._lock:
            return self._status

    @property
    def winning_proposal_id(self) -> int | None:
        """The tallied winner, or None until votes are tallied."""

        with self._lock:
            return self._winning_proposal_id

    def snapshot(self) -> BallotState:
        with self._lock:
            return BallotState(
                administrator=self._administrator,
                status=self._status,
                voters=dict(self._voters),
                proposals=list(self._proposals),
                winning_proposal_id=self._winning_proposal_id,
            )

    # Registration

    def register_voter(self, caller: str, identity: str) -> Voter:
        with self._lock:
            self._require_administrator(caller, "register_voter")
            self._require_status(WorkflowStatus.REGISTERING_VOTERS, "register_voter")
            if identity in self._voters:
                self._reject("register_voter", AlreadyRegistered(identity))

            voter = Voter(identity=identity)
            self._voters[identity] = voter
            logger.info("Voter registered", extra={"voter": identity})
            self._emit(VoterRegistered(voter=identity))
            return voter

    def open_proposals_registration(self, caller: str) -> WorkflowStatus:
        with self._lock:
            self._require_administrator(caller, "open_proposals_registration")
            self._require_status(
                predecessor(WorkflowStatus.PROPOSALS_REGISTRATION_STARTED),
                "open_proposals_registration",
            )
            self._proposals = [genesis_proposal()]
            return self._advance(WorkflowStatus.PROPOSALS_REGISTRATION_STARTED)

    def submit_proposal(self, caller: str, description: str) -> Proposal:
        with self._lock:
            self._require_voter(caller, "submit_proposal")
            self._require_status(WorkflowStatus.PROPOSALS_REGISTRATION_STARTED, "submit_proposal")
            if not description:
                self._reject("submit_proposal", EmptyProposal())

            proposal = Proposal(id=len(self._proposals), description=description)
            self._proposals.append(proposal)
            logger.info(
                "Proposal registered", extra={"voter": caller, "proposal_id": proposal.id}
            )
            self._emit(ProposalRegistered(proposal_id=proposal.id))
            return proposal

    def close_proposals_registration(self, caller: str) -> WorkflowStatus:
        return self._admin_advance(caller, WorkflowStatus.PROPOSALS_REGISTRATION_ENDED)

    # Voting

    def open_voting_session(self, caller: str) -> WorkflowStatus:
        return self._admin_advance(caller, WorkflowStatus.VOTING_SESSION_STARTED)

    def cast_vote(self, caller: str, proposal_id: int) -> Voter:
        with self._lock:
            voter = self._require_voter(caller, "cast_vote")
            self._require_status(WorkflowStatus.VOTING_SESSION_STARTED, "cast_vote")
            if voter.has_voted:
                self._reject("cast_vote", AlreadyVoted(caller))
            if not (GENESIS_PROPOSAL_ID < proposal_id < len(self._proposals)):
                self._reject("cast_vote", ProposalNotFound(proposal_id))

            proposal = self._proposals[proposal_id]
            updated_voter = voter.model_copy(
                update={"has_voted": True, "voted_proposal_id": proposal_id}
            )
            updated_proposal = proposal.model_copy(update={"vote_count": proposal.vote_count + 1})
            self._voters[caller] = updated_voter
            self._proposals[proposal_id] = updated_proposal
            logger.info("Vote cast", extra={"voter": caller, "proposal_id": proposal_id})
            self._emit(Voted(voter=caller, proposal_id=proposal_id))
            return updated_voter

    def close_voting_session(self, caller: str) -> WorkflowStatus:
        return self._admin_advance(caller, WorkflowStatus.VOTING_SESSION_ENDED)

    def tally_votes(self, caller: str) -> int:
        """Pick the winner and close the ballot.

        Ties go to the earliest-submitted proposal: the scan only replaces the
        running winner on a strictly greater count. With no proposal besides
        GENESIS the winner is GENESIS (0).
        """

        with self._lock:
            self._require_administrator(caller, "tally_votes")
            self._require_status(predecessor(WorkflowStatus.VOTES_TALLIED), "tally_votes")

            winning_id = GENESIS_PROPOSAL_ID
            best = -1
            for proposal in self._proposals[1:]:
                if proposal.vote_count > best:
                    winning_id, best = proposal.id, proposal.vote_count

            self._winning_proposal_id = winning_id
            logger.info(
                "Votes tallied", extra={"winning_proposal_id": winning_id, "vote_count": best}
            )
            self._advance(WorkflowStatus.VOTES_TALLIED)
            return winning_id

    # Reads (registered voters only)

    def get_voter(self, caller: str, identity: str) -> Voter:
        with self._lock:
            self._require_voter(caller, "get_voter")
            voter = self._voters.get(identity)
            if voter is None:
                self._reject("get_voter", VoterNotFound(identity))
            return voter

    def get_proposal(self, caller: str, proposal_id: int) -> Proposal:
        with self._lock:
            self._require_voter(caller, "get_proposal")
            if not (0 <= proposal_id < len(self._proposals)):
                self._reject("get_proposal", ProposalNotFound(proposal_id))
            return self._proposals[proposal_id]

    # Guards

    def _admin_advance(self, caller: str, to: WorkflowStatus) -> WorkflowStatus:
        operation = f"advance_to_{to.name.lower()}"
        with self._lock:
            self._require_administrator(caller, operation)
            self._require_status(predecessor(to), operation)
            return self._advance(to)

    def _advance(self, to: WorkflowStatus) -> WorkflowStatus:
        previous = self._status
        self._status = transition(current=previous, to=to)
        logger.info(
            "Workflow status changed",
            extra={"previous_status": previous.title, "new_status": to.title},
        )
        self._emit(WorkflowStatusChange(previous_status=previous, new_status=to))
        return to

    def _require_administrator(self, caller: str, operation: str) -> None:
        if caller != self._administrator:
            self._reject(operation, NotAdministrator(caller))

    def _require_voter(self, caller: str, operation: str) -> Voter:
        voter = self._voters.get(caller)
        if voter is None or not voter.is_registered:
            self._reject(operation, NotVoter(caller))
        return voter

    def _require_status(self, required: WorkflowStatus, operation: str) -> None:
        if self._status != required:
            self._reject(operation, WrongPhase(required=required, current=self._status))

    def _reject(self, operation: str, error: BallotError) -> NoReturn:
        logger.info(
            "Operation rejected",
            extra={"operation": operation, "error": error.code, "detail": str(error)},
        )
        raise error

    def _emit(self, event: BallotEvent) -> None:
        # The mutation is already committed; sink errors are logged, never raised.
        try:
            self._sink(event)
        except Exception:
            logger.exception("Event sink failed", extra={"event": event.to_json()})
