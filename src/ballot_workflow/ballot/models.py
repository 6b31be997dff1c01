"""Immutable ballot records.

The engine keeps these as values and replaces them on change, so a snapshot
handed to a caller can never be used to mutate the ballot.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ballot_workflow.workflow.state_machine import WorkflowStatus

GENESIS_PROPOSAL_ID = 0
GENESIS_DESCRIPTION = "GENESIS"


class Voter(BaseModel):
    model_config = ConfigDict(frozen=True)

    identity: str
    is_registered: bool = True
    has_voted: bool = False
    voted_proposal_id: int = Field(default=0, ge=0, description="Meaningful only if has_voted")


class Proposal(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)
    description: str
    vote_count: int = Field(default=0, ge=0)

    @property
    def is_genesis(self) -> bool:
        return self.id == GENESIS_PROPOSAL_ID


def genesis_proposal() -> Proposal:
    return Proposal(id=GENESIS_PROPOSAL_ID, description=GENESIS_DESCRIPTION)


class BallotState(BaseModel):
    """Full state of one ballot, as persisted and as returned by snapshots."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(default="1.0.0", description="State schema version")
    administrator: str = Field(min_length=1)
    status: WorkflowStatus = WorkflowStatus.REGISTERING_VOTERS
    voters: dict[str, Voter] = Field(default_factory=dict)
    proposals: list[Proposal] = Field(default_factory=list)
    winning_proposal_id: int | None = None

    @model_validator(mode="after")
    def _check_invariants(self) -> BallotState:
        for key, voter in self.voters.items():
            if key != voter.identity:
                raise ValueError(f"Voter key {key!r} does not match identity {voter.identity!r}")
            if voter.has_voted and self.status < WorkflowStatus.VOTING_SESSION_STARTED:
                raise ValueError(f"Voter {key!r} voted before the voting session")

        if self.status == WorkflowStatus.REGISTERING_VOTERS:
            if self.proposals:
                raise ValueError("Proposals exist before proposals registration started")
        else:
            if not self.proposals or not self.proposals[0].is_genesis:
                raise ValueError("Proposal list must start with the GENESIS sentinel")
            for index, proposal in enumerate(self.proposals):
                if proposal.id != index:
                    raise ValueError(f"Proposal at index {index} has id {proposal.id}")

        # Every vote points at a real proposal and is counted exactly once.
        votes = [0] * len(self.proposals)
        for key, voter in self.voters.items():
            if not voter.has_voted:
                continue
            if not (GENESIS_PROPOSAL_ID < voter.voted_proposal_id < len(self.proposals)):
                raise ValueError(
                    f"Voter {key!r} voted for unknown proposal {voter.voted_proposal_id}"
                )
            votes[voter.voted_proposal_id] += 1
        for proposal, expected in zip(self.proposals, votes, strict=True):
            if proposal.vote_count != expected:
                raise ValueError(
                    f"Proposal {proposal.id} has vote_count {proposal.vote_count}, "
                    f"but {expected} voter(s) voted for it"
                )

        tallied = self.status == WorkflowStatus.VOTES_TALLIED
        if tallied != (self.winning_proposal_id is not None):
            raise ValueError("winning_proposal_id is set if and only if votes are tallied")
        if self.winning_proposal_id is not None and not (
            0 <= self.winning_proposal_id < len(self.proposals)
        ):
            raise ValueError(f"Unknown winning proposal id {self.winning_proposal_id}")
        return self
