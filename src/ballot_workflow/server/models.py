"""Pydantic models for the REST server."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RegisterVoterRequest(BaseModel):
    identity: str = Field(min_length=1)


class SubmitProposalRequest(BaseModel):
    # Emptiness is the engine's call (EmptyProposal), not a schema error.
    description: str


class CastVoteRequest(BaseModel):
    proposal_id: int


class BallotStatus(BaseModel):
    administrator: str
    status: int
    status_name: str
    winning_proposal_id: int | None = None


class ApiEvent(BaseModel):
    type: str
    payload: dict[str, object]


class ApiError(BaseModel):
    detail: str
    error: str
