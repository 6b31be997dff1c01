from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from .state_machine import WorkflowStatus


@dataclass(frozen=True, slots=True)
class VoterRegistered:
    voter: str

    type = "VoterRegistered"

    def to_json(self) -> dict[str, object]:
        return {"type": self.type, "payload": {"voter": self.voter}}


@dataclass(frozen=True, slots=True)
class ProposalRegistered:
    proposal_id: int

    type = "ProposalRegistered"

    def to_json(self) -> dict[str, object]:
        return {"type": self.type, "payload": {"proposal_id": self.proposal_id}}


@dataclass(frozen=True, slots=True)
class Voted:
    voter: str
    proposal_id: int

    type = "Voted"

    def to_json(self) -> dict[str, object]:
        return {
            "type": self.type,
            "payload": {"voter": self.voter, "proposal_id": self.proposal_id},
        }


@dataclass(frozen=True, slots=True)
class WorkflowStatusChange:
    previous_status: WorkflowStatus
    new_status: WorkflowStatus

    type = "WorkflowStatusChange"

    def to_json(self) -> dict[str, object]:
        return {
            "type": self.type,
            "payload": {
                "previous_status": self.previous_status.value,
                "new_status": self.new_status.value,
            },
        }


BallotEvent = VoterRegistered | ProposalRegistered | Voted | WorkflowStatusChange

E = TypeVar("E", VoterRegistered, ProposalRegistered, Voted, WorkflowStatusChange)


class EventSink(Protocol):
    """Receives events synchronously, after the operation that produced them succeeded."""

    def __call__(self, event: BallotEvent) -> None: ...


@dataclass
class EventLog:
    """An in-memory sink that keeps every event in emission order."""

    events: list[BallotEvent] = field(default_factory=list)

    def __call__(self, event: BallotEvent) -> None:
        self.events.append(event)

    def of_type(self, kind: type[E]) -> list[E]:
        return [e for e in self.events if isinstance(e, kind)]

    def clear(self) -> None:
        self.events.clear()


def discard(_event: BallotEvent) -> None:
    """Default sink for engines that nobody observes."""
