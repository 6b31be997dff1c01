"""Ballot workflow domain concepts.

This package holds the parts of the ballot that are independent of voters and
proposals:
- the ordered workflow phases and their allowed transitions
- the events emitted when a ballot operation succeeds
"""

from ballot_workflow.workflow.events import (
    BallotEvent,
    EventLog,
    EventSink,
    ProposalRegistered,
    Voted,
    VoterRegistered,
    WorkflowStatusChange,
)
from ballot_workflow.workflow.state_machine import (
    ALLOWED_TRANSITIONS,
    IllegalTransitionError,
    WorkflowStatus,
    transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "BallotEvent",
    "EventLog",
    "EventSink",
    "IllegalTransitionError",
    "ProposalRegistered",
    "Voted",
    "VoterRegistered",
    "WorkflowStatus",
    "WorkflowStatusChange",
    "transition",
]
