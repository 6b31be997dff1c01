"""Ballot Workflow.

A single-session voting workflow: voter registration, proposal submission,
voting and tallying, gated by an explicit phase sequence. Ships with:
- configuration loaded from `.env`
- structured logging
- JSON snapshot persistence, a CLI and a REST adapter
"""

__version__ = "0.1.0"

from ballot_workflow.ballot.engine import BallotEngine
from ballot_workflow.config import BallotSettings
from ballot_workflow.workflow.state_machine import WorkflowStatus

__all__ = ["__version__", "BallotEngine", "BallotSettings", "WorkflowStatus"]
