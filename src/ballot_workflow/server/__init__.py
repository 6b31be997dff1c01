"""FastAPI server adapter for ballot-workflow.

This module exposes a REST API over the ballot engine.

Design intent:
- Keep ballot rules in `ballot_workflow.ballot.*`
- Keep server-specific concerns (routing, caller header, persistence after each call) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from ballot_workflow.server.app import create_app
