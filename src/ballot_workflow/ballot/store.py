"""JSON-file persistence for ballot snapshots.

The engine itself never touches disk; hosts (CLI, REST server) load an engine
from here, run one operation, and save the resulting snapshot.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ballot_workflow.workflow.events import EventSink

from .engine import BallotEngine
from .models import BallotState

logger = logging.getLogger(__name__)


class BallotStateStore:
    """Persist a ballot explicitly so it survives restarts and can be inspected."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> BallotState | None:
        if not self._path.exists():
            return None

        raw = json.loads(self._path.read_text(encoding="utf-8"))
        return BallotState.model_validate(raw)

    def save(self, state: BallotState) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(state.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        logger.debug(
            "Ballot state saved",
            extra={"path": str(self._path), "status": state.status.title},
        )

    def load_engine(self, *, administrator: str, sink: EventSink | None = None) -> BallotEngine:
        """Return the persisted ballot, or a fresh one owned by ``administrator``.

        The administrator recorded in an existing state file is authoritative; a
        different configured value is reported and ignored.
        """

        state = self.load()
        if state is None:
            logger.info(
                "No existing ballot found, starting fresh",
                extra={"path": str(self._path), "administrator": administrator},
            )
            return BallotEngine(administrator, sink=sink)

        if state.administrator != administrator:
            logger.warning(
                "Configured administrator differs from the persisted ballot; keeping persisted",
                extra={
                    "path": str(self._path),
                    "configured": administrator,
                    "persisted": state.administrator,
                },
            )
        return BallotEngine.from_state(state, sink=sink)
