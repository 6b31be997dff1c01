"""FastAPI app factory.

Endpoints are thin wrappers over `BallotEngine`; every rejection is surfaced
verbatim with a status code derived from its type.
"""

import logging
import threading
from collections.abc import Callable
from typing import Annotated, TypeVar

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ballot_workflow import __version__
from ballot_workflow.ballot.engine import BallotEngine
from ballot_workflow.ballot.errors import (
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
from ballot_workflow.ballot.models import Proposal, Voter
from ballot_workflow.ballot.store import BallotStateStore
from ballot_workflow.server.config import ServerSettings
from ballot_workflow.server.models import (
    ApiEvent,
    BallotStatus,
    CastVoteRequest,
    RegisterVoterRequest,
    SubmitProposalRequest,
)
from ballot_workflow.workflow.events import EventLog

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STATUS_CODES: dict[type[BallotError], int] = {
    NotAdministrator: 403,
    NotVoter: 403,
    WrongPhase: 409,
    AlreadyRegistered: 409,
    AlreadyVoted: 409,
    ProposalNotFound: 404,
    VoterNotFound: 404,
    EmptyProposal: 422,
}


def _status_code_for(error: BallotError) -> int:
    for kind, code in _STATUS_CODES.items():
        if isinstance(error, kind):
            return code
    return 400


def _ballot_status(engine: BallotEngine) -> BallotStatus:
    status = engine.status
    return BallotStatus(
        administrator=engine.administrator,
        status=status.value,
        status_name=status.title,
        winning_proposal_id=engine.winning_proposal_id,
    )


def create_app(
    engine: BallotEngine | None = None,
    *,
    events: EventLog | None = None,
    settings: ServerSettings | None = None,
) -> FastAPI:
    """Build the REST app.

    Without an explicit ``engine`` the ballot is loaded from (and saved to) the
    configured state file after every accepted mutation. A caller-supplied
    ``engine`` must come with the ``events`` log it was built with, since that
    log backs ``/api/events``.
    """

    if engine is not None and events is None:
        raise ValueError("create_app(engine) also needs the EventLog the engine emits to")

    settings = settings or ServerSettings()
    events = events if events is not None else EventLog()

    store: BallotStateStore | None = None
    if engine is None:
        store = BallotStateStore(settings.state_path)
        engine = store.load_engine(administrator=settings.administrator, sink=events)
    ballot: BallotEngine = engine

    app = FastAPI(
        title="Ballot Workflow",
        version=__version__,
        description="REST API over a single-session ballot workflow.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.settings = settings
    app.state.engine = ballot
    app.state.events = events

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Operation + save form one unit so the file never lags behind the engine.
    commit_lock = threading.Lock()

    def commit(operation: Callable[[], T]) -> T:
        with commit_lock:
            result = operation()
            if store is not None:
                store.save(ballot.snapshot())
            return result

    def caller_identity(request: Request) -> str:
        caller = request.headers.get(settings.caller_header, "").strip()
        if not caller:
            raise HTTPException(
                status_code=401, detail=f"{settings.caller_header} header is required"
            )
        return caller

    Caller = Annotated[str, Depends(caller_identity)]

    @app.exception_handler(BallotError)
    async def ballot_error_handler(_request: Request, exc: BallotError) -> JSONResponse:
        return JSONResponse(
            status_code=_status_code_for(exc),
            content={"detail": str(exc), "error": exc.code},
        )

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.get("/api/ballot", response_model=BallotStatus)
    def get_ballot() -> BallotStatus:
        return _ballot_status(ballot)

    @app.get("/api/events", response_model=list[ApiEvent])
    def list_events() -> list[ApiEvent]:
        return [ApiEvent.model_validate(event.to_json()) for event in events.events]

    @app.post("/api/voters", response_model=Voter, status_code=201)
    def register_voter(req: RegisterVoterRequest, caller: Caller) -> Voter:
        return commit(lambda: ballot.register_voter(caller, req.identity))

    @app.get("/api/voters/{identity}", response_model=Voter)
    def get_voter(identity: str, caller: Caller) -> Voter:
        return ballot.get_voter(caller, identity)

    @app.post("/api/proposals", response_model=Proposal, status_code=201)
    def submit_proposal(req: SubmitProposalRequest, caller: Caller) -> Proposal:
        return commit(lambda: ballot.submit_proposal(caller, req.description))

    @app.get("/api/proposals/{proposal_id}", response_model=Proposal)
    def get_proposal(proposal_id: int, caller: Caller) -> Proposal:
        return ballot.get_proposal(caller, proposal_id)

    @app.post("/api/votes", response_model=Voter)
    def cast_vote(req: CastVoteRequest, caller: Caller) -> Voter:
        return commit(lambda: ballot.cast_vote(caller, req.proposal_id))

    @app.post("/api/workflow/open-proposals", response_model=BallotStatus)
    def open_proposals(caller: Caller) -> BallotStatus:
        commit(lambda: ballot.open_proposals_registration(caller))
        return _ballot_status(ballot)

    @app.post("/api/workflow/close-proposals", response_model=BallotStatus)
    def close_proposals(caller: Caller) -> BallotStatus:
        commit(lambda: ballot.close_proposals_registration(caller))
        return _ballot_status(ballot)

    @app.post("/api/workflow/open-voting", response_model=BallotStatus)
    def open_voting(caller: Caller) -> BallotStatus:
        commit(lambda: ballot.open_voting_session(caller))
        return _ballot_status(ballot)

    @app.post("/api/workflow/close-voting", response_model=BallotStatus)
    def close_voting(caller: Caller) -> BallotStatus:
        commit(lambda: ballot.close_voting_session(caller))
        return _ballot_status(ballot)

    @app.post("/api/tally", response_model=BallotStatus)
    def tally(caller: Caller) -> BallotStatus:
        winner = commit(lambda: ballot.tally_votes(caller))
        logger.info("Ballot tallied over REST", extra={"winning_proposal_id": winner})
        return _ballot_status(ballot)

    return app
