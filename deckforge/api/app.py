"""
FastAPI Application - REST API for the rules engine.

Endpoints:
    GET    /api/v1/health                      Health check
    GET    /api/v1/cards                       Card catalog
    POST   /api/v1/sessions                    Create game session
    GET    /api/v1/sessions                    List active sessions
    GET    /api/v1/sessions/{id}               Get session status
    DELETE /api/v1/sessions/{id}               End session
    GET    /api/v1/sessions/{id}/state         Get projected game state
    GET    /api/v1/sessions/{id}/events        Get event log (?since=N)
    POST   /api/v1/sessions/{id}/commands      Submit a command
    POST   /api/v1/sessions/{id}/bots/run      Drive bot seats
    GET    /api/v1/sessions/{id}/events/{eid}/state  State right after an event
    POST   /api/v1/sessions/{id}/undo            Request an undo
    POST   /api/v1/sessions/{id}/undo/{rid}/approve  Approve a pending undo
    POST   /api/v1/sessions/{id}/undo/{rid}/deny     Deny a pending undo

Game Flow:
    1. POST /sessions starts the game and returns the seats
    2. The acting seat submits commands; pending choices are answered
       with submit_decision or reveal_reaction/decline_reaction
    3. POST /bots/run lets bot seats act until a human is needed

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union

from ..config import Settings, configure_logging


def create_app(service=None, settings: Optional[Settings] = None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    from fastapi import FastAPI, Query
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse

    from .service import APIService
    from .schemas import (
        # Request models
        CreateSessionRequest,
        CommandRequest,
        RunBotsRequest,
        UndoRequestBody,
        UndoVoteRequest,
        # Response models
        CardListResponse,
        CommandResponse,
        EndSessionResponse,
        ErrorResponse,
        EventListResponse,
        GameStateResponse,
        HealthResponse,
        RunBotsResponse,
        SessionListResponse,
        SessionResponse,
        UndoResponse,
        # Enums
        ErrorCode,
    )
    from .. import __version__

    settings = settings or Settings.from_env()
    api_service = service or APIService(settings=settings)

    app = FastAPI(
        title="Deckforge Engine API",
        description="""
Event-sourced deck-building rules engine.

## Commands

Every state change goes through `POST /sessions/{id}/commands`. A successful
command returns the events it produced and the projected state. When a card
needs input, the state carries a `pending_choice`; answer it with
`submit_decision` (or `reveal_reaction` / `decline_reaction` for reactions).

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_SETUP` | Players, bots or kingdom are invalid |
| `INVALID_COMMAND` | Unknown command type |
| `EVENT_NOT_FOUND` | No event with that id |
| `UNDO_REJECTED` | Undo request, approval or denial not allowed |
| engine codes | `NOT_YOUR_TURN`, `WRONG_PHASE`, `INSUFFICIENT_COINS`, ... |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: str,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(),
        )

    def respond(response):
        """Pass a model through, or turn an ErrorResponse into 400/404."""
        if isinstance(response, ErrorResponse):
            not_found = {ErrorCode.SESSION_NOT_FOUND.value, ErrorCode.EVENT_NOT_FOUND.value}
            status_code = 404 if response.error_code in not_found else 400
            return make_error_response(
                response.error_code,
                response.error,
                status_code=status_code,
                details=response.details,
            )
        return response

    # =========================================================================
    # System Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="deckforge-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Deckforge Engine API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    @app.get(
        "/api/v1/cards",
        response_model=CardListResponse,
        tags=["Cards"],
        summary="List the card catalog",
    )
    async def list_cards() -> CardListResponse:
        """All card definitions: base supply and kingdom."""
        return api_service.list_cards()

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid players, bots or kingdom"},
        },
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(body: CreateSessionRequest) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new game session and start its game.

        Seats listed in `bots` are driven by `POST /bots/run`.
        """
        return respond(api_service.create_session(body))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current status of a game session."""
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> Union[EndSessionResponse, JSONResponse]:
        """End a game session and release resources."""
        if not api_service.end_session(session_id, reason):
            return make_error_response(
                ErrorCode.SESSION_NOT_FOUND.value,
                f"Session {session_id} not found",
                status_code=404,
            )
        return EndSessionResponse(success=True, session_id=session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get projected game state",
    )
    async def get_game_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        """The state projected from the session's event log."""
        return respond(api_service.get_game_state(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/events",
        response_model=EventListResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get the event log",
    )
    async def get_events(
        session_id: str,
        since: Annotated[int, Query(ge=0, description="Skip the first N events")] = 0,
    ) -> Union[EventListResponse, JSONResponse]:
        """
        The session's event log.

        Pass `since` with the number of events already seen to poll for new ones.
        """
        return respond(api_service.get_events(session_id, since))

    @app.post(
        "/api/v1/sessions/{session_id}/commands",
        response_model=CommandResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Command rejected by the engine"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Game"],
        summary="Submit a command",
    )
    async def submit_command(
        session_id: str,
        body: CommandRequest,
    ) -> Union[CommandResponse, JSONResponse]:
        """
        Submit a command for the session's game.

        **Request Body:**
        ```json
        {"command_type": "play_action", "player_id": "alice", "card": "Smithy"}
        ```
        """
        return respond(api_service.submit_command(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/bots/run",
        response_model=RunBotsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Let bot seats act",
    )
    async def run_bots(
        session_id: str,
        body: Optional[RunBotsRequest] = None,
    ) -> Union[RunBotsResponse, JSONResponse]:
        """Drive bot seats until a human must act or the game ends."""
        max_steps = body.max_steps if body else RunBotsRequest().max_steps
        return respond(api_service.run_bots(session_id, max_steps))

    # =========================================================================
    # Time Travel Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/events/{event_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse, "description": "Session or event not found"}},
        tags=["Undo"],
        summary="Get the state right after an event",
    )
    async def get_state_at(session_id: str, event_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Project the log up to and including `event_id`. The live game is untouched."""
        return respond(api_service.get_state_at(session_id, event_id))

    @app.post(
        "/api/v1/sessions/{session_id}/undo",
        response_model=UndoResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Undo not allowed"},
            404: {"model": ErrorResponse, "description": "Session or event not found"},
        },
        tags=["Undo"],
        summary="Request an undo",
    )
    async def request_undo(
        session_id: str,
        body: UndoRequestBody,
    ) -> Union[UndoResponse, JSONResponse]:
        """
        Rewind the log to the end of `to_event_id`'s causal chain.

        Every other human seat must approve. With no one to ask, the undo
        runs at once and the response status is `executed`.
        """
        return respond(api_service.request_undo(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/undo/{request_id}/approve",
        response_model=UndoResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Undo"],
        summary="Approve a pending undo",
    )
    async def approve_undo(
        session_id: str,
        request_id: str,
        body: UndoVoteRequest,
    ) -> Union[UndoResponse, JSONResponse]:
        """Approve; the last needed approval runs the undo."""
        return respond(api_service.approve_undo(session_id, request_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/undo/{request_id}/deny",
        response_model=UndoResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Undo"],
        summary="Deny a pending undo",
    )
    async def deny_undo(
        session_id: str,
        request_id: str,
        body: UndoVoteRequest,
    ) -> Union[UndoResponse, JSONResponse]:
        """Deny and drop the request."""
        return respond(api_service.deny_undo(session_id, request_id, body))

    return app


# For running directly: uvicorn deckforge.api.app:app
_settings = Settings.from_env()
configure_logging(_settings)
app = create_app(settings=_settings)
