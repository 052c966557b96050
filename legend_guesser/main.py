from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from threading import RLock
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from legend_guesser.config import get_settings
from legend_guesser.dataset import load_dataset
from legend_guesser.errors import DatasetError, InvalidStateError
from legend_guesser.logging_utils import setup_logging
from legend_guesser.models import Conference, Player
from legend_guesser.questions import Question, QuestionKind
from legend_guesser.session import GameOutcome, GameSession, GameState
from legend_guesser.simulation import GameStats, build_stats

logger = logging.getLogger(__name__)


class QuestionResponse(BaseModel):
    kind: QuestionKind
    question: str
    names: Optional[List[str]] = None
    team: Optional[str] = None
    position: Optional[str] = None
    attribute: Optional[str] = None
    threshold: Optional[float] = None
    yes_count: int
    no_count: int
    explanation: str


class StartRequest(BaseModel):
    conference: Conference


class StartResponse(BaseModel):
    session_id: str
    conference: Conference
    state: GameState
    remaining: int
    question: Optional[QuestionResponse] = None
    outcome: Optional[GameOutcome] = None
    result: Optional[str] = None


class AskResponse(BaseModel):
    session_id: str
    remaining: int
    questions_asked: int
    awaiting_choice: bool
    choices: List[str]
    question: QuestionResponse


class AnswerRequest(BaseModel):
    session_id: str
    answer: bool


class ChooseRequest(BaseModel):
    session_id: str
    name: str = Field(min_length=1)


class AnswerResponse(BaseModel):
    session_id: str
    state: GameState
    remaining: int
    questions_asked: int
    awaiting_choice: bool
    choices: List[str]
    outcome: Optional[GameOutcome] = None
    result: Optional[str] = None
    next_question: Optional[str] = None


class ResultResponse(BaseModel):
    session_id: str
    outcome: GameOutcome
    result: Optional[str]
    remaining: int
    questions_asked: int
    log: List[str]


class ResetRequest(BaseModel):
    session_id: str


class ResetResponse(BaseModel):
    session_id: str
    state: GameState


class StatsResponse(BaseModel):
    total_players: int
    players_by_conference: Dict[str, int]
    theoretical_min: int
    actual_average: float
    attribute_importance: Dict[str, float]


@dataclass
class SessionEntry:
    game: GameSession
    lock: RLock = field(default_factory=RLock)
    last_access: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SessionStore:
    """In-memory sessions with idle expiry. Each entry is guarded by its own lock."""

    def __init__(self, ttl_minutes: int) -> None:
        self.ttl = timedelta(minutes=ttl_minutes)
        self._sessions: Dict[str, SessionEntry] = {}
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def prune(self) -> None:
        cutoff = datetime.now(timezone.utc) - self.ttl
        with self._lock:
            stale_ids = [sid for sid, entry in self._sessions.items() if entry.last_access < cutoff]
            for sid in stale_ids:
                self._sessions.pop(sid, None)
        if stale_ids:
            logger.debug("Expired %d idle sessions", len(stale_ids))

    def create(self, players: Sequence[Player]) -> Tuple[str, SessionEntry]:
        self.prune()
        session_id = str(uuid4())
        entry = SessionEntry(game=GameSession(players=tuple(players)))
        with self._lock:
            self._sessions[session_id] = entry
        return session_id, entry

    def get(self, session_id: str) -> SessionEntry:
        self.prune()
        with self._lock:
            entry = self._sessions.get(session_id)

        if entry is None:
            raise HTTPException(status_code=404, detail="Session not found or expired")

        entry.last_access = datetime.now(timezone.utc)
        return entry


def _question_response(question: Question) -> QuestionResponse:
    return QuestionResponse(
        kind=question.kind,
        question=question.text,
        names=list(question.names) if question.kind is QuestionKind.EXPLICIT_LIST else None,
        team=question.team,
        position=question.position.value if question.position is not None else None,
        attribute=question.attribute.value if question.attribute is not None else None,
        threshold=question.threshold,
        yes_count=question.yes_count,
        no_count=question.no_count,
        explanation=question.explanation,
    )


def _answer_response(session_id: str, game: GameSession) -> AnswerResponse:
    next_question = None
    if game.state is GameState.PLAYING and not game.awaiting_choice:
        next_question = game.active_question.text
    return AnswerResponse(
        session_id=session_id,
        state=game.state,
        remaining=game.remaining,
        questions_asked=game.questions_asked,
        awaiting_choice=game.awaiting_choice,
        choices=list(game.choices),
        outcome=game.outcome,
        result=game.guess,
        next_question=next_question,
    )


def _conflict(exc: InvalidStateError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(exc))


def create_app(players: Optional[Sequence[Player]] = None) -> FastAPI:
    """Build the API. Without ``players`` the configured dataset is loaded on first use."""

    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="NBA Legend Guesser")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = SessionStore(ttl_minutes=settings.session_ttl_minutes)
    app.state.sessions = store
    app.state.players = tuple(players) if players is not None else None
    app.state.stats = None
    stats_lock = RLock()

    def _population(request: Request) -> Tuple[Player, ...]:
        if request.app.state.players is None:
            try:
                request.app.state.players = load_dataset(settings.data_path)
            except DatasetError as exc:
                logger.error("Player dataset unavailable: %s", exc)
                raise HTTPException(status_code=503, detail=str(exc)) from exc
        return request.app.state.players

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "sessions": len(store)}

    @app.post("/start", response_model=StartResponse)
    def start_game(payload: StartRequest, request: Request) -> StartResponse:
        session_id, entry = store.create(_population(request))
        with entry.lock:
            question = entry.game.start(payload.conference)
            return StartResponse(
                session_id=session_id,
                conference=payload.conference,
                state=entry.game.state,
                remaining=entry.game.remaining,
                question=_question_response(question) if question is not None else None,
                outcome=entry.game.outcome,
                result=entry.game.guess,
            )

    @app.get("/ask", response_model=AskResponse)
    def ask(session_id: str = Query(...)) -> AskResponse:
        entry = store.get(session_id)
        with entry.lock:
            game = entry.game
            if game.state is not GameState.PLAYING or game.active_question is None:
                raise HTTPException(status_code=409, detail="No question pending for this session")
            return AskResponse(
                session_id=session_id,
                remaining=game.remaining,
                questions_asked=game.questions_asked,
                awaiting_choice=game.awaiting_choice,
                choices=list(game.choices),
                question=_question_response(game.active_question),
            )

    @app.post("/answer", response_model=AnswerResponse)
    def answer_question(payload: AnswerRequest) -> AnswerResponse:
        entry = store.get(payload.session_id)
        with entry.lock:
            try:
                entry.game.answer(payload.answer)
            except InvalidStateError as exc:
                raise _conflict(exc) from exc
            return _answer_response(payload.session_id, entry.game)

    @app.post("/choose", response_model=AnswerResponse)
    def choose_player(payload: ChooseRequest) -> AnswerResponse:
        entry = store.get(payload.session_id)
        with entry.lock:
            try:
                entry.game.choose(payload.name)
            except InvalidStateError as exc:
                raise _conflict(exc) from exc
            except ValueError as exc:
                raise HTTPException(status_code=422, detail=str(exc)) from exc
            return _answer_response(payload.session_id, entry.game)

    @app.get("/result", response_model=ResultResponse)
    def result(session_id: str = Query(...)) -> ResultResponse:
        entry = store.get(session_id)
        with entry.lock:
            game = entry.game
            if game.outcome is None:
                raise HTTPException(status_code=409, detail="The game has not finished yet")
            return ResultResponse(
                session_id=session_id,
                outcome=game.outcome,
                result=game.guess,
                remaining=game.remaining,
                questions_asked=game.questions_asked,
                log=[item.message for item in game.log],
            )

    @app.post("/reset", response_model=ResetResponse)
    def reset(payload: ResetRequest) -> ResetResponse:
        entry = store.get(payload.session_id)
        with entry.lock:
            try:
                entry.game.reset()
            except InvalidStateError as exc:
                raise _conflict(exc) from exc
            return ResetResponse(session_id=payload.session_id, state=entry.game.state)

    @app.get("/stats", response_model=StatsResponse)
    def stats(request: Request) -> StatsResponse:
        players = _population(request)
        with stats_lock:
            if request.app.state.stats is None:
                request.app.state.stats = build_stats(players, sample_size=settings.stats_sample_size)
            computed: GameStats = request.app.state.stats
        return StatsResponse(
            total_players=computed.total_players,
            players_by_conference=computed.players_by_conference,
            theoretical_min=computed.theoretical_min,
            actual_average=computed.actual_average,
            attribute_importance=computed.attribute_importance,
        )

    return app


app = create_app()
