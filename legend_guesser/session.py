"""Caller-side game state: one session per player of the game."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from legend_guesser.dataset import players_in_conference
from legend_guesser.engine import apply_answer, choose_candidate, select_question
from legend_guesser.errors import InvalidStateError
from legend_guesser.models import Conference, Player
from legend_guesser.questions import Question, QuestionKind

logger = logging.getLogger(__name__)


class GameState(str, Enum):
    INTRO = "intro"
    PLAYING = "playing"
    RESULT = "result"


class GameOutcome(str, Enum):
    FOUND = "found"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class LogEntry:
    message: str


@dataclass
class GameSession:
    """Session-scoped guessing game over a fixed player population."""

    players: Tuple[Player, ...]
    state: GameState = GameState.INTRO
    conference: Optional[Conference] = None
    candidates: Tuple[Player, ...] = ()
    active_question: Optional[Question] = None
    questions_asked: int = 0
    awaiting_choice: bool = False
    _log: List[LogEntry] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self.players = tuple(self.players)

    @property
    def remaining(self) -> int:
        return len(self.candidates)

    @property
    def log(self) -> Tuple[LogEntry, ...]:
        return tuple(self._log)

    @property
    def choices(self) -> Tuple[str, ...]:
        if not self.awaiting_choice or self.active_question is None:
            return ()
        return self.active_question.names

    @property
    def outcome(self) -> Optional[GameOutcome]:
        if self.state is not GameState.RESULT:
            return None
        return GameOutcome.FOUND if len(self.candidates) == 1 else GameOutcome.NO_MATCH

    @property
    def guess(self) -> Optional[str]:
        if self.outcome is GameOutcome.FOUND:
            return self.candidates[0].name
        return None

    def start(self, conference: Conference | str) -> Optional[Question]:
        if self.state is not GameState.INTRO:
            raise InvalidStateError(f"Cannot start a game from state {self.state.value!r}")

        if not isinstance(conference, Conference):
            conference = Conference(conference.lower())
        self.conference = conference
        self.candidates = players_in_conference(self.players, conference)
        self.questions_asked = 0
        self._log = []
        self.state = GameState.PLAYING
        self._add_log(f"Think of an active NBA player from the {conference.value.title()}ern Conference...")
        logger.info("Started %s conference game with %d candidates", conference.value, self.remaining)
        return self._advance()

    def answer(self, answer: bool) -> Optional[Question]:
        """Apply a yes/no answer to the active question and return the next one, if any."""

        self._require_playing()
        if self.awaiting_choice:
            raise InvalidStateError("Waiting for a player to be chosen from the list")

        question = self.active_question
        previous = self.candidates
        self.questions_asked += 1
        self._add_log(f"Q{self.questions_asked}: {question.text} {'Yes' if answer else 'No'}")
        self.candidates = apply_answer(previous, question, answer)

        if (
            answer
            and question.kind is QuestionKind.EXPLICIT_LIST
            and len(self.candidates) > 1
            and len(self.candidates) == len(previous)
        ):
            self.awaiting_choice = True
            logger.debug("Awaiting a choice among %d listed players", len(self.candidates))
            return question

        return self._advance()

    def choose(self, name: str) -> None:
        """Settle a name-list question by picking the player directly."""

        self._require_playing()
        if not self.awaiting_choice:
            raise InvalidStateError("No list of players to choose from")

        self.candidates = choose_candidate(self.candidates, self.active_question, name)
        self.awaiting_choice = False
        self._add_log(f"Chosen from the list: {name}")
        self._advance()

    def reset(self) -> None:
        if self.state is GameState.PLAYING:
            raise InvalidStateError("Cannot reset a game in progress; discard the session instead")
        self.state = GameState.INTRO
        self.conference = None
        self.candidates = ()
        self.active_question = None
        self.questions_asked = 0
        self.awaiting_choice = False
        self._log = []

    def _advance(self) -> Optional[Question]:
        if len(self.candidates) <= 1:
            self.active_question = None
            self.state = GameState.RESULT
            if self.candidates:
                self._add_log(f"My guess is... **{self.candidates[0].name}**!")
            else:
                self._add_log("No players match these criteria. Something went wrong.")
            logger.info(
                "Game finished after %d questions: %s", self.questions_asked, self.outcome.value
            )
            return None

        self.active_question = select_question(self.candidates)
        return self.active_question

    def _require_playing(self) -> None:
        if self.state is not GameState.PLAYING or self.active_question is None:
            raise InvalidStateError(f"No game in progress (state {self.state.value!r})")

    def _add_log(self, message: str) -> None:
        self._log.append(LogEntry(message))
