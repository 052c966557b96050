from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, Tuple

import numpy as np

from legend_guesser.catalog import (
    NUMERIC_ATTRIBUTES,
    POSITION_ORDER,
    AttributeId,
    get_attribute,
)
from legend_guesser.errors import InvalidStateError
from legend_guesser.models import Player, PositionClass
from legend_guesser.questions import Question, QuestionKind

logger = logging.getLogger(__name__)

EXPLICIT_LIST_LIMIT = 5


@dataclass(frozen=True)
class Split:
    """Candidate binary partition considered during question selection."""

    kind: QuestionKind
    yes_count: int
    no_count: int
    team: Optional[str] = None
    position: Optional[PositionClass] = None
    attribute: Optional[AttributeId] = None
    threshold: Optional[float] = None

    @property
    def balance(self) -> int:
        return abs(self.yes_count - self.no_count)

    @property
    def is_degenerate(self) -> bool:
        return self.yes_count == 0 or self.no_count == 0

    def to_question(self) -> Question:
        counts = {"yes_count": self.yes_count, "no_count": self.no_count}
        if self.kind is QuestionKind.TEAM:
            return Question.for_team(self.team, **counts)
        if self.kind is QuestionKind.POSITION_EXACT:
            return Question.for_position(self.position, **counts)
        if self.kind is QuestionKind.HAS_AWARDS:
            return Question.for_awards(**counts)
        if self.kind is QuestionKind.NUMERIC_THRESHOLD:
            return Question.for_threshold(self.attribute, self.threshold, **counts)
        raise ValueError(f"Split kind {self.kind.value} has no attribute question")


def enumerate_splits(candidates: Sequence[Player]) -> Iterator[Split]:
    """Yield every split in selection order.

    Teams in first-appearance order, then position tags present among the
    candidates, then awards, then each numeric attribute's midpoints in
    ascending order. Splits with an empty branch are included.
    """

    players = tuple(candidates)
    total = len(players)

    team_counts = Counter(player.team for player in players)
    for team, count in team_counts.items():
        yield Split(QuestionKind.TEAM, yes_count=count, no_count=total - count, team=team)

    position_counts = Counter(player.position for player in players)
    for position in POSITION_ORDER:
        count = position_counts.get(position, 0)
        if count == 0:
            continue
        yield Split(
            QuestionKind.POSITION_EXACT,
            yes_count=count,
            no_count=total - count,
            position=position,
        )

    awarded = sum(1 for player in players if player.has_awards)
    yield Split(QuestionKind.HAS_AWARDS, yes_count=awarded, no_count=total - awarded)

    for attribute_id in NUMERIC_ATTRIBUTES:
        attribute = get_attribute(attribute_id)
        values = np.sort(np.array([attribute.extract(player) for player in players], dtype=float))
        distinct = np.unique(values)
        if distinct.size < 2:
            continue
        thresholds = (distinct[:-1] + distinct[1:]) / 2
        at_or_below = np.searchsorted(values, thresholds, side="right")
        for threshold, no_count in zip(thresholds, at_or_below):
            yield Split(
                QuestionKind.NUMERIC_THRESHOLD,
                yes_count=total - int(no_count),
                no_count=int(no_count),
                attribute=attribute_id,
                threshold=float(threshold),
            )


def select_question(candidates: Sequence[Player]) -> Question:
    """Pick the most balanced question for the remaining candidates."""

    players = tuple(candidates)
    total = len(players)
    if total <= 1:
        raise InvalidStateError(
            f"Cannot select a question for {total} candidate(s); the game is already decided"
        )

    if total <= EXPLICIT_LIST_LIMIT:
        return Question.explicit_list(
            [player.name for player in players], yes_count=total, no_count=0
        )

    best: Optional[Split] = None
    best_possible = total % 2
    for split in enumerate_splits(players):
        if split.is_degenerate:
            continue
        if best is None or split.balance < best.balance:
            best = split
            if best.balance == best_possible:
                # nothing later can be strictly better
                break

    if best is None:
        half = players[: total // 2]
        logger.debug("No attribute splits %d candidates; falling back to a name list", total)
        return Question.explicit_list(
            [player.name for player in half], yes_count=len(half), no_count=total - len(half)
        )

    question = best.to_question()
    logger.debug("Selected %s for %d candidates: %s", question.kind.value, total, question.explanation)
    return question


def matches(question: Question, player: Player) -> bool:
    """Truth value of ``question`` for ``player``."""

    if question.kind is QuestionKind.EXPLICIT_LIST:
        return player.name in question.names
    if question.kind is QuestionKind.TEAM:
        return player.team == question.team
    if question.kind is QuestionKind.POSITION_EXACT:
        return player.position == question.position
    if question.kind is QuestionKind.HAS_AWARDS:
        return player.has_awards
    if question.kind is QuestionKind.NUMERIC_THRESHOLD:
        return get_attribute(question.attribute).is_above(player, question.threshold)
    raise ValueError(f"Unknown question kind: {question.kind!r}")


def apply_answer(
    candidates: Iterable[Player],
    question: Optional[Question],
    answer: bool,
) -> Tuple[Player, ...]:
    """Keep the candidates consistent with ``answer``; may return an empty tuple."""

    if question is None:
        raise InvalidStateError("No active question to answer")
    answer = bool(answer)
    return tuple(player for player in candidates if matches(question, player) == answer)


def choose_candidate(
    candidates: Iterable[Player],
    question: Optional[Question],
    name: str,
) -> Tuple[Player, ...]:
    """Resolve a name-list question by picking one of its listed players."""

    if question is None or question.kind is not QuestionKind.EXPLICIT_LIST:
        raise InvalidStateError("Choosing a player requires an active name-list question")
    if name not in question.names:
        raise ValueError(f"{name!r} is not one of the listed players")
    chosen = tuple(player for player in candidates if player.name == name)
    if not chosen:
        raise ValueError(f"{name!r} is no longer a candidate")
    return chosen[:1]


__all__ = [
    "EXPLICIT_LIST_LIMIT",
    "Split",
    "apply_answer",
    "choose_candidate",
    "enumerate_splits",
    "matches",
    "select_question",
]
