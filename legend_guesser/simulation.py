"""Self-play simulation and dataset statistics."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from legend_guesser.catalog import AttributeId
from legend_guesser.dataset import conference_counts
from legend_guesser.engine import Split, enumerate_splits, matches
from legend_guesser.models import Player
from legend_guesser.questions import Question, QuestionKind
from legend_guesser.session import GameSession, GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameStats:
    total_players: int
    players_by_conference: Dict[str, int]
    theoretical_min: int
    actual_average: float
    attribute_importance: Dict[str, float]


def answer_for(question: Question, target: Player) -> bool:
    """Truthful answer a player thinking of ``target`` would give."""

    return matches(question, target)


def play_against(players: Sequence[Player], target: Player) -> GameSession:
    """Play a full game with truthful answers for ``target`` and return the finished session."""

    if all(player.name != target.name for player in players):
        raise ValueError(f"{target.name!r} is not part of the population")

    session = GameSession(players=tuple(players))
    session.start(target.conference)
    while session.state is GameState.PLAYING:
        if session.awaiting_choice:
            session.choose(target.name)
            break
        session.answer(answer_for(session.active_question, target))

    if session.guess != target.name:
        logger.warning("Simulation for %s ended with %s", target.name, session.guess)
    return session


def simulate_game(players: Sequence[Player], target: Player) -> int:
    """Number of questions needed to identify ``target``."""

    return play_against(players, target).questions_asked


def average_questions(players: Sequence[Player], sample_size: int = 250, seed: int = 42) -> float:
    if sample_size < 1:
        raise ValueError(f"sample_size must be at least 1, got {sample_size}")
    players = tuple(players)
    if not players:
        return 0.0

    if sample_size < len(players):
        rng = np.random.default_rng(seed)
        indices = sorted(rng.choice(len(players), size=sample_size, replace=False))
        targets = [players[int(index)] for index in indices]
    else:
        targets = list(players)

    steps = [simulate_game(players, target) for target in targets]
    return round(float(np.mean(steps)), 2)


def _safe_entropy(group_size: int) -> float:
    return math.log2(group_size) if group_size > 0 else 0.0


def information_gain(parent_count: int, yes_count: int, no_count: int) -> float:
    """Entropy reduction in bits for a uniform prior over the candidates."""

    if parent_count <= 1:
        return 0.0
    weighted_children = (
        yes_count / parent_count * _safe_entropy(yes_count)
        + no_count / parent_count * _safe_entropy(no_count)
    )
    return _safe_entropy(parent_count) - weighted_children


def _split_attribute(split: Split) -> AttributeId:
    if split.kind is QuestionKind.TEAM:
        return AttributeId.TEAM
    if split.kind is QuestionKind.POSITION_EXACT:
        return AttributeId.POSITION
    if split.kind is QuestionKind.HAS_AWARDS:
        return AttributeId.HAS_AWARDS
    return split.attribute


def attribute_importance(players: Sequence[Player]) -> Dict[str, float]:
    """Best single-split information gain per attribute, highest first."""

    players = tuple(players)
    scores: Dict[str, float] = {attribute_id.value: 0.0 for attribute_id in AttributeId}
    for split in enumerate_splits(players):
        gain = information_gain(len(players), split.yes_count, split.no_count)
        key = _split_attribute(split).value
        if gain > scores[key]:
            scores[key] = gain
    rounded = {key: round(value, 4) for key, value in scores.items()}
    return dict(sorted(rounded.items(), key=lambda item: item[1], reverse=True))


def build_stats(players: Sequence[Player], sample_size: int = 250) -> GameStats:
    players = tuple(players)
    total = len(players)
    return GameStats(
        total_players=total,
        players_by_conference=conference_counts(players),
        theoretical_min=math.ceil(math.log2(total)) if total > 1 else 0,
        actual_average=average_questions(players, sample_size=sample_size),
        attribute_importance=attribute_importance(players),
    )
