"""Structured yes/no questions.

A :class:`Question` carries everything needed to filter candidates
(``kind`` plus the payload fields). ``text`` is rendered from that
structure when the question is built and is display-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence, Tuple

from legend_guesser.catalog import AttributeId, explicit_list_text, get_attribute
from legend_guesser.models import PositionClass


class QuestionKind(str, Enum):
    EXPLICIT_LIST = "explicit_list"
    TEAM = "team"
    POSITION_EXACT = "position_exact"
    HAS_AWARDS = "has_awards"
    NUMERIC_THRESHOLD = "numeric_threshold"


@dataclass(frozen=True)
class Question:
    kind: QuestionKind
    text: str
    yes_count: int
    no_count: int
    explanation: str = ""
    names: Tuple[str, ...] = ()
    team: Optional[str] = None
    position: Optional[PositionClass] = None
    attribute: Optional[AttributeId] = None
    threshold: Optional[float] = None

    @property
    def balance(self) -> int:
        return abs(self.yes_count - self.no_count)

    @property
    def payload(self) -> Any:
        if self.kind is QuestionKind.EXPLICIT_LIST:
            return list(self.names)
        if self.kind is QuestionKind.TEAM:
            return self.team
        if self.kind is QuestionKind.POSITION_EXACT:
            return self.position
        if self.kind is QuestionKind.NUMERIC_THRESHOLD:
            return {"attribute": self.attribute, "threshold": self.threshold}
        return None

    @classmethod
    def explicit_list(cls, names: Sequence[str], *, yes_count: int, no_count: int) -> "Question":
        names = tuple(names)
        return cls(
            kind=QuestionKind.EXPLICIT_LIST,
            text=explicit_list_text(names),
            yes_count=yes_count,
            no_count=no_count,
            explanation=f"Listing {len(names)} of {yes_count + no_count} remaining players by name.",
            names=names,
        )

    @classmethod
    def for_team(cls, team: str, *, yes_count: int, no_count: int) -> "Question":
        return cls(
            kind=QuestionKind.TEAM,
            text=get_attribute(AttributeId.TEAM).phrase(team),
            yes_count=yes_count,
            no_count=no_count,
            explanation=_split_explanation(f"team == {team}", yes_count, no_count),
            team=team,
        )

    @classmethod
    def for_position(cls, position: PositionClass, *, yes_count: int, no_count: int) -> "Question":
        position = PositionClass(position)
        return cls(
            kind=QuestionKind.POSITION_EXACT,
            text=get_attribute(AttributeId.POSITION).phrase(position),
            yes_count=yes_count,
            no_count=no_count,
            explanation=_split_explanation(f"position == {position.value}", yes_count, no_count),
            position=position,
        )

    @classmethod
    def for_awards(cls, *, yes_count: int, no_count: int) -> "Question":
        return cls(
            kind=QuestionKind.HAS_AWARDS,
            text=get_attribute(AttributeId.HAS_AWARDS).phrase(None),
            yes_count=yes_count,
            no_count=no_count,
            explanation=_split_explanation("has_awards", yes_count, no_count),
        )

    @classmethod
    def for_threshold(
        cls,
        attribute_id: AttributeId,
        threshold: float,
        *,
        yes_count: int,
        no_count: int,
    ) -> "Question":
        attribute = get_attribute(attribute_id)
        if not attribute.is_numeric:
            raise ValueError(f"Attribute {attribute.attribute_id.value} is not numeric")
        return cls(
            kind=QuestionKind.NUMERIC_THRESHOLD,
            text=attribute.phrase(threshold),
            yes_count=yes_count,
            no_count=no_count,
            explanation=_split_explanation(
                f"{attribute.attribute_id.value} > {threshold:.4g}", yes_count, no_count
            ),
            attribute=attribute.attribute_id,
            threshold=float(threshold),
        )


def _split_explanation(criterion: str, yes_count: int, no_count: int) -> str:
    return (
        f"Question '{criterion}' selected because it splits the players {yes_count} yes / "
        f"{no_count} no (balance {abs(yes_count - no_count)})."
    )
