"""Queryable player attributes and the phrasing used to ask about them."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from legend_guesser.models import Player, PositionClass, StatName


class AttributeId(str, Enum):
    TEAM = "team"
    POSITION = "position"
    HAS_AWARDS = "has_awards"
    AGE = "age"
    HEIGHT = "height"
    WEIGHT = "weight"
    POINTS = "average_points"
    ASSISTS = "average_assists"
    REBOUNDS = "average_rebounds"
    STEALS = "average_steals"
    BLOCKS = "average_blocks"


class AttributeKind(str, Enum):
    CATEGORICAL = "categorical"
    BOOLEAN = "boolean"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class Attribute:
    attribute_id: AttributeId
    kind: AttributeKind
    extract: Callable[[Player], Any]
    phrase: Callable[[Any], str]

    @property
    def is_numeric(self) -> bool:
        return self.kind is AttributeKind.NUMERIC

    def is_above(self, player: Player, threshold: float) -> bool:
        """Ordering used by numeric questions: ``True`` when the player's value exceeds the threshold."""

        if not self.is_numeric:
            raise ValueError(f"Attribute {self.attribute_id.value} is not numeric")
        return self.extract(player) > threshold


POSITION_ORDER: Tuple[PositionClass, ...] = (
    PositionClass.GUARD,
    PositionClass.FORWARD,
    PositionClass.CENTER,
    PositionClass.GUARD_FORWARD,
    PositionClass.FORWARD_CENTER,
)

NUMERIC_ATTRIBUTES: Tuple[AttributeId, ...] = (
    AttributeId.AGE,
    AttributeId.HEIGHT,
    AttributeId.WEIGHT,
    AttributeId.POINTS,
    AttributeId.ASSISTS,
    AttributeId.REBOUNDS,
    AttributeId.STEALS,
    AttributeId.BLOCKS,
)

STAT_ATTRIBUTES: Mapping[AttributeId, StatName] = {
    AttributeId.POINTS: StatName.POINTS,
    AttributeId.ASSISTS: StatName.ASSISTS,
    AttributeId.REBOUNDS: StatName.REBOUNDS,
    AttributeId.STEALS: StatName.STEALS,
    AttributeId.BLOCKS: StatName.BLOCKS,
}

_POSITION_QUESTIONS: Mapping[PositionClass, str] = {
    PositionClass.GUARD: "Is your player strictly a Guard (G), not a Guard-Forward hybrid?",
    PositionClass.FORWARD: "Is your player strictly a Forward (F), not a hybrid position?",
    PositionClass.CENTER: "Is your player strictly a Center (C), not a Forward-Center hybrid?",
    PositionClass.GUARD_FORWARD: "Is your player a Guard-Forward (G-F) hybrid?",
    PositionClass.FORWARD_CENTER: "Is your player a Forward-Center (F-C) hybrid?",
}


def format_height(height_cm: float) -> str:
    """Render centimetres as feet and inches, e.g. ``6'7"``."""

    inches = height_cm / 2.54
    feet = math.floor(inches / 12)
    remainder = math.floor(inches - feet * 12 + 0.5)
    if remainder == 12:
        feet += 1
        remainder = 0
    return f"{feet}'{remainder}\""


def explicit_list_text(names: Sequence[str]) -> str:
    return f"Is your player one of these: {', '.join(names)}?"


def _stat_phrase(stat: StatName) -> Callable[[float], str]:
    def phrase(threshold: float) -> str:
        return f"Does your player average more than {threshold:.1f} {stat.value}?"

    return phrase


def _stat_extractor(stat: StatName) -> Callable[[Player], float]:
    def extract(player: Player) -> float:
        return player.stat(stat)

    return extract


def _build_catalog() -> Dict[AttributeId, Attribute]:
    catalog: Dict[AttributeId, Attribute] = {
        AttributeId.TEAM: Attribute(
            AttributeId.TEAM,
            AttributeKind.CATEGORICAL,
            extract=lambda player: player.team,
            phrase=lambda team: f"Is your player on the {team}?",
        ),
        AttributeId.POSITION: Attribute(
            AttributeId.POSITION,
            AttributeKind.CATEGORICAL,
            extract=lambda player: player.position,
            phrase=lambda tag: _POSITION_QUESTIONS[PositionClass(tag)],
        ),
        AttributeId.HAS_AWARDS: Attribute(
            AttributeId.HAS_AWARDS,
            AttributeKind.BOOLEAN,
            extract=lambda player: player.has_awards,
            phrase=lambda _value=None: "Has your player received any awards?",
        ),
        AttributeId.AGE: Attribute(
            AttributeId.AGE,
            AttributeKind.NUMERIC,
            extract=lambda player: player.age,
            phrase=lambda threshold: f"Is your player older than {math.floor(threshold)} years?",
        ),
        AttributeId.HEIGHT: Attribute(
            AttributeId.HEIGHT,
            AttributeKind.NUMERIC,
            extract=lambda player: player.height_cm,
            phrase=lambda threshold: f"Is your player taller than {format_height(threshold)}?",
        ),
        AttributeId.WEIGHT: Attribute(
            AttributeId.WEIGHT,
            AttributeKind.NUMERIC,
            extract=lambda player: player.weight_lbs,
            phrase=lambda threshold: f"Is your player heavier than {math.floor(threshold)} lbs?",
        ),
    }
    for attribute_id, stat in STAT_ATTRIBUTES.items():
        catalog[attribute_id] = Attribute(
            attribute_id,
            AttributeKind.NUMERIC,
            extract=_stat_extractor(stat),
            phrase=_stat_phrase(stat),
        )
    return catalog


_CATALOG: Mapping[AttributeId, Attribute] = _build_catalog()


def get_attribute(attribute_id: AttributeId | str) -> Attribute:
    """Look up an attribute, raising ValueError for ids outside the catalog."""

    try:
        key = AttributeId(attribute_id)
    except ValueError:
        raise ValueError(f"Unknown attribute: {attribute_id!r}") from None
    return _CATALOG[key]


def iter_attributes() -> Tuple[Attribute, ...]:
    return tuple(_CATALOG[attribute_id] for attribute_id in AttributeId)


def extract(attribute_id: AttributeId | str, player: Player) -> Any:
    return get_attribute(attribute_id).extract(player)


def phrase(attribute_id: AttributeId | str, value: Optional[Any] = None) -> str:
    return get_attribute(attribute_id).phrase(value)


__all__ = [
    "Attribute",
    "AttributeId",
    "AttributeKind",
    "NUMERIC_ATTRIBUTES",
    "POSITION_ORDER",
    "STAT_ATTRIBUTES",
    "explicit_list_text",
    "extract",
    "format_height",
    "get_attribute",
    "iter_attributes",
    "phrase",
]
