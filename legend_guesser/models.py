"""Normalized player model consumed by the question engine."""

from __future__ import annotations

import math
from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


class Conference(str, Enum):
    EAST = "east"
    WEST = "west"


class PositionClass(str, Enum):
    GUARD = "G"
    FORWARD = "F"
    CENTER = "C"
    GUARD_FORWARD = "G-F"
    FORWARD_CENTER = "F-C"


class StatName(str, Enum):
    POINTS = "points"
    ASSISTS = "assists"
    REBOUNDS = "rebounds"
    STEALS = "steals"
    BLOCKS = "blocks"


class Player(BaseModel):
    """One guessable player, already normalized by the dataset loader."""

    name: str = Field(..., min_length=1)
    conference: Conference
    team: str
    position: PositionClass
    age: int = Field(default=0, ge=0)
    height_cm: float = Field(default=0.0, ge=0.0)
    weight_lbs: float = Field(default=0.0, ge=0.0)
    stats: Dict[StatName, float] = Field(default_factory=dict)
    has_awards: bool = False

    model_config = ConfigDict(frozen=True)

    @field_validator("height_cm", "weight_lbs")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        return value

    @field_validator("stats")
    @classmethod
    def _complete_stats(cls, value: Dict[StatName, float]) -> Dict[StatName, float]:
        for stat, number in value.items():
            if not math.isfinite(number):
                raise ValueError(f"stat {stat.value} must be a finite number")
        return {stat: float(value.get(stat, 0.0)) for stat in StatName}

    def stat(self, stat: StatName) -> float:
        return self.stats[stat]
