"""Load raw player records and normalize them into :class:`Player` models."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from pydantic import ValidationError

from legend_guesser.config import get_settings
from legend_guesser.errors import DatasetError
from legend_guesser.models import Conference, Player, PositionClass, StatName

logger = logging.getLogger(__name__)

EAST_TEAMS = frozenset({
    "Celtics", "Knicks", "Nets", "76ers", "Raptors",
    "Bucks", "Bulls", "Cavaliers", "Pistons", "Pacers",
    "Hawks", "Heat", "Hornets", "Magic", "Wizards",
})

WEST_TEAMS = frozenset({
    "Lakers", "Clippers", "Warriors", "Kings", "Suns",
    "Mavericks", "Spurs", "Rockets", "Grizzlies", "Pelicans",
    "Thunder", "Trail Blazers", "Timberwolves", "Nuggets", "Jazz",
})

POSITION_ALIASES = {
    "guard": PositionClass.GUARD,
    "forward": PositionClass.FORWARD,
    "center": PositionClass.CENTER,
    "guard-forward": PositionClass.GUARD_FORWARD,
    "forward-center": PositionClass.FORWARD_CENTER,
    "center-forward": PositionClass.FORWARD_CENTER,
    "g": PositionClass.GUARD,
    "f": PositionClass.FORWARD,
    "c": PositionClass.CENTER,
    "g-f": PositionClass.GUARD_FORWARD,
    "f-c": PositionClass.FORWARD_CENTER,
}

STAT_COLUMNS = {
    StatName.POINTS: "average_points",
    StatName.ASSISTS: "average_assists",
    StatName.REBOUNDS: "average_rebounds",
    StatName.STEALS: "average_steals",
    StatName.BLOCKS: "average_blocks",
}

NUMERIC_COLUMNS = ["height", "weight", "age", "awards_count", *STAT_COLUMNS.values()]


def normalize_position(raw: object) -> PositionClass:
    """Map a raw position label to a position tag; unrecognized labels become F."""

    if raw is None or (isinstance(raw, float) and np.isnan(raw)):
        return PositionClass.FORWARD
    return POSITION_ALIASES.get(str(raw).strip().lower(), PositionClass.FORWARD)


def conference_for_team(team: str) -> Conference:
    """Conference of a team nickname. Free agents and unknown teams count as East."""

    if team in EAST_TEAMS:
        return Conference.EAST
    if team in WEST_TEAMS:
        return Conference.WEST
    if team:
        logger.debug("Unknown team %r, assigning to the East", team)
    return Conference.EAST


def _read_frame(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise DatasetError(f"Player dataset not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".csv":
            return pd.read_csv(path)
        if suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                records = list(data.values())
            elif isinstance(data, list):
                records = data
            else:
                raise DatasetError(f"Expected a list or an object of player records in {path}")
            return pd.DataFrame([record for record in records if isinstance(record, dict)])
    except (ValueError, OSError) as exc:
        raise DatasetError(f"Could not read player dataset {path}: {exc}") from exc
    raise DatasetError(f"Unsupported dataset format {suffix!r} for {path}")


def normalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Return a cleaned copy of raw player rows, one row per unique name."""

    df = df.rename(columns=lambda col: str(col).strip())
    if "full_name" not in df.columns:
        raise DatasetError("Dataset must contain a 'full_name' column")

    df = df.copy()
    df["full_name"] = df["full_name"].fillna("").astype(str).str.strip()
    df = df[df["full_name"] != ""].copy()

    duplicated = df["full_name"].duplicated(keep="first")
    if duplicated.any():
        logger.warning(
            "Dropping %d duplicate player rows: %s",
            int(duplicated.sum()),
            ", ".join(df.loc[duplicated, "full_name"].head(5)),
        )
        df = df[~duplicated].copy()

    df["team"] = df["team"].fillna("").astype(str).str.strip() if "team" in df.columns else ""
    raw_positions = df["position"] if "position" in df.columns else [None] * len(df)
    df["position"] = [normalize_position(value) for value in raw_positions]

    for col in NUMERIC_COLUMNS:
        raw = df[col] if col in df.columns else pd.Series(0, index=df.index)
        values = pd.to_numeric(raw, errors="coerce").replace([np.inf, -np.inf], np.nan)
        df[col] = values.fillna(0.0).clip(lower=0.0)
    df["age"] = np.floor(df["age"]).astype(int)
    df["awards_count"] = np.floor(df["awards_count"]).astype(int)

    derived = [conference_for_team(team) for team in df["team"]]
    if "conference" in df.columns:
        given = df["conference"].fillna("").astype(str).str.strip().str.lower()
        df["conference"] = [
            Conference(value) if value in {"east", "west"} else fallback
            for value, fallback in zip(given, derived)
        ]
    else:
        df["conference"] = derived

    return df.reset_index(drop=True)


def frame_to_players(df: pd.DataFrame) -> List[Player]:
    players: List[Player] = []
    for row in df.to_dict("records"):
        try:
            players.append(
                Player(
                    name=row["full_name"],
                    conference=row["conference"],
                    team=row["team"],
                    position=row["position"],
                    age=int(row["age"]),
                    height_cm=float(row["height"]),
                    weight_lbs=float(row["weight"]),
                    stats={stat: float(row[col]) for stat, col in STAT_COLUMNS.items()},
                    has_awards=int(row["awards_count"]) > 0,
                )
            )
        except ValidationError as exc:
            raise DatasetError(f"Invalid player row {row['full_name']!r}: {exc}") from exc
    return players


def load_players(path: Path | str) -> List[Player]:
    path = Path(path)
    players = frame_to_players(normalize_frame(_read_frame(path)))
    logger.info("Loaded %d players from %s", len(players), path)
    return players


@lru_cache(maxsize=4)
def _cached_players(path: str) -> Tuple[Player, ...]:
    return tuple(load_players(path))


def load_dataset(path: Optional[Path | str] = None) -> Tuple[Player, ...]:
    """Cached player population, defaulting to the configured dataset path."""

    resolved = Path(path) if path is not None else get_settings().data_path
    return _cached_players(str(resolved.resolve()))


def players_in_conference(players: Iterable[Player], conference: Conference | str) -> Tuple[Player, ...]:
    conference = conference if isinstance(conference, Conference) else Conference(conference.lower())
    return tuple(player for player in players if player.conference is conference)


def conference_counts(players: Sequence[Player]) -> dict[str, int]:
    return {
        conference.value: sum(1 for player in players if player.conference is conference)
        for conference in Conference
    }
