import json
from pathlib import Path

import pytest

from legend_guesser.config import DEFAULT_DATA_PATH
from legend_guesser.dataset import (
    conference_counts,
    conference_for_team,
    load_dataset,
    load_players,
    normalize_position,
    players_in_conference,
)
from legend_guesser.errors import DatasetError
from legend_guesser.models import Conference, PositionClass, StatName


HEADER = (
    "full_name,team,position,height,weight,age,average_points,average_assists,"
    "average_rebounds,average_steals,average_blocks,awards_count\n"
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Guard", PositionClass.GUARD),
        ("Forward", PositionClass.FORWARD),
        ("Center", PositionClass.CENTER),
        ("Guard-Forward", PositionClass.GUARD_FORWARD),
        ("Forward-Center", PositionClass.FORWARD_CENTER),
        ("Center-Forward", PositionClass.FORWARD_CENTER),
        ("G-F", PositionClass.GUARD_FORWARD),
        ("Point Forward", PositionClass.FORWARD),
        ("", PositionClass.FORWARD),
        (None, PositionClass.FORWARD),
        (float("nan"), PositionClass.FORWARD),
    ],
)
def test_normalize_position(raw, expected):
    assert normalize_position(raw) is expected


def test_conference_for_team_defaults_to_east():
    assert conference_for_team("Lakers") is Conference.WEST
    assert conference_for_team("Trail Blazers") is Conference.WEST
    assert conference_for_team("Knicks") is Conference.EAST
    assert conference_for_team("") is Conference.EAST
    assert conference_for_team("Sonics") is Conference.EAST


def test_load_players_normalizes_csv(tmp_path: Path):
    path = tmp_path / "players.csv"
    path.write_text(
        HEADER
        + "LeBron James,Lakers,Forward,206,250,40,25.7,8.3,7.3,1.3,0.5,20\n"
        + "Free Agent,,Guard,abc,190,31.8,n/a,2,3,1,0.1,0\n"
        + "Bam Adebayo,Heat,Center-Forward,206,255,27,19.3,3.9,10.4,1.1,0.9,4\n",
        encoding="utf-8",
    )

    players = load_players(path)

    assert [player.name for player in players] == ["LeBron James", "Free Agent", "Bam Adebayo"]
    lebron, free_agent, bam = players
    assert lebron.conference is Conference.WEST
    assert lebron.position is PositionClass.FORWARD
    assert lebron.stat(StatName.ASSISTS) == pytest.approx(8.3)
    assert lebron.has_awards

    assert free_agent.team == ""
    assert free_agent.conference is Conference.EAST
    assert free_agent.height_cm == 0.0
    assert free_agent.age == 31
    assert free_agent.stat(StatName.POINTS) == 0.0
    assert not free_agent.has_awards

    assert bam.position is PositionClass.FORWARD_CENTER
    assert bam.conference is Conference.EAST


def test_load_players_drops_blank_and_duplicate_names(tmp_path: Path):
    path = tmp_path / "players.csv"
    path.write_text(
        HEADER
        + "Stephen Curry,Warriors,Guard,188,185,37,26.4,5.1,4.5,0.7,0.4,14\n"
        + ",Warriors,Guard,188,185,37,26.4,5.1,4.5,0.7,0.4,14\n"
        + "Stephen Curry,Warriors,Guard,190,190,36,20.0,5.0,4.0,0.5,0.2,0\n",
        encoding="utf-8",
    )

    players = load_players(path)

    assert len(players) == 1
    assert players[0].weight_lbs == 185.0


def test_load_players_reads_keyed_json(tmp_path: Path):
    path = tmp_path / "players.json"
    payload = {
        "1": {"full_name": "Nikola Jokic", "team": "Nuggets", "position": "Center", "height": "211",
              "weight": 284, "age": "30", "average_points": 26.4, "awards_count": 11},
        "2": {"full_name": "Trae Young", "team": "Hawks", "position": "Guard", "height": 185,
              "weight": 164, "age": 26, "average_points": "25.7", "awards_count": "3"},
        "meta": "ignored",
    }
    path.write_text(json.dumps(payload), encoding="utf-8")

    players = load_players(path)

    assert [player.name for player in players] == ["Nikola Jokic", "Trae Young"]
    assert players[0].height_cm == 211.0
    assert players[0].stat(StatName.BLOCKS) == 0.0
    assert players[1].stat(StatName.POINTS) == pytest.approx(25.7)
    assert players[1].conference is Conference.EAST


def test_explicit_conference_column_wins(tmp_path: Path):
    path = tmp_path / "players.csv"
    path.write_text(
        "full_name,team,conference\nRookie,Lakers,east\nVeteran,Celtics,somewhere\n",
        encoding="utf-8",
    )

    rookie, veteran = load_players(path)

    assert rookie.conference is Conference.EAST
    assert veteran.conference is Conference.EAST
    assert rookie.position is PositionClass.FORWARD
    assert rookie.age == 0


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(DatasetError):
        load_players(tmp_path / "nope.csv")


def test_unsupported_format_raises(tmp_path: Path):
    path = tmp_path / "players.txt"
    path.write_text("full_name\nSomeone\n", encoding="utf-8")

    with pytest.raises(DatasetError):
        load_players(path)


def test_missing_name_column_raises(tmp_path: Path):
    path = tmp_path / "players.csv"
    path.write_text("name,team\nSomeone,Lakers\n", encoding="utf-8")

    with pytest.raises(DatasetError):
        load_players(path)


def test_malformed_json_raises(tmp_path: Path):
    path = tmp_path / "players.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(DatasetError):
        load_players(path)


@pytest.mark.parametrize("payload", ["42", "\"players\"", "null"])
def test_json_without_records_raises(tmp_path: Path, payload):
    path = tmp_path / "players.json"
    path.write_text(payload, encoding="utf-8")

    with pytest.raises(DatasetError):
        load_players(path)


def test_bundled_dataset_loads_and_is_cached():
    players = load_dataset(DEFAULT_DATA_PATH)

    assert load_dataset(DEFAULT_DATA_PATH) is players
    assert len({player.name for player in players}) == len(players)
    counts = conference_counts(players)
    assert counts["east"] > 5 and counts["west"] > 5
    assert sum(counts.values()) == len(players)
    assert len(players_in_conference(players, "West")) == counts["west"]
