import pytest
from pydantic import ValidationError

from legend_guesser.models import Conference, Player, PositionClass, StatName

from tests.factories import make_player


def test_player_is_frozen():
    player = make_player("Frozen")

    with pytest.raises((TypeError, ValidationError)):
        player.team = "Suns"  # type: ignore[misc]


def test_missing_stats_default_to_zero():
    player = Player(
        name="Sparse",
        conference="east",
        team="Heat",
        position="G",
        stats={"points": 12.0},
    )

    assert player.conference is Conference.EAST
    assert player.position is PositionClass.GUARD
    assert player.stat(StatName.POINTS) == 12.0
    assert player.stat(StatName.BLOCKS) == 0.0
    assert set(player.stats) == set(StatName)


@pytest.mark.parametrize("field", ["height_cm", "weight_lbs"])
def test_non_finite_measurements_are_rejected(field):
    with pytest.raises(ValidationError):
        Player(name="Bad", conference="west", team="Jazz", position="C", **{field: float("inf")})


def test_non_finite_stats_are_rejected():
    with pytest.raises(ValidationError):
        Player(name="Bad", conference="west", team="Jazz", position="C", stats={"steals": float("nan")})


def test_unknown_position_tag_is_rejected():
    with pytest.raises(ValidationError):
        Player(name="Bad", conference="west", team="Jazz", position="PG")
