from __future__ import annotations

import pytest

from chesscore.engine.coords import Color, from_algebraic, is_light, is_valid, require_valid, reverse, to_algebraic


def test_algebraic_round_trip_on_corners() -> None:
    assert to_algebraic(7, 0) == "a1"
    assert to_algebraic(0, 7) == "h8"
    assert to_algebraic(7, 4) == "e1"
    assert from_algebraic("e4") == (4, 4)
    assert from_algebraic("a8") == (0, 0)


@pytest.mark.parametrize("bad", ["", "e", "i1", "a9", "a0", "e44"])
def test_from_algebraic_rejects_malformed(bad: str) -> None:
    with pytest.raises(ValueError):
        from_algebraic(bad)


def test_bounds_are_checked_not_clamped() -> None:
    assert is_valid(0, 0) and is_valid(7, 7)
    assert not is_valid(-1, 3) and not is_valid(3, 8)
    with pytest.raises(ValueError):
        require_valid(8, 0)
    with pytest.raises(ValueError):
        to_algebraic(0, -1)


def test_reverse_and_tile_colors() -> None:
    assert reverse(Color.WHITE) is Color.BLACK
    assert Color.BLACK.opposite is Color.WHITE
    # a8 and h1 are light, a1 and h8 are dark
    assert is_light(0, 0) and is_light(7, 7)
    assert not is_light(7, 0) and not is_light(0, 7)
