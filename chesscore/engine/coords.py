from __future__ import annotations

from enum import Enum
from typing import Tuple


Square = Tuple[int, int]

FILES = "abcdefgh"
BOARD_SIZE = 8


class Color(str, Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opposite(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def is_white(self) -> bool:
        return self is Color.WHITE

    @property
    def label(self) -> str:
        return self.name.lower()


def reverse(color: Color) -> Color:
    return color.opposite


def is_valid(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def require_valid(row: int, col: int) -> None:
    """Raise ``ValueError`` if ``(row, col)`` lies outside the board."""
    if not is_valid(row, col):
        raise ValueError(f"invalid square: ({row}, {col})")


def column_letter(col: int) -> str:
    if not 0 <= col < BOARD_SIZE:
        raise ValueError(f"invalid column: {col}")
    return FILES[col]


def to_algebraic(row: int, col: int) -> str:
    """Convert a (row, column) pair into algebraic notation.

    Row 0 is the eighth rank and column 0 is the a-file, so ``(7, 4)`` is
    ``"e1"``.

    Raises:
        ValueError: If the coordinates are off the board.
    """
    require_valid(row, col)
    return FILES[col] + str(BOARD_SIZE - row)


def from_algebraic(text: str) -> Square:
    """Convert a square name such as ``"e4"`` into ``(row, column)``.

    Raises:
        ValueError: If ``text`` is not a valid square.
    """
    if not isinstance(text, str) or len(text) != 2:
        raise ValueError(f"invalid square: {text!r}")
    file_ch, rank_ch = text[0].lower(), text[1]
    if file_ch not in FILES or rank_ch < "1" or rank_ch > "8":
        raise ValueError(f"invalid square: {text!r}")
    return BOARD_SIZE - int(rank_ch), FILES.index(file_ch)


def is_light(row: int, col: int) -> bool:
    return (row + col) % 2 == 0
