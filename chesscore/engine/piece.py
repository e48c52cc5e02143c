from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Final, List, Tuple

from .coords import Color, Square

if TYPE_CHECKING:  # pragma: no cover
    from .move import Move


class PieceKind(Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"

    @property
    def letter(self) -> str:
        return self.value.upper()

    @property
    def material(self) -> int:
        return PIECE_VALUES[self]

    @classmethod
    def from_letter(cls, ch: str) -> "PieceKind":
        try:
            return cls(ch.lower())
        except ValueError:
            raise ValueError(f"invalid piece letter: {ch!r}") from None


# Material values in centipawns; kings are never traded so they carry none.
PIECE_VALUES: Final[Dict[PieceKind, int]] = {
    PieceKind.PAWN: 100,
    PieceKind.KNIGHT: 320,
    PieceKind.BISHOP: 330,
    PieceKind.ROOK: 500,
    PieceKind.QUEEN: 900,
    PieceKind.KING: 0,
}

# Index order of the promotion dialog: 0 knight .. 3 queen.
PROMOTION_CHOICES: Final[Tuple[PieceKind, ...]] = (
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.ROOK,
    PieceKind.QUEEN,
)

_BOARD_ICONS: Final[Dict[Tuple[Color, PieceKind], str]] = {
    (Color.WHITE, PieceKind.KING): "♔",
    (Color.WHITE, PieceKind.QUEEN): "♕",
    (Color.WHITE, PieceKind.ROOK): "♖",
    (Color.WHITE, PieceKind.BISHOP): "♗",
    (Color.WHITE, PieceKind.KNIGHT): "♘",
    (Color.WHITE, PieceKind.PAWN): "♙",
    (Color.BLACK, PieceKind.KING): "♚",
    (Color.BLACK, PieceKind.QUEEN): "♛",
    (Color.BLACK, PieceKind.ROOK): "♜",
    (Color.BLACK, PieceKind.BISHOP): "♝",
    (Color.BLACK, PieceKind.KNIGHT): "♞",
    (Color.BLACK, PieceKind.PAWN): "♟",
}


def promotion_kind(index: int) -> PieceKind:
    """Map a promotion dialog index (0 knight .. 3 queen) to a piece kind."""
    if not 0 <= index < len(PROMOTION_CHOICES):
        raise ValueError(f"invalid promotion choice: {index}")
    return PROMOTION_CHOICES[index]


@dataclass(eq=False)
class Piece:
    """A piece standing on a square.

    Attributes:
        color (Color): Owning side.
        kind (PieceKind): Piece type.
        row (int): Current row (0 is black's back rank).
        column (int): Current column (0 is the a-file).
        moves (int): Number of moves this piece has made.
        legal_moves (List[Move]): Legal moves for the current turn only; filled
            by ``Player.refresh`` and discarded with the board.

    Two pieces compare equal when they share color and kind, regardless of
    the square they stand on.
    """

    color: Color
    kind: PieceKind
    row: int
    column: int
    moves: int = 0
    legal_moves: List["Move"] = field(default_factory=list, repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return self.color == other.color and self.kind == other.kind

    def __hash__(self) -> int:
        return hash((self.color, self.kind))

    @property
    def square(self) -> Square:
        return self.row, self.column

    def moved_to(self, row: int, col: int) -> "Piece":
        return Piece(self.color, self.kind, row, col, self.moves + 1)

    def copy(self) -> "Piece":
        return Piece(self.color, self.kind, self.row, self.column, self.moves)

    def promoted_to(self, kind: PieceKind) -> "Piece":
        if not self.is_pawn:
            raise ValueError("only pawns can be promoted")
        if kind in (PieceKind.PAWN, PieceKind.KING):
            raise ValueError(f"cannot promote to {kind.name.lower()}")
        return Piece(self.color, kind, self.row, self.column, self.moves)

    @property
    def is_pawn(self) -> bool:
        return self.kind is PieceKind.PAWN

    @property
    def is_knight(self) -> bool:
        return self.kind is PieceKind.KNIGHT

    @property
    def is_bishop(self) -> bool:
        return self.kind is PieceKind.BISHOP

    @property
    def is_rook(self) -> bool:
        return self.kind is PieceKind.ROOK

    @property
    def is_queen(self) -> bool:
        return self.kind is PieceKind.QUEEN

    @property
    def is_king(self) -> bool:
        return self.kind is PieceKind.KING

    @property
    def is_white(self) -> bool:
        return self.color is Color.WHITE

    @property
    def is_black(self) -> bool:
        return self.color is Color.BLACK

    @property
    def has_moved(self) -> bool:
        return self.moves > 0

    def is_enemy(self, other: "Piece") -> bool:
        return self.color is not other.color

    @property
    def value(self) -> int:
        return self.kind.material

    @property
    def icon(self) -> str:
        """FEN letter: upper case for white, lower case for black."""
        return self.kind.letter if self.is_white else self.kind.value

    @property
    def board_icon(self) -> str:
        return _BOARD_ICONS[(self.color, self.kind)]
