from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .coords import Square, column_letter, to_algebraic
from .piece import Piece

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


class MoveKind(Enum):
    REGULAR = "regular"
    ATTACKING = "attacking"
    CASTLING = "castling"
    EN_PASSANT = "en_passant"


@dataclass(frozen=True)
class Move:
    """A legal move computed for one board.

    Attributes:
        kind (MoveKind): Move variant.
        piece (Piece): Moving piece as it stands before the move.
        origin (Square): Square the piece leaves.
        destination (Square): Square the piece lands on.
        victim (Optional[Piece]): Captured piece for attacking and en passant
            moves.
        rook_origin (Optional[Square]): Castling rook's starting square.
        rook_destination (Optional[Square]): Castling rook's landing square.
        board (Optional[Board]): Board the move was generated on; used only
            to produce the transitional board and ignored by equality.
    """

    kind: MoveKind
    piece: Piece
    origin: Square
    destination: Square
    victim: Optional[Piece] = None
    rook_origin: Optional[Square] = None
    rook_destination: Optional[Square] = None
    board: Optional["Board"] = field(default=None, compare=False, repr=False)

    @classmethod
    def regular(cls, piece: Piece, row: int, col: int, board: "Board") -> "Move":
        return cls(MoveKind.REGULAR, piece, piece.square, (row, col), board=board)

    @classmethod
    def attacking(cls, piece: Piece, victim: Piece, board: "Board") -> "Move":
        return cls(MoveKind.ATTACKING, piece, piece.square, victim.square, victim=victim, board=board)

    @classmethod
    def castling(cls, king: Piece, col: int, board: "Board") -> "Move":
        row = king.row
        if col == 6:
            rook_origin, rook_destination = (row, 7), (row, 5)
        elif col == 2:
            rook_origin, rook_destination = (row, 0), (row, 3)
        else:
            raise ValueError(f"invalid castling destination column: {col}")
        return cls(
            MoveKind.CASTLING,
            king,
            king.square,
            (row, col),
            rook_origin=rook_origin,
            rook_destination=rook_destination,
            board=board,
        )

    @classmethod
    def en_passant(cls, pawn: Piece, row: int, col: int, victim: Piece, board: "Board") -> "Move":
        return cls(MoveKind.EN_PASSANT, pawn, pawn.square, (row, col), victim=victim, board=board)

    @property
    def is_regular(self) -> bool:
        return self.kind is MoveKind.REGULAR

    @property
    def is_attack(self) -> bool:
        return self.kind is MoveKind.ATTACKING

    @property
    def is_castling(self) -> bool:
        return self.kind is MoveKind.CASTLING

    @property
    def is_en_passant(self) -> bool:
        return self.kind is MoveKind.EN_PASSANT

    @property
    def is_capture(self) -> bool:
        return self.victim is not None

    @property
    def is_kingside_castle(self) -> bool:
        return self.is_castling and self.destination[1] == 6

    @property
    def captured_square(self) -> Optional[Square]:
        if self.victim is None:
            return None
        return self.victim.square

    @property
    def lands_on_last_rank(self) -> bool:
        return self.piece.is_pawn and self.destination[0] == (0 if self.piece.is_white else 7)

    def matches(self, origin: Square, destination: Square) -> bool:
        return self.origin == origin and self.destination == destination

    def transitional_board(self) -> "Board":
        """Return the board that results from playing this move."""
        if self.board is None:
            raise ValueError("move is not bound to a board")
        return self.board.apply(self)

    def to_algebraic(self) -> str:
        """Render the move for the move-history display.

        Returns:
            str: ``"Nf3"``, ``"e4"``, ``"Nxc6"``, ``"fxe4"``, ``"0-0"``,
            ``"0-0-0"`` or ``"fxe6e.p."``.
        """
        dest = to_algebraic(*self.destination)
        if self.is_castling:
            return "0-0" if self.is_kingside_castle else "0-0-0"
        if self.is_en_passant:
            return f"{column_letter(self.origin[1])}x{dest}e.p."
        prefix = "" if self.piece.is_pawn else self.piece.kind.letter
        if self.is_attack:
            if self.piece.is_pawn:
                prefix = column_letter(self.origin[1])
            return f"{prefix}x{dest}"
        return prefix + dest

    def to_coordinates(self) -> str:
        """Origin and destination squares, e.g. ``"e2e4"``."""
        return to_algebraic(*self.origin) + to_algebraic(*self.destination)

    def __str__(self) -> str:
        return self.to_algebraic()
