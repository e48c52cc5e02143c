from __future__ import annotations

from typing import TYPE_CHECKING, List

from .coords import BOARD_SIZE, Color, Square
from .movegen import EN_PASSANT_ROW
from .piece import PieceKind

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


MASK64 = 0xFFFFFFFFFFFFFFFF

_KIND_INDEX = {kind: i for i, kind in enumerate(PieceKind)}


class _SplitMix64:
    def __init__(self, seed: int) -> None:
        self.state = seed & MASK64

    def next(self) -> int:
        self.state = (self.state + 0x9E3779B97F4A7C15) & MASK64
        z = self.state
        z = (z ^ (z >> 30)) * 0xBF58476D1CE4E5B9 & MASK64
        z = (z ^ (z >> 27)) * 0x94D049BB133111EB & MASK64
        return (z ^ (z >> 31)) & MASK64


class Zobrist:
    """Zobrist keys for repetition bookkeeping.

    Table layout:
    - piece_square[12][64]: white pawn..king, then black pawn..king; squares
      are ``row * 8 + column``
    - side_to_move: toggled when black is to move
    - castling[4]: K, Q, k, q
    - ep_file[8]: files a..h
    """

    piece_square: List[List[int]]
    side_to_move: int
    castling: List[int]
    ep_file: List[int]

    def __init__(self, seed: int = 0xC0FFEE_F00D_DEAD) -> None:
        prng = _SplitMix64(seed)
        self.piece_square = [[prng.next() for _ in range(64)] for _ in range(12)]
        self.side_to_move = prng.next()
        self.castling = [prng.next() for _ in range(4)]
        self.ep_file = [prng.next() for _ in range(8)]


ZOBRIST = Zobrist()


def position_hash(board: "Board") -> int:
    """Hash piece placement, side to move, castling rights and en-passant file.

    Move counters are excluded so that repeated positions hash equally. The
    en-passant file only counts when a pawn of the side to move stands beside
    the pushed pawn.
    """
    h = 0
    for piece in board.pieces():
        index = _KIND_INDEX[piece.kind] + (0 if piece.color is Color.WHITE else 6)
        h ^= ZOBRIST.piece_square[index][piece.row * 8 + piece.column]
    if board.turn is Color.BLACK:
        h ^= ZOBRIST.side_to_move
    rights = board.castling_rights()
    for i, ch in enumerate("KQkq"):
        if ch in rights:
            h ^= ZOBRIST.castling[i]
    target = board.en_passant
    if target is not None and _en_passant_capturable(board, target):
        h ^= ZOBRIST.ep_file[target[1]]
    return h & MASK64


def _en_passant_capturable(board: "Board", target: Square) -> bool:
    row = EN_PASSANT_ROW[board.turn]
    for col in (target[1] - 1, target[1] + 1):
        if 0 <= col < BOARD_SIZE:
            p = board.piece_at(row, col)
            if p is not None and p.is_pawn and p.color is board.turn:
                return True
    return False
