from __future__ import annotations

from enum import Enum
from typing import List, Optional

from .board import Board
from .coords import Color
from .move import Move
from .movegen import is_king_safe, legal_moves
from .piece import Piece


class PlayerKind(Enum):
    HUMAN = "human"
    COMPUTER = "computer"


class Player:
    """One side's view of a board.

    Active pieces, the king and every legal move are derived from the board
    by ``refresh``; nothing is tracked incrementally. Call ``refresh`` after
    each board transition before trusting the predicates below.
    """

    def __init__(self, color: Color, kind: PlayerKind = PlayerKind.HUMAN) -> None:
        self.color = color
        self.kind = kind
        self.king: Optional[Piece] = None
        self.active_pieces: List[Piece] = []
        self.captured_pieces: List[Piece] = []

    @classmethod
    def for_board(cls, color: Color, board: Board, kind: PlayerKind = PlayerKind.HUMAN) -> "Player":
        player = cls(color, kind)
        player.refresh(board)
        return player

    @property
    def is_computer(self) -> bool:
        return self.kind is PlayerKind.COMPUTER

    def refresh(self, board: Board) -> None:
        self.active_pieces = board.pieces(self.color)
        self.king = next((p for p in self.active_pieces if p.is_king), None)
        for piece in self.active_pieces:
            piece.legal_moves = legal_moves(piece, board)

    def successor(self, board: Board, move: Optional[Move] = None) -> "Player":
        """Return a refreshed copy for ``board``, recording ``move``'s victim."""
        player = Player(self.color, self.kind)
        player.captured_pieces = list(self.captured_pieces)
        if move is not None and move.victim is not None and move.piece.color is self.color:
            player.captured_pieces.append(move.victim)
        player.refresh(board)
        return player

    def ugly_moves(self) -> List[Move]:
        """Every legal move of every active piece."""
        return [m for p in self.active_pieces for m in p.legal_moves]

    def move_count(self) -> int:
        return sum(len(p.legal_moves) for p in self.active_pieces)

    def is_king_safe(self, board: Board) -> bool:
        if self.king is None:
            return True
        return is_king_safe(board, self.king.row, self.king.column, self.color)

    def is_in_check(self, board: Board) -> bool:
        return not self.is_king_safe(board) and self.move_count() > 0

    def is_in_checkmate(self, board: Board) -> bool:
        return not self.is_king_safe(board) and self.move_count() == 0

    def is_in_stalemate(self, board: Board) -> bool:
        return self.is_king_safe(board) and self.move_count() == 0

    def has_bare_king(self) -> bool:
        return len(self.active_pieces) == 1 and self.active_pieces[0].is_king

    def has_king_and_knight(self) -> bool:
        return len(self.active_pieces) == 2 and any(p.is_knight for p in self.active_pieces)

    def has_king_and_bishop(self) -> bool:
        return len(self.active_pieces) == 2 and any(p.is_bishop for p in self.active_pieces)

    def bishops(self) -> List[Piece]:
        return [p for p in self.active_pieces if p.is_bishop]

    def material_value(self) -> int:
        return sum(p.value for p in self.active_pieces)

    @staticmethod
    def has_castled(history: str) -> bool:
        # "0-0" also matches queenside "0-0-0".
        return "0-0" in history

    def __repr__(self) -> str:
        return f"Player({self.color.label}, {self.kind.value}, pieces={len(self.active_pieces)})"
