from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from .board import Board
from .coords import Color, Square, from_algebraic, is_light, is_valid
from .move import Move
from .movegen import candidate_moves
from .piece import Piece, PieceKind, promotion_kind
from .player import Player, PlayerKind
from .zobrist import position_hash
from ..search.service import SearchResult, SearchService


logger = logging.getLogger(__name__)

FIFTY_MOVE_HALFMOVES = 100
REPETITION_LIMIT = 3

SquareLike = Union[Square, str]
PromotionLike = Union[PieceKind, int]


class GameState(Enum):
    NORMAL = "normal"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    INSUFFICIENT_MATERIAL = "insufficient_material"
    FIFTY_MOVE_RULE = "fifty_move_rule"
    THREEFOLD_REPETITION = "threefold_repetition"

    @property
    def is_draw(self) -> bool:
        return self in (
            GameState.STALEMATE,
            GameState.INSUFFICIENT_MATERIAL,
            GameState.FIFTY_MOVE_RULE,
            GameState.THREEFOLD_REPETITION,
        )

    @property
    def is_over(self) -> bool:
        return self is GameState.CHECKMATE or self.is_draw


class RejectionReason(str, Enum):
    OUT_OF_BOUNDS = "out_of_bounds"
    EMPTY_SOURCE = "empty_source"
    WRONG_TURN = "wrong_turn"
    OCCUPIED_BY_ALLY = "occupied_by_ally"
    OWN_KING_UNSAFE = "own_king_unsafe"
    ILLEGAL_PATTERN = "illegal_pattern"
    GAME_OVER = "game_over"

    @property
    def message(self) -> str:
        return _REJECTION_MESSAGES[self]


_REJECTION_MESSAGES: Dict[RejectionReason, str] = {
    RejectionReason.OUT_OF_BOUNDS: "square is off the board",
    RejectionReason.EMPTY_SOURCE: "there is no piece on the source square",
    RejectionReason.WRONG_TURN: "that piece does not belong to the side to move",
    RejectionReason.OCCUPIED_BY_ALLY: "destination is occupied by an allied piece",
    RejectionReason.OWN_KING_UNSAFE: "move would leave the king in check",
    RejectionReason.ILLEGAL_PATTERN: "the piece cannot move there",
    RejectionReason.GAME_OVER: "the game is over",
}


class IllegalMoveError(ValueError):
    """Raised when a requested move is rejected; ``reason`` says why."""

    def __init__(self, reason: RejectionReason) -> None:
        super().__init__(reason.message)
        self.reason = reason


@dataclass(frozen=True)
class MoveCheck:
    """Outcome of resolving a source/destination pair against the legal moves."""

    move: Optional[Move] = None
    reason: Optional[RejectionReason] = None

    @property
    def legal(self) -> bool:
        return self.move is not None and self.reason is None


@dataclass(frozen=True)
class HistoryEntry:
    color: Color
    notation: str


@dataclass(frozen=True)
class _Snapshot:
    board: Board
    white_captured: Tuple[Piece, ...]
    black_captured: Tuple[Piece, ...]


def is_insufficient_material(white: Player, black: Player) -> bool:
    """Bare kings, bare king against K+B or K+N, or K+B against K+B on one colour."""
    if white.has_bare_king() and black.has_bare_king():
        return True
    for lone, other in ((white, black), (black, white)):
        if lone.has_bare_king() and (other.has_king_and_bishop() or other.has_king_and_knight()):
            return True
    if white.has_king_and_bishop() and black.has_king_and_bishop():
        wb, bb = white.bishops()[0], black.bishops()[0]
        return is_light(wb.row, wb.column) == is_light(bb.row, bb.column)
    return False


def evaluate_game_state(board: Board, mover: Player, waiting: Player, repetitions: int = 1) -> GameState:
    """Classify ``board`` for the side to move.

    Both players must be refreshed against ``board``. Checks run in priority
    order: checkmate, stalemate, insufficient material, fifty-move rule,
    threefold repetition, check.
    """
    if mover.is_in_checkmate(board):
        return GameState.CHECKMATE
    if mover.is_in_stalemate(board):
        return GameState.STALEMATE
    if is_insufficient_material(mover, waiting):
        return GameState.INSUFFICIENT_MATERIAL
    if board.halfmove_clock >= FIFTY_MOVE_HALFMOVES:
        return GameState.FIFTY_MOVE_RULE
    if repetitions >= REPETITION_LIMIT:
        return GameState.THREEFOLD_REPETITION
    if mover.is_in_check(board):
        return GameState.CHECK
    return GameState.NORMAL


@dataclass
class Game:
    """Game wrapper around a board and its two players.

    Responsibility: track the authoritative board, resolve requested moves
    against the legal-move lists, apply them (check first, then apply),
    keep the move history and the repetition counts, and support undo.
    """

    board: Board
    white: Player = field(default_factory=lambda: Player(Color.WHITE))
    black: Player = field(default_factory=lambda: Player(Color.BLACK))
    history: List[HistoryEntry] = field(default_factory=list)
    repetition: Dict[int, int] = field(default_factory=dict)
    _snapshots: List[_Snapshot] = field(default_factory=list, repr=False)

    @classmethod
    def new(
        cls,
        white_kind: PlayerKind = PlayerKind.HUMAN,
        black_kind: PlayerKind = PlayerKind.HUMAN,
    ) -> "Game":
        return cls(Board.initial_position(), Player(Color.WHITE, white_kind), Player(Color.BLACK, black_kind))

    @classmethod
    def from_fen(
        cls,
        fen: str,
        white_kind: PlayerKind = PlayerKind.HUMAN,
        black_kind: PlayerKind = PlayerKind.HUMAN,
    ) -> "Game":
        return cls(Board.from_fen(fen), Player(Color.WHITE, white_kind), Player(Color.BLACK, black_kind))

    def __post_init__(self) -> None:
        self.white.refresh(self.board)
        self.black.refresh(self.board)
        h = position_hash(self.board)
        self.repetition[h] = self.repetition.get(h, 0) + 1

    def to_fen(self) -> str:
        return self.board.to_fen()

    def render(self, perspective: Color = Color.WHITE, unicode: bool = False) -> str:
        return self.board.render(perspective, unicode)

    # --- Players ---
    def player(self, color: Color) -> Player:
        return self.white if color is Color.WHITE else self.black

    @property
    def current_player(self) -> Player:
        return self.player(self.board.turn)

    @property
    def waiting_player(self) -> Player:
        return self.player(self.board.turn.opposite)

    def legal_moves(self) -> List[Move]:
        return self.current_player.ugly_moves()

    # --- Move resolution ---
    def check_move(self, source: SquareLike, destination: SquareLike) -> MoveCheck:
        """Resolve a source/destination pair without touching the board."""
        try:
            src = _to_square(source)
            dst = _to_square(destination)
        except ValueError:
            return MoveCheck(reason=RejectionReason.OUT_OF_BOUNDS)
        if self.state().is_over:
            return MoveCheck(reason=RejectionReason.GAME_OVER)
        piece = self.board.piece_at(*src)
        if piece is None:
            return MoveCheck(reason=RejectionReason.EMPTY_SOURCE)
        if piece.color is not self.board.turn:
            return MoveCheck(reason=RejectionReason.WRONG_TURN)
        target = self.board.piece_at(*dst)
        if target is not None and not target.is_enemy(piece):
            return MoveCheck(reason=RejectionReason.OCCUPIED_BY_ALLY)
        for move in piece.legal_moves:
            if move.destination == dst:
                return MoveCheck(move=move)
        if any(m.destination == dst for m in candidate_moves(piece, self.board)):
            return MoveCheck(reason=RejectionReason.OWN_KING_UNSAFE)
        return MoveCheck(reason=RejectionReason.ILLEGAL_PATTERN)

    def play(
        self,
        source: SquareLike,
        destination: SquareLike,
        promotion: Optional[PromotionLike] = None,
    ) -> Move:
        """Check then apply the move from ``source`` to ``destination``.

        Raises:
            IllegalMoveError: If the move is rejected; the board is unchanged.
        """
        check = self.check_move(source, destination)
        if not check.legal or check.move is None:
            raise IllegalMoveError(check.reason or RejectionReason.ILLEGAL_PATTERN)
        self.apply_move(check.move, promotion)
        return check.move

    def apply_move(self, move: Move, promotion: Optional[PromotionLike] = None) -> None:
        """Apply a legal move; a pawn reaching its last rank is promoted.

        ``promotion`` is a piece kind or a promotion dialog index
        (0 knight .. 3 queen) and defaults to a queen.
        """
        if self.state().is_over:
            raise IllegalMoveError(RejectionReason.GAME_OVER)
        # Replay on the current board; a Move only compares by squares and pieces.
        current = next((m for m in self.legal_moves() if m == move), None)
        if current is None:
            raise IllegalMoveError(RejectionReason.ILLEGAL_PATTERN)
        move = current
        kind = _promotion(promotion)

        self._snapshots.append(
            _Snapshot(self.board, tuple(self.white.captured_pieces), tuple(self.black.captured_pieces))
        )
        board = move.transitional_board()
        notation = move.to_algebraic()
        pawn = board.promotable_pawn()
        if pawn is not None:
            board = board.apply_promotion(pawn.promoted_to(kind))
            notation += f"={kind.letter}"

        self.history.append(HistoryEntry(move.piece.color, notation))
        self.white = self.white.successor(board, move)
        self.black = self.black.successor(board, move)
        self.board = board
        h = position_hash(board)
        self.repetition[h] = self.repetition.get(h, 0) + 1
        logger.debug("move applied", extra={"move": notation, "fen": board.to_fen()})

    def undo_move(self) -> None:
        if not self._snapshots:
            raise ValueError("no moves to undo")
        curr = position_hash(self.board)
        if curr in self.repetition:
            self.repetition[curr] -= 1
            if self.repetition[curr] <= 0:
                del self.repetition[curr]
        snap = self._snapshots.pop()
        self.history.pop()
        self.board = snap.board
        self.white = Player(Color.WHITE, self.white.kind)
        self.white.captured_pieces = list(snap.white_captured)
        self.white.refresh(self.board)
        self.black = Player(Color.BLACK, self.black.kind)
        self.black.captured_pieces = list(snap.black_captured)
        self.black.refresh(self.board)

    def computer_move(self, depth: int = 3, service: Optional[SearchService] = None) -> SearchResult:
        """Search ``depth`` plies for the side to move and play the result."""
        if self.state().is_over:
            raise IllegalMoveError(RejectionReason.GAME_OVER)
        service = service or SearchService()
        result = service.search(
            self.board,
            self.white,
            self.black,
            depth,
            histories=(self.player_history(Color.WHITE), self.player_history(Color.BLACK)),
        )
        if result.best_move is not None:
            self.apply_move(result.best_move, result.promotion)
        return result

    # --- State flags ---
    def state(self) -> GameState:
        repetitions = self.repetition.get(position_hash(self.board), 0)
        return evaluate_game_state(self.board, self.current_player, self.waiting_player, repetitions)

    def in_check(self) -> bool:
        return self.current_player.is_in_check(self.board)

    def checkmate(self) -> bool:
        return self.current_player.is_in_checkmate(self.board)

    def stalemate(self) -> bool:
        return self.current_player.is_in_stalemate(self.board)

    def is_draw(self) -> bool:
        return self.state().is_draw

    def move_history(self) -> List[str]:
        return [e.notation for e in self.history]

    def player_history(self, color: Color) -> str:
        return " ".join(e.notation for e in self.history if e.color is color)


def _to_square(value: SquareLike) -> Square:
    if isinstance(value, str):
        return from_algebraic(value)
    row, col = value
    if not is_valid(row, col):
        raise ValueError(f"invalid square: {value!r}")
    return row, col


def _promotion(value: Optional[PromotionLike]) -> PieceKind:
    if value is None:
        return PieceKind.QUEEN
    if isinstance(value, PieceKind):
        if value in (PieceKind.PAWN, PieceKind.KING):
            raise ValueError(f"cannot promote to {value.name.lower()}")
        return value
    return promotion_kind(value)
