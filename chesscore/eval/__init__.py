"""Static evaluation from one player's point of view.

Pure, deterministic, and side-effect free. Scores are centipawns; the
caller compares a player's score against the opponent's.
"""

from __future__ import annotations

from typing import Dict, Final, List

from chesscore.engine.board import Board
from chesscore.engine.piece import Piece, PieceKind
from chesscore.engine.player import Player


# Heuristic weights (centipawns)
CHECK_BONUS: Final = 50
CHECKMATE_BONUS: Final = 10_000
DEPTH_BONUS: Final = 100
CASTLED_BONUS: Final = 60
MOBILITY_WEIGHT: Final = 1

# Piece-square tables from white's point of view; row 0 is the eighth rank.
PSQT_P: Final = [
    [0, 0, 0, 0, 0, 0, 0, 0],
    [50, 50, 50, 50, 50, 50, 50, 50],
    [10, 10, 20, 30, 30, 20, 10, 10],
    [5, 5, 10, 25, 25, 10, 5, 5],
    [0, 0, 0, 20, 20, 0, 0, 0],
    [5, -5, -10, 0, 0, -10, -5, 5],
    [5, 10, 10, -20, -20, 10, 10, 5],
    [0, 0, 0, 0, 0, 0, 0, 0],
]

PSQT_N: Final = [
    [-50, -40, -30, -30, -30, -30, -40, -50],
    [-40, -20, 0, 0, 0, 0, -20, -40],
    [-30, 0, 10, 15, 15, 10, 0, -30],
    [-30, 5, 15, 20, 20, 15, 5, -30],
    [-30, 0, 15, 20, 20, 15, 0, -30],
    [-30, 5, 10, 15, 15, 10, 5, -30],
    [-40, -20, 0, 5, 5, 0, -20, -40],
    [-50, -40, -30, -30, -30, -30, -40, -50],
]

PSQT_B: Final = [
    [-20, -10, -10, -10, -10, -10, -10, -20],
    [-10, 0, 0, 0, 0, 0, 0, -10],
    [-10, 0, 5, 10, 10, 5, 0, -10],
    [-10, 5, 5, 10, 10, 5, 5, -10],
    [-10, 0, 10, 10, 10, 10, 0, -10],
    [-10, 10, 10, 10, 10, 10, 10, -10],
    [-10, 5, 0, 0, 0, 0, 5, -10],
    [-20, -10, -10, -10, -10, -10, -10, -20],
]

PSQT_R: Final = [
    [0, 0, 0, 0, 0, 0, 0, 0],
    [-5, 10, 10, 10, 10, 10, 10, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [0, 0, 0, 0, 0, 0, 0, 0],
]

PSQT_Q: Final = [
    [-20, -10, -10, -5, -5, -10, -10, -20],
    [-10, 0, 0, 0, 0, 0, 0, -10],
    [-10, 0, -5, -5, -5, -5, 0, -10],
    [-5, 0, 5, 5, 5, 5, 0, -5],
    [-5, 0, 5, 5, 5, 5, 0, -5],
    [-10, 0, -5, -5, -5, -5, 0, -10],
    [-10, 0, 0, 0, 0, 0, 0, -10],
    [-20, -10, -10, -5, -5, -10, -10, -20],
]

PSQT_K: Final = [
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-20, -30, -30, -40, -40, -30, -30, -20],
    [-10, -20, -20, -20, -20, -20, -20, -10],
    [20, 0, 0, 0, 0, 0, 0, 20],
    [20, 30, 10, 0, 0, 10, 20, 30],
]

PSQT: Final[Dict[PieceKind, List[List[int]]]] = {
    PieceKind.PAWN: PSQT_P,
    PieceKind.KNIGHT: PSQT_N,
    PieceKind.BISHOP: PSQT_B,
    PieceKind.ROOK: PSQT_R,
    PieceKind.QUEEN: PSQT_Q,
    PieceKind.KING: PSQT_K,
}


def piece_square_value(piece: Piece) -> int:
    row = piece.row if piece.is_white else 7 - piece.row
    return PSQT[piece.kind][row][piece.column]


def depth_bonus(depth: int) -> int:
    return DEPTH_BONUS * depth


def evaluate_player(
    player: Player,
    opponent: Player,
    board: Board,
    depth: int = 0,
    history: str = "",
) -> int:
    """Return ``player``'s static score on ``board``.

    Sum of material, mobility, a check bonus, a checkmate bonus (scaled up by
    the remaining ``depth`` so faster mates score higher), a castling bonus
    when ``history`` shows the player has castled, and piece-square terms.
    Both players must be refreshed against ``board``.
    """
    score = player.material_value()
    score += MOBILITY_WEIGHT * player.move_count()
    if opponent.is_in_checkmate(board):
        score += CHECKMATE_BONUS + depth_bonus(depth)
    elif opponent.is_in_check(board):
        score += CHECK_BONUS
    if Player.has_castled(history):
        score += CASTLED_BONUS
    score += sum(piece_square_value(p) for p in player.active_pieces)
    return score


def score(
    board: Board,
    player: Player,
    opponent: Player,
    depth: int = 0,
    player_history: str = "",
    opponent_history: str = "",
) -> int:
    """``player``'s evaluation minus ``opponent``'s."""
    return evaluate_player(player, opponent, board, depth, player_history) - evaluate_player(
        opponent, player, board, depth, opponent_history
    )
