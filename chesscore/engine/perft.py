from __future__ import annotations

from typing import Dict

from .board import Board
from .movegen import all_legal_moves
from .piece import PROMOTION_CHOICES


def perft(board: Board, depth: int) -> int:
    """Count leaf nodes of the legal move tree below ``board``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    A pawn reaching its last rank counts once per promotion choice.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    for move in all_legal_moves(board, board.turn):
        child = move.transitional_board()
        pawn = child.promotable_pawn()
        if pawn is None:
            nodes += perft(child, depth - 1)
            continue
        for kind in PROMOTION_CHOICES:
            nodes += perft(child.apply_promotion(pawn.promoted_to(kind)), depth - 1)
    return nodes


def divide(board: Board, depth: int) -> Dict[str, int]:
    """Per-root-move perft counts keyed by ``"e2e4"``-style coordinates."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for move in all_legal_moves(board, board.turn):
        child = move.transitional_board()
        pawn = child.promotable_pawn()
        if pawn is None:
            out[move.to_coordinates()] = perft(child, depth - 1)
            continue
        for kind in PROMOTION_CHOICES:
            promoted = child.apply_promotion(pawn.promoted_to(kind))
            out[move.to_coordinates() + kind.value] = perft(promoted, depth - 1)
    return out
