from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Final, List, Optional, Tuple

from chesscore.engine.board import Board
from chesscore.engine.coords import Color
from chesscore.engine.move import Move
from chesscore.engine.piece import PROMOTION_CHOICES, PieceKind
from chesscore.engine.player import Player
from chesscore.eval import CHECKMATE_BONUS, score


logger = logging.getLogger(__name__)

INF: Final = 10**9
DRAW_SCORE: Final = 0


@dataclass
class SearchResult:
    best_move: Optional[Move]
    promotion: Optional[PieceKind]
    score: int
    nodes: int
    depth: int
    time_ms: int
    checkmate: bool = False


@dataclass(frozen=True)
class Node:
    """A board with both players refreshed against it."""

    board: Board
    white: Player
    black: Player
    histories: Tuple[str, str] = ("", "")

    def player(self, color: Color) -> Player:
        return self.white if color is Color.WHITE else self.black

    def history(self, color: Color) -> str:
        return self.histories[0] if color is Color.WHITE else self.histories[1]

    @property
    def mover(self) -> Player:
        return self.player(self.board.turn)

    @property
    def waiting(self) -> Player:
        return self.player(self.board.turn.opposite)


@dataclass(frozen=True)
class Candidate:
    move: Move
    promotion: Optional[PieceKind]
    node: Node
    score: int
    checkmate: bool


class SearchService:
    """Fixed-depth alpha-beta minimax.

    The service keeps no game state between calls; every explored position
    is a fresh board produced by applying a move, with freshly refreshed
    players. The side to move at the root is the maximizer.
    """

    def __init__(self) -> None:
        self._nodes = 0

    def search(
        self,
        board: Board,
        white: Player,
        black: Player,
        depth: int,
        histories: Optional[Tuple[str, str]] = None,
    ) -> SearchResult:
        if depth < 1:
            raise ValueError("depth must be >= 1")
        start = time.perf_counter()
        self._nodes = 0
        root = board.turn
        node = Node(board, white, black, histories or ("", ""))

        candidates = self.sort(node, depth)
        if not candidates:
            mated = node.mover.is_in_checkmate(board)
            return SearchResult(
                best_move=None,
                promotion=None,
                score=-CHECKMATE_BONUS if mated else DRAW_SCORE,
                nodes=0,
                depth=depth,
                time_ms=_elapsed_ms(start),
            )

        best = candidates[0]
        best_score = -INF
        alpha, beta = -INF, INF
        for cand in candidates:
            if cand.checkmate:
                best, best_score = cand, cand.score
                break
            value = self.minimize(cand.node, depth - 1, alpha, beta, root)
            if value > best_score:
                best, best_score = cand, value
            alpha = max(alpha, best_score)

        result = SearchResult(
            best_move=best.move,
            promotion=best.promotion,
            score=best_score,
            nodes=self._nodes,
            depth=depth,
            time_ms=_elapsed_ms(start),
            checkmate=best.checkmate,
        )
        logger.debug(
            "search",
            extra={
                "depth": depth,
                "nodes": result.nodes,
                "best_move": best.move.to_algebraic(),
                "score": best_score,
                "time_ms": result.time_ms,
            },
        )
        return result

    def maximize(self, node: Node, depth: int, alpha: int, beta: int, root: Color) -> int:
        self._nodes += 1
        if depth == 0:
            return self.evaluate(node, depth, root)
        children = self.sort(node, depth)
        if not children:
            return self._terminal(node, depth, root)
        value = -INF
        for child in children:
            value = max(value, self.minimize(child.node, depth - 1, alpha, beta, root))
            alpha = max(alpha, value)
            if beta <= alpha:
                break
        return value

    def minimize(self, node: Node, depth: int, alpha: int, beta: int, root: Color) -> int:
        self._nodes += 1
        if depth == 0:
            return self.evaluate(node, depth, root)
        children = self.sort(node, depth)
        if not children:
            return self._terminal(node, depth, root)
        value = INF
        for child in children:
            value = min(value, self.maximize(child.node, depth - 1, alpha, beta, root))
            beta = min(beta, value)
            if beta <= alpha:
                break
        return value

    def sort(self, node: Node, depth: int) -> List[Candidate]:
        """Expand every legal move of the side to move, best-first.

        Each child is scored statically from the mover's point of view; the
        order only affects pruning, never which moves are considered.
        """
        mover_color = node.board.turn
        children: List[Candidate] = []
        for move in node.mover.ugly_moves():
            after = move.transitional_board()
            pawn = after.promotable_pawn()
            if pawn is None:
                children.append(self._child(node, move, None, after, depth - 1))
                continue
            for kind in PROMOTION_CHOICES:
                promoted = after.apply_promotion(pawn.promoted_to(kind))
                children.append(self._child(node, move, kind, promoted, depth - 1))
        children.sort(key=lambda c: c.score, reverse=True)
        logger.debug("sorted", extra={"side": mover_color.label, "children": len(children), "depth": depth})
        return children

    def evaluate(self, node: Node, depth: int, root: Color) -> int:
        return score(
            node.board,
            node.player(root),
            node.player(root.opposite),
            depth,
            node.history(root),
            node.history(root.opposite),
        )

    def _child(self, node: Node, move: Move, promotion: Optional[PieceKind], board: Board, depth: int) -> Candidate:
        mover = node.board.turn
        text = move.to_algebraic() + (f"={promotion.letter}" if promotion is not None else "")
        white_hist, black_hist = node.histories
        if mover is Color.WHITE:
            white_hist = f"{white_hist} {text}".strip()
        else:
            black_hist = f"{black_hist} {text}".strip()
        child = Node(
            board,
            node.white.successor(board, move),
            node.black.successor(board, move),
            (white_hist, black_hist),
        )
        return Candidate(
            move=move,
            promotion=promotion,
            node=child,
            score=self.evaluate(child, depth, mover),
            checkmate=child.mover.is_in_checkmate(board),
        )

    def _terminal(self, node: Node, depth: int, root: Color) -> int:
        if node.mover.is_in_checkmate(node.board):
            return self.evaluate(node, depth, root)
        return DRAW_SCORE


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
