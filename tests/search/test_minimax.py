from __future__ import annotations

import pytest

from chesscore.engine.board import Board
from chesscore.engine.coords import Color, to_algebraic
from chesscore.engine.piece import PieceKind
from chesscore.engine.player import Player
from chesscore.eval import CHECKMATE_BONUS
from chesscore.search.service import Node, SearchService


def _setup(fen: str) -> tuple[Board, Player, Player]:
    b = Board.from_fen(fen)
    return b, Player.for_board(Color.WHITE, b), Player.for_board(Color.BLACK, b)


def _coords(res) -> str:
    assert res.best_move is not None
    return res.best_move.to_coordinates()


def test_depth_one_takes_free_capture() -> None:
    b, white, black = _setup("4k3/8/8/3q4/8/8/3R4/4K3 w - - 0 1")
    res = SearchService().search(b, white, black, 1)
    assert _coords(res) == "d2d5"
    assert res.best_move.is_capture  # type: ignore[union-attr]
    assert res.depth == 1


def test_black_takes_free_capture() -> None:
    b, white, black = _setup("4k3/8/8/3r4/8/8/3Q4/7K b - - 0 1")
    res = SearchService().search(b, white, black, 1)
    assert _coords(res) == "d5d2"


def test_depth_two_sees_recapture() -> None:
    # Qxd5 wins a pawn at depth 1 but loses the queen to cxd5.
    b, white, black = _setup("4k3/8/2p5/3p4/8/8/3Q4/4K3 w - - 0 1")
    assert _coords(SearchService().search(b, white, black, 1)) == "d2d5"
    assert _coords(SearchService().search(b, white, black, 2)) != "d2d5"


def test_mate_in_one_short_circuits() -> None:
    b, white, black = _setup("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    res = SearchService().search(b, white, black, 2)
    assert res.checkmate
    assert res.best_move is not None
    assert to_algebraic(*res.best_move.destination) == "a8"


def test_promotion_prefers_queen() -> None:
    b, white, black = _setup("8/P6k/8/8/8/8/8/K7 w - - 0 1")
    res = SearchService().search(b, white, black, 1)
    assert _coords(res) == "a7a8"
    assert res.promotion is PieceKind.QUEEN


def test_no_moves_at_root() -> None:
    b, white, black = _setup("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    res = SearchService().search(b, white, black, 2)
    assert res.best_move is None
    assert res.score == 0

    b, white, black = _setup("7k/6Q1/6K1/8/8/8/8/8 b - - 0 1")
    res = SearchService().search(b, white, black, 2)
    assert res.best_move is None
    assert res.score == -CHECKMATE_BONUS


def test_search_does_not_mutate_inputs() -> None:
    fen = "r1bqkbnr/pppp1ppp/2n5/4p3/2B1P3/5Q2/PPPP1PPP/RNB1K1NR w KQkq - 2 3"
    b, white, black = _setup(fen)
    white_moves = [m.to_coordinates() for m in white.ugly_moves()]
    res = SearchService().search(b, white, black, 2)
    assert res.checkmate  # Qxf7#
    assert b.to_fen() == fen
    assert [m.to_coordinates() for m in white.ugly_moves()] == white_moves
    assert white.captured_pieces == [] and black.captured_pieces == []


def test_sort_orders_best_first() -> None:
    b, white, black = _setup("4k3/8/8/3q4/8/8/3R4/4K3 w - - 0 1")
    service = SearchService()
    children = service.sort(Node(b, white, black), 1)
    scores = [c.score for c in children]
    assert scores == sorted(scores, reverse=True)
    assert len(children) == len(white.ugly_moves())
    assert children[0].move.to_coordinates() == "d2d5"


def test_depth_must_be_positive() -> None:
    b, white, black = _setup("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    with pytest.raises(ValueError):
        SearchService().search(b, white, black, 0)
