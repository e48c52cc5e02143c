from __future__ import annotations

from chesscore.engine.board import Board
from chesscore.engine.coords import Color, from_algebraic
from chesscore.engine.move import MoveKind
from chesscore.engine.movegen import (
    all_legal_moves,
    candidate_moves,
    is_king_safe,
    legal_moves,
)


def _dests(board: Board, square: str) -> set[str]:
    piece = board.piece_at(*from_algebraic(square))
    assert piece is not None
    return {m.to_coordinates()[2:] for m in legal_moves(piece, board)}


def test_start_position_has_twenty_moves_each_side() -> None:
    b = Board.initial_position()
    moves = all_legal_moves(b, Color.WHITE)
    assert len(moves) == 20
    assert sum(1 for m in moves if m.piece.is_pawn) == 16
    assert sum(1 for m in moves if m.piece.is_knight) == 4
    e4 = next(m for m in moves if m.to_coordinates() == "e2e4")
    assert len(all_legal_moves(e4.transitional_board(), Color.BLACK)) == 20


def test_sliders_stop_at_blockers_and_capture_enemies() -> None:
    b = Board.from_fen("4k3/8/8/3p4/8/1P1R4/8/4K3 w - - 0 1")
    dests = _dests(b, "d3")
    assert "d5" in dests  # capture
    assert "d6" not in dests  # behind the victim
    assert "b3" not in dests and "c3" in dests  # own pawn blocks
    assert {"d1", "d2", "d4", "e3", "h3"} <= dests
    rook = b.piece_at(*from_algebraic("d3"))
    capture = next(m for m in legal_moves(rook, b) if m.to_coordinates() == "d3d5")  # type: ignore[arg-type]
    assert capture.kind is MoveKind.ATTACKING and capture.victim is not None and capture.victim.is_pawn


def test_knight_and_king_spectrum() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/8/N3K3 w - - 0 1")
    assert _dests(b, "a1") == {"b3", "c2"}
    assert _dests(b, "e1") == {"d1", "d2", "e2", "f2", "f1"}


def test_king_is_never_captured() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/8/4K2r w - - 0 1")
    rook = b.piece_at(*from_algebraic("h1"))
    assert rook is not None
    assert all(m.to_coordinates() != "h1e1" for m in candidate_moves(rook, b))


def test_pinned_piece_cannot_leave_the_line() -> None:
    b = Board.from_fen("4r1k1/8/8/8/8/8/4B3/4K3 w - - 0 1")
    assert _dests(b, "e2") == set()
    bishop = b.piece_at(*from_algebraic("e2"))
    assert bishop is not None and candidate_moves(bishop, b)


def test_king_cannot_step_into_attack() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/r7/4K3 w - - 0 1")
    assert _dests(b, "e1") == {"d1", "f1"}
    assert not is_king_safe(b, 6, 4, Color.WHITE)
    assert is_king_safe(b, 7, 4, Color.WHITE)


def test_pawn_pushes_and_captures() -> None:
    b = Board.from_fen("4k3/8/8/8/8/p1n5/1P6/4K3 w - - 0 1")
    assert _dests(b, "b2") == {"b3", "b4", "a3", "c3"}
    blocked = Board.from_fen("4k3/8/8/8/1n6/8/1P6/4K3 w - - 0 1")
    assert _dests(blocked, "b2") == {"b3"}
    black = Board.from_fen("4k3/3p4/2N5/8/8/8/8/4K3 b - - 0 1")
    assert _dests(black, "d7") == {"d6", "d5", "c6"}


def test_every_legal_move_leaves_mover_safe() -> None:
    fens = [
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
        "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
        "r1bqkbnr/pppp1ppp/2n5/4p3/2B1P3/5Q2/PPPP1PPP/RNB1K1NR b KQkq - 3 3",
    ]
    for fen in fens:
        b = Board.from_fen(fen)
        for color in (Color.WHITE, Color.BLACK):
            for m in all_legal_moves(b, color):
                after = m.transitional_board()
                king = after.king(color)
                assert king is not None
                assert is_king_safe(after, king.row, king.column, color), m.to_coordinates()
