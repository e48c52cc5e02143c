from __future__ import annotations

from chesscore.engine.board import Board
from chesscore.engine.coords import Color
from chesscore.engine.game import Game
from chesscore.engine.player import Player, PlayerKind


def _players(fen: str) -> tuple[Board, Player, Player]:
    b = Board.from_fen(fen)
    return b, Player.for_board(Color.WHITE, b), Player.for_board(Color.BLACK, b, PlayerKind.COMPUTER)


def test_refresh_collects_pieces_king_and_moves() -> None:
    b, white, black = _players("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1")
    assert len(white.active_pieces) == 16
    assert white.king is not None and white.king.square == (7, 4)
    assert white.move_count() == 20 == len(white.ugly_moves())
    assert black.move_count() == 20
    assert black.is_computer and not white.is_computer
    assert white.material_value() == 8 * 100 + 2 * 320 + 2 * 330 + 2 * 500 + 900


def test_scholars_mate_is_checkmate() -> None:
    game = Game.new()
    for src, dst in (("e2", "e4"), ("e7", "e5"), ("f1", "c4"), ("b8", "c6"), ("d1", "h5"), ("g8", "f6"), ("h5", "f7")):
        game.play(src, dst)
    black = game.black
    assert black.is_in_checkmate(game.board)
    assert not black.is_in_check(game.board)
    assert not black.is_in_stalemate(game.board)
    assert all(p.legal_moves == [] for p in black.active_pieces)
    assert black.ugly_moves() == []
    assert game.move_history()[-1] == "Qxf7"


def test_check_requires_a_way_out() -> None:
    b, white, _ = _players("4k3/8/8/8/8/8/8/4K2r w - - 0 1")
    assert white.is_in_check(b)
    assert not white.is_in_checkmate(b)


def test_stalemate() -> None:
    b, _, black = _players("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert black.is_in_stalemate(b)
    assert not black.is_in_checkmate(b)
    assert not black.is_in_check(b)


def test_material_draw_predicates() -> None:
    _, white, black = _players("4k3/8/8/8/8/8/8/2B1K3 w - - 0 1")
    assert black.has_bare_king()
    assert white.has_king_and_bishop() and not white.has_king_and_knight()
    _, white, _ = _players("4k3/8/8/8/8/8/8/1N2K3 w - - 0 1")
    assert white.has_king_and_knight()
    _, white, _ = _players("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    assert not (white.has_bare_king() or white.has_king_and_bishop() or white.has_king_and_knight())


def test_has_castled_reads_history_text() -> None:
    assert Player.has_castled("e4 Nf3 0-0")
    assert Player.has_castled("d4 0-0-0")
    assert not Player.has_castled("e4 Nf3 Bc4")


def test_successor_records_capture_without_touching_original() -> None:
    b, white, black = _players("4k3/8/8/3q4/8/8/3R4/4K3 w - - 0 1")
    capture = next(m for m in white.ugly_moves() if m.is_capture)
    after = capture.transitional_board()
    next_white = white.successor(after, capture)
    next_black = black.successor(after, capture)
    assert [p.kind.value for p in next_white.captured_pieces] == ["q"]
    assert next_black.captured_pieces == []
    assert white.captured_pieces == []
    assert len(black.active_pieces) == 2 and len(next_black.active_pieces) == 1
