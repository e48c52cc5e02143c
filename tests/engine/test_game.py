from __future__ import annotations

import pytest

from chesscore.engine.board import STARTPOS_FEN
from chesscore.engine.coords import Color
from chesscore.engine.game import Game, GameState, IllegalMoveError, RejectionReason


@pytest.mark.parametrize(
    "src,dst,reason",
    [
        ("e9", "e4", RejectionReason.OUT_OF_BOUNDS),
        ((8, 0), (7, 0), RejectionReason.OUT_OF_BOUNDS),
        ("e4", "e5", RejectionReason.EMPTY_SOURCE),
        ("e7", "e5", RejectionReason.WRONG_TURN),
        ("e1", "e2", RejectionReason.OCCUPIED_BY_ALLY),
        ("e2", "e5", RejectionReason.ILLEGAL_PATTERN),
        ("g1", "g3", RejectionReason.ILLEGAL_PATTERN),
    ],
)
def test_check_move_reports_reason(src, dst, reason) -> None:
    game = Game.new()
    check = game.check_move(src, dst)
    assert not check.legal
    assert check.move is None
    assert check.reason is reason


def test_check_move_flags_pinned_piece() -> None:
    game = Game.from_fen("4r1k1/8/8/8/8/8/4B3/4K3 w - - 0 1")
    assert game.check_move("e2", "d3").reason is RejectionReason.OWN_KING_UNSAFE


def test_check_move_resolves_legal_move_without_applying() -> None:
    game = Game.new()
    check = game.check_move("g1", "f3")
    assert check.legal and check.move is not None
    assert check.move.to_algebraic() == "Nf3"
    assert game.to_fen() == STARTPOS_FEN


def test_play_raises_and_leaves_board_unchanged() -> None:
    game = Game.new()
    with pytest.raises(IllegalMoveError) as excinfo:
        game.play("e2", "e5")
    assert excinfo.value.reason is RejectionReason.ILLEGAL_PATTERN
    assert isinstance(excinfo.value, ValueError)
    assert game.to_fen() == STARTPOS_FEN
    assert game.move_history() == []


def test_apply_move_rejects_move_from_another_position() -> None:
    game = Game.new()
    stale = game.check_move("e2", "e4").move
    game.play("e2", "e4")
    assert stale is not None
    with pytest.raises(IllegalMoveError):
        game.apply_move(stale)


def test_apply_move_replays_earlier_move_on_current_board() -> None:
    game = Game.new()
    knight = game.check_move("g1", "f3").move
    assert knight is not None
    game.play("e2", "e4")
    game.play("e7", "e5")
    game.apply_move(knight)
    assert game.to_fen() == "rnbqkbnr/pppp1ppp/8/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R b KQkq - 1 2"
    assert game.move_history() == ["e4", "e5", "Nf3"]


def test_play_raises_with_rejection_reason() -> None:
    game = Game.new()
    with pytest.raises(IllegalMoveError) as exc:
        game.play("e2", "e5")
    assert exc.value.reason is RejectionReason.ILLEGAL_PATTERN


def test_undo_restores_board_history_and_captures() -> None:
    game = Game.new()
    for src, dst in (("e2", "e4"), ("d7", "d5"), ("e4", "d5")):
        game.play(src, dst)
    assert len(game.white.captured_pieces) == 1
    game.undo_move()
    assert game.white.captured_pieces == []
    assert game.move_history() == ["e4", "d5"]
    assert game.board.turn is Color.WHITE
    game.undo_move()
    game.undo_move()
    assert game.to_fen() == STARTPOS_FEN
    assert sum(game.repetition.values()) == 1
    with pytest.raises(ValueError):
        game.undo_move()


def test_history_per_side() -> None:
    game = Game.new()
    for src, dst in (("e2", "e4"), ("e7", "e5"), ("g1", "f3"), ("b8", "c6")):
        game.play(src, dst)
    assert game.player_history(Color.WHITE) == "e4 Nf3"
    assert game.player_history(Color.BLACK) == "e5 Nc6"


def test_threefold_repetition() -> None:
    game = Game.new()
    shuffle = (("g1", "f3"), ("g8", "f6"), ("f3", "g1"), ("f6", "g8"))
    for src, dst in shuffle:
        game.play(src, dst)
    assert game.state() is GameState.NORMAL
    for src, dst in shuffle:
        game.play(src, dst)
    assert game.state() is GameState.THREEFOLD_REPETITION
    assert game.is_draw()
    assert game.check_move("e2", "e4").reason is RejectionReason.GAME_OVER


def test_threefold_repetition_after_double_push_without_en_passant_capture() -> None:
    game = Game.new()
    game.play("e2", "e4")
    shuffle = (("g8", "f6"), ("g1", "f3"), ("f6", "g8"), ("f3", "g1"))
    for src, dst in shuffle:
        game.play(src, dst)
    assert game.state() is GameState.NORMAL
    for src, dst in shuffle:
        game.play(src, dst)
    assert game.state() is GameState.THREEFOLD_REPETITION


def test_fifty_move_rule() -> None:
    game = Game.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 100 80")
    assert game.state() is GameState.FIFTY_MOVE_RULE
    game = Game.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 99 80")
    assert game.state() is GameState.NORMAL
    game.play("a1", "a2")
    assert game.state() is GameState.FIFTY_MOVE_RULE


@pytest.mark.parametrize(
    "fen,state",
    [
        ("4k3/8/8/8/8/8/8/4K3 w - - 0 1", GameState.INSUFFICIENT_MATERIAL),
        ("4k3/8/8/8/8/8/8/2B1K3 w - - 0 1", GameState.INSUFFICIENT_MATERIAL),
        ("4k3/8/8/8/8/8/8/1N2K3 b - - 0 1", GameState.INSUFFICIENT_MATERIAL),
        ("4kb2/8/8/8/8/8/8/2B1K3 w - - 0 1", GameState.INSUFFICIENT_MATERIAL),
        ("2b1k3/8/8/8/8/8/8/2B1K3 w - - 0 1", GameState.NORMAL),
        ("4k3/8/8/8/8/8/8/R3K3 w - - 0 1", GameState.NORMAL),
        ("4k3/8/8/8/8/8/8/4K2r w - - 0 1", GameState.CHECK),
        ("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1", GameState.STALEMATE),
        ("7k/6Q1/6K1/8/8/8/8/8 b - - 0 1", GameState.CHECKMATE),
    ],
)
def test_game_state_classification(fen: str, state: GameState) -> None:
    assert Game.from_fen(fen).state() is state


def test_game_over_blocks_moves() -> None:
    game = Game.from_fen("7k/6Q1/6K1/8/8/8/8/8 b - - 0 1")
    assert game.checkmate()
    assert game.state().is_over
    with pytest.raises(IllegalMoveError) as excinfo:
        game.computer_move(1)
    assert excinfo.value.reason is RejectionReason.GAME_OVER


def test_computer_move_plays_for_side_to_move() -> None:
    game = Game.from_fen("4k3/8/8/3q4/8/8/3R4/4K3 w - - 0 1")
    res = game.computer_move(depth=1)
    assert res.best_move is not None
    assert game.move_history() == ["Rxd5"]
    assert game.board.turn is Color.BLACK
