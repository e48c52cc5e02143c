"""Per-piece legal move generation and king-safety checks.

Raw candidates follow each piece's movement pattern; ``legal_moves`` then
drops every candidate whose resulting board leaves the mover's own king
attacked. Pins and moving into check need no special cases.
"""

from __future__ import annotations

from typing import Dict, Final, Iterator, List, Tuple

from .board import HOME_ROW, KING_COLUMN, PAWN_ROW, Board
from .coords import Color, Square, is_valid
from .move import Move
from .piece import Piece, PieceKind


Offsets = Tuple[Tuple[int, int], ...]

KING_OFFSETS: Final[Offsets] = ((-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1))
KNIGHT_OFFSETS: Final[Offsets] = ((-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1))
ROOK_DIRECTIONS: Final[Offsets] = ((-1, 0), (1, 0), (0, -1), (0, 1))
BISHOP_DIRECTIONS: Final[Offsets] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
QUEEN_DIRECTIONS: Final[Offsets] = ROOK_DIRECTIONS + BISHOP_DIRECTIONS

SLIDING_DIRECTIONS: Final[Dict[PieceKind, Offsets]] = {
    PieceKind.BISHOP: BISHOP_DIRECTIONS,
    PieceKind.ROOK: ROOK_DIRECTIONS,
    PieceKind.QUEEN: QUEEN_DIRECTIONS,
}
SPECTRUM_OFFSETS: Final[Dict[PieceKind, Offsets]] = {
    PieceKind.KNIGHT: KNIGHT_OFFSETS,
    PieceKind.KING: KING_OFFSETS,
}

PAWN_DIRECTION: Final = {Color.WHITE: -1, Color.BLACK: 1}
# Row a pawn must stand on to capture en passant (its fifth rank).
EN_PASSANT_ROW: Final = {Color.WHITE: 3, Color.BLACK: 4}

KINGSIDE_EMPTY: Final = (5, 6)
KINGSIDE_SAFE: Final = (4, 5, 6)
QUEENSIDE_EMPTY: Final = (1, 2, 3)
QUEENSIDE_SAFE: Final = (4, 3, 2)


def sliding_moves(piece: Piece, board: Board, directions: Offsets) -> List[Move]:
    moves: List[Move] = []
    for dr, dc in directions:
        r, c = piece.row + dr, piece.column + dc
        while is_valid(r, c):
            occupant = board.piece_at(r, c)
            if occupant is None:
                moves.append(Move.regular(piece, r, c, board))
            else:
                if occupant.is_enemy(piece) and not occupant.is_king:
                    moves.append(Move.attacking(piece, occupant, board))
                break
            r += dr
            c += dc
    return moves


def spectrum_moves(piece: Piece, board: Board, offsets: Offsets) -> List[Move]:
    moves: List[Move] = []
    for dr, dc in offsets:
        r, c = piece.row + dr, piece.column + dc
        if not is_valid(r, c):
            continue
        occupant = board.piece_at(r, c)
        if occupant is None:
            moves.append(Move.regular(piece, r, c, board))
        elif occupant.is_enemy(piece) and not occupant.is_king:
            moves.append(Move.attacking(piece, occupant, board))
    return moves


def pawn_moves(pawn: Piece, board: Board) -> List[Move]:
    moves: List[Move] = []
    step = PAWN_DIRECTION[pawn.color]
    col = pawn.column
    r = pawn.row + step
    if not is_valid(r, col):
        return moves

    if board.piece_at(r, col) is None:
        moves.append(Move.regular(pawn, r, col, board))
        r2 = r + step
        if pawn.row == PAWN_ROW[pawn.color] and not pawn.has_moved and board.piece_at(r2, col) is None:
            moves.append(Move.regular(pawn, r2, col, board))

    for dc in (-1, 1):
        c = col + dc
        if not is_valid(r, c):
            continue
        occupant = board.piece_at(r, c)
        if occupant is not None and occupant.is_enemy(pawn) and not occupant.is_king:
            moves.append(Move.attacking(pawn, occupant, board))

    target = board.en_passant
    if target is not None and pawn.row == EN_PASSANT_ROW[pawn.color]:
        tr, tc = target
        if tr == r and abs(tc - col) == 1 and board.piece_at(tr, tc) is None:
            victim = board.piece_at(pawn.row, tc)
            if victim is not None and victim.is_pawn and victim.is_enemy(pawn):
                moves.append(Move.en_passant(pawn, tr, tc, victim, board))
    return moves


def castling_moves(king: Piece, board: Board) -> List[Move]:
    moves: List[Move] = []
    if can_kingside_castle_on_this_turn(king, board):
        moves.append(Move.castling(king, 6, board))
    if can_queenside_castle_on_this_turn(king, board):
        moves.append(Move.castling(king, 2, board))
    return moves


def candidate_moves(piece: Piece, board: Board) -> List[Move]:
    """Raw moves for ``piece`` before self-check filtering."""
    if piece.is_pawn:
        return pawn_moves(piece, board)
    if piece.kind in SLIDING_DIRECTIONS:
        return sliding_moves(piece, board, SLIDING_DIRECTIONS[piece.kind])
    moves = spectrum_moves(piece, board, SPECTRUM_OFFSETS[piece.kind])
    if piece.is_king:
        moves.extend(castling_moves(piece, board))
    return moves


def leaves_king_safe(move: Move) -> bool:
    after = move.transitional_board()
    king = after.king(move.piece.color)
    if king is None:
        return True
    return is_king_safe(after, king.row, king.column, king.color)


def legal_moves(piece: Piece, board: Board) -> List[Move]:
    """Legal moves for ``piece`` on ``board`` for the current turn."""
    return [m for m in candidate_moves(piece, board) if leaves_king_safe(m)]


def all_legal_moves(board: Board, color: Color) -> List[Move]:
    moves: List[Move] = []
    for piece in board.pieces(color):
        moves.extend(legal_moves(piece, board))
    return moves


def attack_squares(piece: Piece, board: Board) -> Iterator[Square]:
    """Yield every square ``piece`` attacks, ignoring its own king's safety."""
    if piece.is_pawn:
        r = piece.row + PAWN_DIRECTION[piece.color]
        for dc in (-1, 1):
            if is_valid(r, piece.column + dc):
                yield r, piece.column + dc
        return
    if piece.kind in SPECTRUM_OFFSETS:
        for dr, dc in SPECTRUM_OFFSETS[piece.kind]:
            r, c = piece.row + dr, piece.column + dc
            if is_valid(r, c):
                yield r, c
        return
    for dr, dc in SLIDING_DIRECTIONS[piece.kind]:
        r, c = piece.row + dr, piece.column + dc
        while is_valid(r, c):
            yield r, c
            if board.piece_at(r, c) is not None:
                break
            r += dr
            c += dc


def is_square_attacked(board: Board, row: int, col: int, by: Color) -> bool:
    target = (row, col)
    return any(target in attack_squares(p, board) for p in board.pieces(by))


def is_king_safe(board: Board, row: int, col: int, color: Color) -> bool:
    """Return ``False`` iff a ``color`` king on ``(row, col)`` would be attacked."""
    return not is_square_attacked(board, row, col, color.opposite)


def _castle_ready(king: Piece, board: Board, rook_col: int, empty: Tuple[int, ...], safe: Tuple[int, ...]) -> bool:
    home = HOME_ROW[king.color]
    if not king.is_king or king.has_moved or king.square != (home, KING_COLUMN):
        return False
    rook = board.piece_at(home, rook_col)
    if rook is None or not rook.is_rook or rook.color is not king.color or rook.has_moved:
        return False
    if any(board.piece_at(home, c) is not None for c in empty):
        return False
    return all(is_king_safe(board, home, c, king.color) for c in safe)


def can_kingside_castle_on_this_turn(king: Piece, board: Board) -> bool:
    """King and h-rook unmoved, f/g empty, and e/f/g not attacked."""
    return _castle_ready(king, board, 7, KINGSIDE_EMPTY, KINGSIDE_SAFE)


def can_queenside_castle_on_this_turn(king: Piece, board: Board) -> bool:
    """King and a-rook unmoved, b/c/d empty, and e/d/c not attacked."""
    return _castle_ready(king, board, 0, QUEENSIDE_EMPTY, QUEENSIDE_SAFE)
