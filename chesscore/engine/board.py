from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable, List, Optional, Tuple

from .coords import BOARD_SIZE, Color, Square, from_algebraic, is_light, require_valid, to_algebraic
from .move import Move, MoveKind
from .piece import Piece, PieceKind


STARTPOS_FEN: Final = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

BACK_RANK: Final = (
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
)

HOME_ROW: Final = {Color.WHITE: 7, Color.BLACK: 0}
PAWN_ROW: Final = {Color.WHITE: 6, Color.BLACK: 1}
KING_COLUMN: Final = 4

Grid = List[List[Optional[Piece]]]


@dataclass(frozen=True)
class Tile:
    """One square of the board with an optional occupant."""

    row: int
    column: int
    piece: Optional[Piece] = None

    @property
    def is_light(self) -> bool:
        return is_light(self.row, self.column)

    @property
    def color(self) -> Color:
        return Color.WHITE if self.is_light else Color.BLACK

    @property
    def is_occupied(self) -> bool:
        return self.piece is not None

    @property
    def is_empty(self) -> bool:
        return self.piece is None

    def copy(self) -> "Tile":
        return Tile(self.row, self.column, self.piece.copy() if self.piece is not None else None)


class Board:
    """Immutable 8x8 chess board.

    Every ``apply_*`` method returns a new board built from a deep copy of
    this one; no method mutates ``self``. Besides piece placement the board
    tracks the side to move, the en-passant target square (the square a pawn
    skipped over on the immediately preceding double advance) and the FEN
    move counters.
    """

    def __init__(
        self,
        tiles: Iterable[Iterable[Tile]],
        turn: Color = Color.WHITE,
        en_passant: Optional[Square] = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> None:
        rows = tuple(tuple(r) for r in tiles)
        if len(rows) != BOARD_SIZE or any(len(r) != BOARD_SIZE for r in rows):
            raise ValueError("board must be 8x8")
        if en_passant is not None:
            require_valid(*en_passant)
        self._tiles: Tuple[Tuple[Tile, ...], ...] = rows
        self._turn = turn
        self._en_passant = en_passant
        self._halfmove_clock = halfmove_clock
        self._fullmove_number = fullmove_number

    # --- Construction ---
    @classmethod
    def _from_grid(
        cls,
        grid: Grid,
        turn: Color,
        en_passant: Optional[Square] = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> "Board":
        tiles = [[Tile(r, c, grid[r][c]) for c in range(BOARD_SIZE)] for r in range(BOARD_SIZE)]
        return cls(tiles, turn, en_passant, halfmove_clock, fullmove_number)

    @classmethod
    def initial_position(cls) -> "Board":
        """Standard starting layout, white to move, all castling rights open."""
        grid: Grid = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        for color in (Color.WHITE, Color.BLACK):
            home, pawns = HOME_ROW[color], PAWN_ROW[color]
            for col, kind in enumerate(BACK_RANK):
                grid[home][col] = Piece(color, kind, home, col)
                grid[pawns][col] = Piece(color, PieceKind.PAWN, pawns, col)
        return cls._from_grid(grid, Color.WHITE)

    @classmethod
    def empty(cls, turn: Color = Color.WHITE) -> "Board":
        grid: Grid = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        return cls._from_grid(grid, turn)

    @classmethod
    def from_pieces(
        cls,
        pieces: Iterable[Piece],
        turn: Color = Color.WHITE,
        en_passant: Optional[Square] = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> "Board":
        """Build a board from pieces placed on their own squares.

        Raises:
            ValueError: If a piece is off the board or two pieces share a square.
        """
        grid: Grid = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        for p in pieces:
            require_valid(p.row, p.column)
            if grid[p.row][p.column] is not None:
                raise ValueError(f"square {to_algebraic(p.row, p.column)} is occupied twice")
            grid[p.row][p.column] = p.copy()
        return cls._from_grid(grid, turn, en_passant, halfmove_clock, fullmove_number)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth-Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Board: Board initialized with the state encoded in ``fen``.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields,
                contains invalid piece placement, does not hold exactly one
                king per side, has pawns on the first or last rank, or has
                invalid castling rights, en-passant square or counters.

        Notes:
            Move counts are not part of FEN. Kings and rooks on their home
            squares are treated as unmoved only when the matching castling
            right is present; pawns are unmoved only on their starting rank.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        ranks = placement.split("/")
        if len(ranks) != BOARD_SIZE:
            raise ValueError("FEN board must have 8 ranks")
        grid: Grid = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        for row, rank in enumerate(ranks):
            col = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    col += n
                    continue
                if col >= BOARD_SIZE:
                    raise ValueError("too many squares in FEN rank")
                kind = PieceKind.from_letter(ch)
                color = Color.WHITE if ch.isupper() else Color.BLACK
                grid[row][col] = Piece(color, kind, row, col)
                col += 1
            if col != BOARD_SIZE:
                raise ValueError("rank does not sum to 8 squares in FEN")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")
        turn = Color(stm)

        if castling == "-":
            castling = ""
        elif any(ch not in "KQkq" for ch in castling) or len(set(castling)) != len(castling):
            raise ValueError("invalid castling rights")

        en_passant: Optional[Square] = None
        if ep != "-":
            en_passant = from_algebraic(ep)
            # The target lies behind a pawn of the side that just moved.
            expected_row = 2 if turn is Color.WHITE else 5
            if en_passant[0] != expected_row:
                raise ValueError("invalid en passant square")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError:
            raise ValueError("FEN move counters must be integers") from None
        if halfmove_clock < 0 or fullmove_number < 1:
            raise ValueError("FEN move counters out of range")

        _validate_placement(grid)
        _assign_move_counts(grid, castling)
        return cls._from_grid(grid, turn, en_passant, halfmove_clock, fullmove_number)

    # --- Accessors ---
    @property
    def turn(self) -> Color:
        return self._turn

    @property
    def en_passant(self) -> Optional[Square]:
        return self._en_passant

    @property
    def halfmove_clock(self) -> int:
        return self._halfmove_clock

    @property
    def fullmove_number(self) -> int:
        return self._fullmove_number

    def tile(self, row: int, col: int) -> Tile:
        """Return the tile at ``(row, col)``.

        Raises:
            ValueError: If the coordinates are off the board.
        """
        require_valid(row, col)
        return self._tiles[row][col]

    def piece_at(self, row: int, col: int) -> Optional[Piece]:
        return self.tile(row, col).piece

    def tiles(self) -> Iterable[Tile]:
        for row in self._tiles:
            yield from row

    def pieces(self, color: Optional[Color] = None) -> List[Piece]:
        return [
            t.piece
            for t in self.tiles()
            if t.piece is not None and (color is None or t.piece.color is color)
        ]

    def king(self, color: Color) -> Optional[Piece]:
        for p in self.pieces(color):
            if p.is_king:
                return p
        return None

    def castling_rights(self) -> str:
        """Castling rights in FEN order, derived from unmoved kings and rooks."""
        rights = ""
        for color, (short, long_) in ((Color.WHITE, "KQ"), (Color.BLACK, "kq")):
            home = HOME_ROW[color]
            king = self.piece_at(home, KING_COLUMN)
            if king is None or not king.is_king or king.color is not color or king.has_moved:
                continue
            for col, letter in ((7, short), (0, long_)):
                rook = self.piece_at(home, col)
                if rook is not None and rook.is_rook and rook.color is color and not rook.has_moved:
                    rights += letter
        return rights

    def promotable_pawn(self) -> Optional[Piece]:
        """Return a pawn standing on its farthest rank, if any."""
        for color, row in ((Color.WHITE, 0), (Color.BLACK, BOARD_SIZE - 1)):
            for tile in self._tiles[row]:
                p = tile.piece
                if p is not None and p.is_pawn and p.color is color:
                    return p
        return None

    def deep_copy(self) -> "Board":
        tiles = [[t.copy() for t in row] for row in self._tiles]
        return Board(tiles, self._turn, self._en_passant, self._halfmove_clock, self._fullmove_number)

    # --- Move application ---
    def apply(self, move: Move) -> "Board":
        """Return the board after ``move``, dispatching on its kind."""
        if move.kind is MoveKind.REGULAR:
            return self.apply_regular(move)
        if move.kind is MoveKind.ATTACKING:
            return self.apply_attack(move)
        if move.kind is MoveKind.CASTLING:
            return self.apply_castle(move)
        return self.apply_en_passant(move)

    def apply_regular(self, move: Move) -> "Board":
        self._check_move(move, MoveKind.REGULAR)
        grid = self._grid()
        (r0, c0), (r1, c1) = move.origin, move.destination
        if grid[r1][c1] is not None:
            raise ValueError("destination square is occupied")
        grid[r0][c0] = None
        grid[r1][c1] = move.piece.moved_to(r1, c1)
        en_passant: Optional[Square] = None
        if move.piece.is_pawn and abs(r1 - r0) == 2:
            en_passant = ((r0 + r1) // 2, c0)
        return self._next(grid, reset_clock=move.piece.is_pawn, en_passant=en_passant)

    def apply_attack(self, move: Move) -> "Board":
        self._check_move(move, MoveKind.ATTACKING)
        grid = self._grid()
        (r0, c0), (r1, c1) = move.origin, move.destination
        victim = grid[r1][c1]
        if victim is None or not victim.is_enemy(move.piece):
            raise ValueError("attacking move without an enemy on its destination")
        grid[r0][c0] = None
        grid[r1][c1] = move.piece.moved_to(r1, c1)
        return self._next(grid, reset_clock=True)

    def apply_castle(self, move: Move) -> "Board":
        self._check_move(move, MoveKind.CASTLING)
        if move.rook_origin is None or move.rook_destination is None:
            raise ValueError("castling move without rook squares")
        grid = self._grid()
        (r0, c0), (r1, c1) = move.origin, move.destination
        (rr0, rc0), (rr1, rc1) = move.rook_origin, move.rook_destination
        rook = grid[rr0][rc0]
        if rook is None or not rook.is_rook or rook.color is not move.piece.color:
            raise ValueError("castling rook is missing")
        grid[r0][c0] = None
        grid[rr0][rc0] = None
        grid[r1][c1] = move.piece.moved_to(r1, c1)
        grid[rr1][rc1] = rook.moved_to(rr1, rc1)
        return self._next(grid)

    def apply_en_passant(self, move: Move) -> "Board":
        self._check_move(move, MoveKind.EN_PASSANT)
        grid = self._grid()
        (r0, c0), (r1, c1) = move.origin, move.destination
        if move.victim is None:
            raise ValueError("en passant move without a victim")
        vr, vc = move.victim.square
        victim = grid[vr][vc]
        if victim is None or not victim.is_pawn or not victim.is_enemy(move.piece):
            raise ValueError("en passant victim is missing")
        grid[r0][c0] = None
        grid[vr][vc] = None
        grid[r1][c1] = move.piece.moved_to(r1, c1)
        return self._next(grid, reset_clock=True)

    def apply_promotion(self, new_piece: Piece) -> "Board":
        """Replace the pawn on ``new_piece``'s square with ``new_piece``.

        The turn is not flipped; promotion completes the move that brought the
        pawn to its last rank.
        """
        require_valid(new_piece.row, new_piece.column)
        pawn = self.piece_at(new_piece.row, new_piece.column)
        if pawn is None or not pawn.is_pawn or pawn.color is not new_piece.color:
            raise ValueError("no pawn to promote on that square")
        grid = self._grid()
        grid[new_piece.row][new_piece.column] = new_piece.copy()
        return Board._from_grid(
            grid, self._turn, self._en_passant, self._halfmove_clock, self._fullmove_number
        )

    def _check_move(self, move: Move, kind: MoveKind) -> None:
        if move.kind is not kind:
            raise ValueError(f"expected a {kind.value} move, got {move.kind.value}")
        piece = self.piece_at(*move.origin)
        if piece is None or piece != move.piece:
            raise ValueError("moving piece is not on its origin square")

    def _grid(self) -> Grid:
        return [[t.piece.copy() if t.piece is not None else None for t in row] for row in self._tiles]

    def _next(self, grid: Grid, *, reset_clock: bool = False, en_passant: Optional[Square] = None) -> "Board":
        return Board._from_grid(
            grid,
            self._turn.opposite,
            en_passant,
            0 if reset_clock else self._halfmove_clock + 1,
            self._fullmove_number + (1 if self._turn is Color.BLACK else 0),
        )

    # --- Serialization ---
    def to_fen(self) -> str:
        rows: List[str] = []
        for row in self._tiles:
            out = ""
            empty = 0
            for t in row:
                if t.piece is None:
                    empty += 1
                    continue
                if empty:
                    out += str(empty)
                    empty = 0
                out += t.piece.icon
            if empty:
                out += str(empty)
            rows.append(out)
        ep = to_algebraic(*self._en_passant) if self._en_passant is not None else "-"
        return " ".join(
            [
                "/".join(rows),
                self._turn.value,
                self.castling_rights() or "-",
                ep,
                str(self._halfmove_clock),
                str(self._fullmove_number),
            ]
        )

    def render(self, perspective: Color = Color.WHITE, unicode: bool = False) -> str:
        """Render the board as text with rank and file labels.

        ``perspective`` chooses which side's back rank is drawn at the bottom.
        Empty squares are drawn as ``-``.
        """
        rows = range(BOARD_SIZE) if perspective is Color.WHITE else range(BOARD_SIZE - 1, -1, -1)
        cols = list(range(BOARD_SIZE)) if perspective is Color.WHITE else list(range(BOARD_SIZE - 1, -1, -1))
        lines = []
        for r in rows:
            cells = []
            for c in cols:
                p = self._tiles[r][c].piece
                if p is None:
                    cells.append("-")
                else:
                    cells.append(p.board_icon if unicode else p.icon)
            lines.append(f"{BOARD_SIZE - r} " + " ".join(cells))
        lines.append("  " + " ".join("abcdefgh"[c] for c in cols))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Board({self.to_fen()!r})"


def _validate_placement(grid: Grid) -> None:
    for color in (Color.WHITE, Color.BLACK):
        kings = sum(1 for row in grid for p in row if p is not None and p.is_king and p.color is color)
        if kings != 1:
            raise ValueError(f"{color.label} must have exactly one king")
    for row in (0, BOARD_SIZE - 1):
        if any(p is not None and p.is_pawn for p in grid[row]):
            raise ValueError("pawns cannot stand on the first or last rank")


def _assign_move_counts(grid: Grid, castling: str) -> None:
    for color, (short, long_) in ((Color.WHITE, "KQ"), (Color.BLACK, "kq")):
        home = HOME_ROW[color]
        rights = [ch for ch in castling if ch in (short, long_)]
        king = grid[home][KING_COLUMN]
        king_home = king is not None and king.is_king and king.color is color
        if rights and not king_home:
            raise ValueError("castling rights do not match piece placement")
        for col, letter in ((7, short), (0, long_)):
            rook = grid[home][col]
            rook_home = rook is not None and rook.is_rook and rook.color is color
            if letter in rights and not rook_home:
                raise ValueError("castling rights do not match piece placement")
            if rook_home and letter not in rights:
                rook.moves = 1  # type: ignore[union-attr]
        if king_home and not rights:
            king.moves = 1  # type: ignore[union-attr]
    for row in grid:
        for p in row:
            if p is None:
                continue
            if p.is_pawn and p.row != PAWN_ROW[p.color]:
                p.moves = 1
            elif (p.is_king or p.is_rook) and p.row != HOME_ROW[p.color]:
                p.moves = 1
            elif p.is_king and p.column != KING_COLUMN:
                p.moves = 1

