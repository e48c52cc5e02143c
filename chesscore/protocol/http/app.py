from __future__ import annotations

import logging
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    illegal_move_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestLoggingMiddleware
from .session import InMemoryGameStore
from ...config import Settings, get_settings
from ...engine.coords import Color, to_algebraic
from ...engine.game import Game, GameState, IllegalMoveError
from ...engine.perft import perft as perft_nodes
from ...engine.piece import PieceKind
from ...engine.player import PlayerKind
from ...search.service import SearchService


logger = logging.getLogger(__name__)

PromotionName = Literal["queen", "rook", "bishop", "knight"]


class CreateGameRequest(BaseModel):
    white: PlayerKind = PlayerKind.HUMAN
    black: PlayerKind = PlayerKind.HUMAN
    fen: Optional[str] = Field(default=None, description="Starting position; defaults to the initial position")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    source: str = Field(..., description="Source square, e.g. e2")
    destination: str = Field(..., description="Destination square, e.g. e4")
    promotion: Optional[PromotionName] = None


class ComputerMoveRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1)


class PerftRequest(BaseModel):
    fen: str
    depth: int = Field(default=1, ge=0, le=4)


class LegalMove(BaseModel):
    source: str
    destination: str
    notation: str
    kind: str


class GameView(BaseModel):
    game_id: str
    fen: str
    board: str
    turn: str
    status: str
    legal_moves: List[LegalMove]
    in_check: bool
    checkmate: bool
    stalemate: bool
    draw: bool
    last_move: Optional[str]
    move_history: List[str]
    captured: Dict[str, List[str]]
    players: Dict[str, str]


class ComputerMoveResponse(BaseModel):
    best_move: Optional[str]
    source: Optional[str]
    destination: Optional[str]
    promotion: Optional[str]
    score: int
    nodes: int
    depth: int
    time_ms: int
    state: GameView


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="chesscore", version="0.1.0")

    logging.basicConfig(level=settings.log_level)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(IllegalMoveError, illegal_move_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemoryGameStore(max_games=settings.max_games)

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        req = req or CreateGameRequest()
        if req.fen:
            game = _game_from_fen(req.fen, req.white, req.black)
        else:
            game = Game.new(req.white, req.black)
        game_id = store.create(game)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameView)
    async def get_state(game_id: str) -> GameView:
        return _view(game_id, _require_game(store, game_id))

    @app.get("/api/games/{game_id}/board", response_class=PlainTextResponse)
    async def get_board(game_id: str, perspective: Color = Color.WHITE, unicode: bool = False) -> str:
        return _require_game(store, game_id).render(perspective, unicode)

    @app.post("/api/games/{game_id}/position", response_model=GameView)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameView:
        current = _require_game(store, game_id)
        game = _game_from_fen(req.fen, current.white.kind, current.black.kind)
        store.set(game_id, game)
        return _view(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameView)
    async def make_move(game_id: str, req: MoveRequest) -> GameView:
        game = _require_game(store, game_id)
        promotion = PieceKind[req.promotion.upper()] if req.promotion else None
        game.play(req.source, req.destination, promotion)
        return _view(game_id, game)

    @app.post("/api/games/{game_id}/computer-move", response_model=ComputerMoveResponse)
    async def computer_move(game_id: str, req: Optional[ComputerMoveRequest] = None) -> ComputerMoveResponse:
        game = _require_game(store, game_id)
        depth = (req.depth if req and req.depth else None) or settings.default_depth
        if depth > settings.max_depth:
            raise HTTPException(status_code=400, detail=f"depth must be <= {settings.max_depth}")
        res = game.computer_move(depth, SearchService())
        move = res.best_move
        return ComputerMoveResponse(
            best_move=game.move_history()[-1] if move is not None else None,
            source=to_algebraic(*move.origin) if move is not None else None,
            destination=to_algebraic(*move.destination) if move is not None else None,
            promotion=res.promotion.name.lower() if res.promotion is not None else None,
            score=res.score,
            nodes=res.nodes,
            depth=res.depth,
            time_ms=res.time_ms,
            state=_view(game_id, game),
        )

    @app.post("/api/games/{game_id}/undo", response_model=GameView)
    async def undo(game_id: str) -> GameView:
        game = _require_game(store, game_id)
        try:
            game.undo_move()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _view(game_id, game)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, bool]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"deleted": True}

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        game = _game_from_fen(req.fen, PlayerKind.HUMAN, PlayerKind.HUMAN)
        return {"nodes": perft_nodes(game.board, req.depth), "depth": req.depth}

    return app


def _require_game(store: InMemoryGameStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _game_from_fen(fen: str, white: PlayerKind, black: PlayerKind) -> Game:
    try:
        return Game.from_fen(fen, white, black)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"invalid FEN: {e}")


def _view(game_id: str, game: Game) -> GameView:
    state = game.state()
    history = game.move_history()
    return GameView(
        game_id=game_id,
        fen=game.to_fen(),
        board=game.render(),
        turn=game.board.turn.label,
        status=state.value,
        legal_moves=[
            LegalMove(
                source=to_algebraic(*m.origin),
                destination=to_algebraic(*m.destination),
                notation=m.to_algebraic(),
                kind=m.kind.value,
            )
            for m in game.legal_moves()
        ],
        in_check=game.in_check(),
        checkmate=state is GameState.CHECKMATE,
        stalemate=state is GameState.STALEMATE,
        draw=state.is_draw,
        last_move=history[-1] if history else None,
        move_history=history,
        captured={
            "white": [p.icon for p in game.white.captured_pieces],
            "black": [p.icon for p in game.black.captured_pieces],
        },
        players={"white": game.white.kind.value, "black": game.black.kind.value},
    )


# Default app for non-factory servers
app = create_app()
