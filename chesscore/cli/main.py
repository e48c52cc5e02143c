from __future__ import annotations

import argparse
import logging
import time
from typing import List, Optional

import uvicorn

from chesscore.config import get_settings
from chesscore.engine.board import STARTPOS_FEN
from chesscore.engine.game import Game
from chesscore.engine.perft import perft
from chesscore.search.service import SearchService


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="chesscore", description="Chess rules engine and minimax search")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)

    suggest = sub.add_parser("suggest", help="Print the board and the move the search picks")
    suggest.add_argument("--fen", default=STARTPOS_FEN, help="FEN string (default: startpos)")
    suggest.add_argument("--depth", type=int, default=settings.default_depth)
    suggest.add_argument("--unicode", action="store_true", help="Draw pieces as figurines")

    perft_cmd = sub.add_parser("perft", help="Count legal move tree nodes")
    perft_cmd.add_argument("--fen", default=STARTPOS_FEN, help="FEN string (default: startpos)")
    perft_cmd.add_argument("--depth", type=int, default=3)
    return parser


def _suggest(fen: str, depth: int, unicode: bool) -> int:
    try:
        game = Game.from_fen(fen)
    except ValueError as e:
        print(f"invalid FEN: {e}")
        return 2
    side = game.board.turn
    print(game.render(side, unicode))
    print(f"state={game.state().value} to_move={side.label}")
    res = SearchService().search(game.board, game.white, game.black, depth)
    if res.best_move is None:
        print("no legal moves")
        return 0
    text = res.best_move.to_algebraic()
    if res.promotion is not None:
        text += f"={res.promotion.letter}"
    print(f"best={text} score={res.score} nodes={res.nodes} depth={res.depth} time_ms={res.time_ms}")
    return 0


def _perft(fen: str, depth: int) -> int:
    try:
        game = Game.from_fen(fen)
    except ValueError as e:
        print(f"invalid FEN: {e}")
        return 2
    start = time.perf_counter()
    nodes = perft(game.board, depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={depth} time_ms={int(dt * 1000)} nps={int(nodes / max(dt, 1e-9))}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    if args.command == "suggest":
        return _suggest(args.fen, args.depth, args.unicode)
    if args.command == "perft":
        return _perft(args.fen, args.depth)
    host = getattr(args, "host", settings.host)
    port = getattr(args, "port", settings.port)
    uvicorn.run("chesscore.protocol.http.app:create_app", factory=True, host=host, port=port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
