from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from typing import Optional

from ...engine.game import Game


logger = logging.getLogger(__name__)


class InMemoryGameStore:
    """Thread-safe in-memory store of games keyed by ``game_id``.

    Holds at most ``max_games`` games; creating one more evicts the game
    that was least recently created or accessed.
    """

    def __init__(self, max_games: int = 256) -> None:
        if max_games < 1:
            raise ValueError("max_games must be >= 1")
        self._lock = threading.RLock()
        self._games: "OrderedDict[str, Game]" = OrderedDict()
        self._max_games = max_games

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

    def create(self, game: Optional[Game] = None) -> str:
        """Store a game (a fresh one by default) and return its ``game_id``."""
        gid = str(uuid.uuid4())
        if game is None:
            game = Game.new()
        with self._lock:
            self._games[gid] = game
            while len(self._games) > self._max_games:
                evicted, _ = self._games.popitem(last=False)
                logger.info("game evicted", extra={"game_id": evicted})
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            game = self._games.get(game_id)
            if game is not None:
                self._games.move_to_end(game_id)
            return game

    def set(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game
            self._games.move_to_end(game_id)

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None
