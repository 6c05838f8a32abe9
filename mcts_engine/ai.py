from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import chess

from .config import SearchConfig
from .search import MonteCarloSearch
from .timer import TurnTimer

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    best_move: Optional[chess.Move]
    iterations: int
    root_visits: int
    elapsed_ms: int
    tree_reused: bool = False


class AIPlayer:
    """Plays one side of a game with Monte Carlo tree search.

    The same instance must be used for consecutive turns of a game so the
    tree from the previous turn can be reused; call ``reset`` between games.
    """

    def __init__(self, config: Optional[SearchConfig] = None) -> None:
        self.config = config or SearchConfig()
        self.search = MonteCarloSearch(self.config)
        self.last_result: Optional[SearchResult] = None

    def reset(self) -> None:
        self.search.reset()
        self.last_result = None

    def choose_move(
        self,
        board: chess.Board,
        time_limit_ms: Optional[int] = None,
        max_iterations: Optional[int] = None,
    ) -> Optional[str]:
        """Think about ``board`` and return the chosen move in UCI, or None if the game is over.

        ``board`` itself is never mutated; the search runs on a copy.
        """
        if board.is_game_over():
            self.last_result = None
            return None

        budget = self.config.time_limit_ms if time_limit_ms is None else time_limit_ms
        if max_iterations is None:
            max_iterations = self.config.max_iterations

        timer = TurnTimer()
        self.search.initialize(board, board.move_stack)
        iterations = self.search.search(timer, budget, max_iterations=max_iterations)
        # A fresh root is only expanded on its second visit; keep going until
        # there is something to pick, whatever the budget said.
        while not self.search.root.children:
            self.search.iterate()
            iterations += 1
        move = self.search.get_best_move()

        self.last_result = SearchResult(
            best_move=move,
            iterations=iterations,
            root_visits=self.search.root.visits,
            elapsed_ms=timer.milliseconds_elapsed_this_turn,
            tree_reused=self.search.tree.reused,
        )
        logger.info(
            "Chose %s after %d iterations in %d ms (root visits %d, reused=%s)",
            move.uci(), iterations, self.last_result.elapsed_ms,
            self.last_result.root_visits, self.last_result.tree_reused,
        )
        if self.search.cache is not None:
            cache = self.search.cache
            logger.debug(
                "Eval cache: %d entries, %d hits, %d misses, %d evictions",
                len(cache), cache.hits, cache.misses, cache.evictions,
            )
        return move.uci()
