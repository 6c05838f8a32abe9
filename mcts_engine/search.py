from __future__ import annotations

import logging
import random
from typing import Optional, Protocol, Sequence

import chess

from .config import SearchConfig
from .evaluator import EvaluationCache, Evaluator
from .policies import (
    BackpropagationPolicy,
    ExpansionPolicy,
    SelectionPolicy,
    SimulationPolicy,
)
from .position import MoveStack
from .tree import GameTree, GameTreeNode

logger = logging.getLogger(__name__)


class Timer(Protocol):
    @property
    def milliseconds_elapsed_this_turn(self) -> int: ...


class NoLegalMovesError(RuntimeError):
    """Raised when a decision is requested from a root without children."""


class MonteCarloSearch:
    """Time-budgeted MCTS over a tree that survives between turns.

    Call ``initialize`` once per turn, then ``search`` and ``get_best_move``.
    """

    def __init__(self, config: Optional[SearchConfig] = None) -> None:
        self.config = config or SearchConfig()
        self.rng = random.Random(self.config.seed)
        self.cache = (
            EvaluationCache(self.config.eval_cache_size)
            if self.config.eval_cache_size
            else None
        )
        self.evaluator = Evaluator(self.cache)
        self.selection = SelectionPolicy(self.config)
        self.expansion = ExpansionPolicy(
            self.evaluator, rng=self.rng, shuffle=self.config.shuffle_children
        )
        self.simulation = SimulationPolicy(rng=self.rng)
        self.backpropagation = BackpropagationPolicy()
        self.tree = GameTree()
        self.board: Optional[chess.Board] = None

    @property
    def root(self) -> Optional[GameTreeNode]:
        return self.tree.root

    def reset(self) -> None:
        self.tree.reset()
        self.board = None
        if self.cache is not None:
            self.cache.clear()

    def initialize(self, board: chess.Board, history: Optional[Sequence[chess.Move]] = None) -> None:
        self.board = self.tree.initialize(board, history)

    def search(self, timer: Timer, budget_ms: int, max_iterations: Optional[int] = None) -> int:
        """Run iterations until ``budget_ms`` has elapsed on ``timer``.

        The clock is only read between iterations, so the last iteration may
        run past the budget. Returns the number of iterations completed.
        """
        if self.board is None or self.root is None:
            raise RuntimeError("initialize() must be called before search()")
        iterations = 0
        while timer.milliseconds_elapsed_this_turn < budget_ms:
            if max_iterations is not None and iterations >= max_iterations:
                break
            self.iterate()
            iterations += 1
        return iterations

    def iterate(self) -> GameTreeNode:
        """One select/expand/simulate/backpropagate pass; returns the simulated node."""
        root = self.root
        leaf = self.selection.select(root, root.visits)
        with MoveStack(self.board) as stack:
            stack.replay(leaf)
            node = leaf
            if leaf.visits > 0:
                node = self.expansion.expand(leaf, stack)
                if node is not leaf:
                    stack.push(node.move)
            self.simulation.simulate(node, stack)
            self.backpropagation.backpropagate(node)
        return node

    def get_best_move(self) -> chess.Move:
        """Most visited child of the root, first one on ties."""
        root = self.root
        if root is None or not root.children:
            raise NoLegalMovesError("Root has no children to choose from")
        best: Optional[GameTreeNode] = None
        for child in root.children.values():
            if best is None or child.visits > best.visits:
                best = child
        return best.move
