"""Selection, expansion, simulation and backpropagation steps of the search."""

from __future__ import annotations

import math
import random
from typing import List, Optional

import chess

from .config import SearchConfig
from .evaluator import Evaluator
from .position import MoveStack, is_draw
from .tree import GameTreeNode


def sigmoid(x: float) -> float:
    # Split on sign so math.exp never overflows for large |x|.
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


class SelectionPolicy:
    """UCB1 descent with the static evaluation squashed in as a prior."""

    def __init__(self, config: Optional[SearchConfig] = None) -> None:
        config = config or SearchConfig()
        self.exploration = config.exploration
        self.prior_scale = config.prior_scale
        self.epsilon = config.epsilon

    def score(self, child: GameTreeNode, total_sims: int) -> float:
        if child.visits == 0:
            return math.inf
        exploit = child.wins / max(1, child.visits)
        spread = math.sqrt(math.log(max(1, total_sims)) / max(self.epsilon, child.visits))
        return exploit + self.exploration * sigmoid(self.prior_scale * child.static_value * spread)

    def best_child(self, node: GameTreeNode, total_sims: int) -> GameTreeNode:
        best: Optional[GameTreeNode] = None
        best_score = -math.inf
        for child in node.children.values():
            s = self.score(child, total_sims)
            if best is None or s > best_score:
                best = child
                best_score = s
        return best

    def select(self, root: GameTreeNode, total_sims: int) -> GameTreeNode:
        node = root
        while not node.is_leaf():
            node = self.best_child(node, total_sims)
        return node


class ExpansionPolicy:
    """Creates every child of a leaf at once, each with a static value."""

    def __init__(
        self,
        evaluator: Evaluator,
        rng: Optional[random.Random] = None,
        shuffle: bool = False,
    ) -> None:
        self.evaluator = evaluator
        self.rng = rng or random.Random()
        self.shuffle = shuffle

    def expand(self, leaf: GameTreeNode, stack: MoveStack) -> GameTreeNode:
        """Expand ``leaf``, whose position is the current board of ``stack``.

        Returns the first new child, or ``leaf`` itself when the position has
        no legal moves.
        """
        board = stack.board
        moves: List[chess.Move] = list(board.legal_moves)
        if not moves:
            return leaf
        if self.shuffle:
            self.rng.shuffle(moves)

        # Static values are stored from the point of view of the side moving.
        mover = board.turn
        for move in moves:
            stack.push(move)
            try:
                value = self.evaluator.evaluate(board)
            finally:
                stack.pop()
            leaf.add_child(move, value if mover == chess.WHITE else -value)
        return leaf.children[moves[0]]


class SimulationPolicy:
    """Uniformly random playout to the end of the game."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def simulate(self, node: GameTreeNode, stack: MoveStack) -> int:
        """Play out from ``node``'s position, the current board of ``stack``.

        Returns +1 if the side that played ``node.move`` wins, -1 if it loses
        and 0 for a draw. The board is restored before returning.
        """
        board = stack.board
        depth = len(stack)
        result = 1
        try:
            while True:
                if board.is_checkmate():
                    break
                if is_draw(board):
                    result = 0
                    break
                moves = list(board.legal_moves)
                stack.push(self.rng.choice(moves))
                result = -result
        finally:
            stack.unwind(depth)
        node.last_sim_result = result
        return result


class BackpropagationPolicy:
    """Credits the last simulation result to the node and all its ancestors."""

    def backpropagate(self, node: GameTreeNode) -> None:
        result = node.last_sim_result
        flag = 0
        current: Optional[GameTreeNode] = node
        while current is not None:
            current.visits += 1
            if (flag == 0 and result == 1) or (flag == 1 and result == -1):
                current.wins += 1
            flag ^= 1
            current = current.parent
