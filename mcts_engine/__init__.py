"""Monte Carlo tree search chess engine built on python-chess.

Modules:
- game: the host's game state atop python-chess
- evaluator: material evaluation with a capture quiescence pass
- tree: search tree nodes and root reuse between turns
- policies: selection, expansion, simulation and backpropagation
- search: the time-budgeted search loop
- ai: one-call "think and answer" player for hosts
"""

from .ai import AIPlayer, SearchResult
from .config import SearchConfig
from .evaluator import EvaluationCache, Evaluator, MATE_SCORE
from .game import Game
from .position import MoveStack, MoveStackError
from .search import MonteCarloSearch, NoLegalMovesError
from .timer import TurnTimer
from .tree import GameTree, GameTreeNode

__all__ = [
    "AIPlayer",
    "EvaluationCache",
    "Evaluator",
    "Game",
    "GameTree",
    "GameTreeNode",
    "MATE_SCORE",
    "MonteCarloSearch",
    "MoveStack",
    "MoveStackError",
    "NoLegalMovesError",
    "SearchConfig",
    "SearchResult",
    "TurnTimer",
]
