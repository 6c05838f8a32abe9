from __future__ import annotations

import logging
import weakref
from typing import Dict, Optional, Sequence

import chess

logger = logging.getLogger(__name__)


class GameTreeNode:
    """A position in the search tree, identified by the move that reached it.

    ``parent`` is held weakly: the tree is owned top-down from the root, so
    promoting a child to root lets the old root and its other subtrees be
    collected.
    """

    __slots__ = (
        "move",
        "_parent",
        "children",
        "visits",
        "wins",
        "last_sim_result",
        "static_value",
        "__weakref__",
    )

    def __init__(
        self,
        move: Optional[chess.Move] = None,
        parent: Optional["GameTreeNode"] = None,
        static_value: int = 0,
    ) -> None:
        self.move = move
        self._parent = weakref.ref(parent) if parent is not None else None
        self.children: Dict[chess.Move, GameTreeNode] = {}
        self.visits = 0
        self.wins = 0
        self.last_sim_result = 0
        self.static_value = static_value

    @property
    def parent(self) -> Optional["GameTreeNode"]:
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, node: Optional["GameTreeNode"]) -> None:
        self._parent = weakref.ref(node) if node is not None else None

    def is_leaf(self) -> bool:
        return not self.children

    def add_child(self, move: chess.Move, static_value: int) -> "GameTreeNode":
        child = GameTreeNode(move=move, parent=self, static_value=static_value)
        self.children[move] = child
        return child

    def __repr__(self) -> str:
        move = self.move.uci() if self.move is not None else "root"
        return (
            f"GameTreeNode({move}, visits={self.visits}, wins={self.wins}, "
            f"children={len(self.children)})"
        )


class GameTree:
    """Owns the root and carries it over between turns of one game."""

    def __init__(self) -> None:
        self.root: Optional[GameTreeNode] = None
        self.reused = False
        # Length of the game history at the root position of the last turn.
        self._root_ply: Optional[int] = None

    def reset(self) -> None:
        self.root = None
        self.reused = False
        self._root_ply = None

    def initialize(self, board: chess.Board, history: Optional[Sequence[chess.Move]] = None) -> chess.Board:
        """Prepare the root for a new turn and return the board to search on.

        The returned board is a private copy of ``board``. When the root
        carries the opponent's last move the copy is rewound by that move, so
        replaying root-first lands on the current position.
        """
        if history is None:
            history = board.move_stack
        history = list(history)
        search_board = board.copy()
        self.reused = False

        if self.root is None or not history:
            self.root = GameTreeNode()
            self._root_ply = len(history)
            return search_board

        promoted = self._lookup(history)
        if promoted is not None:
            promoted.parent = None
            self.root = promoted
            self.reused = True
            logger.debug(
                "Reusing subtree for %s with %d visits",
                promoted.move.uci(), promoted.visits,
            )
        else:
            logger.warning(
                "Opponent move %s not in tree, starting from a fresh root",
                history[-1].uci(),
            )
            self.root = GameTreeNode(move=history[-1])

        self._root_ply = len(history)
        search_board.pop()
        return search_board

    def _lookup(self, history: Sequence[chess.Move]) -> Optional[GameTreeNode]:
        if self._root_ply is None or len(history) != self._root_ply + 2:
            return None
        own_move, reply = history[-2], history[-1]
        node = self.root.children.get(own_move)
        if node is None:
            return None
        return node.children.get(reply)
