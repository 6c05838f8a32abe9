"""Scoped access to the shared search board.

Every component that mutates the board during a search goes through a
``MoveStack`` so pushes and pops always pair up in reverse order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import chess

if TYPE_CHECKING:
    from .tree import GameTreeNode


class MoveStackError(RuntimeError):
    """The board's move stack no longer mirrors the moves we pushed."""


def is_draw(board: chess.Board) -> bool:
    return (
        board.is_stalemate()
        or board.is_insufficient_material()
        or board.halfmove_clock >= 100
        or board.is_repetition(3)
    )


def path_from_root(node: "GameTreeNode") -> List[chess.Move]:
    """Moves leading from the tree root down to ``node``, root first.

    A root created for the first turn has no move and contributes nothing.
    """
    moves: List[chess.Move] = []
    current: Optional["GameTreeNode"] = node
    while current is not None:
        if current.move is not None:
            moves.append(current.move)
        current = current.parent
    moves.reverse()
    return moves


class MoveStack:
    """Records moves pushed on a board and undoes them in exact reverse order."""

    def __init__(self, board: chess.Board) -> None:
        self.board = board
        self._moves: List[chess.Move] = []

    def __len__(self) -> int:
        return len(self._moves)

    def __enter__(self) -> "MoveStack":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # A desynced stack cannot be unwound safely; let the error surface as is.
        if exc_type is not None and issubclass(exc_type, MoveStackError):
            return
        self.unwind()

    @property
    def moves(self) -> List[chess.Move]:
        return list(self._moves)

    def push(self, move: chess.Move) -> None:
        self.board.push(move)
        self._moves.append(move)

    def pop(self) -> chess.Move:
        if not self._moves:
            raise MoveStackError("pop() without a matching push()")
        expected = self._moves.pop()
        undone = self.board.pop()
        if undone != expected:
            raise MoveStackError(
                f"Board undid {undone.uci()} but {expected.uci()} was expected"
            )
        return undone

    def unwind(self, depth: int = 0) -> None:
        """Pop moves until only ``depth`` of ours remain on the board."""
        while len(self._moves) > depth:
            self.pop()

    def replay(self, node: "GameTreeNode") -> int:
        moves = path_from_root(node)
        for move in moves:
            self.push(move)
        return len(moves)
