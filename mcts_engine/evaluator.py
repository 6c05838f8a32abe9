from __future__ import annotations

from collections import OrderedDict
from typing import Dict, Optional

import chess
import chess.polyglot

from .position import MoveStack, is_draw


# Sentinel for a mated side, mirrors a 32-bit int max.
MATE_SCORE = 2**31 - 1


class EvaluationCache:
    """LRU memo of static evaluations keyed by Zobrist hash."""

    def __init__(self, max_entries: int = 100_000) -> None:
        self._table: "OrderedDict[int, int]" = OrderedDict()
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        return len(self._table)

    def get(self, key: int) -> Optional[int]:
        if key in self._table:
            self._table.move_to_end(key)
            self.hits += 1
            return self._table[key]
        self.misses += 1
        return None

    def put(self, key: int, value: int) -> None:
        if key in self._table:
            self._table.move_to_end(key)
        elif len(self._table) >= self.max_entries:
            self._table.popitem(last=False)
            self.evictions += 1
        self._table[key] = value

    def clear(self) -> None:
        self._table.clear()


class Evaluator:
    """Static evaluation with a capture-only quiescence pass.

    Positive scores favor White, negative scores favor Black. Callers that
    need the score from the mover's side flip the sign themselves.
    """

    MATERIAL_VALUES: Dict[chess.PieceType, int] = {
        chess.PAWN: 100,
        chess.KNIGHT: 300,
        chess.BISHOP: 300,
        chess.ROOK: 500,
        chess.QUEEN: 900,
        chess.KING: 500000,
    }

    def __init__(self, cache: Optional[EvaluationCache] = None) -> None:
        self.cache = cache

    def evaluate(self, board: chess.Board) -> int:
        if board.is_checkmate():
            return -MATE_SCORE if board.turn == chess.WHITE else MATE_SCORE
        if is_draw(board):
            return 0

        key = None
        if self.cache is not None:
            key = chess.polyglot.zobrist_hash(board)
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        with MoveStack(board) as stack:
            self.quiesce(stack)
            score = self.material(board) + self.mobility(board)

        if self.cache is not None:
            self.cache.put(key, score)
        return score

    @classmethod
    def quiesce(cls, stack: MoveStack) -> int:
        """Play out the cheapest captures until none remain.

        The captures stay on ``stack``; the caller unwinds them. Returns the
        number of captures played.
        """
        played = 0
        while True:
            move = cls.least_valuable_capture(stack.board)
            if move is None:
                return played
            stack.push(move)
            played += 1

    @classmethod
    def least_valuable_capture(cls, board: chess.Board) -> Optional[chess.Move]:
        best: Optional[chess.Move] = None
        best_delta = 0
        for move in board.generate_legal_captures():
            attacker = board.piece_type_at(move.from_square)
            if board.is_en_passant(move):
                victim = chess.PAWN
            else:
                victim = board.piece_type_at(move.to_square)
            delta = cls.MATERIAL_VALUES[attacker] - cls.MATERIAL_VALUES[victim]
            if best is None or delta < best_delta:
                best = move
                best_delta = delta
        return best

    @classmethod
    def material(cls, board: chess.Board) -> int:
        score = 0
        for piece_type, value in cls.MATERIAL_VALUES.items():
            score += value * len(board.pieces(piece_type, chess.WHITE))
            score -= value * len(board.pieces(piece_type, chess.BLACK))
        return score

    @staticmethod
    def mobility(board: chess.Board) -> int:
        count = board.legal_moves.count()
        return count if board.turn == chess.WHITE else -count
