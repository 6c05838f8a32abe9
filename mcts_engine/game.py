from __future__ import annotations

from typing import Dict, List, Optional

import chess


class Game:
    """The host's copy of a game: the real board plus status helpers.

    The search engine never touches this board directly; it is handed to
    ``AIPlayer.choose_move`` which searches on a private copy.
    """

    def __init__(self, starting_fen: Optional[str] = None) -> None:
        self.reset(starting_fen)

    def reset(self, starting_fen: Optional[str] = None) -> None:
        self.board = chess.Board(fen=starting_fen) if starting_fen else chess.Board()
        self.last_move_was_capture = False

    def get_turn_color(self) -> str:
        return "white" if self.board.turn == chess.WHITE else "black"

    def get_legal_moves(self) -> List[str]:
        return [move.uci() for move in self.board.legal_moves]

    def is_game_over(self) -> bool:
        return self.board.is_game_over()

    def get_result(self) -> Optional[str]:
        if not self.board.is_game_over():
            return None
        return self.board.result()

    def parse_uci(self, uci: str) -> chess.Move:
        """Resolve a UCI string to a legal move, auto-queening bare promotions."""
        try:
            move = chess.Move.from_uci(uci)
        except ValueError as exc:
            raise ValueError(f"Malformed move: {uci}") from exc
        if move in self.board.legal_moves:
            return move

        if move.promotion is None:
            piece = self.board.piece_at(move.from_square)
            if piece and piece.piece_type == chess.PAWN:
                promo_move = chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
                if promo_move in self.board.legal_moves:
                    return promo_move

        raise ValueError(f"Illegal move: {uci}")

    def push_uci(self, uci: str) -> chess.Move:
        move = self.parse_uci(uci)
        self.last_move_was_capture = self.board.is_capture(move)
        self.board.push(move)
        return move

    def pop(self) -> chess.Move:
        return self.board.pop()

    def snapshot(self) -> Dict[str, object]:
        last_uci: Optional[str] = None
        if self.board.move_stack:
            last_uci = self.board.move_stack[-1].uci()

        return {
            "fen": self.board.fen(),
            "turn": self.get_turn_color(),
            "legal_moves": self.get_legal_moves(),
            "game_over": self.is_game_over(),
            "result": self.get_result(),
            "last_move": last_uci,
            "last_move_capture": self.last_move_was_capture,
            "in_check": self.board.is_check(),
            "ply": len(self.board.move_stack),
        }
