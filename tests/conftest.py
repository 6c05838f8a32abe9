from __future__ import annotations

import chess
import pytest

# White to move and mated (fool's mate).
FOOLS_MATE_FEN = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
# White mates with Ra8.
BACK_RANK_FEN = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"
# White queen and king against a lone king; random playouts end quickly.
KQ_VS_K_FEN = "8/8/8/4k3/8/8/8/3QK3 w - - 0 1"


class FakeTimer:
    """Timer whose clock only moves when a test says so."""

    def __init__(self, now: int = 0) -> None:
        self.now = now
        self.reads = 0

    @property
    def milliseconds_elapsed_this_turn(self) -> int:
        self.reads += 1
        return self.now


class RecordingBoard(chess.Board):
    """Board that logs every push and pop made on it."""

    def __init__(self, *args, **kwargs) -> None:
        self.log = []
        super().__init__(*args, **kwargs)

    def push(self, move: chess.Move) -> None:
        self.log.append(("push", move))
        super().push(move)

    def pop(self) -> chess.Move:
        move = super().pop()
        self.log.append(("pop", move))
        return move


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()
