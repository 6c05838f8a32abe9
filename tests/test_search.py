from __future__ import annotations

import chess
import chess.polyglot
import pytest

from mcts_engine import (
    GameTreeNode,
    MonteCarloSearch,
    NoLegalMovesError,
    SearchConfig,
)

from conftest import BACK_RANK_FEN, FOOLS_MATE_FEN, KQ_VS_K_FEN, FakeTimer, RecordingBoard


def _engine(seed: int = 1) -> MonteCarloSearch:
    return MonteCarloSearch(SearchConfig(seed=seed))


def _assert_balanced(log):
    open_moves = []
    for action, move in log:
        if action == "push":
            open_moves.append(move)
        else:
            assert open_moves, f"pop of {move} without a push"
            assert open_moves.pop() == move
    assert open_moves == []


def test_each_iteration_restores_the_board():
    engine = _engine()
    engine.initialize(RecordingBoard(KQ_VS_K_FEN))
    board = engine.board
    before = (board.fen(), list(board.move_stack), chess.polyglot.zobrist_hash(board))

    for _ in range(6):
        board.log.clear()
        engine.iterate()
        _assert_balanced(board.log)
        after = (board.fen(), list(board.move_stack), chess.polyglot.zobrist_hash(board))
        assert after == before


def test_root_visits_equal_completed_iterations(timer):
    engine = _engine()
    engine.initialize(chess.Board(KQ_VS_K_FEN))

    assert engine.search(timer, budget_ms=1000, max_iterations=15) == 15
    assert engine.root.visits == 15
    assert sum(c.visits for c in engine.root.children.values()) == 14


def test_search_checks_the_clock_only_between_iterations(timer):
    engine = _engine()
    engine.initialize(chess.Board(KQ_VS_K_FEN))
    simulate = engine.simulation.simulate

    def slow_simulate(node, stack):
        timer.now += 500
        return simulate(node, stack)

    engine.simulation.simulate = slow_simulate
    assert engine.search(timer, budget_ms=100) == 1
    assert engine.root.visits == 1
    assert timer.now > 100
    assert engine.board.fen() == chess.Board(KQ_VS_K_FEN).fen()


def test_search_with_spent_budget_does_nothing():
    engine = _engine()
    engine.initialize(chess.Board())
    assert engine.search(FakeTimer(now=50), budget_ms=50) == 0
    assert engine.root.visits == 0


def test_search_requires_initialize(timer):
    with pytest.raises(RuntimeError):
        _engine().search(timer, budget_ms=10)


def test_opening_decision_is_a_root_child(timer):
    board = chess.Board()
    engine = _engine(seed=7)
    engine.initialize(board)
    engine.search(timer, budget_ms=1000, max_iterations=25)

    assert len(engine.root.children) == 20
    assert all(child.visits >= 1 for child in engine.root.children.values())
    best = engine.get_best_move()
    assert best in engine.root.children
    assert best in board.legal_moves
    assert board.move_stack == []


def test_mating_move_is_found_and_never_descended(timer):
    engine = _engine(seed=3)
    engine.initialize(chess.Board(BACK_RANK_FEN))
    engine.search(timer, budget_ms=1000, max_iterations=60)

    mate = chess.Move.from_uci("a1a8")
    mate_node = engine.root.children[mate]
    assert engine.get_best_move() == mate
    assert mate_node.children == {}
    assert mate_node.wins == mate_node.visits
    assert engine.board.fen() == chess.Board(BACK_RANK_FEN).fen()


def test_terminal_root_has_no_decision(timer):
    engine = _engine()
    engine.initialize(chess.Board(FOOLS_MATE_FEN))
    engine.search(timer, budget_ms=1000, max_iterations=3)

    assert engine.root.visits == 3
    assert engine.root.children == {}
    assert engine.board.fen() == FOOLS_MATE_FEN
    with pytest.raises(NoLegalMovesError):
        engine.get_best_move()


def test_best_move_is_most_visited_child():
    engine = _engine()
    engine.initialize(chess.Board())
    root = engine.root
    for uci, visits, wins in (("a2a3", 5, 5), ("b2b3", 9, 1), ("c2c3", 9, 9)):
        child = root.add_child(chess.Move.from_uci(uci), 0)
        child.visits, child.wins = visits, wins
    assert engine.get_best_move() == chess.Move.from_uci("b2b3")


def test_reset_clears_tree_and_cache(timer):
    engine = _engine()
    engine.initialize(chess.Board(KQ_VS_K_FEN))
    engine.search(timer, budget_ms=1000, max_iterations=3)
    engine.reset()
    assert engine.root is None
    assert len(engine.cache) == 0


def test_cache_can_be_disabled(timer):
    engine = MonteCarloSearch(SearchConfig(seed=1, eval_cache_size=0))
    assert engine.cache is None
    engine.initialize(chess.Board(KQ_VS_K_FEN))
    assert engine.search(timer, budget_ms=1000, max_iterations=3) == 3


def test_root_node_of_fresh_tree_is_isolated():
    engine = _engine()
    engine.initialize(chess.Board())
    assert isinstance(engine.root, GameTreeNode)
    assert engine.root.parent is None
