from __future__ import annotations

from typing import Any, Mapping, Optional

from flask import Flask, jsonify, request

from mcts_engine import AIPlayer, Game, SearchConfig

MIN_TIME_MS = 10
MAX_TIME_MS = 30_000


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_prefixed_env("MCTS_CHESS")
    if config:
        app.config.update(config)

    search_config = SearchConfig.from_mapping(app.config, prefix="SEARCH_")
    game = Game()
    ai = AIPlayer(search_config)
    app.extensions["mcts_engine"] = ai

    def time_budget(data: Mapping[str, Any]) -> int:
        raw = data.get("time_ms", search_config.time_limit_ms)
        try:
            value = int(raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid time_ms: {raw!r}") from exc
        return max(MIN_TIME_MS, min(MAX_TIME_MS, value))

    def engine_reply(budget_ms: int) -> dict:
        ai_move_uci = ai.choose_move(game.board, time_limit_ms=budget_ms)
        if ai_move_uci:
            game.push_uci(ai_move_uci)
        snap = game.snapshot()
        snap["ai_move"] = ai_move_uci
        result = ai.last_result
        snap["search"] = None if result is None else {
            "iterations": result.iterations,
            "root_visits": result.root_visits,
            "elapsed_ms": result.elapsed_ms,
            "tree_reused": result.tree_reused,
        }
        return snap

    @app.get("/api/state")
    def api_state():
        return jsonify(game.snapshot())

    @app.post("/api/new")
    def api_new():
        data = request.get_json(silent=True) or {}
        fen = data.get("fen")
        color = (data.get("color") or "white").lower()
        if color not in ("white", "black"):
            return jsonify({"error": f"Unknown color: {color}"}), 400
        try:
            budget = time_budget(data)
            game.reset(fen)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        ai.reset()

        # Human plays black: the engine takes the side to move first.
        if color == "black" and not game.is_game_over():
            pre_fen = game.board.fen()
            snap = engine_reply(budget)
            snap["pre_fen"] = pre_fen
            return jsonify(snap)

        snap = game.snapshot()
        snap["ai_move"] = None
        return jsonify(snap)

    @app.post("/api/move")
    def api_move():
        payload = request.get_json(silent=True) or {}
        uci = payload.get("move")
        if not uci:
            return jsonify({"error": "Missing move"}), 400

        try:
            budget = time_budget(payload)
            game.push_uci(uci)
        except ValueError as exc:
            app.logger.info("Rejected move %r: %s", uci, exc)
            return jsonify({"error": str(exc)}), 400

        if game.is_game_over():
            snap = game.snapshot()
            snap["ai_move"] = None
            return jsonify(snap)

        return jsonify(engine_reply(budget))

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
