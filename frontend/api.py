# frontend/api.py

from flask import Blueprint, current_app, jsonify

api_blueprint = Blueprint("api", __name__)


@api_blueprint.route("/state", methods=["GET"])
def get_state():
    server = current_app.config["MINESWEEPER_SERVER"]
    board = server.board
    with board.lock:
        rows = board.look().splitlines()
        bombs_remaining = board.bombs_remaining()
    return jsonify({
        "width": board.width,
        "height": board.height,
        "players": server.players.count,
        "debug": server.debug,
        "bombs_remaining": bombs_remaining,
        "board": rows,
    })


@api_blueprint.route("/health", methods=["GET"])
def health():
    return jsonify({"ok": True})
