import logging
import os
import random

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from sudoku_generator import (
    DIFFICULTY,
    BoardGenerationError,
    count_empty,
    generate,
    is_consistent,
    is_solved,
)

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Generation config
CARVE_TIMEOUT_MS = int(os.getenv("SUDOKU_CARVE_TIMEOUT_MS", "500"))
DEFAULT_LEVEL = os.getenv("SUDOKU_DEFAULT_LEVEL", "easy").lower()
MAX_HOLES = int(os.getenv("SUDOKU_MAX_HOLES", "81"))

if DEFAULT_LEVEL not in DIFFICULTY:
    DEFAULT_LEVEL = "easy"

app = Flask(__name__)
app.config["CARVE_TIMEOUT"] = CARVE_TIMEOUT_MS / 1000 if CARVE_TIMEOUT_MS > 0 else None
app.config["DEFAULT_LEVEL"] = DEFAULT_LEVEL
app.config["MAX_HOLES"] = MAX_HOLES


def _is_board(value) -> bool:
    return (
        isinstance(value, list)
        and len(value) == 9
        and all(isinstance(row, list) and len(row) == 9 for row in value)
        and all(isinstance(v, int) and not isinstance(v, bool) for row in value for v in row)
    )


@app.errorhandler(BoardGenerationError)
def board_generation_failed(e):
    app.logger.error("Puzzle generation failed: %s", e)
    return jsonify({"error": "board_generation_failed"}), 500


@app.route("/api/levels")
def api_levels():
    return jsonify(DIFFICULTY)


@app.route("/api/new_puzzle")
def api_new_puzzle():
    default_level = app.config["DEFAULT_LEVEL"]
    level = request.args.get("level", default_level).lower()
    if level not in DIFFICULTY:
        level = default_level
    holes = DIFFICULTY[level]

    raw_holes = request.args.get("holes")
    if raw_holes is not None:
        try:
            holes = int(raw_holes)
        except ValueError:
            return jsonify({"error": "invalid_holes"}), 400
        holes = max(0, min(holes, app.config["MAX_HOLES"]))

    puzzle, solution = generate(holes, random.Random(), app.config["CARVE_TIMEOUT"])
    empty = count_empty(puzzle)
    if empty < holes:
        app.logger.info("Requested %d holes, carved %d", holes, empty)
    return jsonify({
        "level": level,
        "holes": holes,
        "empty": empty,
        "puzzle": puzzle,
        "solution": solution,
    })


@app.route("/api/check", methods=["POST"])
def api_check():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "invalid_board"}), 400
    board = payload.get("board")
    if not _is_board(board):
        return jsonify({"error": "invalid_board"}), 400
    solution = payload.get("solution")
    if solution is not None and not _is_board(solution):
        return jsonify({"error": "invalid_board"}), 400

    solved = is_solved(board)
    if solution is not None:
        solved = solved and board == solution
    return jsonify({"consistent": is_consistent(board), "solved": solved})


if __name__ == "__main__":
    app.run(debug=os.getenv("FLASK_DEBUG", "0") == "1")
