import logging
import random
import time
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)

Board = List[List[int]]
Cell = Tuple[int, int]

DIGITS = range(1, 10)

SOLVE_MAX_STEPS = 50_000
COUNT_MAX_STEPS = 5_000
BOARD_ATTEMPTS = 20
CARVE_TIMEOUT = 0.5  # seconds

# Returned by count_solutions when the step budget runs out. Callers pass
# limit=2, so "too complex" reads the same as "not unique".
TOO_COMPLEX = 999

DIFFICULTY: Dict[str, int] = {
    "easy": 30,
    "medium": 40,
    "hard": 50,
    "expert": 55,
}


class BoardGenerationError(RuntimeError):
    """No solved board could be built within the attempt budget."""


class Puzzle(NamedTuple):
    puzzle: Board
    solution: Board

    def to_dict(self) -> Dict[str, Board]:
        return {"puzzle": clone_board(self.puzzle), "solution": clone_board(self.solution)}


# ---- Grid ----
def empty_board() -> Board:
    return [[0] * 9 for _ in range(9)]


def clone_board(board: Board) -> Board:
    return [row[:] for row in board]


def box_origin(r: int, c: int) -> Cell:
    return r - r % 3, c - c % 3


def find_empty(board: Board) -> Cell | None:
    for r in range(9):
        for c in range(9):
            if board[r][c] == 0:
                return r, c
    return None


def count_empty(board: Board) -> int:
    return sum(row.count(0) for row in board)


# ---- Validation ----
def valid(board: Board, num: int, pos: Cell) -> bool:
    r, c = pos
    if num in board[r]:
        return False
    for row in board:
        if row[c] == num:
            return False
    br, bc = box_origin(r, c)
    for row in board[br:br + 3]:
        if num in row[bc:bc + 3]:
            return False
    return True


def candidates(board: Board, r: int, c: int) -> List[int]:
    return [n for n in DIGITS if valid(board, n, (r, c))]


def _has_duplicates(values: List[int]) -> bool:
    nums = [v for v in values if v != 0]
    return len(nums) != len(set(nums))


def is_consistent(board: Board) -> bool:
    """True when no row, column or box repeats a non-zero digit."""
    if len(board) != 9 or any(len(row) != 9 for row in board):
        return False
    if any(v not in range(10) for row in board for v in row):
        return False
    for i in range(9):
        if _has_duplicates(board[i]):
            return False
        if _has_duplicates([board[r][i] for r in range(9)]):
            return False
    for br in range(0, 9, 3):
        for bc in range(0, 9, 3):
            box = [board[r][c] for r in range(br, br + 3) for c in range(bc, bc + 3)]
            if _has_duplicates(box):
                return False
    return True


def is_solved(board: Board) -> bool:
    return is_consistent(board) and count_empty(board) == 0


# ---- Solver ----
def solve(board: Board, max_steps: int = SOLVE_MAX_STEPS) -> bool:
    """Fill every empty cell in place. False if infeasible or over budget."""
    return _solve(board, [0], max_steps)


def _solve(board: Board, steps: List[int], max_steps: int) -> bool:
    steps[0] += 1
    if steps[0] > max_steps:
        return False
    empty = find_empty(board)
    if not empty:
        return True
    r, c = empty
    for n in DIGITS:
        if valid(board, n, (r, c)):
            board[r][c] = n
            if _solve(board, steps, max_steps):
                return True
            board[r][c] = 0
    return False


# ---- Solution counting ----
def most_constrained_cell(board: Board) -> Tuple[Cell, List[int]] | None:
    """Empty cell with the fewest candidates, first found on ties.

    Scanning stops as soon as a cell with one candidate (or none, which
    marks a dead end) turns up. Returns None on a full board.
    """
    best: Tuple[Cell, List[int]] | None = None
    for r in range(9):
        for c in range(9):
            if board[r][c] != 0:
                continue
            cands = candidates(board, r, c)
            if best is None or len(cands) < len(best[1]):
                best = (r, c), cands
                if len(cands) <= 1:
                    return best
    return best


def count_solutions(board: Board, limit: int = 2, max_steps: int = COUNT_MAX_STEPS) -> int:
    """Count completions of board up to limit, or TOO_COMPLEX when over budget.

    Works on a private copy; the caller's board is never touched.
    """
    work = clone_board(board)
    found = [0]
    if not _count(work, limit, found, [0], max_steps):
        return TOO_COMPLEX
    return min(found[0], limit)


def _count(board: Board, limit: int, found: List[int], steps: List[int], max_steps: int) -> bool:
    # False means the step budget ran out and the whole search is abandoned.
    steps[0] += 1
    if steps[0] > max_steps:
        return False
    if found[0] >= limit:
        return True

    choice = most_constrained_cell(board)
    if choice is None:
        found[0] += 1
        return True
    (r, c), cands = choice
    for n in cands:
        board[r][c] = n
        ok = _count(board, limit, found, steps, max_steps)
        board[r][c] = 0
        if not ok:
            return False
        if found[0] >= limit:
            break
    return True


# ---- Full board ----
def fill_box(board: Board, row: int, col: int, rng: random.Random) -> None:
    nums = list(DIGITS)
    rng.shuffle(nums)
    idx = 0
    for r in range(row, row + 3):
        for c in range(col, col + 3):
            board[r][c] = nums[idx]; idx += 1


def generate_full_board(rng: Optional[random.Random] = None, attempts: int = BOARD_ATTEMPTS) -> Board:
    rng = rng or random.Random()
    for attempt in range(1, attempts + 1):
        board = empty_board()
        # diagonal boxes share no row, column or box with each other
        for box in range(0, 9, 3):
            fill_box(board, box, box, rng)
        if solve(board) and is_solved(board):
            return board
        logger.warning("Board attempt %d/%d could not be completed", attempt, attempts)
    logger.error("No solved board after %d attempts", attempts)
    raise BoardGenerationError(f"could not build a solved board in {attempts} attempts")


# ---- Carving ----
def remove_numbers(
    board: Board,
    holes: int,
    rng: Optional[random.Random] = None,
    timeout: Optional[float] = CARVE_TIMEOUT,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """Blank up to `holes` cells in place, keeping the solution unique.

    Every removal is checked with count_solutions; removals that leave zero,
    several or an undetermined number of solutions are undone. Stops early
    when `timeout` seconds have passed (None disables the deadline). Returns
    the number of cells actually blanked.
    """
    rng = rng or random.Random()
    cells = [(r, c) for r in range(9) for c in range(9)]
    rng.shuffle(cells)

    start = clock()
    remaining = holes
    for r, c in cells:
        if remaining <= 0:
            break
        if timeout is not None and clock() - start > timeout:
            break
        backup = board[r][c]
        if backup == 0:
            continue
        board[r][c] = 0
        if count_solutions(board, 2) != 1:
            board[r][c] = backup
        else:
            remaining -= 1

    carved = max(holes, 0) - max(remaining, 0)
    logger.debug("Carved %d of %d requested holes in %.3fs", carved, holes, clock() - start)
    return carved


# ---- Entry points ----
def holes_for(difficulty: str) -> int:
    try:
        return DIFFICULTY[difficulty.lower()]
    except KeyError:
        raise ValueError(f"unknown difficulty: {difficulty!r}") from None


def generate(
    holes: int = DIFFICULTY["easy"],
    rng: Optional[random.Random] = None,
    timeout: Optional[float] = CARVE_TIMEOUT,
) -> Puzzle:
    rng = rng or random.Random()
    solution = generate_full_board(rng)
    puzzle = clone_board(solution)
    remove_numbers(puzzle, holes, rng, timeout)
    return Puzzle(puzzle=puzzle, solution=solution)


def generate_puzzle(
    difficulty: str = "easy",
    rng: Optional[random.Random] = None,
    timeout: Optional[float] = CARVE_TIMEOUT,
) -> Puzzle:
    return generate(holes_for(difficulty), rng, timeout)
