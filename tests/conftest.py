# tests/conftest.py
import sys
from pathlib import Path

import pytest

# app.py and sudoku_generator.py are loose top-level modules, not an installed package
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def solved_board():
    # classic shifted pattern, valid in every row, column and box
    return [[(r * 3 + r // 3 + c) % 9 + 1 for c in range(9)] for r in range(9)]
