from pathlib import Path

import pytest

from Sudoku.puzzle import SudokuPuzzle


PUZZLE_DIR = Path(__file__).parent.parent / "data" / "puzzles"

SEVENTEEN = "000000010400000000020000000000050407008000300001090000300400200050100000000806000"
SEVENTEEN_SOLUTION = "693784512487512936125963874932651487568247391741398625319475268856129743274836159"

THIRTY = "530070000600195000098000060800060003400803001700020006060000280000419005000080079"
THIRTY_SOLUTION = "534678912672195348198342567859761423426853791713924856961537284287419635345286179"

# SEVENTEEN with a wrong 2 at r1c4: passes preprocessing, search runs dry
EXHAUSTED = "000200010400000000020000000000050407008000300001090000300400200050100000000806000"


def digits_to_text(digits: str) -> str:
    """81-digit string ('0' = blank) to puzzle file text."""
    rows = [digits[i:i + 9] for i in range(0, 81, 9)]
    return "\n".join(" ".join("-" if ch == "0" else ch for ch in row) for row in rows) + "\n"


def grid_digits(puzzle: SudokuPuzzle) -> str:
    return "".join(str(v) for v in puzzle.values().flatten())


@pytest.fixture
def puzzle_from_digits():
    def _make(digits: str) -> SudokuPuzzle:
        return SudokuPuzzle.from_string(digits_to_text(digits))
    return _make


@pytest.fixture
def write_puzzle(tmp_path):
    def _write(text: str, name: str = "puzzle.txt") -> str:
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return _write
