from Sudoku.candidates import CandidateEngine
from Sudoku.output import SolutionFormatter
from Sudoku.puzzle import SudokuPuzzle
from Sudoku.solver import SolveResult, SudokuSolver

from conftest import PUZZLE_DIR, THIRTY, digits_to_text


def test_board_layout(puzzle_from_digits):
    text = SolutionFormatter.format_board(puzzle_from_digits(THIRTY))
    lines = text.splitlines()
    assert len(lines) == 11
    assert lines[0] == "  5 3 -   - 7 -   - - -"
    assert lines[3] == ""
    assert lines[7] == ""
    assert lines[-1] == "  - - -   - 8 -   - 7 9"


def test_board_layout_for_larger_size():
    puzzle = SudokuPuzzle.from_file(str(PUZZLE_DIR / "sixteen.txt"))
    lines = SolutionFormatter.format_board(puzzle).splitlines()
    assert lines[0] == "//N=4"
    assert lines[2] == "  - 2 3 4   - 6 7 8   - 0 A B   - D E F"
    assert len(lines) == 2 + 16 + 3


def test_board_layout_reloads(puzzle_from_digits):
    puzzle = puzzle_from_digits(THIRTY)
    again = SudokuPuzzle.from_string(SolutionFormatter.format_board(puzzle))
    assert (again.values() == puzzle.values()).all()


def test_candidates_listing():
    puzzle = SudokuPuzzle.from_string(digits_to_text(THIRTY))
    CandidateEngine.compute_all_base_candidates(puzzle)
    lines = SolutionFormatter.format_candidates(puzzle).splitlines()
    assert lines[0] == "Square (1, 1) current value:  5"
    assert lines[2] == "Square (1, 3) candidates: 1 2 4"


def test_statistics_report(puzzle_from_digits):
    puzzle = puzzle_from_digits(THIRTY)
    solver = SudokuSolver(puzzle, verbose=False)
    solver.solve()

    text = SolutionFormatter.format_statistics(puzzle, solver.stats)
    assert text.startswith("statistics\n  original board\n")
    assert "    number of occupied squares:         30" in text
    assert "    number of empty squares:            51" in text
    assert "    total number of squares:            81" in text

    summary = SolutionFormatter.summarize_stats(puzzle, solver.stats)
    assert summary['occupied_after'] == 30 + solver.frozen_by_rules()
    assert summary['candidates_per_empty_before'] == solver.stats['candidates_before'] / 51


def test_solution_json_without_result(puzzle_from_digits):
    puzzle = puzzle_from_digits(THIRTY)
    solver = SudokuSolver(puzzle, verbose=False)
    data = SolutionFormatter.format_solution_json(puzzle, solver.stats)
    assert data['result'] is None
    assert data['puzzle_info']['solved'] is False
    assert data['clues'][0][:2] == [5, 3]

    result = SolveResult(status="solved", duration_ms=3)
    data = SolutionFormatter.format_solution_json(puzzle, solver.stats, result)
    assert data['puzzle_info']['solved'] is True
    assert data['result']['duration_ms'] == 3
