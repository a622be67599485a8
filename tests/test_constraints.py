import numpy as np
import pytest

from Sudoku.candidates import CandidateEngine
from Sudoku.constraints import ConstraintChecker, DeductionRules
from Sudoku.puzzle import SudokuPuzzle

from conftest import THIRTY, THIRTY_SOLUTION, digits_to_text


def blank_with(*clues):
    puzzle = SudokuPuzzle(3)
    for r, c, v in clues:
        puzzle.set_clue(r, c, v)
    return puzzle


# -----------------------------------------------------------------------------
# Verification
# -----------------------------------------------------------------------------
def test_partial_board_with_distinct_values_passes(puzzle_from_digits):
    puzzle = puzzle_from_digits(THIRTY)
    assert ConstraintChecker.verify(puzzle)
    assert not ConstraintChecker.verify(puzzle, full=True)


def test_solved_board_passes_full_check(puzzle_from_digits):
    puzzle = puzzle_from_digits(THIRTY_SOLUTION)
    assert ConstraintChecker.find_violations(puzzle, full=True) == []


def test_duplicate_in_row_column_and_subsquare():
    puzzle = blank_with((1, 1, 7), (1, 9, 7))
    assert ConstraintChecker.find_violations(puzzle) == ["Row 1 contains 7 2 times"]

    puzzle = blank_with((2, 4, 3), (8, 4, 3))
    assert ConstraintChecker.find_violations(puzzle) == ["Column 4 contains 3 2 times"]

    puzzle = blank_with((4, 4, 9), (6, 6, 9))
    assert ConstraintChecker.find_violations(puzzle) == ["Subsquare (4, 4) contains 9 2 times"]


def test_full_check_reports_missing_values(puzzle_from_digits):
    digits = THIRTY_SOLUTION[:-1] + "0"
    problems = ConstraintChecker.find_violations(puzzle_from_digits(digits), full=True)
    assert problems == [
        "Row 9 contains 9 0 times",
        "Column 9 contains 9 0 times",
        "Subsquare (7, 7) contains 9 0 times",
    ]


def test_subsquare_labels_on_larger_board():
    puzzle = SudokuPuzzle(4)
    puzzle.set_clue(5, 9, 16)
    puzzle.set_clue(8, 12, 16)
    assert ConstraintChecker.find_violations(puzzle) == ["Subsquare (5, 9) contains F 2 times"]


def test_out_of_range_value_is_rejected():
    puzzle = SudokuPuzzle(3)
    puzzle.cell(1, 1).value = 10
    with pytest.raises(ValueError):
        ConstraintChecker.find_violations(puzzle)


def test_clue_mismatches(puzzle_from_digits):
    puzzle = puzzle_from_digits(THIRTY)
    assert ConstraintChecker.verify_against_clues(puzzle)

    puzzle.cell(1, 1).value = 4
    puzzle.cell(1, 3).value = 4  # not a clue, not compared
    assert ConstraintChecker.clue_mismatches(puzzle) == [(1, 1, 5, 4)]
    assert not ConstraintChecker.verify_against_clues(puzzle)


def test_clue_mismatches_against_explicit_snapshot():
    puzzle = SudokuPuzzle(3)
    snapshot = np.zeros((9, 9), dtype=np.int64)
    snapshot[8, 8] = 2
    assert ConstraintChecker.clue_mismatches(puzzle, snapshot) == [(9, 9, 2, 0)]


def test_clue_mismatches_needs_a_snapshot():
    with pytest.raises(ValueError):
        ConstraintChecker.clue_mismatches(SudokuPuzzle(3))


# -----------------------------------------------------------------------------
# Deduction rules
# -----------------------------------------------------------------------------
def test_only_candidate():
    # r1c9 sees 1..8 in its row, so 9 is its only candidate
    puzzle = SudokuPuzzle.from_string(
        "1 2 3 4 5 6 7 8 -\n" + "- - - - - - - - -\n" * 8
    )
    CandidateEngine.compute_all_base_candidates(puzzle)
    cell, value = DeductionRules.find_only_candidate(puzzle)
    assert cell.pos == (1, 9)
    assert value == 9


def test_only_place_in_row():
    # 1 is blocked from r1c1..r1c8 by the columns and subsquares, only r1c9 is left
    puzzle = blank_with(
        (2, 1, 1), (3, 4, 1), (4, 7, 1), (5, 8, 1),
    )
    CandidateEngine.compute_all_base_candidates(puzzle)
    assert DeductionRules.find_only_candidate(puzzle) is None
    cell, value = DeductionRules.find_in_rows(puzzle)
    assert cell.pos == (1, 9)
    assert value == 1


def test_only_place_in_column():
    puzzle = blank_with(
        (1, 2, 1), (4, 3, 1), (7, 4, 1), (8, 5, 1),
    )
    CandidateEngine.compute_all_base_candidates(puzzle)
    cell, value = DeductionRules.find_in_columns(puzzle)
    assert cell.pos == (9, 1)
    assert value == 1


def test_only_place_in_subsquare():
    puzzle = blank_with(
        (1, 4, 1), (2, 7, 1), (4, 2, 1), (5, 3, 1),
    )
    CandidateEngine.compute_all_base_candidates(puzzle)
    cell, value = DeductionRules.find_in_subsquares(puzzle)
    assert cell.pos == (3, 1)
    assert value == 1


def test_only_place_ignores_frozen_cells():
    puzzle = SudokuPuzzle.from_string(digits_to_text(THIRTY))
    CandidateEngine.compute_all_base_candidates(puzzle)
    row = puzzle.row_cells(1)
    found = DeductionRules.find_only_place(puzzle, row)
    assert found is None or not found[0].frozen


def test_no_rule_fires_on_blank_board():
    puzzle = SudokuPuzzle(3)
    CandidateEngine.compute_all_base_candidates(puzzle)
    assert DeductionRules.find_only_candidate(puzzle) is None
    assert DeductionRules.find_in_rows(puzzle) is None
    assert DeductionRules.find_in_columns(puzzle) is None
    assert DeductionRules.find_in_subsquares(puzzle) is None
