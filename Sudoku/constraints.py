"""
Constraint checking and deduction-rule detection for the Sudoku solver

ConstraintChecker counts value occurrences per row, column and subsquare and
compares a board against its clue snapshot.  DeductionRules scans the base
candidate frames for forced values; it never mutates the board, the solver
applies whatever it finds.
"""
from typing import List, Optional, Tuple

import numpy as np

from .candidates import BIT
from .puzzle import Cell, SudokuPuzzle, map_int_to_alphabet


Deduction = Tuple[Cell, int]


# -----------------------------------------------------------------------------
# Constraint Checking
# -----------------------------------------------------------------------------
class ConstraintChecker:
    """Validates a board against the row/column/subsquare uniqueness rules."""

    @staticmethod
    def _unit_blocks(puzzle: SudokuPuzzle, grid: np.ndarray) -> List[Tuple[str, np.ndarray]]:
        """(label, values) for every row, column and subsquare of grid."""
        n, n2 = puzzle.n, puzzle.n2
        blocks = []
        for i in range(n2):
            blocks.append((f"Row {i + 1}", grid[i, :]))
        for j in range(n2):
            blocks.append((f"Column {j + 1}", grid[:, j]))
        # (band, row-in-band, stack, col-in-stack) -> one subsquare per row
        squares = grid.reshape(n, n, n, n).swapaxes(1, 2).reshape(n2, n2)
        for k in range(n2):
            srow = (k // n) * n + 1
            scol = (k % n) * n + 1
            blocks.append((f"Subsquare ({srow}, {scol})", squares[k]))
        return blocks

    @staticmethod
    def find_violations(puzzle: SudokuPuzzle, full: bool = False) -> List[str]:
        """
        List every uniqueness violation on the board.

        Partial mode: a value may appear at most once per unit.
        Full mode: each value must appear exactly once per unit.
        """
        grid = puzzle.values()
        if grid.min() < 0 or grid.max() > puzzle.n2:
            raise ValueError(f"Board holds a value outside 0..{puzzle.n2}")

        problems = []
        for label, block in ConstraintChecker._unit_blocks(puzzle, grid):
            counts = np.bincount(block, minlength=puzzle.n2 + 1)
            for v in range(1, puzzle.n2 + 1):
                used = int(counts[v])
                if used > 1 or (full and used != 1):
                    problems.append(
                        f"{label} contains {map_int_to_alphabet(v)} {used} times"
                    )
        return problems

    @staticmethod
    def verify(puzzle: SudokuPuzzle, full: bool = False) -> bool:
        return not ConstraintChecker.find_violations(puzzle, full)

    @staticmethod
    def clue_mismatches(puzzle: SudokuPuzzle,
                        snapshot: Optional[np.ndarray] = None) -> List[Tuple[int, int, int, int]]:
        """(row, col, clue, current) for every clue the board no longer agrees with."""
        if snapshot is None:
            snapshot = puzzle.clues_snapshot
        if snapshot is None:
            raise ValueError("No clue snapshot has been taken for this puzzle")

        grid = puzzle.values()
        bad = (snapshot != 0) & (grid != snapshot)
        return [
            (int(r) + 1, int(c) + 1, int(snapshot[r, c]), int(grid[r, c]))
            for r, c in zip(*np.nonzero(bad))
        ]

    @staticmethod
    def verify_against_clues(puzzle: SudokuPuzzle,
                             snapshot: Optional[np.ndarray] = None) -> bool:
        """True when every clue in the snapshot still holds on the board."""
        return not ConstraintChecker.clue_mismatches(puzzle, snapshot)


# -----------------------------------------------------------------------------
# Deduction Rules
# -----------------------------------------------------------------------------
class DeductionRules:
    """Detects values forced by the base candidate frames (read-only scans)."""

    @staticmethod
    def find_only_candidate(puzzle: SudokuPuzzle) -> Optional[Deduction]:
        """First unfrozen cell (row-major) with exactly one base candidate."""
        for cell in puzzle.cells:
            if not cell.frozen and cell.base_candidate_count == 1:
                value = cell.candidates.base.bit_length() - 1
                return cell, value
        return None

    @staticmethod
    def find_only_place(puzzle: SudokuPuzzle, cells: List[Cell]) -> Optional[Deduction]:
        """
        First value (in increasing order) that is a base candidate of exactly
        one unfrozen cell among cells.
        """
        seen = [0] * (puzzle.n2 + 1)
        where: List[Optional[Cell]] = [None] * (puzzle.n2 + 1)
        for cell in cells:
            if cell.frozen:
                continue
            base = cell.candidates.base
            for v in range(1, puzzle.n2 + 1):
                if base & BIT[v]:
                    seen[v] += 1
                    where[v] = cell

        for v in range(1, puzzle.n2 + 1):
            if seen[v] == 1:
                return where[v], v
        return None

    @staticmethod
    def find_in_rows(puzzle: SudokuPuzzle) -> Optional[Deduction]:
        for r in range(1, puzzle.n2 + 1):
            found = DeductionRules.find_only_place(puzzle, puzzle.row_cells(r))
            if found:
                return found
        return None

    @staticmethod
    def find_in_columns(puzzle: SudokuPuzzle) -> Optional[Deduction]:
        for c in range(1, puzzle.n2 + 1):
            found = DeductionRules.find_only_place(puzzle, puzzle.column_cells(c))
            if found:
                return found
        return None

    @staticmethod
    def find_in_subsquares(puzzle: SudokuPuzzle) -> Optional[Deduction]:
        for srow, scol in puzzle.subsquare_origins():
            found = DeductionRules.find_only_place(puzzle, puzzle.subsquare_cells(srow, scol))
            if found:
                return found
        return None
