"""
Candidate engine: per-cell bitmask stacks

Bit v of a mask is set when value v is still a candidate for the cell.  The
base frame (depth 0) is recomputed from the neighbors' values; during search
each assignment pushes one frame onto every unfrozen neighbor and each undo
pops it again, so the top frame always equals "values no neighbor holds".
"""
from typing import List, Optional, Sequence, Tuple

from .puzzle import MAX_N, Cell, SudokuPuzzle


# Single-bit masks for values 0..MAX_N^2, built once at import
BIT: Tuple[int, ...] = tuple(1 << v for v in range((MAX_N * MAX_N) + 1))


class CandidateStackError(RuntimeError):
    """A candidate stack operation was called in a state it does not allow."""


def full_mask(n2: int) -> int:
    """Mask with bits 1..n2 set."""
    return (1 << (n2 + 1)) - 2


class CandidateEngine:
    """Computes, restricts and releases candidate sets on a board."""

    # -------------------------------------------------------------------------
    # Base candidates
    # -------------------------------------------------------------------------
    @staticmethod
    def compute_base_candidates(puzzle: SudokuPuzzle, cell: Cell) -> bool:
        """
        Reset the cell's stack to a single frame holding every value that no
        neighbor currently holds.

        Returns False when the cell is unfrozen and has no candidate at all
        (a dead cell).  Frozen cells are left alone.
        """
        if cell.frozen:
            return True

        seen = [0] * (puzzle.n2 + 1)
        for pos in cell.neighbors:
            seen[puzzle.cell_by_pos[pos].value] += 1

        mask = 0
        for v in range(1, puzzle.n2 + 1):
            if seen[v] == 0:
                mask |= BIT[v]

        cell.candidates.reset(mask)
        cell.base_candidate_count = mask.bit_count()
        return mask != 0

    @staticmethod
    def compute_all_base_candidates(puzzle: SudokuPuzzle) -> List[Cell]:
        """Recompute base candidates for every unfrozen cell; return the dead ones."""
        dead = []
        for cell in puzzle.cells:
            if not CandidateEngine.compute_base_candidates(puzzle, cell):
                dead.append(cell)
        return dead

    # -------------------------------------------------------------------------
    # Incremental restriction
    # -------------------------------------------------------------------------
    @staticmethod
    def restrict(cell: Cell, value: int) -> None:
        """Push a copy of the top frame with value's bit cleared."""
        if cell.frozen:
            raise CandidateStackError(f"restrict on frozen {cell}")
        if not cell.candidates.depth:
            raise CandidateStackError(f"restrict on {cell} before its base candidates exist")
        cell.candidates.push(cell.candidates.top & ~BIT[value])

    @staticmethod
    def release(cell: Cell) -> None:
        """Pop the top frame, undoing the matching restrict."""
        if cell.frozen:
            raise CandidateStackError(f"release on frozen {cell}")
        if cell.candidates.depth <= 1:
            raise CandidateStackError(f"release would pop the base frame of {cell}")
        cell.candidates.pop()

    @staticmethod
    def propagate(puzzle: SudokuPuzzle, cell: Cell, value: int, assigning: bool) -> None:
        """Restrict (or release) value on every unfrozen neighbor of cell."""
        for pos in cell.neighbors:
            neighbor = puzzle.cell_by_pos[pos]
            if neighbor.frozen:
                continue
            if assigning:
                CandidateEngine.restrict(neighbor, value)
            else:
                CandidateEngine.release(neighbor)

    @staticmethod
    def freeze(cell: Cell, value: int) -> None:
        """Fix value on the cell for the rest of solving."""
        cell.value = value
        cell.frozen = True
        cell.candidates.clear()
        cell.base_candidate_count = 0

    # -------------------------------------------------------------------------
    # Mask helpers
    # -------------------------------------------------------------------------
    @staticmethod
    def first_candidate(mask: int, n2: int, above: int = 0) -> int:
        """Smallest value > above whose bit is set in mask, or 0 if there is none."""
        remaining = mask & full_mask(n2) & ~((1 << (above + 1)) - 1)
        if not remaining:
            return 0
        lowest = remaining & -remaining
        return lowest.bit_length() - 1

    @staticmethod
    def candidate_values(mask: int, n2: int) -> List[int]:
        return [v for v in range(1, n2 + 1) if mask & BIT[v]]

    @staticmethod
    def live_candidate_total(puzzle: SudokuPuzzle) -> int:
        """Sum of base candidate counts over the unfrozen cells."""
        return sum(c.base_candidate_count for c in puzzle.cells if not c.frozen)

    @staticmethod
    def invariant_violations(puzzle: SudokuPuzzle,
                             cells: Optional[Sequence[Cell]] = None) -> List[Tuple[int, int, int]]:
        """
        Check that, for each unfrozen cell, bit v of the top frame is set iff no
        neighbor holds v.  Returns (row, col, value) for every disagreement.
        """
        violations = []
        for cell in (puzzle.cells if cells is None else cells):
            if cell.frozen:
                continue
            held = {puzzle.cell_by_pos[pos].value for pos in cell.neighbors}
            top = cell.candidates.top
            for v in range(1, puzzle.n2 + 1):
                if bool(top & BIT[v]) == (v in held):
                    violations.append((cell.row, cell.col, v))
        return violations
