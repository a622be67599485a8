"""
Sudoku solver: fixed-point preprocessing followed by chronological backtracking

Phase 1 recomputes every base candidate set and freezes one forced cell at a
time (only candidate, then only place in a row, column or subsquare) until no
rule fires.  Phase 2 scans the board in row-major order, assigning the smallest
remaining candidate to each unfrozen cell and undoing the most recent
assignment whenever a cell runs out of candidates.
"""
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .candidates import CandidateEngine, CandidateStackError
from .constraints import ConstraintChecker, Deduction, DeductionRules
from .puzzle import Cell, SudokuPuzzle


STATUS_SOLVED = "solved"
STATUS_INVALID_SETUP = "invalid-setup"
STATUS_UNSOLVABLE = "unsolvable"
STATUS_NO_SOLUTION = "no-solution"
STATUS_INCONSISTENT = "inconsistent"

PROGRESS_INTERVAL = 100000  # unstackings between progress lines

# (stats key, printed name, detector) in the order the rules are tried
RULES: List[Tuple[str, str, Callable[[SudokuPuzzle], Optional[Deduction]]]] = [
    ("frozen_only_candidate", "only candidate", DeductionRules.find_only_candidate),
    ("frozen_by_row", "row rule", DeductionRules.find_in_rows),
    ("frozen_by_column", "column rule", DeductionRules.find_in_columns),
    ("frozen_by_subsquare", "subsquare rule", DeductionRules.find_in_subsquares),
]


@dataclass
class SolveResult:
    status: str
    duration_ms: int
    message: str = ""
    problems: Tuple[str, ...] = ()

    @property
    def solved(self) -> bool:
        return self.status == STATUS_SOLVED


class SudokuSolver:
    def __init__(self, puzzle: SudokuPuzzle, verbose: bool = True,
                 skip_preprocessing: bool = False, check_invariants: bool = False):
        self.puzzle = puzzle
        self.verbose = verbose
        self.skip_preprocessing = skip_preprocessing  # only compute base candidates once
        self.check_invariants = check_invariants  # slow, re-checks neighbors after every move
        self.dead_cells: List[Cell] = []
        self.stats: Dict[str, int] = {
            'occupied_originally': puzzle.count_clues(),
            'candidates_before': 0,
            'frozen_only_candidate': 0,
            'frozen_by_row': 0,
            'frozen_by_column': 0,
            'frozen_by_subsquare': 0,
            'candidates_after': 0,
            'search_moves': 0,
            'unstackings': 0,
        }

    # -------------------------------------------------------------------------
    # Main solving driver
    # -------------------------------------------------------------------------
    def solve(self) -> SolveResult:
        """Check the clues, preprocess, search, then check the result."""
        start = time.time()
        if self.puzzle.clues_snapshot is None:
            self.puzzle.take_snapshot()

        if self.verbose:
            print(f"Starting solver: {self.puzzle}")

        problems = ConstraintChecker.find_violations(self.puzzle, full=False)
        if problems:
            return self._finish(start, STATUS_INVALID_SETUP,
                                "The given clues break the uniqueness rules.", problems)

        if self.verbose:
            print("=== Phase 1: Preprocessing ===")
        if not self.preprocess():
            cells = ", ".join(f"r{c.row}c{c.col}" for c in self.dead_cells)
            return self._finish(start, STATUS_UNSOLVABLE,
                                f"Can't get started: no candidates for {cells}.")

        if self.verbose:
            cp = self.puzzle.get_completion_percentage()
            print(f"\n=== Phase 2: Backtracking ===")
            print(f"Starting at {cp:.1%} complete\n")
        if not self.search():
            return self._finish(start, STATUS_NO_SOLUTION,
                                "Search exhausted every candidate without a full assignment.")

        mismatches = ConstraintChecker.clue_mismatches(self.puzzle)
        if mismatches:
            problems = [f"r{r}c{c}: clue {clue} became {cur}" for r, c, clue, cur in mismatches]
            return self._finish(start, STATUS_INCONSISTENT,
                                "Not a solution to the original problem.", problems)

        problems = ConstraintChecker.find_violations(self.puzzle, full=True)
        if problems:
            return self._finish(start, STATUS_INCONSISTENT, "Invalid solution.", problems)

        return self._finish(start, STATUS_SOLVED, "Solved successfully.")

    def _finish(self, start: float, status: str, message: str,
                problems: Optional[List[str]] = None) -> SolveResult:
        duration_ms = int((time.time() - start) * 1000)
        if self.verbose:
            print(f"\n[solver] {status} in {duration_ms} ms: {message}")
            for problem in problems or []:
                print(f"  {problem}")
        return SolveResult(status=status, duration_ms=duration_ms, message=message,
                           problems=tuple(problems or ()))

    # -------------------------------------------------------------------------
    # Phase 1: preprocessing
    # -------------------------------------------------------------------------
    def preprocess(self) -> bool:
        """
        Run the deduction rules to a fixed point.

        Each pass recomputes the base candidates of every unfrozen cell, then
        freezes at most one cell, since a freeze changes the candidates of its
        neighbors.  Returns False as soon as some unfrozen cell has no
        candidate left.
        """
        first_time = True
        solvable = True

        while True:
            self.dead_cells = CandidateEngine.compute_all_base_candidates(self.puzzle)

            if first_time:
                self.stats['candidates_before'] = CandidateEngine.live_candidate_total(self.puzzle)
                first_time = False

            if self.dead_cells:
                solvable = False
                break

            if self.skip_preprocessing:
                break

            if not self._apply_one_rule():
                break

        self.stats['candidates_after'] = CandidateEngine.live_candidate_total(self.puzzle)

        if self.verbose:
            frozen = self.frozen_by_rules()
            if solvable:
                print(f"Preprocessing froze {frozen} cell(s)")
            else:
                for cell in self.dead_cells:
                    print(f"ERROR: Can't find candidates for square ({cell.row},{cell.col})")
        return solvable

    def _apply_one_rule(self) -> bool:
        """Freeze the first forced cell found by the rules, in order."""
        for key, name, detect in RULES:
            found = detect(self.puzzle)
            if found is None:
                continue
            cell, value = found
            CandidateEngine.freeze(cell, value)
            self.stats[key] += 1
            if self.verbose:
                print(f"Forced ({name}): r{cell.row}c{cell.col} = {value}")
            return True
        return False

    def frozen_by_rules(self) -> int:
        return (self.stats['frozen_only_candidate'] + self.stats['frozen_by_row'] +
                self.stats['frozen_by_column'] + self.stats['frozen_by_subsquare'])

    # -------------------------------------------------------------------------
    # Phase 2: backtracking
    # -------------------------------------------------------------------------
    def search(self) -> bool:
        """
        Assign every unfrozen cell by row-major chronological backtracking.

        `moves` holds the board indices of the cells assigned so far.  When a
        cell has no candidate above `resume_after`, the last move is undone and
        the scan resumes at that cell with `resume_after` set to the value it
        just gave up.  Returns False when the move stack runs out.
        """
        cells = self.puzzle.cells
        n2 = self.puzzle.n2

        for cell in cells:
            if not cell.frozen and cell.candidates.depth != 1:
                raise CandidateStackError(
                    f"{cell} must hold only its base frame before search; run preprocess() first"
                )

        moves: List[int] = []
        resume_after = 0
        index = 0

        while index < len(cells):
            cell = cells[index]
            if cell.frozen:
                index += 1
                continue

            value = CandidateEngine.first_candidate(cell.candidates.top, n2, resume_after)
            if value:
                cell.value = value
                CandidateEngine.propagate(self.puzzle, cell, value, assigning=True)
                self._check_move(cell)
                moves.append(index)
                self.stats['search_moves'] += 1
                resume_after = 0
                index += 1
                continue

            # Dead end: undo the most recent assignment
            if not moves:
                if self.verbose:
                    print("Search exhausted: no assignment left to undo")
                return False

            index = moves.pop()
            back = cells[index]
            resume_after = back.value
            CandidateEngine.propagate(self.puzzle, back, resume_after, assigning=False)
            back.value = 0
            self._check_move(back)
            self.stats['unstackings'] += 1

            if self.verbose and self.stats['unstackings'] % PROGRESS_INTERVAL == 0:
                cp = self.puzzle.get_completion_percentage()
                print(f"  Progress: {cp:.1%} | Unstackings: {self.stats['unstackings']} | "
                      f"Depth: {len(moves)}")

        return True

    def _check_move(self, cell: Cell) -> None:
        if not self.check_invariants:
            return
        touched = self.puzzle.get_neighbors(cell) + [cell]
        violations = CandidateEngine.invariant_violations(self.puzzle, touched)
        if violations:
            r, c, v = violations[0]
            raise CandidateStackError(
                f"candidate stack of r{r}c{c} disagrees with its neighbors about {v} "
                f"after move at r{cell.row}c{cell.col}"
            )

