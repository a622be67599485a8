#!/usr/bin/env python3
"""
Sudoku Solver - Main Entry Point

Usage:
    python -m Sudoku.main data/puzzles/press_democrat.txt
    sudoku-solve data/puzzles/press_democrat.txt
"""

import sys
from pathlib import Path
from typing import Optional, Tuple

from .puzzle import ALPHABET, MAX_N, MIN_N, PuzzleFormatError, SudokuPuzzle
from .solver import (
    STATUS_INCONSISTENT,
    STATUS_INVALID_SETUP,
    STATUS_NO_SOLUTION,
    STATUS_UNSOLVABLE,
    SolveResult,
    SudokuSolver,
)
from .output import SolutionFormatter

# ============================================================================
# CONFIGURATION
# ============================================================================
OUTPUT_DIR = "data/solutions"   # Base output directory for saved solutions
SAVE_SOLUTION = False           # Write solution.json / solution.txt per puzzle

VERBOSE = False
# Print every forced cell and search progress while solving

SHOW_CELL_DETAILS = False
# Dump neighbors, candidate frames and current candidates of every cell after solving

SKIP_PREPROCESSING = False
# Go straight to backtracking (base candidates are still computed once)

CHECK_INVARIANTS = False
# Re-check the candidate stacks around every search move (slow, for debugging)

ALLOW_SIZE_DIRECTIVE = True
# Honor a '//N=d' comment before the first board row
# ============================================================================

BANNERS = {
    STATUS_INVALID_SETUP: "****** INVALID SETUP *****",
    STATUS_UNSOLVABLE: "****** NO SOLUTION EXISTS *****",
    STATUS_NO_SOLUTION: "****** SEARCH EXHAUSTED: NO SOLUTION *****",
}

EXAMPLE_PUZZLE = """\
// From The Santa Rosa, CA Press Democrat, 2006 Feb 18.

  - - 4   5 - -   - - 9
  - 8 -   - 7 2   - - -
  2 - 1   9 - -   - 7 -

  - - -   2 5 -   9 - -
  - 1 9   - - -   6 5 -
  - - 2   - 9 7   - - -

  - 6 -   - - 9   2 - 4
  - - -   3 6 -   - 9 -
  1 - -   - - 8   3 - -
"""


def usage_text() -> str:
    rows = []
    for n in range(MIN_N, MAX_N + 1):
        n2 = n * n
        rows.append(f"    {n}   {n2:2d}    {_alphabet_ranges(n2)}")
    return "\n".join([
        "",
        "Usage:  sudoku-solve  input-file",
        "",
        "where the input file has the form in the example shown below.  The",
        "solution of the problem is written to stdout, along with statistics",
        "about the problem and its solution.  Here is an example input file:",
        "",
        EXAMPLE_PUZZLE,
        "Blank lines, lines consisting solely of whitespace, and lines beginning",
        "with '//' are ignored, with one exception:  a line before the first",
        "line of the problem which begins with '//N=<digit>' specifies that the",
        "problem does not have the default 3x3 subsquare size.  For the larger",
        "problems these alphabets are used:",
        "",
        "    N   N^2    alphabet",
        "    ---------------------",
        *rows,
        "",
        "Whitespace between the squares of a row is optional.",
        "",
    ])


def _alphabet_ranges(n2: int) -> str:
    """Describe ALPHABET[1..n2] as ranges, e.g. '1-9, 0, A-F'."""
    groups = ["123456789", "0", "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
              "abcdefghijklmnopqrstuvwxyz", "#", "$"]
    used = ALPHABET[1:n2 + 1]
    parts = []
    for group in groups:
        chars = [ch for ch in group if ch in used]
        if not chars:
            continue
        parts.append(chars[0] if len(chars) == 1 else f"{chars[0]}-{chars[-1]}")
    return ", ".join(parts)


def solve_puzzle(input_path: str, output_dir: Optional[str] = None, verbose: bool = VERBOSE,
                 skip_preprocessing: bool = SKIP_PREPROCESSING,
                 check_invariants: bool = CHECK_INVARIANTS,
                 show_cell_details: bool = SHOW_CELL_DETAILS
                 ) -> Tuple[SolveResult, SudokuPuzzle, SudokuSolver]:
    """
    Load, solve and report a single puzzle.

    Args:
        input_path: Path to the puzzle text file
        output_dir: Directory for solution.json / solution.txt (None = don't save)
        verbose: Print forced cells and search progress
        skip_preprocessing: Skip the deduction rules
        check_invariants: Validate candidate stacks after every search move
        show_cell_details: Print every cell's internals after preprocessing

    Raises:
        PuzzleFormatError: the file can't be read or is malformed
    """
    puzzle = SudokuPuzzle.from_file(input_path, allow_size_directive=ALLOW_SIZE_DIRECTIVE)

    print(SolutionFormatter.format_board(puzzle))

    solver = SudokuSolver(
        puzzle,
        verbose=verbose,
        skip_preprocessing=skip_preprocessing,
        check_invariants=check_invariants,
    )
    result = solver.solve()

    if show_cell_details:
        print("\n" + SolutionFormatter.format_cell_details(puzzle))
        print("\n" + SolutionFormatter.format_candidates(puzzle))

    if result.status in BANNERS:
        print(f"\n{BANNERS[result.status]}")
        if result.status != STATUS_INVALID_SETUP:
            print(result.message)
        for problem in result.problems:
            print(f"  {problem}")
    else:
        print("\n")
        print(SolutionFormatter.format_board(puzzle))
        if result.status == STATUS_INCONSISTENT:
            print(f"\n****** {result.message.rstrip('.').upper()} *****")
            for problem in result.problems:
                print(f"  {problem}")
        print("\n" + SolutionFormatter.format_statistics(puzzle, solver.stats))

    if output_dir is not None:
        out = Path(output_dir) / Path(input_path).stem
        out.mkdir(parents=True, exist_ok=True)
        SolutionFormatter.save_solution(puzzle, solver.stats, str(out / "solution.json"), result)
        SolutionFormatter.save_human_readable(puzzle, solver.stats, str(out / "solution.txt"))

    return result, puzzle, solver


def main(argv=None) -> int:
    """Main entry point"""
    args = sys.argv[1:] if argv is None else argv

    if len(args) != 1:
        print(usage_text(), file=sys.stderr)
        return 1

    try:
        solve_puzzle(args[0], output_dir=OUTPUT_DIR if SAVE_SOLUTION else None)
    except PuzzleFormatError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print(f"\n\n{'='*60}")
        print("⚠ Solving interrupted by user (Ctrl+C)")
        print(f"{'='*60}")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
