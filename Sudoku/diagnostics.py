"""
Diagnostic Script: how much of each puzzle do the deduction rules settle?

Usage:
    python -m Sudoku.diagnostics data/puzzles
"""

import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

from .candidates import CandidateEngine
from .puzzle import PuzzleFormatError, SudokuPuzzle
from .solver import SudokuSolver, STATUS_SOLVED

HEAVY_SEARCH = 10000  # unstackings


def classify(result_status: str, stats: Dict) -> str:
    """One-word outcome used in the summary table."""
    if result_status != STATUS_SOLVED:
        return result_status.upper()
    if stats['search_moves'] == 0:
        return "DEDUCTION"
    if stats['unstackings'] > HEAVY_SEARCH:
        return "HEAVY-SEARCH"
    return "SEARCH"


def analyze_puzzle(path: str, verbose: bool = False) -> Dict:
    """Load a puzzle, describe it, solve it and report where the work went."""
    puzzle = SudokuPuzzle.from_file(path)

    print(f"\n{'='*80}")
    print(f"ANALYZING: {Path(path).name}")
    print(f"{'='*80}")
    print(f"Board: {puzzle.n2}x{puzzle.n2} (subsquare {puzzle.n}x{puzzle.n})")
    print(f"Clues: {puzzle.count_clues()}/{puzzle.num_squares}")

    # Clue density per unit kind
    print("\nClues per unit:")
    density: Dict[str, List[int]] = {}
    for kind, _, cells in puzzle.units():
        density.setdefault(kind, []).append(sum(1 for c in cells if c.frozen))
    for kind, counts in density.items():
        print(f"  {kind:10s} min={min(counts)} max={max(counts)} "
              f"avg={sum(counts) / len(counts):.1f}")

    dead = CandidateEngine.compute_all_base_candidates(puzzle)
    print(f"\nLive candidates before preprocessing: "
          f"{CandidateEngine.live_candidate_total(puzzle)}")
    if dead:
        print(f"Dead cells: {', '.join(f'r{c.row}c{c.col}' for c in dead)}")

    solver = SudokuSolver(puzzle, verbose=verbose)
    start = time.time()
    result = solver.solve()
    elapsed = time.time() - start
    outcome = classify(result.status, solver.stats)

    print(f"\n{'='*80}")
    mark = "✓" if result.solved else "✗"
    print(f"{mark} {outcome} in {elapsed:.2f}s: {result.message}")
    print(f"  Frozen by rules: {solver.frozen_by_rules()}")
    print(f"  Search moves: {solver.stats['search_moves']}")
    print(f"  Unstackings: {solver.stats['unstackings']}")
    if outcome == "HEAVY-SEARCH":
        print("\n⚠️  HIGH UNSTACKING COUNT - the rules left a lot of the board open")
    print(f"{'='*80}\n")

    return {
        'file': Path(path).name,
        'status': result.status,
        'outcome': outcome,
        'elapsed': elapsed,
        'stats': dict(solver.stats),
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Analyze every *.txt puzzle in a directory and summarize the outcomes."""
    args = sys.argv[1:] if argv is None else argv
    data_dir = Path(args[0]) if args else Path("data/puzzles")

    if not data_dir.is_dir():
        print(f"Error: Directory not found: {data_dir}")
        return 1

    files = sorted(data_dir.glob("*.txt"))
    if not files:
        print(f"No puzzles found in {data_dir}")
        return 1

    results = []
    for path in files:
        try:
            results.append(analyze_puzzle(str(path)))
        except PuzzleFormatError as e:
            print(f"WARNING: skipping {path.name}: {e}")

    print("\n" + "=" * 80)
    print("SUMMARY")
    print("=" * 80)
    for r in results:
        print(f"{r['file']:30s} {r['outcome']:14s} "
              f"{r['stats']['unstackings']:>10d} unstackings  {r['elapsed']:.2f}s")

    solved = sum(1 for r in results if r['status'] == STATUS_SOLVED)
    print(f"\nSolved: {solved}/{len(results)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
