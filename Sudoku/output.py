import json
from typing import Dict, Optional
from datetime import datetime

from .candidates import CandidateEngine
from .puzzle import DEFAULT_N, SudokuPuzzle, map_int_to_alphabet
from .solver import SolveResult


class SolutionFormatter:
    """Formats boards, candidates and solving statistics for output"""

    @staticmethod
    def format_board(puzzle: SudokuPuzzle) -> str:
        """
        Board as text: wider gaps between subsquares, a blank line between
        bands of subsquares.
        """
        lines = []
        if puzzle.n != DEFAULT_N:
            lines.append(f"//N={puzzle.n}")
            lines.append("")

        for r in range(1, puzzle.n2 + 1):
            parts = []
            for c, cell in enumerate(puzzle.row_cells(r), 1):
                parts.append(map_int_to_alphabet(cell.value))
                if c < puzzle.n2:
                    parts.append("   " if c % puzzle.n == 0 else " ")
            lines.append("  " + "".join(parts))
            if r < puzzle.n2 and r % puzzle.n == 0:
                lines.append("")

        return "\n".join(lines)

    @staticmethod
    def _mask_bits(mask: int, n2: int) -> str:
        """Bit string for values 1..n2, value 1 first."""
        return "".join("1" if mask >> v & 1 else "0" for v in range(1, n2 + 1))

    @staticmethod
    def format_cell_details(puzzle: SudokuPuzzle) -> str:
        """Every internal detail of every cell: value, flags, neighbors, candidate frames."""
        lines = []
        for cell in puzzle.cells:
            lines.append(
                f"({cell.row:2d},{cell.col:2d}):  value={cell.value:2d}  "
                f"frozen={int(cell.frozen)}  depth={cell.candidates.depth}  "
                f"base_candidates={cell.base_candidate_count}"
            )
            lines.append("           " + "".join(f" ({r:2d},{c:2d})" for r, c in cell.neighbors))
            for k, mask in enumerate(cell.candidates.frames):
                lines.append(f"            {k:2d}: {SolutionFormatter._mask_bits(mask, puzzle.n2)}")
        return "\n".join(lines)

    @staticmethod
    def format_candidates(puzzle: SudokuPuzzle) -> str:
        """Current candidates of each cell, or its value when frozen."""
        lines = []
        for cell in puzzle.cells:
            if cell.frozen:
                lines.append(f"Square ({cell.row}, {cell.col}) current value:  "
                             f"{map_int_to_alphabet(cell.value)}")
                continue
            values = CandidateEngine.candidate_values(cell.candidates.top, puzzle.n2)
            chars = " ".join(map_int_to_alphabet(v) for v in values)
            lines.append(f"Square ({cell.row}, {cell.col}) candidates: {chars}")
        return "\n".join(lines)

    @staticmethod
    def summarize_stats(puzzle: SudokuPuzzle, stats: Dict) -> Dict:
        """Derived figures for the statistics report."""
        total = puzzle.num_squares
        occupied_before = stats['occupied_originally']
        optimizations = (stats['frozen_only_candidate'] + stats['frozen_by_row'] +
                         stats['frozen_by_column'] + stats['frozen_by_subsquare'])
        occupied_after = occupied_before + optimizations
        empty_before = total - occupied_before
        empty_after = total - occupied_after
        return {
            'total_squares': total,
            'occupied_before': occupied_before,
            'empty_before': empty_before,
            'candidates_per_empty_before':
                stats['candidates_before'] / empty_before if empty_before else 0.0,
            'optimizations': optimizations,
            'occupied_after': occupied_after,
            'empty_after': empty_after,
            'candidates_per_empty_after':
                stats['candidates_after'] / empty_after if empty_after else 0.0,
        }

    @staticmethod
    def format_statistics(puzzle: SudokuPuzzle, stats: Dict) -> str:
        s = SolutionFormatter.summarize_stats(puzzle, stats)
        lines = [
            "statistics",
            "  original board",
            f"    number of occupied squares:       {s['occupied_before']:4d}",
            f"    number of empty squares:          {s['empty_before']:4d}",
            f"    total number of squares:          {s['total_squares']:4d}",
            f"    sum of no. candidates       {stats['candidates_before']:10d}",
            f"    candidates/empty square         {s['candidates_per_empty_before']:6.1f}",
            "  preprocessing",
            f"    number of only-one candidates:    {stats['frozen_only_candidate']:4d}",
            f"    number of row optimizations:      {stats['frozen_by_row']:4d}",
            f"    number of column optimizations:   {stats['frozen_by_column']:4d}",
            f"    number of subsquare optimizations:{stats['frozen_by_subsquare']:4d}",
            f"    total number of optimizations:    {s['optimizations']:4d}",
            "  after optimization",
            f"    number of occupied squares:       {s['occupied_after']:4d}",
            f"    number of empty squares:          {s['empty_after']:4d}",
            f"    total number of squares:          {s['total_squares']:4d}",
            f"    sum of no. candidates       {stats['candidates_after']:10d}",
            f"    candidates/empty square         {s['candidates_per_empty_after']:6.1f}",
            "  backtracking",
            f"    number of search moves:      {stats['search_moves']:9d}",
            f"    number of unstackings:       {stats['unstackings']:9d}",
        ]
        return "\n".join(lines)

    @staticmethod
    def format_solution_json(puzzle: SudokuPuzzle, stats: Dict,
                             result: Optional[SolveResult] = None) -> Dict:
        """
        Format solution as JSON
        """
        solution = {
            'puzzle_info': {
                'source': puzzle.source,
                'n': puzzle.n,
                'size': puzzle.n2,
                'clues': puzzle.count_clues(),
                'solved': bool(result and result.solved),
                'timestamp': datetime.now().isoformat()
            },
            'result': {
                'status': result.status,
                'message': result.message,
                'duration_ms': result.duration_ms,
                'problems': list(result.problems),
            } if result else None,
            'solving_stats': dict(stats),
            'summary': SolutionFormatter.summarize_stats(puzzle, stats),
            'grid': puzzle.values().tolist(),
        }
        if puzzle.clues_snapshot is not None:
            solution['clues'] = puzzle.clues_snapshot.tolist()
        return solution

    @staticmethod
    def save_solution(puzzle: SudokuPuzzle, stats: Dict, output_path: str,
                      result: Optional[SolveResult] = None):
        """
        Save solution to JSON file
        """
        solution = SolutionFormatter.format_solution_json(puzzle, stats, result)

        with open(output_path, 'w') as f:
            json.dump(solution, f, indent=2)

        print(f"\n✓ Solution saved to: {output_path}")

    @staticmethod
    def save_human_readable(puzzle: SudokuPuzzle, stats: Dict, output_path: str):
        """
        Save the board (in puzzle file format) followed by the statistics report
        """
        text = puzzle.to_text()
        text += "\n" + "\n".join(
            "// " + line for line in SolutionFormatter.format_statistics(puzzle, stats).splitlines()
        ) + "\n"

        with open(output_path, 'w') as f:
            f.write(text)

        print(f"✓ Human-readable solution saved to: {output_path}")
