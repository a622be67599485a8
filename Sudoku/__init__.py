"""
Generalized Sudoku Solver Package

Constraint propagation over per-cell candidate stacks, a fixed-point
deduction pass, and chronological backtracking for N^2 x N^2 boards.
"""

from .puzzle import SudokuPuzzle, Cell, CandidateStack, PuzzleFormatError, BoardSizeError
from .candidates import CandidateEngine, CandidateStackError
from .constraints import ConstraintChecker, DeductionRules
from .solver import SudokuSolver, SolveResult
from .output import SolutionFormatter

__version__ = "1.0.0"
__all__ = [
    'SudokuPuzzle',
    'Cell',
    'CandidateStack',
    'PuzzleFormatError',
    'BoardSizeError',
    'CandidateEngine',
    'CandidateStackError',
    'ConstraintChecker',
    'DeductionRules',
    'SudokuSolver',
    'SolveResult',
    'SolutionFormatter'
]
