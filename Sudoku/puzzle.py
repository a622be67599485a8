"""
Core data structures for generalized Sudoku boards (N^2 x N^2 grids)

A board is built once per puzzle size.  Every cell knows its neighbors (the
cells sharing its row, column or subsquare) and carries a stack of candidate
bitmasks that the candidate engine pushes and pops while solving.
"""
import re
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from dataclasses import dataclass, field

import numpy as np


DEFAULT_N = 3  # 9x9 board
MIN_N = 3
MAX_N = 8      # 64x64 board, the alphabet has no characters beyond 64

# Index 0 is the blank marker, index v is the character for value v
ALPHABET = (
    "-"
    "1234567890"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "#$"
)
BLANK = ALPHABET[0]
_CHAR_TO_VALUE = {ch: i for i, ch in enumerate(ALPHABET) if i > 0}

_SIZE_DIRECTIVE = re.compile(r"^//N=")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

Pos = Tuple[int, int]


class PuzzleFormatError(RuntimeError):
    """Raised when a puzzle file cannot be read or does not follow the format."""

    def __init__(self, message: str, source: str = "<string>", line: Optional[int] = None):
        self.source = source
        self.line = line
        where = f"{source}, line {line}" if line is not None else source
        super().__init__(f"[puzzle] {where}: {message}")


class BoardSizeError(ValueError):
    """Raised when a board is requested with an unsupported subsquare size."""


def map_alphabet_to_int(ch: str) -> Optional[int]:
    """Map a puzzle character to its value (1..64); None if it is not in the alphabet."""
    return _CHAR_TO_VALUE.get(ch)


def map_int_to_alphabet(value: int) -> str:
    """Inverse of map_alphabet_to_int; 0 maps to the blank marker."""
    if not 0 <= value < len(ALPHABET):
        raise ValueError(f"Value {value} has no puzzle character")
    return ALPHABET[value]


@dataclass
class CandidateStack:
    """Stack of candidate bitmasks for one cell.

    Frame 0 is the base set computed from the neighbors' values; each further
    frame is pushed when a neighbor is assigned a value and popped when that
    assignment is undone.
    """
    frames: List[int] = field(default_factory=list)

    def reset(self, mask: int) -> None:
        self.frames = [mask]

    def clear(self) -> None:
        self.frames = []

    def push(self, mask: int) -> None:
        self.frames.append(mask)

    def pop(self) -> int:
        return self.frames.pop()

    @property
    def top(self) -> int:
        return self.frames[-1] if self.frames else 0

    @property
    def base(self) -> int:
        return self.frames[0] if self.frames else 0

    @property
    def depth(self) -> int:
        return len(self.frames)


@dataclass
class Cell:
    """A single square of the board (1-indexed row and column)"""
    row: int
    col: int
    value: int = 0  # 0 means empty
    frozen: bool = False  # value can no longer change
    neighbors: Tuple[Pos, ...] = ()
    candidates: CandidateStack = field(default_factory=CandidateStack)
    base_candidate_count: int = 0

    @property
    def pos(self) -> Pos:
        return (self.row, self.col)

    def __hash__(self):
        return hash(self.pos)

    def __eq__(self, other):
        return isinstance(other, Cell) and self.pos == other.pos

    def __repr__(self):
        state = "frozen" if self.frozen else f"depth={self.candidates.depth}"
        return f"Cell(r{self.row}c{self.col}, value={self.value}, {state})"


class SudokuPuzzle:
    """Board of N^2 x N^2 cells with a precomputed neighbor relation"""

    def __init__(self, n: int = DEFAULT_N, source: str = "<string>"):
        self.source = source
        self.clues_snapshot: Optional[np.ndarray] = None
        self.build(n)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------
    def build(self, n: int) -> None:
        """Allocate the grid for subsquare size n and compute every neighbor list."""
        if not isinstance(n, int) or not MIN_N <= n <= MAX_N:
            raise BoardSizeError(
                f"Subsquare size must be an integer in [{MIN_N}, {MAX_N}], got {n!r}"
            )

        self.n = n
        self.n2 = n * n
        self.num_squares = self.n2 * self.n2
        self.num_neighbors = 3 * self.n2 - 2 * n - 1
        self.clues_snapshot = None

        self.cells: List[Cell] = []
        self.cell_by_pos: Dict[Pos, Cell] = {}
        for row in range(1, self.n2 + 1):
            for col in range(1, self.n2 + 1):
                cell = Cell(row=row, col=col, neighbors=self._compute_neighbors(row, col))
                self.cells.append(cell)
                self.cell_by_pos[cell.pos] = cell

    def _compute_neighbors(self, row: int, col: int) -> Tuple[Pos, ...]:
        """Row peers, then column peers, then the subsquare peers not already listed."""
        neighbors: List[Pos] = []
        for c in range(1, self.n2 + 1):
            if c != col:
                neighbors.append((row, c))
        for r in range(1, self.n2 + 1):
            if r != row:
                neighbors.append((r, col))
        srow, scol = self.subsquare_origin(row, col)
        for r in range(srow, srow + self.n):
            if r == row:
                continue
            for c in range(scol, scol + self.n):
                if c == col:
                    continue
                neighbors.append((r, c))
        return tuple(neighbors)

    def subsquare_origin(self, row: int, col: int) -> Pos:
        """Upper-left coordinates of the subsquare containing (row, col)."""
        return (
            self.n * ((row - 1) // self.n) + 1,
            self.n * ((col - 1) // self.n) + 1,
        )

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------
    def cell(self, row: int, col: int) -> Cell:
        return self.cell_by_pos[(row, col)]

    def get_neighbors(self, cell: Cell) -> List[Cell]:
        return [self.cell_by_pos[pos] for pos in cell.neighbors]

    def row_cells(self, row: int) -> List[Cell]:
        return [self.cell_by_pos[(row, c)] for c in range(1, self.n2 + 1)]

    def column_cells(self, col: int) -> List[Cell]:
        return [self.cell_by_pos[(r, col)] for r in range(1, self.n2 + 1)]

    def subsquare_cells(self, srow: int, scol: int) -> List[Cell]:
        return [
            self.cell_by_pos[(r, c)]
            for r in range(srow, srow + self.n)
            for c in range(scol, scol + self.n)
        ]

    def subsquare_origins(self) -> List[Pos]:
        starts = range(1, self.n2 + 1, self.n)
        return [(r, c) for r in starts for c in starts]

    def units(self) -> Iterator[Tuple[str, str, List[Cell]]]:
        """Yield (kind, label, cells) for every row, column and subsquare."""
        for r in range(1, self.n2 + 1):
            yield "row", f"Row {r}", self.row_cells(r)
        for c in range(1, self.n2 + 1):
            yield "column", f"Column {c}", self.column_cells(c)
        for srow, scol in self.subsquare_origins():
            yield "subsquare", f"Subsquare ({srow}, {scol})", self.subsquare_cells(srow, scol)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------
    def set_clue(self, row: int, col: int, value: int) -> None:
        """Write a given value and freeze the cell."""
        if not 1 <= value <= self.n2:
            raise ValueError(f"Clue {value} out of range 1..{self.n2} at r{row}c{col}")
        cell = self.cell(row, col)
        cell.value = value
        cell.frozen = True
        cell.candidates.clear()
        cell.base_candidate_count = 0

    def values(self) -> np.ndarray:
        """Current values as an n2 x n2 integer array (0 = empty)."""
        grid = np.zeros((self.n2, self.n2), dtype=np.int64)
        for cell in self.cells:
            grid[cell.row - 1, cell.col - 1] = cell.value
        return grid

    def take_snapshot(self) -> np.ndarray:
        """Record the clue values so the final board can be checked against them."""
        snapshot = np.zeros((self.n2, self.n2), dtype=np.int64)
        for cell in self.cells:
            if cell.frozen:
                snapshot[cell.row - 1, cell.col - 1] = cell.value
        snapshot.setflags(write=False)
        self.clues_snapshot = snapshot
        return snapshot

    def count_clues(self) -> int:
        if self.clues_snapshot is not None:
            return int(np.count_nonzero(self.clues_snapshot))
        return sum(1 for c in self.cells if c.frozen)

    def is_complete(self) -> bool:
        return all(cell.value for cell in self.cells)

    def get_completion_percentage(self) -> float:
        filled = sum(1 for c in self.cells if c.value)
        return filled / self.num_squares if self.cells else 0.0

    # -------------------------------------------------------------------------
    # Text format
    # -------------------------------------------------------------------------
    @classmethod
    def from_file(cls, path: str, allow_size_directive: bool = True) -> "SudokuPuzzle":
        """Load a puzzle from a text file (see from_lines for the format)."""
        try:
            # comments may hold any bytes; squares still go through the alphabet
            with open(path, "r", encoding="latin-1") as f:
                lines = f.readlines()
        except OSError as e:
            raise PuzzleFormatError(f"can't read file ({e})", source=str(path)) from e
        return cls.from_lines(lines, source=str(path), allow_size_directive=allow_size_directive)

    @classmethod
    def from_string(cls, text: str, source: str = "<string>",
                    allow_size_directive: bool = True) -> "SudokuPuzzle":
        return cls.from_lines(text.splitlines(), source=source,
                              allow_size_directive=allow_size_directive)

    @classmethod
    def from_lines(cls, lines: Iterable[str], source: str = "<string>",
                   allow_size_directive: bool = True) -> "SudokuPuzzle":
        """
        Build a puzzle from its text lines.

        Lines starting with '//' are comments; before the first data line a
        comment '//N=d' switches to subsquare size d.  Blank lines are skipped.
        The next n2 lines each start with n2 characters ('-' for blank,
        otherwise a character from ALPHABET); whitespace between them is
        optional and anything after them on the line is ignored.  Lines after
        the last board row are ignored.
        """
        puzzle = cls(DEFAULT_N, source=source)
        allow_n = allow_size_directive
        row = 0
        linenum = 0

        for linenum, raw in enumerate(lines, 1):
            if row == puzzle.n2:
                break
            line = raw.rstrip("\r\n")

            if line.startswith("//"):
                if allow_n and _SIZE_DIRECTIVE.match(line):
                    puzzle.build(cls._parse_size_directive(line, source, linenum))
                continue

            if not line.strip():
                continue

            allow_n = False  # size can't change once the board has started
            row += 1
            puzzle._load_row(row, line, linenum)

        if row < puzzle.n2:
            raise PuzzleFormatError(
                f"file ended prematurely, read {row} of {puzzle.n2} board rows",
                source=source, line=linenum + 1,
            )

        puzzle.take_snapshot()
        return puzzle

    @staticmethod
    def _parse_size_directive(line: str, source: str, linenum: int) -> int:
        match = _LEADING_INT.match(line[4:])
        n = int(match.group(1)) if match else None
        if n is None or not MIN_N <= n <= MAX_N:
            raise PuzzleFormatError(
                f"a line begins with '//N=' but an integer in the range "
                f"[{MIN_N}, {MAX_N}] does not follow",
                source=source, line=linenum,
            )
        return n

    def _load_row(self, row: int, line: str, linenum: int) -> None:
        # the first n2 non-space characters are the row, the rest of the line is ignored
        tokens = [ch for ch in line if not ch.isspace()][:self.n2]
        if len(tokens) < self.n2:
            raise PuzzleFormatError(
                f"board row {row} has {len(tokens)} squares, expected {self.n2}",
                source=self.source, line=linenum,
            )

        for col, ch in enumerate(tokens, 1):
            if ch == BLANK:
                continue
            value = map_alphabet_to_int(ch)
            if value is None or value > self.n2:
                raise PuzzleFormatError(
                    f"square ({row}, {col}) is not '{BLANK}' nor a valid character "
                    f"for a puzzle of size {self.n2}x{self.n2}: {ch!r}",
                    source=self.source, line=linenum,
                )
            self.set_clue(row, col, value)

    def to_text(self) -> str:
        """Render the board in the puzzle file format."""
        lines = []
        if self.n != DEFAULT_N:
            lines.append(f"//N={self.n}")
        for r in range(1, self.n2 + 1):
            lines.append(" ".join(map_int_to_alphabet(c.value) for c in self.row_cells(r)))
        return "\n".join(lines) + "\n"

    def __repr__(self):
        return (f"SudokuPuzzle(n={self.n}, size={self.n2}x{self.n2}, "
                f"clues={self.count_clues()}, filled={self.get_completion_percentage():.0%})")
