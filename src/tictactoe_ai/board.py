"""
Board basics: cell encoding, the eight lines, parsing/serialization, validity.
Notes:
- A board is a sequence of 9 cells in row-major order: 0=empty, 1=X, 2=O. X always starts.
- Callers may pass "X"/"O"/"" strings; normalize_board converts them to ints.
- Valid states have counts either equal (X to move) or X has one more (O to move).
"""
from typing import List, Optional, Sequence, Tuple

from .errors import InvalidInput

EMPTY = 0
X = 1
O = 2
MARKS = (X, O)

LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)

MARK_SYMBOLS = {EMPTY: '.', X: 'X', O: 'O'}

_CELL_ALIASES = {
    '': EMPTY, ' ': EMPTY, '.': EMPTY, '-': EMPTY, '_': EMPTY, '0': EMPTY,
    'X': X, '1': X,
    'O': O, '2': O,
}


def _normalize_cell(value, index: int) -> int:
    # bool is an int subclass; True/False are never valid cells
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid cell value at index {index}: {value!r}")
    if isinstance(value, int):
        if value in (EMPTY, X, O):
            return value
        raise InvalidInput(f"Invalid cell value at index {index}: {value!r}")
    if isinstance(value, str):
        cell = _CELL_ALIASES.get(value.upper())
        if cell is not None:
            return cell
    raise InvalidInput(f"Invalid cell value at index {index}: {value!r}")


def normalize_board(board: Sequence) -> List[int]:
    """Validate the shape of a board and return a fresh list of ints.

    Accepts ints (0/1/2) or the strings "", "X", "O" (any case). Raises
    InvalidInput on anything else; nothing is repaired.
    """
    if isinstance(board, (str, bytes)) or not hasattr(board, '__len__'):
        raise InvalidInput(f"Board must be a sequence of 9 cells, got {type(board).__name__}")
    if len(board) != 9:
        raise InvalidInput(f"Board must have 9 cells, got {len(board)}")
    return [_normalize_cell(v, i) for i, v in enumerate(board)]


def normalize_mark(mark) -> int:
    if isinstance(mark, str):
        mark = _CELL_ALIASES.get(mark.upper(), mark)
    if isinstance(mark, bool) or mark not in MARKS:
        raise InvalidInput(f"Mark must be X or O, got {mark!r}")
    return mark


def parse_board(text: str) -> List[int]:
    """Parse a 9-character board string such as "100020200" or "X...O.O..".

    0 . - _ are empty, 1/X is X, 2/O is O.
    """
    raw = (text or '').strip()
    if len(raw) != 9:
        raise InvalidInput(f"Board string must be 9 characters, got {len(raw)}: {raw!r}")
    try:
        return [_normalize_cell(c, i) for i, c in enumerate(raw)]
    except InvalidInput:
        raise InvalidInput(f"Invalid board string {raw!r}: use 0/./-/_ for empty, 1/X and 2/O") from None


def serialize_board(board: Sequence[int]) -> str:
    return ''.join(str(cell) for cell in board)


def render_board(board: Sequence[int]) -> str:
    rows = []
    for r in range(3):
        rows.append(' '.join(MARK_SYMBOLS[board[r * 3 + c]] for c in range(3)))
    return '\n'.join(rows)


def mark_symbol(mark: Optional[int]) -> str:
    return MARK_SYMBOLS[mark] if mark in MARKS else '-'


def other_mark(mark: int) -> int:
    return O if mark == X else X


def empty_cells(board: Sequence[int]) -> List[int]:
    return [i for i, v in enumerate(board) if v == EMPTY]


def piece_counts(board: Sequence[int]) -> Tuple[int, int]:
    return board.count(X), board.count(O)


def current_player(board: Sequence[int]) -> int:
    x, o = piece_counts(board)
    return X if x == o else O


def _count_lines(board: Sequence[int], mark: int) -> int:
    return sum(1 for line in LINES if all(board[i] == mark for i in line))


def is_valid_state(board: Sequence[int]) -> bool:
    """True when the board can arise from legal alternating play with X first."""
    x_count, o_count = piece_counts(board)
    if not (x_count == o_count or x_count == o_count + 1):
        return False
    x_lines = _count_lines(board, X)
    o_lines = _count_lines(board, O)
    if x_lines and o_lines:
        return False
    if x_lines and x_count != o_count + 1:
        return False
    if o_lines and x_count != o_count:
        return False
    return True
