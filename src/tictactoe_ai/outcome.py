"""
Outcome evaluation: winner, draw or game still in progress.

Lines are scanned in the fixed order of board.LINES and the first completed
line wins, so boards with two completed lines (unreachable in legal play)
still evaluate deterministically.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .board import EMPTY, LINES, mark_symbol, normalize_board

WIN = 'win'
DRAW = 'draw'
IN_PROGRESS = 'in_progress'


@dataclass(frozen=True)
class Outcome:
    status: str
    winner: Optional[int] = None
    line: Optional[Tuple[int, int, int]] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != IN_PROGRESS

    def describe(self) -> str:
        if self.status == WIN:
            return f"{mark_symbol(self.winner)} Wins!"
        if self.status == DRAW:
            return "Draw!"
        return "In progress"


_DRAW = Outcome(DRAW)
_IN_PROGRESS = Outcome(IN_PROGRESS)


def scan_board(board: Sequence[int]) -> Outcome:
    """Evaluate an already normalized board (no shape checks)."""
    for line in LINES:
        a, b, c = line
        v = board[a]
        if v != EMPTY and v == board[b] and v == board[c]:
            return Outcome(WIN, v, line)
    if EMPTY not in board:
        return _DRAW
    return _IN_PROGRESS


def evaluate(board: Sequence) -> Outcome:
    """Evaluate a board. Raises InvalidInput for malformed boards."""
    return scan_board(normalize_board(board))


def winning_line(board: Sequence) -> Optional[Tuple[int, int, int]]:
    return evaluate(board).line


def winner(board: Sequence[int]) -> int:
    """Mark on the first completed line, or 0. Expects an already normalized board."""
    for a, b, c in LINES:
        v = board[a]
        if v != EMPTY and v == board[b] and v == board[c]:
            return v
    return EMPTY
