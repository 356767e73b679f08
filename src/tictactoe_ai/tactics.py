"""
Tactics and simple motifs: immediate wins, blocks, forks.
Used for move hints; the engine itself never needs them.
"""
from typing import List, Sequence

from .board import empty_cells, other_mark
from .outcome import winner


def _with_move(board: Sequence[int], index: int, mark: int) -> List[int]:
    child = list(board)
    child[index] = mark
    return child


def immediate_winning_moves(board: Sequence[int], mark: int) -> List[int]:
    return [i for i in empty_cells(board) if winner(_with_move(board, i, mark)) == mark]


def blocking_moves(board: Sequence[int], mark: int) -> List[int]:
    """Cells where the opponent of mark would complete a line next move."""
    return immediate_winning_moves(board, other_mark(mark))


def fork_moves(board: Sequence[int], mark: int) -> List[int]:
    """Cells after which mark threatens two lines at once.

    A move that wins outright is not counted as a fork.
    """
    forks: List[int] = []
    for i in empty_cells(board):
        child = _with_move(board, i, mark)
        if winner(child) != mark and len(blocking_moves(child, other_mark(mark))) >= 2:
            forks.append(i)
    return forks
