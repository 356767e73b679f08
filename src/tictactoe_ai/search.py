"""
Move selection for the computer side: exhaustive minimax over the 3x3 game tree.
Scoring is from the searching side's perspective:
- Own win scores 10 - depth, opponent win scores depth - 10, draw scores 0.
- depth counts plies after the candidate move, so faster wins and slower losses rank higher.
- Among equally scored candidates the lowest cell index is chosen.
Boards are explored as immutable tuples; the caller's board is never written.
"""
import logging
import random
from numbers import Real
from typing import Dict, List, Optional, Sequence

from .board import EMPTY, normalize_board, normalize_mark
from .errors import InvalidInput, InvalidState
from .outcome import scan_board, winner

DEFAULT_RANDOM_FALLBACK = 0.001
WIN_SCORE = 10


def legal_moves(board_t: tuple) -> List[int]:
    return [i for i, v in enumerate(board_t) if v == EMPTY]


def apply_move_t(board_t: tuple, idx: int, mark: int) -> tuple:
    lst = list(board_t)
    lst[idx] = mark
    return tuple(lst)


def minimax(
    board_t: tuple,
    depth: int,
    maximizing: bool,
    ai_mark: int,
    human_mark: int,
    memo: Optional[Dict[tuple, int]] = None,
) -> int:
    """Score board_t with ai_mark maximizing and human_mark minimizing.

    memo may be shared by every call made from the same root position: there
    a board fixes both the depth and the side to move.
    """
    if memo is not None and board_t in memo:
        return memo[board_t]
    w = winner(board_t)
    if w == ai_mark:
        score = WIN_SCORE - depth
    elif w == human_mark:
        score = depth - WIN_SCORE
    elif EMPTY not in board_t:
        score = 0
    else:
        mark = ai_mark if maximizing else human_mark
        children = (
            minimax(apply_move_t(board_t, mv, mark), depth + 1, not maximizing, ai_mark, human_mark, memo)
            for mv in legal_moves(board_t)
        )
        score = max(children) if maximizing else min(children)
    if memo is not None:
        memo[board_t] = score
    return score


def _prepare(board: Sequence, ai_mark, human_mark):
    board_t = tuple(normalize_board(board))
    ai = normalize_mark(ai_mark)
    human = normalize_mark(human_mark)
    if ai == human:
        raise InvalidInput("ai_mark and human_mark must differ")
    outcome = scan_board(board_t)
    if outcome.is_terminal:
        raise InvalidState(f"No move to choose: game is over ({outcome.status})")
    return board_t, ai, human


def _score_moves_t(board_t: tuple, ai: int, human: int) -> List[Optional[int]]:
    memo: Dict[tuple, int] = {}
    scores: List[Optional[int]] = [None] * 9
    for mv in legal_moves(board_t):
        child = apply_move_t(board_t, mv, ai)
        scores[mv] = minimax(child, 0, False, ai, human, memo)
    return scores


def score_moves(board: Sequence, ai_mark, human_mark) -> List[Optional[int]]:
    """Top-level minimax score of every cell (None for occupied cells).

    Raises InvalidInput for malformed arguments and InvalidState when the
    board is already won or drawn.
    """
    board_t, ai, human = _prepare(board, ai_mark, human_mark)
    return _score_moves_t(board_t, ai, human)


def check_probability(p) -> float:
    if isinstance(p, bool) or not isinstance(p, Real) or not (0.0 <= p <= 1.0):
        raise InvalidInput(f"random_fallback_probability must be within [0, 1], got {p!r}")
    return float(p)


def choose_move(
    board: Sequence,
    ai_mark,
    human_mark,
    random_fallback_probability: float = DEFAULT_RANDOM_FALLBACK,
    rng: Optional[random.Random] = None,
) -> int:
    """Pick the move for ai_mark.

    With probability random_fallback_probability a uniformly random empty
    cell is returned instead of the searched one. rng is any object with
    random() and choice(); a fresh random.Random is used when omitted.
    """
    p = check_probability(random_fallback_probability)
    board_t, ai, human = _prepare(board, ai_mark, human_mark)
    moves = legal_moves(board_t)
    if p > 0.0:
        if rng is None:
            rng = random.Random()
        if rng.random() < p:
            move = rng.choice(moves)
            logging.debug("random fallback move=%d (p=%s)", move, p)
            return move
    scores = _score_moves_t(board_t, ai, human)
    best = max(s for s in scores if s is not None)
    move = scores.index(best)
    logging.debug("searched move=%d score=%d", move, best)
    return move
