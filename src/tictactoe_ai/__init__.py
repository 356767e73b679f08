"""tictactoe_ai package.

Outcome evaluation and a full-depth minimax opponent for 3x3 tic-tac-toe,
plus a headless game session, self-play arena and a small CLI.

Convenience imports are exposed for common workflows.
"""

from .board import EMPTY, LINES, O, X
from .errors import IllegalMove, InvalidInput, InvalidState, TicTacToeError
from .game import Game
from .outcome import Outcome, evaluate, winning_line
from .search import choose_move, score_moves

__all__ = [
    "EMPTY",
    "X",
    "O",
    "LINES",
    "Outcome",
    "evaluate",
    "winning_line",
    "choose_move",
    "score_moves",
    "Game",
    "TicTacToeError",
    "InvalidInput",
    "InvalidState",
    "IllegalMove",
]
