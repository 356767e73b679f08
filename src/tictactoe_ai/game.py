"""
Game session: the human/computer turn cycle around the engine.

The session owns its board; the engine only ever receives it as an argument.
Rendering and input handling are left to the caller (see cli.play).
"""
from __future__ import annotations

import logging
import random
import time
from typing import Callable, List, Optional, Tuple

from .board import EMPTY, O, X, mark_symbol, normalize_mark
from .config import EngineConfig
from .errors import IllegalMove, InvalidInput, InvalidState
from .outcome import Outcome, scan_board
from .search import choose_move


class Game:
    """One game of human vs. computer. X always moves first."""

    def __init__(
        self,
        human_mark=X,
        config: Optional[EngineConfig] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.human_mark = normalize_mark(human_mark)
        self.ai_mark = O if self.human_mark == X else X
        self.config = config if config is not None else EngineConfig()
        self.rng = rng if rng is not None else self.config.make_rng()
        self._sleep = sleep
        self.reset()

    def reset(self) -> None:
        self.board: List[int] = [EMPTY] * 9
        self.current_player = X
        self.outcome: Outcome = scan_board(self.board)
        self.history: List[Tuple[int, int]] = []

    @property
    def active(self) -> bool:
        return not self.outcome.is_terminal

    @property
    def winning_line(self) -> Optional[Tuple[int, int, int]]:
        return self.outcome.line

    def is_human_turn(self) -> bool:
        return self.active and self.current_player == self.human_mark

    def _place(self, index: int, mark: int) -> Outcome:
        self.board[index] = mark
        self.history.append((mark, index))
        self.outcome = scan_board(self.board)
        if self.outcome.is_terminal:
            logging.info("game over: %s", self.outcome.describe())
        else:
            self.current_player = O if mark == X else X
        return self.outcome

    def human_move(self, index: int) -> Outcome:
        if not self.active:
            raise InvalidState("Game is already over")
        if self.current_player != self.human_mark:
            raise InvalidState("Not the human player's turn")
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= 8:
            raise InvalidInput(f"Cell index must be 0-8, got {index!r}")
        if self.board[index] != EMPTY:
            raise IllegalMove(f"Cell {index} is already occupied")
        return self._place(index, self.human_mark)

    def ai_move(self) -> int:
        """Let the computer move; returns the chosen cell."""
        if not self.active:
            raise InvalidState("Game is already over")
        if self.current_player != self.ai_mark:
            raise InvalidState("Not the computer's turn")
        if self.config.think_delay > 0:
            self._sleep(self.config.think_delay)
        move = choose_move(
            self.board,
            self.ai_mark,
            self.human_mark,
            self.config.random_fallback_probability,
            rng=self.rng,
        )
        self._place(move, self.ai_mark)
        return move

    def status_text(self) -> str:
        if self.active:
            if self.current_player == self.human_mark:
                return f"Your Turn: {mark_symbol(self.human_mark)}"
            return f"Computer's Turn: {mark_symbol(self.ai_mark)}"
        return self.outcome.describe()
