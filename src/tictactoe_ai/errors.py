"""
Exceptions raised by the engine, the game session and the CLI helpers.

Normal game results (win, draw, in progress) are never exceptions; these
classes only signal a caller passing something the package cannot use.
"""


class TicTacToeError(Exception):
    """Base class for all package errors."""


class InvalidInput(TicTacToeError, ValueError):
    """Malformed board, mark, probability or board string."""


class InvalidState(TicTacToeError, RuntimeError):
    """Operation not allowed in the current game state (e.g. board already terminal)."""


class IllegalMove(InvalidState):
    """Move onto an occupied cell."""
