# errors.py - exception types raised by the puzzle core


class PuzzleError(Exception):
    """Base class for every error raised by jigsaw_madness."""


class InvalidConfigurationError(PuzzleError, ValueError):
    """Generation was refused: bad piece count, missing image or empty canvas."""


class PersistenceError(PuzzleError):
    """A save could not be written or a saved puzzle could not be read back."""


class InvariantError(PuzzleError, AssertionError):
    """Internal state is inconsistent (broken group partition, unknown id).

    This is a programming error and is never caught inside the core.
    """
