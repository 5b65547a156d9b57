"""Jigsaw Madness: cut a picture into jigsaw pieces and put it back together."""
from jigsaw_madness.completion import CompletionDetector, CompletionEvent
from jigsaw_madness.controller import InteractionController
from jigsaw_madness.errors import InvalidConfigurationError, InvariantError, PersistenceError, PuzzleError
from jigsaw_madness.generator import generate_puzzle
from jigsaw_madness.model import BoardRect, Piece, PuzzleImage
from jigsaw_madness.session import PuzzleSession
from jigsaw_madness.viewport import Viewport

__version__ = "1.0.0"
