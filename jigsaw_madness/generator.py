# generator.py - cut an image into a fresh puzzle session
import logging
import math
import numbers
import random
import time

from jigsaw_madness.errors import InvalidConfigurationError
from jigsaw_madness.geometry import edge_signature
from jigsaw_madness.model import BoardRect, Piece
from jigsaw_madness.scatter import scatter_pieces
from jigsaw_madness.session import PuzzleSession
from jigsaw_madness.settings import BOARD_FILL_RATIO, MIN_COLS, MIN_ROWS

log = logging.getLogger(__name__)


def round_half_up(value):
    return int(math.floor(value + 0.5))


def validate_piece_count(count):
    if isinstance(count, bool) or not isinstance(count, numbers.Integral):
        raise InvalidConfigurationError(f"piece count must be an integer, got {count!r}")
    count = int(count)
    if count <= 0:
        raise InvalidConfigurationError(f"piece count must be positive, got {count}")
    return count


def validate_image(image):
    if image is None:
        raise InvalidConfigurationError("no image loaded")
    if image.width <= 0 or image.height <= 0:
        raise InvalidConfigurationError(f"image has no area ({image.width}x{image.height})")
    return image


# --- Grid ---
def grid_for(count, aspect_ratio, min_rows=MIN_ROWS, min_cols=MIN_COLS):
    """Rows and columns closest to `count` pieces for an image of the given width/height ratio."""
    rows = round_half_up(math.sqrt(count / aspect_ratio))
    cols = round_half_up(rows * aspect_ratio)
    return max(min_rows, rows), max(min_cols, cols)


def board_layout(image, rows, cols, canvas_width, canvas_height, fill_ratio=BOARD_FILL_RATIO):
    """Scale (world units per source pixel) and the centered board rectangle."""
    scale_x = canvas_width * fill_ratio / image.width
    scale_y = canvas_height * fill_ratio / image.height
    scale = min(scale_x, scale_y)
    total_w = image.width / cols * scale * cols
    total_h = image.height / rows * scale * rows
    board = BoardRect((canvas_width - total_w) / 2, (canvas_height - total_h) / 2, total_w, total_h)
    return scale, board


def build_pieces(rows, cols, piece_width, piece_height, rng=None):
    rng = rng or random
    pieces = []
    for r in range(rows):
        for c in range(cols):
            above = pieces[(r - 1) * cols + c].edges if r > 0 else None
            left = pieces[r * cols + c - 1].edges if c > 0 else None
            pieces.append(Piece(
                id=r * cols + c,
                row=r,
                col=c,
                width=piece_width,
                height=piece_height,
                edges=edge_signature(r, c, rows, cols, above=above, left=left, rng=rng),
            ))
    return pieces


def generate_puzzle(image, target_count, canvas_size, rng=None, clock=time.monotonic):
    """
    Cut `image` into roughly `target_count` pieces laid out for a canvas of
    `canvas_size` and scatter them around the board. Nothing is created when
    the inputs are invalid.
    """
    validate_image(image)
    target_count = validate_piece_count(target_count)
    canvas_width, canvas_height = canvas_size
    if canvas_width <= 0 or canvas_height <= 0:
        raise InvalidConfigurationError(f"canvas has no area ({canvas_width}x{canvas_height})")
    rng = rng or random.Random()

    rows, cols = grid_for(target_count, image.aspect_ratio)
    pieces = build_pieces(rows, cols, image.width / cols, image.height / rows, rng)
    scale, board = board_layout(image, rows, cols, canvas_width, canvas_height)
    session = PuzzleSession(image, rows, cols, pieces, board=board, scale=scale,
                            target_piece_count=target_count, canvas_size=(canvas_width, canvas_height),
                            clock=clock)
    scatter_pieces(session, keep_locked=False, rng=rng)
    log.info("generated %dx%d puzzle (%d pieces, asked for %d) from %dx%d image",
             rows, cols, rows * cols, target_count, image.width, image.height)
    return session
