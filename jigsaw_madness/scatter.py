# scatter.py - random starting positions around the board
import logging
import random

from jigsaw_madness.settings import SCATTER_PADDING

log = logging.getLogger(__name__)


def open_sides(session, canvas_width, canvas_height):
    """Canvas margins around the board wide enough to hold half a piece."""
    board = session.board
    pw, ph = session.scaled_piece_size
    sides = []
    if board.y > ph * 0.5:
        sides.append("top")
    if canvas_height - board.bottom > ph * 0.5:
        sides.append("bottom")
    if board.x > pw * 0.5:
        sides.append("left")
    if canvas_width - board.right > pw * 0.5:
        sides.append("right")
    return sides


def random_position(side, session, canvas_width, canvas_height, rng, pad=SCATTER_PADDING):
    board = session.board
    pw, ph = session.scaled_piece_size
    span_x = max(0.0, canvas_width - pw)
    span_y = max(0.0, canvas_height - ph)
    if side == "top":
        return rng.random() * span_x, rng.random() * max(0.0, board.y - ph - pad)
    if side == "bottom":
        start = board.bottom + pad
        return rng.random() * span_x, start + rng.random() * max(0.0, canvas_height - start - ph)
    if side == "left":
        return rng.random() * max(0.0, board.x - pw - pad), rng.random() * span_y
    if side == "right":
        start = board.right + pad
        return start + rng.random() * max(0.0, canvas_width - start - pw), rng.random() * span_y
    return rng.random() * span_x, rng.random() * span_y


def scatter_pieces(session, keep_locked=False, rng=None, canvas_size=None):
    """
    Throw pieces into the margins around the board.

    Groups move as one body: the first piece of each group gets a random spot and
    the rest follow it. With `keep_locked`, groups already locked to the board stay
    put; otherwise every piece is unlocked first.
    """
    if session.board.w == 0:
        return 0
    rng = rng or random
    canvas_width, canvas_height = canvas_size or session.canvas_size
    sides = open_sides(session, canvas_width, canvas_height) or ["any"]
    moved = 0
    for gid in session.groups.group_ids():
        members = session.group_pieces(gid)
        if keep_locked and any(p.locked for p in members):
            continue
        for p in members:
            p.locked = False
        side = rng.choice(sides)
        px, py = random_position(side, session, canvas_width, canvas_height, rng)
        lead = members[0]
        session.translate([p.id for p in members], px - lead.x, py - lead.y)
        moved += len(members)
    log.debug("scattered %d pieces over %s", moved, ", ".join(sides))
    return moved
