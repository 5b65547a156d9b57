# persistence.py - puzzle state as plain data and JSON save files
"""
A save file is the plain-dict form of a session plus the picture itself, embedded
as a JPEG data URL. Big pictures are re-encoded smaller until the file fits the
quota, so a restored picture may be smaller than the one the puzzle was cut from:
piece sizes and the world scale are therefore always recomputed from the restored
picture and the saved board rectangle, never taken from the file.
"""
import json
import logging
import os
import time

from jigsaw_madness.errors import InvariantError, PersistenceError
from jigsaw_madness.generator import validate_image
from jigsaw_madness.groups import GroupTracker
from jigsaw_madness.images import compress_image, decode_data_url, encode_data_url
from jigsaw_madness.model import BoardRect, Piece
from jigsaw_madness.session import PuzzleSession
from jigsaw_madness.settings import SAVE_ATTEMPTS, SAVE_FILENAME, SAVE_QUOTA_BYTES, SAVES_DIR

log = logging.getLogger(__name__)


def default_save_path():
    return os.path.join(SAVES_DIR, SAVE_FILENAME)


def has_save(path=None):
    return os.path.isfile(path or default_save_path())


# --- Plain Data ---
def session_to_dict(session):
    return {
        "pieces": [p.to_dict() for p in session.pieces],
        "groups": session.groups.as_lists(),
        "boardRect": session.board.to_dict(),
        "rows": session.rows,
        "cols": session.cols,
        "pieceWidth": session.piece_width,
        "pieceHeight": session.piece_height,
        "canvasScale": session.scale,
        "targetPieceCount": session.target_piece_count,
        "elapsedTime": int(session.timer.elapsed),
        "canvasSize": list(session.canvas_size),
        "showGuide": session.show_guide,
    }


def session_from_dict(data, image, clock=time.monotonic, canvas_size=None):
    """
    Rebuild a session from `session_to_dict` output and the restored picture.

    `canvas_size` is the canvas the session will be played on; when it is not
    given the saved `canvasSize` is used.
    """
    validate_image(image)
    try:
        rows = int(data["rows"])
        cols = int(data["cols"])
        board = BoardRect.from_dict(data["boardRect"])
        pieces = [Piece.from_dict(item) for item in data["pieces"]]
        group_lists = data["groups"]
        target = int(data.get("targetPieceCount") or rows * cols)
        elapsed = float(data.get("elapsedTime", 0))
        canvas_size = tuple(canvas_size or data.get("canvasSize") or (0, 0))
    except (KeyError, TypeError, ValueError) as exc:
        raise PersistenceError(f"saved puzzle is corrupt: {exc!r}") from exc

    if rows < 1 or cols < 1 or len(pieces) != rows * cols:
        raise PersistenceError(f"saved puzzle has {len(pieces)} pieces for a {rows}x{cols} grid")
    if sorted(p.id for p in pieces) != list(range(rows * cols)):
        raise PersistenceError("saved puzzle has missing or duplicate piece ids")
    try:
        groups = GroupTracker.from_lists(group_lists, range(rows * cols))
    except (InvariantError, TypeError, ValueError) as exc:
        raise PersistenceError(f"saved groups are corrupt: {exc}") from exc

    piece_width = image.width / cols
    piece_height = image.height / rows
    for p in pieces:
        p.width = piece_width
        p.height = piece_height

    session = PuzzleSession(image, rows, cols, pieces, board=board, scale=board.w / image.width,
                            target_piece_count=target, groups=groups, canvas_size=canvas_size,
                            clock=clock)
    session.timer.restore(elapsed)
    session.show_guide = bool(data.get("showGuide", False))
    session.complete = session.all_locked()
    return session


# --- Save Files ---
def save_game(session, path=None, attempts=SAVE_ATTEMPTS, quota=SAVE_QUOTA_BYTES):
    """
    Write the session and its picture to `path`, trying smaller and lower quality
    pictures until the file fits in `quota` bytes. Returns the max side used.
    """
    path = path or default_save_path()
    surface = session.image.pixels
    if surface is None:
        raise PersistenceError("puzzle has no picture to save")
    for max_size, quality in attempts:
        data = session_to_dict(session)
        data["imageSrc"] = encode_data_url(compress_image(surface, max_size, quality))
        data["originalWidth"] = session.image.width
        data["originalHeight"] = session.image.height
        text = json.dumps(data)
        if len(text.encode("utf-8")) > quota:
            log.warning("save at max size %d is over the %d byte quota, trying smaller", max_size, quota)
            continue
        try:
            folder = os.path.dirname(path)
            if folder:
                os.makedirs(folder, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as exc:
            raise PersistenceError(f"could not write {path}: {exc}") from exc
        log.info("Puzzle saved to %s", path)
        return max_size
    raise PersistenceError("puzzle picture is too large to save")


def load_game(path=None, clock=time.monotonic, canvas_size=None):
    path = path or default_save_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise PersistenceError(f"could not read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise PersistenceError(f"{path} does not hold a saved puzzle")
    image = decode_data_url(data.get("imageSrc"))
    session = session_from_dict(data, image, clock=clock, canvas_size=canvas_size)
    log.info("Puzzle loaded from %s (%dx%d, %d groups left)", path, session.rows, session.cols,
             len(session.groups))
    return session
