# session.py - the state of one puzzle being played
import time

from jigsaw_madness.errors import InvariantError
from jigsaw_madness.groups import GroupTracker
from jigsaw_madness.model import BoardRect


class Stopwatch:
    """Elapsed play time; `clock` is injectable for tests."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._started_at = None
        self._banked = 0.0

    @property
    def running(self):
        return self._started_at is not None

    def start(self):
        self._banked = 0.0
        self._started_at = self._clock()

    def restore(self, seconds):
        """Set the elapsed time of a saved game; the stopwatch stays stopped."""
        self._started_at = None
        self._banked = float(seconds)

    def resume(self):
        if self._started_at is None:
            self._started_at = self._clock()

    def stop(self):
        if self._started_at is not None:
            self._banked += self._clock() - self._started_at
            self._started_at = None

    @property
    def elapsed(self):
        if self._started_at is None:
            return self._banked
        return self._banked + self._clock() - self._started_at

    def formatted(self):
        seconds = int(self.elapsed)
        return f"{seconds // 60:02d}:{seconds % 60:02d}"


class PuzzleSession:
    """
    Everything one puzzle needs while it is being played.

    `pieces` is kept in draw order (last drawn is on top); `piece(id)` looks a
    piece up by id regardless of where it sits in that order.
    """

    def __init__(self, image, rows, cols, pieces, board=None, scale=1.0,
                 target_piece_count=None, groups=None, canvas_size=(0, 0), clock=time.monotonic):
        self.image = image
        self.rows = rows
        self.cols = cols
        self.piece_width = image.width / cols
        self.piece_height = image.height / rows
        self.pieces = list(pieces)
        self._by_id = {p.id: p for p in self.pieces}
        self._by_cell = {(p.row, p.col): p for p in self.pieces}
        self.groups = groups if groups is not None else GroupTracker(p.id for p in self.pieces)
        self.board = board or BoardRect()
        self.scale = scale
        self.target_piece_count = target_piece_count or rows * cols
        self.canvas_size = canvas_size
        self.timer = Stopwatch(clock)
        self.complete = False
        self.show_guide = False

    def __repr__(self):
        return (f"<PuzzleSession {self.rows}x{self.cols} groups={len(self.groups)} "
                f"complete={self.complete}>")

    # --- Lookup ---
    @property
    def piece_ids(self):
        return [p.id for p in self.pieces]

    def piece(self, piece_id):
        try:
            return self._by_id[piece_id]
        except KeyError:
            raise InvariantError(f"no piece with id {piece_id}") from None

    def piece_at(self, row, col):
        return self._by_cell.get((row, col))

    def group_pieces(self, group_id):
        return [self.piece(pid) for pid in self.groups.members(group_id)]

    # --- Layout ---
    @property
    def scaled_piece_size(self):
        return self.piece_width * self.scale, self.piece_height * self.scale

    def board_target(self, piece):
        """World position where `piece` sits when the puzzle is assembled."""
        sw, sh = self.scaled_piece_size
        return self.board.x + piece.col * sw, self.board.y + piece.row * sh

    def translate(self, piece_ids, dx, dy):
        for pid in piece_ids:
            self.piece(pid).move_by(dx, dy)

    def raise_to_top(self, piece_ids):
        """Move the given pieces to the end of the draw order, keeping their relative order."""
        lifted = set(piece_ids)
        self.pieces = ([p for p in self.pieces if p.id not in lifted]
                       + [p for p in self.pieces if p.id in lifted])

    # --- State ---
    def all_locked(self):
        return all(p.locked for p in self.pieces)

    def group_locked(self, group_id):
        return any(p.locked for p in self.group_pieces(group_id))

    def lock(self, piece_ids):
        for pid in piece_ids:
            self.piece(pid).locked = True

    def toggle_guide(self):
        self.show_guide = not self.show_guide
        return self.show_guide
