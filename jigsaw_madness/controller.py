# controller.py - pointer input to drags, pans and snaps
"""
A three-state machine fed with screen coordinates:

    idle --down on a free piece--> dragging --up--> snap, completion check, idle
    idle --down on empty table (view moved)--> panning --up--> idle

Locked pieces are ignored by hit-testing, so a press goes through them to
whatever free piece lies underneath. Losing the pointer (`cancel`) always goes
back to idle without snapping.
"""
import logging

from jigsaw_madness.completion import CompletionDetector
from jigsaw_madness.geometry import in_hit_box
from jigsaw_madness.settings import SNAP_DISTANCE
from jigsaw_madness.snapping import resolve_snaps
from jigsaw_madness.viewport import Viewport

log = logging.getLogger(__name__)

IDLE = "idle"
DRAGGING = "dragging"
PANNING = "panning"


class InteractionController:
    def __init__(self, session, viewport=None, detector=None, snap_distance=SNAP_DISTANCE):
        self.session = session
        self.viewport = viewport if viewport is not None else Viewport()
        self.detector = detector if detector is not None else CompletionDetector(session)
        self.snap_distance = snap_distance
        self.state = IDLE
        self.drag_group = None
        self.last_snap = None
        self._anchor = None
        self._drag_start = {}
        self._view_start = None

    @property
    def dragging(self):
        return self.state == DRAGGING

    @property
    def panning(self):
        return self.state == PANNING

    def dragged_piece_ids(self):
        if self.drag_group is None:
            return []
        self.drag_group = self.session.groups.resolve(self.drag_group)
        return self.session.groups.members(self.drag_group)

    def hit_test(self, wx, wy):
        """Topmost unlocked piece whose hit box contains the world point."""
        sw, sh = self.session.scaled_piece_size
        for p in reversed(self.session.pieces):
            if not in_hit_box(wx, wy, p.x, p.y, sw, sh):
                continue
            if p.locked:
                continue
            return p
        return None

    # --- Pointer Events ---
    def pointer_down(self, sx, sy):
        if self.state != IDLE:
            return False
        wx, wy = self.viewport.screen_to_world(sx, sy)
        piece = self.hit_test(wx, wy)
        if piece is not None:
            groups = self.session.groups
            self.drag_group = groups.group_id_of(piece.id)
            members = groups.members(self.drag_group)
            self._drag_start = {pid: (self.session.piece(pid).x, self.session.piece(pid).y)
                                for pid in members}
            self._anchor = (sx, sy)
            self.session.raise_to_top(members)
            self.state = DRAGGING
            return True
        if not self.viewport.is_identity:
            self._anchor = (sx, sy)
            self._view_start = (self.viewport.view_x, self.viewport.view_y)
            self.state = PANNING
            return True
        return False

    def pointer_move(self, sx, sy):
        if self.state == DRAGGING:
            zoom = self.viewport.zoom
            dx = (sx - self._anchor[0]) / zoom
            dy = (sy - self._anchor[1]) / zoom
            for pid, (x0, y0) in self._drag_start.items():
                p = self.session.piece(pid)
                p.x = x0 + dx
                p.y = y0 + dy
        elif self.state == PANNING:
            vx, vy = self._view_start
            self.viewport.pan_to(vx + sx - self._anchor[0], vy + sy - self._anchor[1])

    def pointer_up(self, sx, sy):
        """Finish the gesture; returns a CompletionEvent when this drop solved the puzzle."""
        if self.state != DRAGGING:
            self._reset()
            return None
        self.last_snap = resolve_snaps(self.session, self.drag_group, self.snap_distance)
        self._reset()
        return self.detector.check()

    def cancel(self):
        if self.state != IDLE:
            log.debug("pointer released while %s", self.state)
        self._reset()

    def _reset(self):
        self.state = IDLE
        self.drag_group = None
        self._anchor = None
        self._drag_start = {}
        self._view_start = None

    # --- View ---
    def zoom_at(self, sx, sy, factor):
        # drag and pan anchors are in screen pixels, so the view holds until release
        if self.state != IDLE:
            return self.viewport.zoom
        return self.viewport.zoom_at(sx, sy, factor)

    def reset_view(self):
        self.viewport.reset()
