# viewport.py - pan/zoom mapping between screen pixels and world units
import math
from dataclasses import dataclass

from jigsaw_madness.settings import MAX_ZOOM, MIN_ZOOM

# repeated wheel steps leave float error; anything this close counts as unzoomed/unpanned
ZOOM_EPSILON = 1e-9
OFFSET_EPSILON = 1e-6


def clamp_zoom(zoom):
    zoom = max(MIN_ZOOM, min(MAX_ZOOM, zoom))
    if math.isclose(zoom, 1.0, abs_tol=ZOOM_EPSILON):
        return 1.0
    return zoom


def _snap_offset(value):
    return 0.0 if abs(value) < OFFSET_EPSILON else value


@dataclass
class Viewport:
    """screen = view + world * zoom"""
    view_x: float = 0.0
    view_y: float = 0.0
    zoom: float = 1.0

    def __post_init__(self):
        self.zoom = clamp_zoom(self.zoom)

    @property
    def is_identity(self):
        return self.view_x == 0 and self.view_y == 0 and self.zoom == 1

    def screen_to_world(self, sx, sy):
        return (sx - self.view_x) / self.zoom, (sy - self.view_y) / self.zoom

    def world_to_screen(self, wx, wy):
        return wx * self.zoom + self.view_x, wy * self.zoom + self.view_y

    def pan_to(self, view_x, view_y):
        self.view_x = _snap_offset(view_x)
        self.view_y = _snap_offset(view_y)

    def set_zoom(self, zoom):
        self.zoom = clamp_zoom(zoom)
        return self.zoom

    def zoom_at(self, sx, sy, factor):
        """Zoom by `factor` keeping the world point under (sx, sy) where it is."""
        wx, wy = self.screen_to_world(sx, sy)
        self.set_zoom(self.zoom * factor)
        self.pan_to(sx - wx * self.zoom, sy - wy * self.zoom)
        return self.zoom

    def reset(self):
        self.view_x = 0.0
        self.view_y = 0.0
        self.zoom = 1.0
