# geometry.py - jigsaw piece shapes and hit testing
"""
Pure geometry for jigsaw pieces.

Every edge of a piece is flat, a tab or a slot. Tabs and slots share one curve
built from four cubic Bezier segments, scaled by the edge type, so a slot is the
exact mirror of the tab it mates with. Outlines are numpy arrays of (x, y) points
and are used for clipping, strokes, overlays and exact hit tests alike.
"""
import random
from dataclasses import dataclass

import numpy as np

from jigsaw_madness.settings import HIT_BLEED_RATIO, TAB_AMPLITUDE

FLAT, TAB, SLOT = 0, 1, -1
SIDES = ("top", "right", "bottom", "left")
# (row, col) step from a piece to the neighbor sharing that side
SIDE_STEPS = {"top": (-1, 0), "right": (0, 1), "bottom": (1, 0), "left": (0, -1)}

CURVE_STEPS = 8


@dataclass
class EdgeSignature:
    top: int = FLAT
    right: int = FLAT
    bottom: int = FLAT
    left: int = FLAT

    def edge(self, side):
        return getattr(self, side)

    def toward(self, drow, dcol):
        """Edge facing the neighbor one (drow, dcol) step away."""
        for side, step in SIDE_STEPS.items():
            if step == (drow, dcol):
                return getattr(self, side)
        raise ValueError(f"({drow}, {dcol}) is not a grid neighbor step")

    def to_dict(self):
        return {side: self.edge(side) for side in SIDES}

    @classmethod
    def from_dict(cls, data):
        return cls(**{side: int(data.get(side, FLAT)) for side in SIDES})


# --- Edge Signatures ---
def random_edge(rng):
    return TAB if rng.random() > 0.5 else SLOT


def edge_signature(row, col, rows, cols, above=None, left=None, rng=None):
    """
    Build the edges of the piece at (row, col).

    `above` and `left` are the signatures of the neighbors generated before this
    piece in row-major order; the shared edges are their negations. Border edges
    are always flat.
    """
    rng = rng or random
    if row > 0 and above is None:
        raise ValueError(f"piece ({row}, {col}) needs the signature of the piece above it")
    if col > 0 and left is None:
        raise ValueError(f"piece ({row}, {col}) needs the signature of the piece to its left")
    return EdgeSignature(
        top=FLAT if row == 0 else -above.bottom,
        right=FLAT if col == cols - 1 else random_edge(rng),
        bottom=FLAT if row == rows - 1 else random_edge(rng),
        left=FLAT if col == 0 else -left.right,
    )


# --- Curves ---
def _edge_segments(edge_type, amplitude):
    # (u, v) control points: u runs along the edge, v is the outward
    # displacement; both are shares of the edge length.
    amp = edge_type * amplitude
    lip = 0.05 * edge_type
    third = 1.0 / 3.0
    return [
        ((0.0, 0.0), (0.20, 0.0), (0.25, 0.0), (third, lip)),
        ((third, lip), (third + 0.05, amp * 1.2), (0.45, amp), (0.5, amp)),
        ((0.5, amp), (0.55, amp), (1.0 - third - 0.05, amp * 1.2), (1.0 - third, lip)),
        ((1.0 - third, lip), (0.75, 0.0), (0.80, 0.0), (1.0, 0.0)),
    ]


def cubic_bezier(p0, p1, p2, p3, steps=CURVE_STEPS):
    """Sample a cubic Bezier at `steps` points, excluding p0 and including p3."""
    t = np.linspace(0.0, 1.0, steps + 1)[1:, None]
    mt = 1.0 - t
    p0, p1, p2, p3 = (np.asarray(p, dtype=float) for p in (p0, p1, p2, p3))
    return mt ** 3 * p0 + 3 * mt ** 2 * t * p1 + 3 * mt * t ** 2 * p2 + t ** 3 * p3


def edge_curve(x1, y1, x2, y2, edge_type, steps=CURVE_STEPS, amplitude=TAB_AMPLITUDE):
    """
    Points tracing one edge from (x1, y1) to (x2, y2), start excluded.

    A flat edge is a single point (the end). Positive types bulge to the left of
    the direction of travel, which is outwards for a clockwise outline.
    """
    if edge_type == FLAT:
        return np.array([[x2, y2]], dtype=float)
    dx = x2 - x1
    dy = y2 - y1
    local = np.vstack([cubic_bezier(*seg, steps=steps)
                       for seg in _edge_segments(edge_type, amplitude)])
    u = local[:, 0]
    v = local[:, 1]
    xs = x1 + dx * u + dy * v
    ys = y1 + dy * u - dx * v
    return np.column_stack((xs, ys))


def piece_outline(x, y, w, h, edges, steps=CURVE_STEPS, amplitude=TAB_AMPLITUDE):
    """Closed clockwise outline of a piece whose cell starts at (x, y)."""
    tl = (x, y)
    tr = (x + w, y)
    br = (x + w, y + h)
    bl = (x, y + h)
    parts = [
        np.array([tl], dtype=float),
        edge_curve(*tl, *tr, edges.top, steps, amplitude),
        edge_curve(*tr, *br, edges.right, steps, amplitude),
        edge_curve(*br, *bl, edges.bottom, steps, amplitude),
        edge_curve(*bl, *tl, edges.left, steps, amplitude),
    ]
    # the left edge ends back on the top-left corner
    return np.vstack(parts)[:-1]


# --- Hit Testing ---
def hit_box(x, y, w, h, bleed_ratio=HIT_BLEED_RATIO):
    """Cell rect grown by the bleed margin, as (left, top, right, bottom)."""
    bleed_x = w * bleed_ratio
    bleed_y = h * bleed_ratio
    return (x - bleed_x, y - bleed_y, x + w + bleed_x, y + h + bleed_y)


def in_hit_box(px, py, x, y, w, h, bleed_ratio=HIT_BLEED_RATIO):
    # Cheap stand-in for the real outline; tabs poke out by at most the bleed.
    left, top, right, bottom = hit_box(x, y, w, h, bleed_ratio)
    return left <= px <= right and top <= py <= bottom


def point_in_polygon(px, py, poly):
    """Even-odd test of (px, py) against an N x 2 outline."""
    poly = np.asarray(poly, dtype=float)
    xs = poly[:, 0]
    ys = poly[:, 1]
    xn = np.roll(xs, -1)
    yn = np.roll(ys, -1)
    crosses = (ys > py) != (yn > py)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_at = xs + (py - ys) * (xn - xs) / (yn - ys)
    inside = crosses & (px < x_at)
    return bool(np.count_nonzero(inside) % 2)


def point_in_piece(px, py, x, y, w, h, edges):
    reach = max(w, h) * TAB_AMPLITUDE * 1.2
    if not (x - reach <= px <= x + w + reach and y - reach <= py <= y + h + reach):
        return False
    return point_in_polygon(px, py, piece_outline(x, y, w, h, edges))
