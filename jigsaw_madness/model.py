# model.py - puzzle pieces, board and image records
from dataclasses import dataclass, field
from typing import Any

from jigsaw_madness.geometry import EdgeSignature


@dataclass
class PuzzleImage:
    """Source picture. The core only reads the size; `pixels` is handed to the renderer."""
    width: int
    height: int
    pixels: Any = None

    @property
    def aspect_ratio(self):
        return self.width / self.height


@dataclass
class BoardRect:
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0

    @property
    def right(self):
        return self.x + self.w

    @property
    def bottom(self):
        return self.y + self.h

    @property
    def empty(self):
        return self.w <= 0 or self.h <= 0

    def to_dict(self):
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}

    @classmethod
    def from_dict(cls, data):
        return cls(float(data["x"]), float(data["y"]), float(data["w"]), float(data["h"]))


@dataclass
class Piece:
    id: int
    row: int
    col: int
    width: float                # cell size in source pixels
    height: float
    edges: EdgeSignature = field(default_factory=EdgeSignature)
    x: float = 0.0              # world position of the cell's top-left corner
    y: float = 0.0
    locked: bool = False

    def move_by(self, dx, dy):
        self.x += dx
        self.y += dy

    def to_dict(self):
        return {
            "id": self.id,
            "r": self.row,
            "c": self.col,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "shapes": self.edges.to_dict(),
            "isLocked": self.locked,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=int(data["id"]),
            row=int(data["r"]),
            col=int(data["c"]),
            width=float(data.get("width", 0.0)),
            height=float(data.get("height", 0.0)),
            edges=EdgeSignature.from_dict(data.get("shapes", {})),
            x=float(data["x"]),
            y=float(data["y"]),
            locked=bool(data.get("isLocked", False)),
        )
