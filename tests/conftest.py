import os
import random

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from jigsaw_madness.generator import generate_puzzle
from jigsaw_madness.model import PuzzleImage


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_session(clock):
    """Seeded puzzle without pixels; 2x2 on a 400x400 image fills a 600x600 board at (200, 200)."""

    def _make(count=4, width=400, height=400, canvas=(1000, 1000), seed=7):
        image = PuzzleImage(width, height)
        return generate_puzzle(image, count, canvas, rng=random.Random(seed), clock=clock)

    return _make


@pytest.fixture
def square_session(make_session):
    return make_session()


def park_far_apart(session):
    """Move every piece well away from the board and from each other."""
    for p in session.pieces:
        p.x = -2000.0 * (p.id + 1)
        p.y = -2000.0 * (p.id + 1)
        p.locked = False


@pytest.fixture
def park():
    return park_far_apart
