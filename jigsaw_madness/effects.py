# effects.py - per-frame animations driven by the main loop
import math
import random

import pygame

from jigsaw_madness.settings import CONFETTI_COLORS


class FrameScheduler:
    """
    Runs callbacks once per frame. A callback takes the frame time in seconds and
    returns True to run again next frame; returning False drops it.
    """

    def __init__(self):
        self._callbacks = []

    def __len__(self):
        return len(self._callbacks)

    def schedule(self, callback):
        self._callbacks.append(callback)
        return callback

    def cancel(self, callback):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def clear(self):
        self._callbacks = []

    def tick(self, dt):
        current = self._callbacks
        self._callbacks = []
        survivors = [cb for cb in current if cb(dt)]
        # anything scheduled during this tick goes after the survivors
        self._callbacks = survivors + self._callbacks


class AssistPulse:
    """Breathing highlight for the group being dragged; runs while `condition()` holds."""

    def __init__(self, condition, period=1.2):
        self.condition = condition
        self.period = period
        self.phase = 0.0

    def __call__(self, dt):
        if not self.condition():
            self.phase = 0.0
            return False
        self.phase = (self.phase + dt / self.period) % 1.0
        return True

    @property
    def strength(self):
        return 0.5 + 0.5 * math.sin(self.phase * 2 * math.pi)


class Confetti:
    def __init__(self, width, height, condition, count=150, rng=None):
        rng = rng or random
        self.condition = condition
        self.height = height
        self.particles = []
        for _ in range(count):
            self.particles.append({
                "x": width / 2,
                "y": height / 2,
                "vx": (rng.random() - 0.5) * 20,
                "vy": (rng.random() - 1) * 20 - 5,
                "color": rng.choice(CONFETTI_COLORS),
                "size": rng.random() * 10 + 5,
                "rotation": rng.random() * math.pi * 2,
                "spin": (rng.random() - 0.5) * 0.2,
            })

    def __call__(self, dt):
        if not self.condition():
            self.particles = []
            return False
        frames = dt * 60.0
        for p in self.particles:
            p["x"] += p["vx"] * frames
            p["y"] += p["vy"] * frames
            p["vy"] += 0.5 * frames
            p["rotation"] += p["spin"] * frames
            # bounce off the bottom
            if p["y"] > self.height:
                p["y"] = self.height
                p["vy"] *= -0.5
        return True

    def draw(self, surface):
        for p in self.particles:
            half = p["size"] / 2
            cos_r = math.cos(p["rotation"])
            sin_r = math.sin(p["rotation"])
            corners = []
            for cx, cy in ((-half, -half), (half, -half), (half, half), (-half, half)):
                corners.append((p["x"] + cx * cos_r - cy * sin_r, p["y"] + cx * sin_r + cy * cos_r))
            pygame.draw.polygon(surface, p["color"], corners)
