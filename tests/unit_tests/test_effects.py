import random

import pygame

from jigsaw_madness.effects import AssistPulse, Confetti, FrameScheduler
from jigsaw_madness.images import fit_within


def test_scheduler_drops_finished_callbacks():
    scheduler = FrameScheduler()
    calls = []

    def once(dt):
        calls.append(("once", dt))
        return False

    def forever(dt):
        calls.append(("forever", dt))
        return True

    scheduler.schedule(once)
    scheduler.schedule(forever)
    scheduler.tick(0.5)
    scheduler.tick(0.25)
    assert calls == [("once", 0.5), ("forever", 0.5), ("forever", 0.25)]
    assert len(scheduler) == 1
    scheduler.cancel(forever)
    assert len(scheduler) == 0


def test_callbacks_scheduled_during_a_tick_run_next_frame():
    scheduler = FrameScheduler()
    calls = []

    def later(dt):
        calls.append("later")
        return False

    def first(dt):
        calls.append("first")
        scheduler.schedule(later)
        return False

    scheduler.schedule(first)
    scheduler.tick(0.1)
    assert calls == ["first"]
    scheduler.tick(0.1)
    assert calls == ["first", "later"]


def test_pulse_runs_while_condition_holds():
    held = [True]
    pulse = AssistPulse(lambda: held[0], period=1.0)
    assert pulse(0.25)
    assert pulse.strength == 1.0
    held[0] = False
    assert not pulse(0.25)
    assert pulse.phase == 0.0


def test_confetti_falls_and_stops():
    shown = [True]
    confetti = Confetti(800, 600, lambda: shown[0], count=20, rng=random.Random(3))
    assert len(confetti.particles) == 20
    assert confetti(1 / 60)
    assert all(p["y"] <= 600 for p in confetti.particles)
    confetti.draw(pygame.Surface((800, 600)))
    shown[0] = False
    assert not confetti(1 / 60)
    assert confetti.particles == []


def test_fit_within():
    assert fit_within(300, 200, 400) == (300, 200)
    assert fit_within(2000, 1500, 800) == (800, 600)
    assert fit_within(1500, 2000, 800) == (600, 800)
