import json
import os
import random

import pygame
import pytest

from jigsaw_madness import app as app_module
from jigsaw_madness.app import JigsawApp, image_stem, list_images


class DummyFont:
    def __init__(self, size):
        self._size = max(1, int(size) if size else 1)

    def render(self, text, *_, **__):
        width = max(1, len(str(text)) * max(self._size // 2, 1))
        return pygame.Surface((width, self._size), pygame.SRCALPHA)

    def size(self, text):
        return max(1, len(str(text)) * max(self._size // 2, 1)), self._size

    def get_height(self):
        return self._size


def write_picture(folder, name, size=(200, 150), color=(30, 120, 200)):
    surface = pygame.Surface(size)
    surface.fill(color)
    pygame.image.save(surface, os.path.join(folder, name))


@pytest.fixture
def mouse(monkeypatch):
    pos = [0, 0]
    monkeypatch.setattr(pygame.mouse, "get_pos", lambda: (pos[0], pos[1]))
    return pos


@pytest.fixture
def folders(tmp_path):
    images = tmp_path / "images"
    images.mkdir()
    return {"images": str(images), "save": str(tmp_path / "saves" / "save.json"),
            "completed": str(tmp_path / "completed")}


@pytest.fixture
def make_app(monkeypatch, mouse, folders):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    monkeypatch.setattr(pygame.font, "SysFont", lambda name, size, *args, **kwargs: DummyFont(size))

    def _make(pictures=("castle.png",)):
        for name in pictures:
            write_picture(folders["images"], name)
        screen = pygame.Surface((1000, 800))
        return JigsawApp(screen, images_dir=folders["images"], save_path=folders["save"],
                         completed_dir=folders["completed"], rng=random.Random(4))

    return _make


def click(app, key):
    app.draw()
    assert key in app.buttons, f"{key} not on screen {app.game_state}: {sorted(app.buttons)}"
    pos = app.buttons[key]["rect"].center
    app.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": pos, "button": 1}))


def drag(app, start, end):
    app.draw()
    app.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": start, "button": 1}))
    app.handle_event(pygame.event.Event(pygame.MOUSEMOTION, {"pos": end, "rel": (0, 0), "buttons": (1, 0, 0)}))
    app.handle_event(pygame.event.Event(pygame.MOUSEBUTTONUP, {"pos": end, "button": 1}))


def start_puzzle(app):
    click(app, "new")
    assert app.game_state == "menu_new"
    click(app, "start")
    assert app.game_state == "puzzle"
    return app.session


def test_list_images(tmp_path):
    for name in ("b.JPG", "a.png", "notes.txt", "c.jpeg"):
        (tmp_path / name).write_bytes(b"")
    assert list_images(str(tmp_path)) == ["a.png", "b.JPG", "c.jpeg"]
    assert list_images(str(tmp_path / "missing")) == []
    assert image_stem("images/castle.png") == "castle"


def test_new_puzzle_menu(make_app):
    app = make_app(pictures=("a.png", "b.png"))
    click(app, "new")
    settings = app.new_puzzle_settings
    assert settings["pieces"] == 12
    click(app, "pieces_inc")
    assert settings["pieces"] == 24
    click(app, "pieces_dec")
    click(app, "pieces_dec")
    assert settings["pieces"] == 12
    click(app, "preset_48")
    assert settings["pieces"] == 48
    click(app, "img_right")
    assert settings["image_index"] == 1
    click(app, "img_right")
    assert settings["image_index"] == 0
    click(app, "img_left")
    assert settings["image_index"] == 1
    click(app, "back")
    assert app.game_state == "menu_main"


def test_start_without_pictures_stays_in_menu(make_app):
    app = make_app(pictures=())
    click(app, "new")
    click(app, "start")
    assert app.game_state == "menu_new"
    assert app.session is None
    assert app.status


def test_new_puzzle_layout(make_app):
    app = make_app()
    session = start_puzzle(app)
    # 200x150 picture on a 1000x800 window
    assert (session.rows, session.cols) == (3, 4)
    assert session.scale == pytest.approx(3.0)
    assert (session.board.x, session.board.y) == (pytest.approx(200), pytest.approx(175))
    assert session.scaled_piece_size == (pytest.approx(150), pytest.approx(150))
    assert session.timer.running
    assert not any(p.locked for p in session.pieces)


def test_solving_the_puzzle(make_app, folders):
    app = make_app()
    session = start_puzzle(app)
    last = session.piece(0)
    for p in session.pieces:
        if p is not last:
            p.x, p.y = session.board_target(p)
            p.locked = True
    last.x, last.y = 600, 650

    drag(app, (675, 700), (280, 230))

    assert last.locked
    assert session.complete
    assert app.banner is not None
    assert app.banner.difficulty == 12
    exported = os.path.join(folders["completed"], "12-Pieces-castle.jpeg")
    assert os.path.isfile(exported)

    app.scheduler.tick(1 / 60)
    assert len(app.scheduler) == 1
    assert app.confetti.particles

    click(app, "play_again")
    assert app.game_state == "menu_new"
    assert app.session is None
    assert len(app.scheduler) == 0


def test_clicks_ignored_after_completion(make_app):
    app = make_app()
    session = start_puzzle(app)
    session.lock(session.piece_ids)
    app.controller.detector.check()
    assert app.banner is not None
    app.draw()
    app.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": (900, 700), "button": 1}))
    assert app.controller.state == "idle"


def test_guide_and_shuffle(make_app):
    app = make_app()
    session = start_puzzle(app)
    click(app, "hint")
    assert session.show_guide
    click(app, "hint")
    assert not session.show_guide

    placed = session.piece(5)
    placed.x, placed.y = session.board_target(placed)
    placed.locked = True
    click(app, "shuffle")
    assert placed.locked
    assert (placed.x, placed.y) == session.board_target(placed)


def test_zoom_and_reset_view(make_app, mouse):
    app = make_app()
    start_puzzle(app)
    mouse[:] = [500, 400]
    app.handle_event(pygame.event.Event(pygame.MOUSEWHEEL, {"x": 0, "y": 1}))
    viewport = app.controller.viewport
    assert viewport.zoom == pytest.approx(1.1)
    assert viewport.screen_to_world(500, 400) == (pytest.approx(500), pytest.approx(400))
    click(app, "reset_view")
    assert viewport.is_identity


def test_focus_loss_cancels_drag(make_app):
    app = make_app()
    session = start_puzzle(app)
    piece = session.pieces[-1]
    piece.x, piece.y = 600, 650
    app.draw()
    app.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": (675, 700), "button": 1}))
    assert app.controller.dragging
    app.handle_event(pygame.event.Event(pygame.MOUSEMOTION, {"pos": (700, 700), "rel": (0, 0), "buttons": (1, 0, 0)}))
    app.handle_event(pygame.event.Event(pygame.WINDOWFOCUSLOST, {}))
    assert app.controller.state == "idle"
    assert (piece.x, piece.y) == (625, 650)
    assert not piece.locked


def test_save_and_resume(make_app, folders):
    app = make_app()
    session = start_puzzle(app)
    session.groups.merge(0, 1)
    positions = [(p.id, p.x, p.y) for p in session.pieces]

    click(app, "save")
    assert os.path.isfile(folders["save"])
    assert app.status == "Puzzle saved!"

    click(app, "menu")
    assert app.game_state == "menu_main"
    assert app.session is None

    click(app, "resume")
    assert app.game_state == "puzzle"
    restored = app.session
    assert restored is not session
    assert [(p.id, p.x, p.y) for p in restored.pieces] == positions
    assert restored.groups.same_group(0, 1)
    assert restored.timer.running


def test_broken_save_stays_on_main_menu(make_app, folders):
    app = make_app()
    os.makedirs(os.path.dirname(folders["save"]))
    with open(folders["save"], "w", encoding="utf-8") as f:
        f.write("{}")
    click(app, "resume")
    assert app.game_state == "menu_main"
    assert app.status


def test_failed_export_is_logged(make_app, monkeypatch, caplog):
    app = make_app()
    session = start_puzzle(app)

    def broken(surface, filename):
        raise OSError("disk full")

    monkeypatch.setattr(app_module, "save_surface_as_jpg", broken)
    session.lock(session.piece_ids)
    app.controller.detector.check()
    assert app.banner is not None
    assert "could not export" in caplog.text


def test_exit_and_quit(make_app):
    app = make_app()
    click(app, "exit")
    assert not app.running
    app = make_app()
    app.handle_event(pygame.event.Event(pygame.QUIT, {}))
    assert not app.running


def test_resumed_save_without_canvas_shuffles_over_the_window(make_app, folders):
    app = make_app()
    start_puzzle(app)
    click(app, "save")
    with open(folders["save"], encoding="utf-8") as f:
        data = json.load(f)
    del data["canvasSize"]
    with open(folders["save"], "w", encoding="utf-8") as f:
        json.dump(data, f)

    click(app, "menu")
    click(app, "resume")
    session = app.session
    assert session.canvas_size == (1000, 800)

    click(app, "shuffle")
    sw, sh = session.scaled_piece_size
    for p in session.pieces:
        assert 0 <= p.x <= 1000 - sw + 1e-6
        assert 0 <= p.y <= 800 - sh + 1e-6
    assert max(p.x for p in session.pieces) > 300
