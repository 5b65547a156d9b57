import random

import pygame
import pytest

from jigsaw_madness.generator import generate_puzzle
from jigsaw_madness.images import average_color, darken_color, image_from_surface
from jigsaw_madness.renderer import PLACEHOLDER_COLOR, Renderer, build_piece_sprite, render_assembled
from jigsaw_madness.settings import HIGHLIGHT_COLOR, TRAY_COLOR
from jigsaw_madness.viewport import Viewport

RED = (200, 0, 0)


@pytest.fixture
def red_session(clock, park):
    surface = pygame.Surface((400, 400))
    surface.fill(RED)
    session = generate_puzzle(image_from_surface(surface), 4, (1000, 1000), rng=random.Random(1), clock=clock)
    park(session)
    return session


def test_average_and_darken():
    surface = pygame.Surface((10, 10))
    surface.fill((100, 50, 20))
    assert average_color(surface) == (100, 50, 20)
    assert darken_color((100, 50, 20), 80) == (20, 0, 0)


def test_piece_is_drawn_with_its_picture(red_session):
    piece = red_session.piece(0)
    piece.x, piece.y = 50, 50
    target = pygame.Surface((1000, 1000))
    Renderer(red_session).draw(target, Viewport())
    assert tuple(target.get_at((200, 200)))[:3] == RED


def test_empty_board_shows_darkened_average(red_session):
    target = pygame.Surface((1000, 1000))
    Renderer(red_session).draw(target, Viewport())
    assert tuple(target.get_at((500, 500)))[:3] == (120, 0, 0)
    assert tuple(target.get_at((5, 5)))[:3] == TRAY_COLOR


def test_guide_ghost_tints_the_board(red_session):
    target = pygame.Surface((1000, 1000))
    renderer = Renderer(red_session)
    renderer.draw(target, Viewport())
    plain = tuple(target.get_at((500, 500)))[:3]
    red_session.toggle_guide()
    renderer.draw(target, Viewport())
    ghosted = tuple(target.get_at((500, 500)))[:3]
    assert ghosted[0] > plain[0]


def test_zoomed_draw_fills_the_window(red_session):
    target = pygame.Surface((1000, 1000))
    Renderer(red_session).draw(target, Viewport(zoom=2.0))
    assert target.get_size() == (1000, 1000)
    assert tuple(target.get_at((5, 5)))[:3] == TRAY_COLOR
    # world (300, 300) is inside the board
    assert tuple(target.get_at((600, 600)))[:3] == (120, 0, 0)


def test_dragged_pieces_are_drawn_last(red_session):
    a, b = red_session.piece(0), red_session.piece(1)
    a.x, a.y = 50, 50
    b.x, b.y = 50, 50
    target = pygame.Surface((1000, 1000))
    Renderer(red_session).draw(target, Viewport(), dragged_ids=[0], pulse=1.0)
    assert tuple(target.get_at((200, 200)))[:3] == RED
    # flat top edge of the dragged piece carries the highlight
    assert tuple(target.get_at((200, 50)))[:3] == HIGHLIGHT_COLOR


def test_placeholder_sprite(square_session):
    piece = square_session.piece(0)
    sprite = build_piece_sprite(None, piece, 100, 100, 30)
    assert sprite.get_size() == (160, 160)
    assert tuple(sprite.get_at((80, 80))) == PLACEHOLDER_COLOR + (255,)
    assert sprite.get_at((1, 1)).a == 0


def test_render_assembled(red_session):
    finished = render_assembled(red_session)
    assert finished.get_size() == (400, 400)
    assert tuple(finished.get_at((100, 100)))[:3] == RED
    assert tuple(finished.get_at((300, 300)))[:3] == RED


def test_sprites_rebuilt_when_picture_changes(red_session):
    renderer = Renderer(red_session)
    target = pygame.Surface((1000, 1000))
    renderer.draw(target, Viewport())
    first = renderer._sprites[0]
    renderer.draw(target, Viewport())
    assert renderer._sprites[0] is first
    blue = pygame.Surface((400, 400))
    blue.fill((0, 0, 200))
    red_session.image = image_from_surface(blue)
    renderer.draw(target, Viewport())
    assert renderer._sprites[0] is not first


def test_zoomed_out_view_shows_pieces_past_the_canvas(red_session):
    piece = red_session.piece(0)
    piece.x, piece.y = 1200, 200
    target = pygame.Surface((1000, 1000))
    Renderer(red_session).draw(target, Viewport(zoom=0.5))
    # cell centre (1350, 350) in world units
    assert tuple(target.get_at((675, 175)))[:3] == RED


def test_panned_view_shows_pieces_left_of_the_origin(red_session):
    piece = red_session.piece(0)
    piece.x, piece.y = -400, -400
    target = pygame.Surface((1000, 1000))
    Renderer(red_session).draw(target, Viewport(view_x=300, view_y=300, zoom=0.5))
    # cell centre (-250, -250) in world units
    assert tuple(target.get_at((175, 175)))[:3] == RED
