# renderer.py - draw the table, board and pieces
"""
Drawing is a function of the session, the viewport and the drag in progress.
The only thing kept between frames is a cache of clipped piece sprites, rebuilt
whenever the picture or the scale changes.
"""
import math

import pygame

from jigsaw_madness.geometry import piece_outline
from jigsaw_madness.images import average_color, darken_color
from jigsaw_madness.settings import (BOARD_COLOR, FRAME_COLOR, FRAME_WIDTH, GUIDE_ALPHA,
                                     HIGHLIGHT_COLOR, IMAGE_BLEED_RATIO, SHADOW_OFFSET,
                                     STROKE_COLOR, TRAY_COLOR)

PLACEHOLDER_COLOR = (160, 160, 160)


def scale_surface(surface, size):
    size = (max(1, int(round(size[0]))), max(1, int(round(size[1]))))
    if surface.get_size() == size:
        return surface
    try:
        return pygame.transform.smoothscale(surface, size)
    except ValueError:
        # smoothscale only handles 24 and 32 bit surfaces
        return pygame.transform.scale(surface, size)


def build_piece_sprite(picture, piece, cell_w, cell_h, bleed):
    """
    Cut one piece out of `picture` (already scaled so a cell is cell_w x cell_h).

    The sprite covers the cell plus `bleed` on every side so tabs fit; it should be
    blitted at the piece position minus the bleed.
    """
    width = int(math.ceil(cell_w + 2 * bleed))
    height = int(math.ceil(cell_h + 2 * bleed))
    poly = piece_outline(bleed, bleed, cell_w, cell_h, piece.edges).tolist()
    sprite = pygame.Surface((width, height), pygame.SRCALPHA)
    sprite.fill((0, 0, 0, 0))
    if picture is None:
        pygame.draw.polygon(sprite, PLACEHOLDER_COLOR + (255,), poly)
    else:
        sprite.blit(picture, (bleed - piece.col * cell_w, bleed - piece.row * cell_h))
        mask_surface = pygame.Surface((width, height), pygame.SRCALPHA)
        mask_surface.fill((0, 0, 0, 0))
        pygame.draw.polygon(mask_surface, (255, 255, 255, 255), poly)
        sprite.blit(mask_surface, (0, 0), special_flags=pygame.BLEND_RGBA_MULT)
    pygame.draw.aalines(sprite, STROKE_COLOR, True, poly)
    return sprite


def render_assembled(session):
    """The finished picture at full source resolution, cut lines included."""
    image = session.image
    picture = image.pixels
    completed = pygame.Surface((image.width, image.height))
    completed.fill((50, 50, 50))
    pw, ph = session.piece_width, session.piece_height
    bleed = max(pw, ph) * IMAGE_BLEED_RATIO
    for p in session.pieces:
        sprite = build_piece_sprite(picture, p, pw, ph, bleed)
        completed.blit(sprite, (p.col * pw - bleed, p.row * ph - bleed))
    return completed


class Renderer:
    def __init__(self, session):
        self.session = session
        self._cache_key = None
        self._sprites = {}
        self._picture = None
        self._bleed = 0.0
        self._board_color = BOARD_COLOR

    def _ensure_sprites(self):
        session = self.session
        key = (id(session.image.pixels), session.scale, session.board.w, session.board.h)
        if key == self._cache_key:
            return
        sw, sh = session.scaled_piece_size
        source = session.image.pixels
        self._picture = None
        self._board_color = BOARD_COLOR
        if source is not None:
            self._picture = scale_surface(source, (session.board.w, session.board.h))
            self._board_color = darken_color(average_color(self._picture), 80)
        self._bleed = max(session.piece_width, session.piece_height) * IMAGE_BLEED_RATIO * session.scale
        self._sprites = {p.id: build_piece_sprite(self._picture, p, sw, sh, self._bleed)
                         for p in session.pieces}
        self._cache_key = key

    # --- Frame ---
    def draw(self, target, viewport, dragged_ids=(), pulse=0.0):
        if viewport.is_identity:
            self.draw_world(target, dragged_ids, pulse)
            return
        width, height = target.get_size()
        left, top = viewport.screen_to_world(0, 0)
        right, bottom = viewport.screen_to_world(width, height)
        x0, y0 = int(math.floor(left)), int(math.floor(top))
        # world area under the window, which reaches past the canvas when zoomed out
        visible = pygame.Rect(x0, y0, int(math.ceil(right)) - x0 + 1, int(math.ceil(bottom)) - y0 + 1)
        world = pygame.Surface(visible.size)
        self.draw_world(world, dragged_ids, pulse, origin=visible.topleft)
        zoomed = scale_surface(world, (visible.width * viewport.zoom, visible.height * viewport.zoom))
        target.fill(TRAY_COLOR)
        target.blit(zoomed, viewport.world_to_screen(visible.x, visible.y))

    def draw_world(self, surface, dragged_ids=(), pulse=0.0, origin=(0, 0)):
        """Draw the table onto `surface`, whose top-left corner is the world point `origin`."""
        session = self.session
        self._ensure_sprites()
        ox, oy = origin
        surface.fill(TRAY_COLOR)
        self.draw_board(surface, origin)
        dragged = set(dragged_ids)
        for p in session.pieces:
            if p.id not in dragged:
                surface.blit(self._sprites[p.id], (p.x - self._bleed - ox, p.y - self._bleed - oy))
        if dragged:
            if session.show_guide:
                self.draw_targets(surface, dragged, pulse, origin)
            for p in session.pieces:
                if p.id in dragged:
                    surface.blit(self._sprites[p.id], (p.x - self._bleed - ox, p.y - self._bleed - oy))
            self.draw_highlight(surface, dragged, pulse, origin)

    def draw_board(self, surface, origin=(0, 0)):
        board = self.session.board
        if board.empty:
            return
        rect = pygame.Rect(int(board.x) - origin[0], int(board.y) - origin[1],
                           int(round(board.w)), int(round(board.h)))
        frame = rect.inflate(FRAME_WIDTH * 2, FRAME_WIDTH * 2)
        shadow = pygame.Surface(frame.size, pygame.SRCALPHA)
        shadow.fill((0, 0, 0, 128))
        surface.blit(shadow, frame.move(*SHADOW_OFFSET))
        pygame.draw.rect(surface, FRAME_COLOR, frame)
        pygame.draw.rect(surface, self._board_color, rect)
        if self.session.show_guide and self._picture is not None:
            ghost = self._picture.copy()
            ghost.set_alpha(GUIDE_ALPHA)
            surface.blit(ghost, rect.topleft)

    # --- Overlays ---
    def _outline(self, piece, x, y):
        sw, sh = self.session.scaled_piece_size
        return piece_outline(x, y, sw, sh, piece.edges).tolist()

    def draw_highlight(self, surface, piece_ids, pulse=0.0, origin=(0, 0)):
        level = 0.6 + 0.4 * pulse
        color = tuple(int(c * level) for c in HIGHLIGHT_COLOR)
        for pid in piece_ids:
            p = self.session.piece(pid)
            pygame.draw.lines(surface, color, True, self._outline(p, p.x - origin[0], p.y - origin[1]), 2)

    def draw_targets(self, surface, piece_ids, pulse=0.0, origin=(0, 0)):
        overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        alpha = int(60 + 120 * pulse)
        for pid in piece_ids:
            p = self.session.piece(pid)
            tx, ty = self.session.board_target(p)
            pygame.draw.lines(overlay, HIGHLIGHT_COLOR + (alpha,), True,
                              self._outline(p, tx - origin[0], ty - origin[1]), 2)
        surface.blit(overlay, (0, 0))
