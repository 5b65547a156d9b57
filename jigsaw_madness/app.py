# app.py - pygame menus and main loop for Jigsaw Madness
import logging
import os
import random

import pygame

from jigsaw_madness.completion import CompletionDetector
from jigsaw_madness.controller import InteractionController
from jigsaw_madness.effects import AssistPulse, Confetti, FrameScheduler
from jigsaw_madness.errors import InvalidConfigurationError, PersistenceError
from jigsaw_madness.generator import generate_puzzle, grid_for
from jigsaw_madness.images import load_image, save_surface_as_jpg
from jigsaw_madness.persistence import default_save_path, has_save, load_game, save_game
from jigsaw_madness.renderer import Renderer, render_assembled
from jigsaw_madness.scatter import scatter_pieces
from jigsaw_madness.settings import (COMPLETED_DIR, DEFAULT_PIECE_COUNT, DIFFICULTY_PRESETS, FPS,
                                     IMAGES_DIR, LOG_LEVEL, MAX_PIECE_COUNT, PIECE_COUNT_STEP,
                                     SCREEN_HEIGHT, SCREEN_WIDTH, ZOOM_STEP)
from jigsaw_madness.viewport import Viewport

log = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg")
STATUS_MS = 2500


def list_images(folder):
    if not os.path.isdir(folder):
        return []
    return sorted(f for f in os.listdir(folder) if f.lower().endswith(IMAGE_EXTENSIONS))


def image_stem(filename):
    return os.path.splitext(os.path.basename(filename))[0]


class JigsawApp:
    """
    Screens are plain strings: menu_main, menu_new and puzzle. Each frame the
    current screen is drawn and returns its buttons, which the next events are
    checked against.
    """

    def __init__(self, screen, images_dir=IMAGES_DIR, save_path=None, completed_dir=COMPLETED_DIR, rng=None):
        self.screen = screen
        self.size = screen.get_size()
        self.images_dir = images_dir
        self.save_path = save_path or default_save_path()
        self.completed_dir = completed_dir
        self.rng = rng or random.Random()
        self.game_state = "menu_main"
        self.new_puzzle_settings = {"pieces": DEFAULT_PIECE_COUNT,
                                    "image_list": list_images(images_dir), "image_index": 0}
        self.buttons = {}
        self.fonts = {}
        self.image_cache = {}
        self.gradient = None
        self.status = ""
        self.status_until = 0
        self.running = True

        self.scheduler = FrameScheduler()
        self.session = None
        self.image_name = None
        self.controller = None
        self.renderer = None
        self.pulse = None
        self.confetti = None
        self.banner = None

    # --- Helpers ---
    def get_font(self, size):
        """Return a cached font of the given size."""
        if size not in self.fonts:
            self.fonts[size] = pygame.font.SysFont("arial", size)
        return self.fonts[size]

    def load_image_cached(self, filename):
        path = os.path.join(self.images_dir, filename)
        if path not in self.image_cache:
            self.image_cache[path] = load_image(path)
        return self.image_cache[path]

    def show_status(self, text):
        self.status = text
        self.status_until = pygame.time.get_ticks() + STATUS_MS

    def draw_text(self, text, pos, font_size=30, color=(255, 255, 255), shadow_color=(0, 0, 0), shadow_offset=(2, 2)):
        """Draws text with a subtle drop shadow for improved legibility."""
        font = self.get_font(font_size)
        shadow_surface = font.render(text, True, shadow_color)
        shadow_rect = shadow_surface.get_rect(center=(pos[0] + shadow_offset[0], pos[1] + shadow_offset[1]))
        self.screen.blit(shadow_surface, shadow_rect)
        text_surface = font.render(text, True, color)
        text_rect = text_surface.get_rect(center=pos)
        self.screen.blit(text_surface, text_rect)

    def draw_header(self, text, pos, font_size, main_color, outline_color, outline_thickness=2):
        font = self.get_font(font_size)
        outline_surface = font.render(text, True, outline_color)
        for dx in range(-outline_thickness, outline_thickness + 1):
            for dy in range(-outline_thickness, outline_thickness + 1):
                if dx == 0 and dy == 0:
                    continue
                self.screen.blit(outline_surface, outline_surface.get_rect(center=(pos[0] + dx, pos[1] + dy)))
        main_surface = font.render(text, True, main_color)
        self.screen.blit(main_surface, main_surface.get_rect(center=pos))

    def draw_rounded_button(self, button, mouse_pos=None):
        rect = button["rect"]
        base_color = button["color"]
        # Lighten on hover:
        if mouse_pos and rect.collidepoint(mouse_pos):
            color = tuple(min(255, c + 30) for c in base_color)
        else:
            color = base_color
        pygame.draw.rect(self.screen, (0, 0, 0), rect.inflate(4, 4), border_radius=8)
        pygame.draw.rect(self.screen, color, rect, border_radius=8)
        font = self.get_font(28)
        shadow_surface = font.render(button["label"], True, (0, 0, 0))
        self.screen.blit(shadow_surface, shadow_surface.get_rect(center=(rect.centerx + 1, rect.centery + 1)))
        text_surface = font.render(button["label"], True, (255, 255, 255))
        self.screen.blit(text_surface, text_surface.get_rect(center=rect.center))

    def draw_background_gradient(self):
        """Draws a vertical gradient background, built once per window size."""
        width, height = self.size
        if self.gradient is None or self.gradient.get_size() != self.size:
            self.gradient = pygame.Surface(self.size)
            color_top = (30, 30, 30)
            color_bottom = (60, 60, 60)
            for y in range(height):
                ratio = y / height
                color = tuple(int(color_top[i] * (1 - ratio) + color_bottom[i] * ratio) for i in range(3))
                pygame.draw.line(self.gradient, color, (0, y), (width, y))
        self.screen.blit(self.gradient, (0, 0))

    def make_buttons(self, entries):
        buttons = {}
        mouse = pygame.mouse.get_pos()
        for key, label, rect, color in entries:
            buttons[key] = {"label": label, "rect": pygame.Rect(rect), "color": color}
            self.draw_rounded_button(buttons[key], mouse)
        return buttons

    def fade_in(self, duration=250):
        fade = pygame.Surface(self.size)
        fade.fill((0, 0, 0))
        for alpha in range(255, -1, -15):
            fade.set_alpha(alpha)
            self.draw()
            self.screen.blit(fade, (0, 0))
            pygame.display.update()
            pygame.time.delay(duration // 17)

    # --- Sessions ---
    def install_session(self, session, image_name):
        self.scheduler.clear()
        self.session = session
        self.image_name = image_name
        detector = CompletionDetector(session)
        detector.subscribe(self.on_complete)
        self.controller = InteractionController(session, Viewport(), detector)
        self.renderer = Renderer(session)
        self.pulse = None
        self.confetti = None
        self.banner = None
        self.game_state = "puzzle"

    def close_session(self):
        self.scheduler.clear()
        self.session = None
        self.controller = None
        self.renderer = None
        self.pulse = None
        self.confetti = None
        self.banner = None

    def start_new_puzzle(self):
        settings = self.new_puzzle_settings
        if not settings["image_list"]:
            self.show_status(f"Add pictures to the '{self.images_dir}' folder first")
            return False
        filename = settings["image_list"][settings["image_index"]]
        try:
            image = self.load_image_cached(filename)
            session = generate_puzzle(image, settings["pieces"], self.size, rng=self.rng)
        except (InvalidConfigurationError, pygame.error, OSError) as exc:
            log.warning("could not start a puzzle from %s: %s", filename, exc)
            self.show_status(f"Could not start puzzle: {exc}")
            return False
        self.install_session(session, image_stem(filename))
        session.timer.start()
        return True

    def resume_puzzle(self):
        try:
            session = load_game(self.save_path, canvas_size=self.size)
        except (PersistenceError, InvalidConfigurationError) as exc:
            log.warning("resume failed: %s", exc)
            self.show_status("Saved puzzle could not be loaded")
            return False
        self.install_session(session, "resumed")
        session.timer.resume()
        return True

    def save_puzzle(self):
        try:
            save_game(self.session, self.save_path)
        except PersistenceError as exc:
            log.warning("save failed: %s", exc)
            self.show_status("Save failed: the picture is too large")
            return False
        self.show_status("Puzzle saved!")
        return True

    def on_complete(self, event):
        self.banner = event
        width, height = self.size
        self.confetti = Confetti(width, height, lambda: self.banner is not None and self.session is not None
                                 and self.session.complete, rng=self.rng)
        self.scheduler.schedule(self.confetti)
        self.export_completed()

    def export_completed(self):
        name = f"{len(self.session.pieces)}-Pieces-{self.image_name}.jpeg"
        path = os.path.join(self.completed_dir, name)
        try:
            os.makedirs(self.completed_dir, exist_ok=True)
            save_surface_as_jpg(render_assembled(self.session), path)
        except (OSError, ValueError, pygame.error) as exc:
            log.warning("could not export the completed picture: %s", exc)
            return None
        return path

    # --- Screens ---
    def draw_main_menu(self):
        self.draw_background_gradient()
        cx = self.size[0] // 2
        self.draw_header("Jigsaw Madness", (cx, 100), font_size=96, main_color=(255, 215, 0),
                         outline_color=(0, 0, 0), outline_thickness=3)
        entries = [("new", "New Puzzle", (cx - 100, 250, 200, 50), (70, 130, 180))]
        if has_save(self.save_path):
            entries.append(("resume", "Resume", (cx - 100, 320, 200, 50), (70, 130, 180)))
        entries.append(("exit", "Exit", (cx - 100, 250 + 70 * len(entries), 200, 50), (178, 34, 34)))
        return self.make_buttons(entries)

    def draw_new_menu(self):
        self.draw_background_gradient()
        settings = self.new_puzzle_settings
        cx = self.size[0] // 2
        self.draw_header("New Puzzle", (cx, 50), font_size=64, main_color=(0, 255, 0), outline_color=(0, 0, 0))
        pieces_y = 130
        entries = [
            ("pieces_dec", "-", (cx - 150, pieces_y, 40, 40), (100, 100, 100)),
            ("pieces_inc", "+", (cx + 110, pieces_y, 40, 40), (100, 100, 100)),
        ]
        preset_w, spacing = 80, 10
        start_x = cx - (len(DIFFICULTY_PRESETS) * (preset_w + spacing) - spacing) // 2
        for i, count in enumerate(DIFFICULTY_PRESETS):
            entries.append((f"preset_{count}", str(count),
                          (start_x + i * (preset_w + spacing), pieces_y + 50, preset_w, 40), (150, 150, 150)))
        img_y = pieces_y + 120
        entries.append(("img_left", "<", (cx - 300, img_y, 50, 50), (100, 100, 100)))
        entries.append(("img_right", ">", (cx + 250, img_y, 50, 50), (100, 100, 100)))
        entries.append(("start", "Start", (cx - 100, img_y + 150, 200, 50), (34, 139, 34)))
        entries.append(("back", "Back", (20, self.size[1] - 70, 100, 40), (105, 105, 105)))
        buttons = self.make_buttons(entries)

        self.draw_text(f"Pieces: {settings['pieces']}", (cx, pieces_y + 20), font_size=36)
        if settings["image_list"]:
            filename = settings["image_list"][settings["image_index"]]
            self.draw_text(f"Image: {filename}", (cx, img_y + 25), font_size=36)
            try:
                image = self.load_image_cached(filename)
            except (pygame.error, OSError):
                image = None
            if image is not None:
                rows, cols = grid_for(settings["pieces"], image.aspect_ratio)
                self.draw_text(f"{rows} x {cols} = {rows * cols} pieces", (cx, img_y + 100), font_size=32)
        else:
            self.draw_text(f"No images found in '{self.images_dir}'", (cx, img_y + 25), font_size=36)
        return buttons

    def draw_puzzle(self):
        controller = self.controller
        pulse = self.pulse.strength if self.pulse is not None and controller.dragging else 0.0
        self.renderer.draw(self.screen, controller.viewport, controller.dragged_piece_ids(), pulse)
        entries = [
            ("menu", "Main Menu", (20, 20, 170, 40), (128, 128, 128)),
            ("save", "Save Puzzle", (20, 70, 170, 40), (34, 139, 34)),
            ("hint", "Hide Guide" if self.session.show_guide else "Show Guide", (20, 120, 170, 40), (70, 130, 180)),
            ("shuffle", "Shuffle", (20, 170, 170, 40), (70, 130, 180)),
        ]
        if not controller.viewport.is_identity:
            entries.append(("reset_view", "Reset View", (20, 220, 170, 40), (105, 105, 105)))
        buttons = self.make_buttons(entries)
        self.draw_text(self.session.timer.formatted(), (self.size[0] - 80, 40), font_size=36)
        if self.confetti is not None:
            self.confetti.draw(self.screen)
        if self.banner is not None:
            cx, cy = self.size[0] // 2, self.size[1] // 2
            self.draw_header("Congratulations!", (cx, cy - 60), font_size=72, main_color=(255, 215, 0),
                             outline_color=(0, 0, 0))
            minutes, seconds = divmod(self.banner.elapsed_seconds, 60)
            self.draw_text(f"Time: {minutes:02d}:{seconds:02d}", (cx, cy + 10), font_size=40)
            buttons.update(self.make_buttons([("play_again", "Play Again", (cx - 100, cy + 50, 200, 50),
                                               (34, 139, 34))]))
        return buttons

    def draw(self):
        if self.game_state == "menu_main":
            self.buttons = self.draw_main_menu()
        elif self.game_state == "menu_new":
            self.buttons = self.draw_new_menu()
        elif self.game_state == "puzzle":
            self.buttons = self.draw_puzzle()
        if self.status and pygame.time.get_ticks() < self.status_until:
            self.draw_text(self.status, (self.size[0] // 2, self.size[1] - 40), font_size=30)

    # --- Events ---
    def clicked(self, pos):
        for key, btn in self.buttons.items():
            if btn["rect"].collidepoint(pos):
                return key
        return None

    def handle_main_menu_events(self, event):
        if event.type != pygame.MOUSEBUTTONDOWN or event.button != 1:
            return
        key = self.clicked(event.pos)
        if key == "new":
            self.new_puzzle_settings["image_list"] = list_images(self.images_dir)
            self.new_puzzle_settings["image_index"] = 0
            self.game_state = "menu_new"
        elif key == "resume":
            self.resume_puzzle()
        elif key == "exit":
            self.running = False

    def handle_new_menu_events(self, event):
        if event.type != pygame.MOUSEBUTTONDOWN or event.button != 1:
            return
        settings = self.new_puzzle_settings
        key = self.clicked(event.pos)
        if key == "pieces_dec":
            settings["pieces"] = max(PIECE_COUNT_STEP, settings["pieces"] - PIECE_COUNT_STEP)
        elif key == "pieces_inc":
            settings["pieces"] = min(MAX_PIECE_COUNT, settings["pieces"] + PIECE_COUNT_STEP)
        elif key and key.startswith("preset_"):
            settings["pieces"] = int(key[len("preset_"):])
        elif key in ("img_left", "img_right") and settings["image_list"]:
            step = -1 if key == "img_left" else 1
            settings["image_index"] = (settings["image_index"] + step) % len(settings["image_list"])
        elif key == "start":
            self.start_new_puzzle()
        elif key == "back":
            self.game_state = "menu_main"

    def handle_puzzle_events(self, event):
        controller = self.controller
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            key = self.clicked(event.pos)
            if key == "menu":
                controller.cancel()
                self.close_session()
                self.game_state = "menu_main"
            elif key == "save":
                self.save_puzzle()
            elif key == "hint":
                self.session.toggle_guide()
            elif key == "shuffle":
                scatter_pieces(self.session, keep_locked=True, rng=self.rng, canvas_size=self.size)
            elif key == "reset_view":
                controller.reset_view()
            elif key == "play_again":
                self.close_session()
                self.game_state = "menu_new"
            elif key is None and self.banner is None:
                if controller.pointer_down(*event.pos) and controller.dragging:
                    self.pulse = self.scheduler.schedule(AssistPulse(lambda: controller.dragging))
        elif event.type == pygame.MOUSEMOTION:
            controller.pointer_move(*event.pos)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            controller.pointer_up(*event.pos)
        elif event.type == pygame.MOUSEWHEEL:
            controller.zoom_at(*pygame.mouse.get_pos(), ZOOM_STEP ** event.y)
        elif event.type == pygame.WINDOWFOCUSLOST:
            controller.cancel()

    def handle_event(self, event):
        if event.type == pygame.QUIT:
            self.running = False
        elif self.game_state == "menu_main":
            self.handle_main_menu_events(event)
        elif self.game_state == "menu_new":
            self.handle_new_menu_events(event)
        elif self.game_state == "puzzle":
            self.handle_puzzle_events(event)

    def run(self):
        clock = pygame.time.Clock()
        while self.running:
            dt = clock.tick(FPS) / 1000.0
            for event in pygame.event.get():
                self.handle_event(event)
            self.scheduler.tick(dt)
            if self.running:
                self.draw()
                pygame.display.flip()


def main():
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    os.environ.setdefault("SDL_VIDEO_CENTERED", "1")
    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
    pygame.display.set_caption("Jigsaw Puzzle")
    os.makedirs(IMAGES_DIR, exist_ok=True)
    app = JigsawApp(screen)
    if not app.new_puzzle_settings["image_list"]:
        log.info("No images found in '%s'. Add some pictures to start a puzzle.", IMAGES_DIR)
    app.fade_in()
    app.run()
    pygame.quit()
