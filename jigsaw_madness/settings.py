# settings.py - global settings for Jigsaw Madness
import os

# --- Window ---
SCREEN_WIDTH, SCREEN_HEIGHT = 1600, 900
FPS = 60

# --- Puzzle Layout ---
BOARD_FILL_RATIO = 0.6      # share of the canvas the assembled board may use
SNAP_DISTANCE = 30          # world units, board and neighbor snap
HIT_BLEED_RATIO = 0.2       # hit box grows by this share of the scaled cell
SCATTER_PADDING = 10        # gap kept between scattered pieces and the board
TAB_AMPLITUDE = 0.25        # tab height as a share of edge length
IMAGE_BLEED_RATIO = 0.3     # extra image drawn around each cell to cover tabs
MIN_ROWS = 1
MIN_COLS = 2

# --- Viewport ---
MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
ZOOM_STEP = 1.1

# --- Difficulty ---
DIFFICULTY_PRESETS = (12, 24, 48, 100, 200, 300)
DEFAULT_PIECE_COUNT = 12
PIECE_COUNT_STEP = 12
MAX_PIECE_COUNT = 1200

# --- Colours ---
TRAY_COLOR = (44, 62, 80)
BOARD_COLOR = (236, 240, 241)
FRAME_COLOR = (142, 68, 173)
FRAME_WIDTH = 10
SHADOW_OFFSET = (10, 10)
STROKE_COLOR = (0, 0, 0)
HIGHLIGHT_COLOR = (255, 215, 0)
GUIDE_ALPHA = 51
CONFETTI_COLORS = [
    (231, 76, 60), (230, 126, 34), (241, 196, 15),
    (46, 204, 113), (52, 152, 219), (155, 89, 182),
]

# --- Persistence ---
SAVE_FILENAME = "jigsaw_puzzle_save_v1.json"
# (max side in pixels, JPEG quality) tried in order until the save fits
SAVE_ATTEMPTS = ((1200, 70), (800, 60), (600, 50), (400, 40))
SAVE_QUOTA_BYTES = 5 * 1024 * 1024


def _dir_from_env(name, default):
    value = os.environ.get(name, "").strip()
    return value or default


IMAGES_DIR = _dir_from_env("JIGSAW_IMAGES_DIR", "images")
SAVES_DIR = _dir_from_env("JIGSAW_SAVES_DIR", "saves")
COMPLETED_DIR = _dir_from_env("JIGSAW_COMPLETED_DIR", "completed")
LOG_LEVEL = os.environ.get("JIGSAW_LOG_LEVEL", "INFO").strip().upper() or "INFO"
