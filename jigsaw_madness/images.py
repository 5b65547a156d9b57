# images.py - loading, converting and compressing puzzle pictures
import base64
import binascii
import io
import logging

import numpy as np
import pygame
from PIL import Image, UnidentifiedImageError

from jigsaw_madness.errors import PersistenceError
from jigsaw_madness.model import PuzzleImage

log = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:image/jpeg;base64,"


def load_image(path):
    """Load a picture from disk as a PuzzleImage backed by a pygame Surface."""
    surface = pygame.image.load(path)
    if pygame.display.get_init() and pygame.display.get_surface() is not None:
        surface = surface.convert_alpha()
    return image_from_surface(surface)


def image_from_surface(surface):
    return PuzzleImage(surface.get_width(), surface.get_height(), surface)


# --- pygame <-> Pillow ---
def pil_from_surface(surface):
    data = pygame.image.tobytes(surface, "RGB")
    return Image.frombytes("RGB", surface.get_size(), data)


def surface_from_pil(img):
    img = img.convert("RGB")
    return pygame.image.frombytes(img.tobytes(), img.size, "RGB")


def save_surface_as_jpg(surface, filename):
    pil_from_surface(surface).save(filename, "JPEG")
    log.info("saved image as %s", filename)


# --- Compression ---
def fit_within(width, height, max_size):
    """Shrink (width, height) so neither side exceeds max_size, keeping the aspect ratio."""
    if width <= max_size and height <= max_size:
        return width, height
    if width > height:
        return max_size, max(1, round(height * max_size / width))
    return max(1, round(width * max_size / height)), max_size


def compress_image(surface, max_size, quality):
    """JPEG bytes of the picture scaled to fit within max_size."""
    img = pil_from_surface(surface)
    size = fit_within(img.width, img.height, max_size)
    if size != img.size:
        img = img.resize(size, Image.LANCZOS)
    buf = io.BytesIO()
    img.save(buf, "JPEG", quality=quality)
    return buf.getvalue()


def encode_data_url(jpeg_bytes):
    return DATA_URL_PREFIX + base64.b64encode(jpeg_bytes).decode("ascii")


def decode_data_url(data_url):
    """Decode a saved picture back into a PuzzleImage."""
    if not isinstance(data_url, str) or not data_url.startswith("data:image/"):
        raise PersistenceError("saved image is missing or not a data URL")
    try:
        _, payload = data_url.split(",", 1)
        raw = base64.b64decode(payload, validate=True)
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            surface = surface_from_pil(img)
    except (ValueError, binascii.Error, UnidentifiedImageError, OSError) as exc:
        raise PersistenceError(f"saved image could not be decoded: {exc}") from exc
    return image_from_surface(surface)


# --- Colour ---
def average_color(surface):
    arr = pygame.surfarray.array3d(surface)
    avg = np.mean(arr, axis=(0, 1))
    return (int(avg[0]), int(avg[1]), int(avg[2]))


def darken_color(color, amount=50):
    return (max(color[0] - amount, 0), max(color[1] - amount, 0), max(color[2] - amount, 0))
