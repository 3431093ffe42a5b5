"""Fonts and colors shared by the PNG renderers."""

import logging

from PIL import ImageFont

from ratingmap.colors import hex_to_rgb

logger = logging.getLogger(__name__)

# --- Fonts ---

_FONT_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"
_FONT_REGULAR = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"
_FONT_MONO = "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf"

FontType = ImageFont.FreeTypeFont | ImageFont.ImageFont


def font(size: int, bold: bool = False, mono: bool = False) -> FontType:
    if mono:
        path = _FONT_MONO
    else:
        path = _FONT_BOLD if bold else _FONT_REGULAR
    try:
        return ImageFont.truetype(path, size)
    except OSError:
        logger.debug("Font %s unavailable, using Pillow default", path)
        return ImageFont.load_default(size=size)


# --- Colors ---

RGB = tuple[int, int, int]

BG = (20, 24, 28)
TEXT = (230, 237, 243)
TEXT_DIM = (110, 118, 129)
DIVIDER = (48, 54, 61)
ACCENT_ORANGE = (255, 128, 0)
ACCENT_GREEN = (0, 224, 84)
WHITE = (255, 255, 255)


def rgb(color: str) -> RGB:
    return hex_to_rgb(color)


def blend(fg: tuple[int, int, int, int], bg: RGB) -> RGB:
    """Composite a translucent RGBA color over an opaque background."""
    alpha = fg[3] / 255
    return (
        round(fg[0] * alpha + bg[0] * (1 - alpha)),
        round(fg[1] * alpha + bg[1] * (1 - alpha)),
        round(fg[2] * alpha + bg[2] * (1 - alpha)),
    )
