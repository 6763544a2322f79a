import base64
import io
import logging
from typing import List

import segno
from PIL import Image

from .config import QR_DATA_URI_PREFIX, QR_ERROR_LEVEL, QR_SCALE
from .errors import EncodingError

logger = logging.getLogger(__name__)

DARK = 0
LIGHT = 255


def make_symbol(payload):
    if not payload:
        raise EncodingError("Cannot encode an empty QR payload")
    try:
        return segno.make_qr(payload, error=QR_ERROR_LEVEL)
    except (segno.DataOverflowError, ValueError) as e:
        raise EncodingError(f"Cannot encode QR payload: {e}") from e


def make_grid(payload: str) -> List[List[bool]]:
    """Return the QR module grid for ``payload``; ``True`` is a dark module.

    Uses the smallest version that fits at the configured error level and
    leaves out the quiet zone.
    """
    qr = make_symbol(payload)
    return [[bool(module) for module in row] for row in qr.matrix_iter(scale=1, border=0)]


def rasterize(grid, scale=QR_SCALE) -> Image.Image:
    width = len(grid)
    image = Image.new("L", (width * scale, width * scale), LIGHT)
    for y, row in enumerate(grid):
        for x, dark in enumerate(row):
            if dark:
                image.paste(DARK, (x * scale, y * scale, (x + 1) * scale, (y + 1) * scale))
    return image


def to_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def encode(payload: str, scale=QR_SCALE) -> str:
    """Encode ``payload`` as a QR code and return it as a PNG data URI."""
    grid = make_grid(payload)
    png = to_png(rasterize(grid, scale))
    logger.debug("QR code for %s: %dx%d modules, %d bytes", payload, len(grid), len(grid), len(png))
    return QR_DATA_URI_PREFIX + base64.b64encode(png).decode("ascii")


def print_terminal(url):
    """Render ``url`` as a QR code on the terminal."""
    make_symbol(url).terminal(compact=True)
