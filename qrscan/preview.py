"""
QR Scan Preview - Draw camera frames in the terminal with half blocks
License: MIT
"""

import shutil
import sys
from typing import Optional

from PIL import Image

UPPER_HALF_BLOCK = '▀'
RESET = '\x1b[0m'


def _fit(image: Image.Image, width: Optional[int], height: Optional[int]):
    """Target size in pixels; each text row holds two pixel rows."""
    if width is None and height is None:
        columns, rows = shutil.get_terminal_size()
        width = columns
        height = max(rows - 1, 1)

    w, h = image.size
    if width is not None and height is not None:
        scale = min(width / w, (height * 2) / h)
    elif width is not None:
        scale = width / w
    else:
        scale = (height * 2) / h

    return max(int(w * scale), 1), max(int(h * scale), 2)


def render_frame(image: Image.Image, width: Optional[int] = None,
                 height: Optional[int] = None) -> str:
    """Render an image as 24-bit ANSI colored half blocks."""
    size = _fit(image, width, height)
    img = image.convert('RGB').resize(size)
    w, h = img.size
    px = img.load()

    lines = []
    for y in range(0, h - 1, 2):
        cells = []
        for x in range(w):
            top = px[x, y]
            bottom = px[x, y + 1]
            cells.append('\x1b[38;2;{};{};{}m\x1b[48;2;{};{};{}m{}'.format(
                *top, *bottom, UPPER_HALF_BLOCK))
        lines.append(''.join(cells) + RESET)
    return '\n'.join(lines)


def can_preview(out=None) -> bool:
    out = out or sys.stdout
    return hasattr(out, 'isatty') and out.isatty()


def show_frame(image: Image.Image, x: int = 0, y: int = 0, width: Optional[int] = None,
               height: Optional[int] = None, out=None):
    """Draw the frame with its top left corner at terminal cell (x, y)."""
    out = out or sys.stdout
    rendered = render_frame(image, width, height)

    # Cursor positions are 1-based
    row = y + 1
    for line in rendered.split('\n'):
        out.write(f"\x1b[{row};{x + 1}H{line}")
        row += 1
    out.flush()
