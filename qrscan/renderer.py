"""
QR Scan Renderer - Re-encode content as a QR code and render or export it
License: MIT
"""

import io
import sys
from typing import List, Optional

import qrcode
from qrcode.constants import ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q, ERROR_CORRECT_H
from qrcode.exceptions import DataOverflowError
from qrcode.image.svg import SvgPathImage
from PIL import ImageColor

from qrscan.config import Config, STDIN_MARKER
from qrscan.errors import EncodeError, IoError, QrScanError, UsageError


ERROR_LEVELS = {
    'L': ERROR_CORRECT_L,  # 7% error correction
    'M': ERROR_CORRECT_M,  # 15% error correction
    'Q': ERROR_CORRECT_Q,  # 25% error correction
    'H': ERROR_CORRECT_H,  # 30% error correction
}

BOX_SIZE = 10
QUIET_ZONE = 4

# Tried in order when no level is requested
AUTO_LEVELS = ('M', 'L')


def build_qr(content: str, error_correction: Optional[str] = None,
             version: Optional[int] = None, quiet_zone: bool = True) -> qrcode.QRCode:
    """
    Encode content into a QR code.

    Version and error correction are picked automatically unless given: M is
    preferred, L is used when the data only fits with less redundancy. A
    forced version never grows to fit the data.
    """
    levels = [error_correction.upper()] if error_correction else AUTO_LEVELS

    for level in levels:
        qr = qrcode.QRCode(
            version=version,
            error_correction=ERROR_LEVELS[level],
            box_size=BOX_SIZE,
            border=QUIET_ZONE if quiet_zone else 0,
        )
        qr.add_data(content)

        try:
            qr.make(fit=version is None)
        # best_fit reports running past version 40 as an invalid version
        except (DataOverflowError, ValueError):
            continue
        return qr

    if version is None:
        raise EncodeError(f"content too large for any QR version ({len(content.encode('utf-8'))} bytes)")
    raise EncodeError(f"content too large for QR version {version}")


def matrix(qr: qrcode.QRCode) -> List[List[bool]]:
    """Module grid, quiet zone included."""
    return qr.get_matrix()


def parse_color(value: str):
    try:
        return ImageColor.getrgb(value)
    except ValueError as e:
        raise UsageError(f"invalid color: {value}") from e


def render_terminal(qr: qrcode.QRCode, invert: bool = False) -> str:
    """Half-block rendering, two module rows per text line."""
    out = io.StringIO()
    qr.print_ascii(out=out, invert=invert)
    return out.getvalue().rstrip('\n')


def render_ascii(qr: qrcode.QRCode) -> bytes:
    lines = [''.join('##' if module else '  ' for module in row) for row in matrix(qr)]
    return ('\n'.join(lines) + '\n').encode('utf-8')


class ColoredSvgPathImage(SvgPathImage):
    """Single-path SVG with a custom fill and background."""

    def __init__(self, *args, fill_color: str = '#000', back_color: str = '#fff', **kwargs):
        # Read while the parent constructor builds the document
        self.background = back_color
        self.QR_PATH_STYLE = dict(SvgPathImage.QR_PATH_STYLE, fill=fill_color)
        super().__init__(*args, **kwargs)


def render_svg(qr: qrcode.QRCode, fg: str = '#000', bg: str = '#fff') -> bytes:
    img = qr.make_image(image_factory=ColoredSvgPathImage, fill_color=fg, back_color=bg)
    buf = io.BytesIO()
    img.save(buf)
    return buf.getvalue()


def _pil_image(qr: qrcode.QRCode, fg: str, bg: str):
    parse_color(fg)
    parse_color(bg)
    return qr.make_image(fill_color=fg, back_color=bg).get_image()


def render_png(qr: qrcode.QRCode, fg: str = '#000', bg: str = '#fff') -> bytes:
    buf = io.BytesIO()
    _pil_image(qr, fg, bg).convert('RGBA').save(buf, format='PNG')
    return buf.getvalue()


def render_jpeg(qr: qrcode.QRCode, fg: str = '#000', bg: str = '#fff') -> bytes:
    buf = io.BytesIO()
    # JPEG has no alpha channel
    _pil_image(qr, fg, bg).convert('RGB').save(buf, format='JPEG')
    return buf.getvalue()


def write_output(path: str, data: bytes):
    """Write to the given path, or to stdout when the path is '-'."""
    if path == STDIN_MARKER:
        sys.stdout.flush()
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return

    try:
        with open(path, 'wb') as f:
            f.write(data)
    except OSError as e:
        raise IoError(f"cannot write {path}: {e.strerror or e}") from e


def render(qr: qrcode.QRCode, fmt: str, fg: str, bg: str) -> bytes:
    if fmt == 'ascii':
        return render_ascii(qr)
    if fmt == 'svg':
        return render_svg(qr, fg, bg)
    if fmt == 'png':
        return render_png(qr, fg, bg)
    if fmt == 'jpeg':
        return render_jpeg(qr, fg, bg)
    raise ValueError(f"unknown export format: {fmt}")


def export(content: str, config: Config) -> List[str]:
    """
    Write every export requested in the config.

    Each target is attempted even if an earlier one fails; the failures are
    then reported together as a single IoError. Returns the written paths.
    """
    targets = config.exports
    if not targets:
        return []

    qr = build_qr(content, config.error_correction, config.qr_version, config.quiet_zone)
    fg, bg = config.colors

    written = []
    failures = []
    for fmt, path in targets:
        try:
            write_output(path, render(qr, fmt, fg, bg))
            written.append(path)
        except QrScanError as e:
            failures.append(f"{fmt}: {e}")

    if failures:
        raise IoError("export failed: " + "; ".join(failures))

    return written
