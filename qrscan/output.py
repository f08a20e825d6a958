"""
QR Scan Output - Print decoded content, metadata and the QR code itself
License: MIT
"""

import sys
from typing import List

from qrscan.config import Config
from qrscan.decoder import DecodedCode
from qrscan.renderer import build_qr, render_terminal

NOT_FOUND = "no QR code found"


def format_metadata(code: DecodedCode) -> List[str]:
    left, top, width, height = code.rect
    polygon = ' '.join(f"({x}, {y})" for x, y in code.polygon)
    return [
        f"Type: {code.symbol}",
        f"Version: {code.version or 'unknown'}",
        f"Grid Size: {code.grid_size or 'unknown'}",
        f"EC Level: {code.ec_level or 'unknown'}",
        f"Position: ({left}, {top})",
        f"Size: {width}x{height}",
        f"Polygon: {polygon}",
        f"Quality: {code.quality}",
        f"Orientation: {code.orientation or 'unknown'}",
    ]


def format_result(code: DecodedCode, config: Config) -> List[str]:
    """Output blocks in print order: QR code, metadata, content."""
    blocks = []

    if config.qr:
        qr = build_qr(code.content, config.error_correction, config.qr_version, config.quiet_zone)
        # Light modules are drawn with the terminal's foreground unless inverted
        blocks.append(render_terminal(qr, invert=not config.invert_colors))

    if config.metadata:
        blocks.append('\n'.join(format_metadata(code)))

    if not config.no_content:
        blocks.append(code.content)

    return blocks


def print_result(code: DecodedCode, config: Config, out=None):
    out = out or sys.stdout
    blocks = format_result(code, config)
    if not blocks:
        return

    # Keep the text clear of a preview frame drawn above it
    if config.preview:
        print(file=out)
    print('\n\n'.join(blocks), file=out)
    out.flush()


def print_not_found(err=None):
    print(NOT_FOUND, file=err or sys.stderr)
