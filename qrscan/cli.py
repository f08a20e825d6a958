#!/usr/bin/env python3
"""
QR Scan - Scan a QR code in the terminal using the system camera or a given image
License: MIT
"""

import argparse
import sys
import time
from typing import List, Optional

from PIL import Image

from qrscan import __version__
from qrscan.config import Config, STDIN_MARKER
from qrscan.decoder import decode
from qrscan.errors import QrScanError, EXIT_OK, EXIT_NOT_FOUND, EXIT_INTERRUPTED
from qrscan.output import print_result, print_not_found
from qrscan.preview import can_preview, show_frame
from qrscan.renderer import ERROR_LEVELS, export, parse_color
from qrscan.source import Camera, resolve

PROGRESS = ('.  ', '.. ', '...')


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return number


def _qr_version(value: str) -> int:
    number = int(value)
    if not 1 <= number <= 40:
        raise argparse.ArgumentTypeError(f"QR version must be between 1 and 40, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='qrscan',
        description='Scan a QR code in the terminal using the system camera or a given image',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  qrscan /path/to/input.png
  cat /path/to/input.png | qrscan -
  qrscan --preview --metadata
  qrscan input.png --qr --svg out.svg --png out.png

Exit codes:
  0 - QR code found
  1 - No QR code found, or scanning failed
  2 - Invalid arguments, or the path is a directory
  3 - No such file
        """
    )

    parser.add_argument('image', nargs='?',
                        help='Path to the image to scan, or - for stdin. If not specified, the system camera will be used')
    parser.add_argument('-p', '--preview', action='store_true',
                        help='Preview the camera on the terminal (if compatible)')
    parser.add_argument('--preview-x', type=int, default=0, help="Preview display's x coordinate (default: 0)")
    parser.add_argument('--preview-y', type=int, default=0, help="Preview display's y coordinate (default: 0)")
    parser.add_argument('--preview-w', type=_positive_int, help='Preview width in columns')
    parser.add_argument('--preview-h', type=_positive_int, help='Preview height in rows')
    parser.add_argument('-m', '--metadata', action='store_true', help='Print metadata')
    parser.add_argument('--qr', action='store_true', help='Print the QR code')
    parser.add_argument('-n', '--no-content', action='store_true', help='Do not print the content')
    parser.add_argument('-i', '--interval', type=_non_negative_int, default=200,
                        help='Interval between camera scans in milliseconds (default: 200)')
    parser.add_argument('--timeout', type=float,
                        help='Give up camera scanning after this many seconds (default: never)')
    parser.add_argument('--camera', type=int, default=0, help='Camera device index (default: 0)')
    parser.add_argument('--invert-colors', action='store_true', help='Invert the QR code colors')
    parser.add_argument('--fg', default='#000',
                        help='QR code foreground color when exporting images (default: #000)')
    parser.add_argument('--bg', default='#fff',
                        help='QR code background color when exporting images (default: #fff)')
    parser.add_argument('--no-quiet-zone', action='store_true', help='Do not add quiet zone to the QR code')
    parser.add_argument('-e', '--error-correction', choices=list(ERROR_LEVELS),
                        help='Error correction level of the rendered QR code: L=7%%, M=15%%, Q=25%%, H=30%% (default: M)')
    parser.add_argument('--qr-version', type=_qr_version,
                        help='Force the QR version (1-40) of the rendered QR code (default: smallest that fits)')
    parser.add_argument('--ascii', metavar='PATH', help='Export the QR code as ascii text to the given path')
    parser.add_argument('--svg', metavar='PATH', help='Export the QR code as svg image to the given path')
    parser.add_argument('--png', metavar='PATH', help='Export the QR code as png image to the given path')
    parser.add_argument('--jpeg', metavar='PATH', help='Export the QR code as jpeg image to the given path')
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')

    return parser


def parse_args(argv: Optional[List[str]] = None) -> Config:
    parser = build_parser()
    args = parser.parse_args(argv)

    for option in ('fg', 'bg'):
        try:
            parse_color(getattr(args, option))
        except QrScanError as e:
            parser.error(f"--{option}: {e}")

    stdout_exports = [fmt for fmt in ('ascii', 'svg', 'png', 'jpeg') if getattr(args, fmt) == STDIN_MARKER]
    if len(stdout_exports) > 1:
        parser.error("only one export can be written to stdout")

    return Config(**vars(args))


def scan_image(image: Image.Image, config: Config) -> bool:
    """Decode the image and print/export the result. False if nothing was found."""
    code = decode(image)
    if code is None:
        return False

    print_result(code, config)
    export(code.content, config)
    return True


def scan_camera(config: Config) -> bool:
    """Scan camera frames until a QR code is decoded (or the timeout passes)."""
    preview = config.preview and can_preview()
    deadline = None if config.timeout is None else time.monotonic() + config.timeout
    spinner = 0

    with Camera(config.camera) as camera:
        while True:
            frame = camera.capture()
            code = decode(frame)
            if code is not None:
                if not preview:
                    print("\r                        \r", end='', file=sys.stderr)
                print_result(code, config)
                export(code.content, config)
                return True

            if preview:
                show_frame(frame, config.preview_x, config.preview_y, config.preview_w, config.preview_h)
            else:
                print(f"\rScanning via camera{PROGRESS[spinner]}", end='', file=sys.stderr, flush=True)
                spinner = (spinner + 1) % len(PROGRESS)

            if deadline is not None and time.monotonic() >= deadline:
                if not preview:
                    print(file=sys.stderr)
                return False

            time.sleep(config.interval / 1000)


def run(config: Config) -> int:
    try:
        if config.source_kind == 'camera':
            found = scan_camera(config)
        else:
            found = scan_image(resolve(config), config)
    except QrScanError as e:
        print(f"error: qrscan: {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return EXIT_INTERRUPTED

    if not found:
        if config.metadata or not config.no_content:
            print_not_found()
        return EXIT_NOT_FOUND

    return EXIT_OK


def main(argv: Optional[List[str]] = None):
    sys.exit(run(parse_args(argv)))


if __name__ == "__main__":
    main()
