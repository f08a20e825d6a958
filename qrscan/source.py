"""
QR Scan Sources - Load the image to scan from a file, stdin, or a camera
License: MIT
"""

import io
import sys
from pathlib import Path

import cv2
from PIL import Image, UnidentifiedImageError

from qrscan.config import Config
from qrscan.errors import (DecodeError, DeviceError, IoError,
                           EXIT_IS_DIRECTORY, EXIT_NO_SUCH_FILE)


def load_bytes(data: bytes) -> Image.Image:
    """Decode raw image bytes (format is guessed from the content)."""
    if not data:
        raise DecodeError("empty input, expected image data")

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except UnidentifiedImageError as e:
        raise DecodeError("cannot identify image format") from e
    except Image.DecompressionBombError as e:
        raise DecodeError(f"image too large to decode: {e}") from e
    except (OSError, SyntaxError) as e:
        # Truncated or corrupted files fail only when the pixels are read
        raise DecodeError(f"could not decode image: {e}") from e

    return img


def load_file(path) -> Image.Image:
    path = Path(path)

    if not path.exists():
        raise IoError(f"{path}: No such file", EXIT_NO_SUCH_FILE)
    if path.is_dir():
        raise IoError(f"cannot scan {path}: Is a directory", EXIT_IS_DIRECTORY)

    try:
        data = path.read_bytes()
    except OSError as e:
        raise IoError(f"cannot read {path}: {e.strerror or e}") from e

    return load_bytes(data)


def load_stdin(stream=None) -> Image.Image:
    """Read all of stdin (or the given binary stream) and decode it."""
    if stream is None:
        stream = sys.stdin.buffer

    try:
        data = stream.read()
    except OSError as e:
        raise IoError(f"cannot read stdin: {e}") from e

    return load_bytes(data)


class Camera:
    """
    A video capture device held only inside a ``with`` block.

        with Camera(0) as camera:
            frame = camera.capture()

    The device is released on every exit path, including exceptions.
    """

    def __init__(self, index: int = 0, width: int = 640, height: int = 480):
        self.index = index
        self.width = width
        self.height = height
        self._cap = None

    def __enter__(self) -> 'Camera':
        cap = cv2.VideoCapture(self.index)
        if not cap.isOpened():
            cap.release()
            raise DeviceError(f"could not open camera {self.index}")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._cap = cap
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        return False

    def capture(self) -> Image.Image:
        """Grab a single frame as an RGB image."""
        if self._cap is None:
            raise DeviceError("camera is not open")

        ret, frame = self._cap.read()
        if not ret or frame is None:
            raise DeviceError(f"no frame grabbed from camera {self.index}")

        # OpenCV frames are BGR
        return Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))


def resolve(config: Config) -> Image.Image:
    """Produce the image selected by the config: file, stdin, or one camera frame."""
    kind = config.source_kind

    if kind == 'stdin':
        return load_stdin()
    if kind == 'file':
        return load_file(config.image)

    with Camera(config.camera) as camera:
        return camera.capture()
