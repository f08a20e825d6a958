import io

import numpy as np
import pytest
import qrcode
from PIL import Image


def make_qr_image(data: str, box_size: int = 10) -> Image.Image:
    qr = qrcode.QRCode(box_size=box_size, border=4)
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").get_image().convert('RGB')


def to_bytes(image: Image.Image, fmt: str = 'PNG') -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


def to_bgr(image: Image.Image) -> np.ndarray:
    """Camera frames from OpenCV are BGR arrays."""
    return np.array(image.convert('RGB'))[:, :, ::-1].copy()


class FakeCapture:
    """Stands in for cv2.VideoCapture; serves the given frames in order."""

    instances = []

    def __init__(self, index, frames=None, opened=True):
        self.index = index
        self.frames = list(frames or [])
        self.opened = opened
        self.released = False
        self.props = {}
        FakeCapture.instances.append(self)

    def isOpened(self):
        return self.opened

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def read(self):
        if not self.frames:
            return False, None
        frame = self.frames.pop(0) if len(self.frames) > 1 else self.frames[0]
        return True, frame

    def release(self):
        self.released = True


@pytest.fixture
def fake_camera(monkeypatch):
    """Patch cv2.VideoCapture; returns a function to set the frames served."""
    import qrscan.source

    FakeCapture.instances = []
    settings = {'frames': [], 'opened': True}

    def factory(index):
        return FakeCapture(index, settings['frames'], settings['opened'])

    monkeypatch.setattr(qrscan.source.cv2, 'VideoCapture', factory)

    def configure(frames=None, opened=True):
        settings['frames'] = frames or []
        settings['opened'] = opened
        return FakeCapture.instances

    return configure


@pytest.fixture
def qr_png(tmp_path):
    path = tmp_path / 'code.png'
    make_qr_image('foo png').save(path)
    return path


@pytest.fixture
def blank_png(tmp_path):
    path = tmp_path / 'blank.png'
    Image.new('RGB', (200, 200), 'white').save(path)
    return path
