import io

import pytest
from PIL import Image

from qrscan.config import Config
from qrscan.decoder import decode
from qrscan.errors import DecodeError, DeviceError, IoError
from qrscan.source import Camera, load_bytes, load_file, load_stdin, resolve

from conftest import make_qr_image, to_bgr, to_bytes


def test_load_file_missing(tmp_path):
    with pytest.raises(IoError) as exc_info:
        load_file(tmp_path / 'missing.png')
    assert exc_info.value.exit_code == 3
    assert 'No such file' in str(exc_info.value)


def test_load_file_directory(tmp_path):
    with pytest.raises(IoError) as exc_info:
        load_file(tmp_path)
    assert exc_info.value.exit_code == 2
    assert 'Is a directory' in str(exc_info.value)


def test_load_file_not_an_image(tmp_path):
    path = tmp_path / 'notes.txt'
    path.write_text('definitely not an image')
    with pytest.raises(DecodeError):
        load_file(path)


def test_load_bytes_empty():
    with pytest.raises(DecodeError):
        load_bytes(b'')


def test_load_bytes_truncated():
    data = to_bytes(make_qr_image('cut short'))
    with pytest.raises(DecodeError):
        load_bytes(data[:len(data) // 2])


def test_file_and_stdin_decode_the_same(qr_png):
    from_file = decode(load_file(qr_png))
    from_stdin = decode(load_stdin(io.BytesIO(qr_png.read_bytes())))
    assert from_file is not None
    assert from_file == from_stdin


def test_load_jpeg(tmp_path):
    path = tmp_path / 'code.jpeg'
    make_qr_image('foo jpeg').save(path, format='JPEG')
    assert decode(load_file(path)).content == 'foo jpeg'


def test_resolve_file(qr_png):
    image = resolve(Config(image=str(qr_png)))
    assert isinstance(image, Image.Image)


def test_resolve_stdin(qr_png, monkeypatch):
    monkeypatch.setattr('sys.stdin', io.TextIOWrapper(io.BytesIO(qr_png.read_bytes())))
    assert decode(resolve(Config(image='-'))).content == 'foo png'


def test_camera_capture_converts_bgr_to_rgb(fake_camera):
    red = Image.new('RGB', (8, 6), (255, 0, 0))
    captures = fake_camera([to_bgr(red)])

    with Camera(0) as camera:
        frame = camera.capture()

    assert frame.size == (8, 6)
    assert frame.getpixel((0, 0)) == (255, 0, 0)
    assert captures[0].released


def test_camera_unavailable(fake_camera):
    captures = fake_camera(opened=False)
    with pytest.raises(DeviceError):
        with Camera(1):
            pass
    assert captures[0].index == 1
    assert captures[0].released


def test_camera_released_when_no_frame(fake_camera):
    captures = fake_camera([])
    with pytest.raises(DeviceError):
        with Camera(0) as camera:
            camera.capture()
    assert captures[0].released


def test_camera_released_on_caller_error(fake_camera):
    captures = fake_camera([to_bgr(Image.new('RGB', (4, 4)))])
    with pytest.raises(RuntimeError):
        with Camera(0):
            raise RuntimeError('boom')
    assert captures[0].released


def test_camera_capture_outside_block():
    with pytest.raises(DeviceError):
        Camera(0).capture()


def test_resolve_camera_single_frame(fake_camera):
    captures = fake_camera([to_bgr(make_qr_image('from camera'))])
    image = resolve(Config(camera=2))
    assert decode(image).content == 'from camera'
    assert captures[0].index == 2
    assert captures[0].released


def test_load_bytes_decompression_bomb(monkeypatch):
    data = to_bytes(Image.new('1', (100, 100)))
    monkeypatch.setattr(Image, 'MAX_IMAGE_PIXELS', 1000)
    with pytest.raises(DecodeError):
        load_bytes(data)
