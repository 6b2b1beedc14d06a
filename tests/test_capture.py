import base64
from io import BytesIO
from types import SimpleNamespace

import pytest
from mss.exception import ScreenShotError
from PIL import Image

from capture import screen
from capture.encode import encode_png_data_url
from capture.screen import CaptureError, NoMonitorsAvailable, capture_screen_as_image, probe_capture_backend


class FakeMss:
    def __init__(self, monitors, error=None):
        self.monitors = monitors
        self.error = error
        self.grabbed = []

    def __enter__(self):
        if self.error is not None:
            raise self.error
        return self

    def __exit__(self, *exc):
        return False

    def grab(self, monitor):
        self.grabbed.append(monitor)
        size = (monitor["width"], monitor["height"])
        return SimpleNamespace(size=size, rgb=b"\x10\x20\x30" * (size[0] * size[1]))


def _monitor(width, height):
    return {"left": 0, "top": 0, "width": width, "height": height}


@pytest.fixture()
def fake_mss(monkeypatch):
    def install(monitors, error=None):
        fake = FakeMss(monitors, error)
        monkeypatch.setattr(screen.mss, "mss", lambda: fake)
        return fake

    return install


def test_capture_first_physical_monitor(fake_mss):
    fake = fake_mss([_monitor(6, 4), _monitor(3, 2), _monitor(5, 5)])
    image = capture_screen_as_image()
    assert image.size == (3, 2)
    assert image.getpixel((0, 0)) == (0x10, 0x20, 0x30)
    assert fake.grabbed == [_monitor(3, 2)]


def test_capture_selected_monitor(fake_mss):
    fake_mss([_monitor(8, 2), _monitor(3, 2), _monitor(5, 2)])
    assert capture_screen_as_image(1).size == (5, 2)


def test_no_monitors(fake_mss):
    fake_mss([_monitor(0, 0)])
    with pytest.raises(NoMonitorsAvailable):
        capture_screen_as_image()


def test_monitor_index_out_of_range(fake_mss):
    fake_mss([_monitor(3, 2), _monitor(3, 2)])
    with pytest.raises(CaptureError):
        capture_screen_as_image(3)


def test_platform_error_wrapped(fake_mss):
    fake_mss([], error=ScreenShotError("XOpenDisplay failed"))
    with pytest.raises(CaptureError):
        capture_screen_as_image()
    with pytest.raises(CaptureError):
        probe_capture_backend()


def test_probe_counts_physical_monitors(fake_mss):
    fake_mss([_monitor(6, 2), _monitor(3, 2), _monitor(3, 2)])
    assert probe_capture_backend() == 2


def test_encode_png_data_url():
    image = Image.new("RGB", (2, 2), (255, 0, 0))
    url = encode_png_data_url(image)
    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    decoded = Image.open(BytesIO(base64.b64decode(url[len(prefix):])))
    assert decoded.format == "PNG"
    assert decoded.size == (2, 2)
