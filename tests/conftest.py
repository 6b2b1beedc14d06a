import asyncio

import pytest

from api.llm import EmptyResponse
from capture.screen import NoMonitorsAvailable


class FakeAssistant:
    def __init__(self, answer="42", error=None, delay=0.0):
        self.answer = answer
        self.error = error
        self.delay = delay
        self.calls = []

    async def _respond(self, kind, image_url):
        self.calls.append((kind, image_url))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.answer

    async def answer_from_image(self, image_url):
        return await self._respond("direct", image_url)

    async def answer_from_image_via_transcription(self, image_url):
        return await self._respond("transcribe", image_url)


class RecordingPresenter:
    def __init__(self):
        self.calls = []

    def set_visible(self, visible):
        self.calls.append(("visible", visible))

    def set_background_tint(self, color):
        self.calls.append(("tint", color))

    def set_body_text(self, text):
        self.calls.append(("text", text))


def fake_capture():
    return "raw-image"


def fake_encode(image):
    return f"data:{image}"


def failing_capture():
    raise NoMonitorsAvailable("未找到可用的显示器")


async def wait_until(predicate, timeout=2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("等待条件超时")
        await asyncio.sleep(0.01)


@pytest.fixture()
def assistant():
    return FakeAssistant()


@pytest.fixture()
def empty_response():
    return EmptyResponse("gpt-4o 没有返回内容")


@pytest.fixture()
def presenter():
    return RecordingPresenter()
