from __future__ import annotations

import asyncio
import sys

from dotenv import load_dotenv

from api.llm import Assistant
from capture.encode import encode_png_data_url
from capture.screen import capture_screen_as_image
from utils.config import load_config


async def _answer(transcribe: bool) -> str:
    config = load_config()
    assistant = Assistant.from_config(config)
    image_url = encode_png_data_url(capture_screen_as_image(config.monitor_index))
    if transcribe:
        return await assistant.answer_from_image_via_transcription(image_url)
    return await assistant.answer_from_image(image_url)


def main() -> None:
    load_dotenv()
    transcribe = "--transcribe" in sys.argv[1:]
    print("截屏并请求答案...")
    print("答案:")
    print(asyncio.run(_answer(transcribe)))


if __name__ == "__main__":
    main()
