from __future__ import annotations

import logging
import os
from typing import Any

import openai
from openai import AsyncOpenAI

from utils.config import AppConfig

_logger = logging.getLogger(__name__)


DIRECT_ANSWER_PROMPT = "Answer to the test in the image attached, be concise and to the point"

TRANSCRIBE_QUIZ_PROMPT = (
    "Your task is to extract text from the quiz on screen. "
    "If there's an image, you should explain the content of it for someone to be able to answer "
    "the question without having to look at the image. "
    "If there are multiple choices, transcribe those too. Ignore other things on screen."
)

# 推理模型不接受 system 角色，指令以 user 消息发送
EXACT_ANSWER_PROMPT = "Your task is to provide only the exact answer without any explanations."


class InferenceError(RuntimeError):
    pass


class TransportError(InferenceError):
    pass


class EmptyResponse(InferenceError):
    pass


class LLMConfigError(InferenceError):
    pass


def _image_part(image_url: str) -> dict[str, Any]:
    return {"type": "image_url", "image_url": {"url": image_url}}


class Assistant:
    """远程推理：直接看图作答，或先转写题目再求精确答案。单次请求，不重试。"""

    def __init__(self, client: Any, vision_model: str, answer_model: str) -> None:
        self._client = client
        self.vision_model = vision_model
        self.answer_model = answer_model

    @classmethod
    def from_config(cls, config: AppConfig) -> "Assistant":
        api_key = config.openai_api_key or os.getenv("OPENAI_API_KEY")
        base_url = config.openai_base_url or os.getenv("OPENAI_BASE_URL") or None
        if not api_key:
            raise LLMConfigError("缺少 OpenAI API Key，请在 data/config.json 或环境变量 OPENAI_API_KEY 中配置")
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=config.request_timeout,
            max_retries=0,
        )
        return cls(client, vision_model=config.vision_model, answer_model=config.answer_model)

    async def call(self, model: str, messages: list[dict[str, Any]]) -> str:
        _logger.info("[LLM] 请求模型 %s, 消息数 %d", model, len(messages))
        try:
            response = await self._client.chat.completions.create(model=model, messages=messages)
        except openai.OpenAIError as exc:
            raise TransportError(f"{model} 请求失败: {exc}") from exc

        text = "".join(choice.message.content or "" for choice in response.choices)
        if not text.strip():
            raise EmptyResponse(f"{model} 没有返回内容")
        return text

    async def answer_from_image(self, image_url: str) -> str:
        return await self.call(
            self.vision_model,
            [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": DIRECT_ANSWER_PROMPT},
                        _image_part(image_url),
                    ],
                }
            ],
        )

    async def transcribe_quiz(self, image_url: str) -> str:
        return await self.call(
            self.vision_model,
            [
                {"role": "system", "content": TRANSCRIBE_QUIZ_PROMPT},
                {"role": "user", "content": [_image_part(image_url)]},
            ],
        )

    async def exact_answer(self, quiz_text: str) -> str:
        return await self.call(
            self.answer_model,
            [
                {"role": "user", "content": EXACT_ANSWER_PROMPT},
                {"role": "user", "content": quiz_text},
            ],
        )

    async def answer_from_image_via_transcription(self, image_url: str) -> str:
        # 转写失败直接抛出，不会发起第二次请求
        quiz_text = await self.transcribe_quiz(image_url)
        _logger.info("[LLM] 题目转写完成: %s", quiz_text[:200])
        return await self.exact_answer(quiz_text)

