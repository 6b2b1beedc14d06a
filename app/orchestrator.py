from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

from app.channel import Channel
from app.state import Indicator, SetIndicator, ShowText, ToggleVisibility, UIMessage
from capture.encode import encode_png_data_url
from hotkey.interpreter import Command

_logger = logging.getLogger(__name__)

_TRIGGERS = (Command.TRIGGER_DIRECT_ANSWER, Command.TRIGGER_TRANSCRIBE_THEN_ANSWER)


class AnswerService(Protocol):
    async def answer_from_image(self, image_url: str) -> str: ...

    async def answer_from_image_via_transcription(self, image_url: str) -> str: ...


class Orchestrator:
    """把语义命令变成 UI 消息；触发类命令额外启动一个后台任务。

    后台任务之间互不知情：不去重、不取消，最后完成的那个决定最终显示内容。
    结果以一个批次 (tuple) 写进 feedback 通道，保证同一任务的两条消息相邻且有序。
    """

    def __init__(
        self,
        capture: Callable[[], Any],
        assistant: AnswerService,
        feedback: Channel[tuple[UIMessage, ...]],
        encode: Callable[[Any], str] = encode_png_data_url,
    ) -> None:
        self._capture = capture
        self._assistant = assistant
        self._feedback = feedback
        self._encode = encode
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def dispatch(self, command: Command) -> tuple[UIMessage, ...]:
        if command is Command.DISMISS:
            return (ShowText(None),)
        if command is Command.TOGGLE_VISIBILITY:
            return (ToggleVisibility(),)
        if command in _TRIGGERS:
            self._spawn(command)
            # 任务要等当前步骤让出控制权后才会开始跑，这两条消息一定先被处理
            return (SetIndicator(Indicator.LOADING), ShowText(None))
        raise ValueError(f"未知命令: {command!r}")

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, command: Command) -> None:
        task = asyncio.get_running_loop().create_task(self._run_unit(command))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        _logger.info("[Orchestrator] 启动任务 %s, 进行中 %d", command.value, len(self._tasks))

    async def _run_unit(self, command: Command) -> None:
        try:
            answer = await self._produce_answer(command)
        except Exception:
            _logger.exception("[Orchestrator] 获取答案失败 (%s)", command.value)
            outcome: tuple[UIMessage, ...] = (SetIndicator(Indicator.ERROR),)
        else:
            _logger.info("[Orchestrator] 获取答案成功: %s", answer[:200])
            outcome = (SetIndicator(Indicator.IDLE), ShowText(answer))

        try:
            self._feedback.send(outcome)
        except Exception:
            _logger.exception("[Orchestrator] 结果发送失败")

    async def _produce_answer(self, command: Command) -> str:
        image_url = await asyncio.to_thread(self._capture_and_encode)
        if command is Command.TRIGGER_TRANSCRIBE_THEN_ANSWER:
            return await self._assistant.answer_from_image_via_transcription(image_url)
        return await self._assistant.answer_from_image(image_url)

    def _capture_and_encode(self) -> str:
        image = self._capture()
        return self._encode(image)
