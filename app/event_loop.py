from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional, Protocol

from app.channel import Channel, merge
from app.orchestrator import Orchestrator
from app.state import OverlayState, RenderPlan, UIMessage, reduce, render
from hotkey.events import RawInputEvent
from hotkey.interpreter import HotkeyInterpreter

_logger = logging.getLogger(__name__)


class Presenter(Protocol):
    def set_visible(self, visible: bool) -> None: ...

    def set_background_tint(self, color: Optional[str]) -> None: ...

    def set_body_text(self, text: Optional[str]) -> None: ...


class AssistantLoop:
    """唯一持有 OverlayState 的地方：合并按键通道和结果通道，逐条归约并重绘"""

    def __init__(
        self,
        inputs: Channel[RawInputEvent],
        feedback: Channel[tuple[UIMessage, ...]],
        orchestrator: Orchestrator,
        presenter: Presenter,
        interpreter: Optional[HotkeyInterpreter] = None,
        state: Optional[OverlayState] = None,
    ) -> None:
        self._inputs = inputs
        self._feedback = feedback
        self._orchestrator = orchestrator
        self._presenter = presenter
        self._interpreter = interpreter or HotkeyInterpreter()
        self._state = state or OverlayState()
        self._last_plan: Optional[RenderPlan] = None

    @property
    def state(self) -> OverlayState:
        return self._state

    async def run(self) -> None:
        _logger.info("[Loop] 事件循环启动")
        self._render()
        async for channel, item in merge(self._inputs, self._feedback):
            if channel is self._inputs:
                messages = self._interpret(item)
            else:
                messages = item
            self.apply(messages)

    def apply(self, messages: Iterable[UIMessage]) -> None:
        for message in messages:
            self._state = reduce(self._state, message)
            self._render()

    def _interpret(self, event: RawInputEvent) -> tuple[UIMessage, ...]:
        command = self._interpreter.feed(event)
        if command is None:
            return ()
        return self._orchestrator.dispatch(command)

    def _render(self) -> None:
        plan = render(self._state)
        if plan == self._last_plan:
            return
        self._last_plan = plan
        self._presenter.set_body_text(plan.text)
        self._presenter.set_background_tint(plan.tint)
        self._presenter.set_visible(plan.visible)
