from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from hotkey.events import Key, KeyPress, KeyRelease, RawInputEvent

_logger = logging.getLogger(__name__)


class Command(Enum):
    DISMISS = "dismiss"
    TOGGLE_VISIBILITY = "toggle_visibility"
    TRIGGER_DIRECT_ANSWER = "trigger_direct_answer"
    TRIGGER_TRANSCRIBE_THEN_ANSWER = "trigger_transcribe_then_answer"


_TRIGGER_KEYS = {
    Key.I: Command.TRIGGER_DIRECT_ANSWER,
    Key.O: Command.TRIGGER_TRANSCRIBE_THEN_ANSWER,
}


class HotkeyInterpreter:
    """把原始按键事件翻译成语义命令。

    只在事件循环线程中使用，Ctrl 按住状态是私有的，不需要加锁。
    左 Ctrl 按下置位，任意一侧 Ctrl 松开清零。
    """

    def __init__(self) -> None:
        self._control_held = False

    @property
    def control_held(self) -> bool:
        return self._control_held

    def feed(self, event: RawInputEvent) -> Optional[Command]:
        if isinstance(event, KeyPress):
            return self._on_press(event.key)
        if isinstance(event, KeyRelease):
            if event.key in (Key.CONTROL_LEFT, Key.CONTROL_RIGHT):
                self._control_held = False
        return None

    def _on_press(self, key: Key) -> Optional[Command]:
        if key is Key.CONTROL_LEFT:
            self._control_held = True
            return None
        if key is Key.CONTROL_RIGHT:
            return Command.DISMISS
        if key in _TRIGGER_KEYS and self._control_held:
            command = _TRIGGER_KEYS[key]
            _logger.info("[Hotkey] 触发 %s", command.value)
            return command
        if key in (Key.ALT, Key.ALT_GR):
            return Command.TOGGLE_VISIBILITY
        return None
