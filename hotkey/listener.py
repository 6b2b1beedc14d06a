from __future__ import annotations

import logging
import threading
from collections.abc import Callable

import keyboard

from hotkey.events import RawInputEvent, to_raw_event

_logger = logging.getLogger(__name__)


class HookRegistrationError(RuntimeError):
    pass


class InputEventSource:
    """在独立线程里注册全局键盘 hook，把每个按键事件推给 sink。

    sink 通常是 Channel.send；发送失败只记日志并丢弃事件。
    """

    def __init__(self, sink: Callable[[RawInputEvent], None], ready_timeout: float = 5.0) -> None:
        self._sink = sink
        self._ready_timeout = ready_timeout
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()
        self._error: BaseException | None = None
        self._hook = None

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            _logger.info("[Hotkey] 监听线程已在运行")
            return
        self._ready.clear()
        self._error = None
        self._thread = threading.Thread(target=self._run, name="keyboard-hook", daemon=True)
        self._thread.start()
        if not self._ready.wait(self._ready_timeout):
            raise HookRegistrationError("注册全局键盘 hook 超时")
        if self._error is not None:
            raise HookRegistrationError(f"注册全局键盘 hook 失败: {self._error}") from self._error
        _logger.info("[Hotkey] 全局键盘 hook 注册成功")

    def stop(self) -> None:
        if self._hook is not None:
            _logger.info("[Hotkey] 移除全局键盘 hook")
            keyboard.unhook(self._hook)
            self._hook = None

    def _run(self) -> None:
        try:
            self._hook = keyboard.hook(self._on_hook_event)
        except Exception as exc:
            self._error = exc
            self._ready.set()
            return
        self._ready.set()
        # 阻塞到进程退出
        keyboard.wait()

    def _on_hook_event(self, event: keyboard.KeyboardEvent) -> None:
        raw = to_raw_event(event.name, event.event_type, getattr(event, "scan_code", None))
        if raw is None:
            return
        try:
            self._sink(raw)
        except Exception as exc:
            _logger.warning("[Hotkey] 事件发送失败，已丢弃 %s: %s", raw, exc)
