from __future__ import annotations

import asyncio
import functools
import logging
import sys

from dotenv import load_dotenv

from api.llm import Assistant, LLMConfigError
from app.channel import Channel
from app.event_loop import AssistantLoop
from app.orchestrator import Orchestrator
from capture.screen import CaptureError, capture_screen_as_image, probe_capture_backend
from hotkey.listener import HookRegistrationError, InputEventSource
from utils.config import AppConfig, load_config
from utils.log import setup_logging
from utils.paths import PathAccessError


class StartupError(RuntimeError):
    pass


async def run(config: AppConfig) -> None:
    loop = asyncio.get_running_loop()
    inputs: Channel = Channel(loop, name="input")
    feedback: Channel = Channel(loop, name="feedback")
    closed = asyncio.Event()

    try:
        probe_capture_backend()
        assistant = Assistant.from_config(config)
    except (CaptureError, LLMConfigError) as exc:
        raise StartupError(str(exc)) from exc

    # 延迟导入：没有 tkinter 的环境也能跑核心逻辑
    try:
        from ui.overlay import OverlayWindow
        from ui.tk_host import TkUnavailableError, quit_tk_thread
    except ImportError as exc:
        raise StartupError(f"界面模块不可用: {exc}") from exc

    overlay = OverlayWindow(config, on_closed=lambda: loop.call_soon_threadsafe(closed.set))
    try:
        overlay.start()
    except TkUnavailableError as exc:
        quit_tk_thread()
        raise StartupError(str(exc)) from exc

    source = InputEventSource(inputs.send)
    try:
        source.start()
    except HookRegistrationError as exc:
        quit_tk_thread()
        raise StartupError(str(exc)) from exc

    orchestrator = Orchestrator(
        capture=functools.partial(capture_screen_as_image, config.monitor_index),
        assistant=assistant,
        feedback=feedback,
    )
    app = AssistantLoop(inputs, feedback, orchestrator, overlay)
    logging.info("[Main] 启动完成: Ctrl+I 直接作答, Ctrl+O 转写后作答, 右 Ctrl 清除, Alt 显示/隐藏")

    loop_task = asyncio.create_task(app.run())
    closed_task = asyncio.create_task(closed.wait())
    try:
        done, _ = await asyncio.wait({loop_task, closed_task}, return_when=asyncio.FIRST_COMPLETED)
        if loop_task in done:
            loop_task.result()
    finally:
        loop_task.cancel()
        closed_task.cancel()
        source.stop()
        quit_tk_thread()


def main() -> int:
    load_dotenv()
    setup_logging()
    try:
        config = load_config()
    except PathAccessError as exc:
        print(f"配置目录不可用: {exc}", file=sys.stderr)
        return 1

    try:
        asyncio.run(run(config))
    except StartupError as exc:
        logging.error("[Main] 启动失败: %s", exc)
        print(f"启动失败: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logging.info("[Main] 收到中断，退出")
    return 0


if __name__ == "__main__":
    sys.exit(main())
