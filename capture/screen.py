from __future__ import annotations

import logging

import mss
from mss.exception import ScreenShotError
from PIL import Image

_logger = logging.getLogger(__name__)


class CaptureError(RuntimeError):
    pass


class NoMonitorsAvailable(CaptureError):
    pass


def capture_screen_as_image(monitor_index: int = 0) -> Image.Image:
    """截取指定物理显示器（0 为第一个）的整屏图像，阻塞调用，不要在事件循环线程里直接跑"""
    try:
        with mss.mss() as sct:
            # monitors[0] 是所有显示器拼成的虚拟屏幕，物理显示器从 1 开始
            monitors = sct.monitors[1:]
            if not monitors:
                raise NoMonitorsAvailable("未找到可用的显示器")
            if not 0 <= monitor_index < len(monitors):
                raise CaptureError(f"显示器序号 {monitor_index} 超出范围 (共 {len(monitors)} 个)")
            shot = sct.grab(monitors[monitor_index])
    except ScreenShotError as exc:
        raise CaptureError(f"截屏失败: {exc}") from exc

    _logger.debug("[Capture] 截屏完成 size=%s", shot.size)
    return Image.frombytes("RGB", shot.size, shot.rgb)


def probe_capture_backend() -> int:
    """启动时检查截屏后端是否可用，返回物理显示器数量"""
    try:
        with mss.mss() as sct:
            count = len(sct.monitors) - 1
    except ScreenShotError as exc:
        raise CaptureError(f"截屏后端初始化失败: {exc}") from exc
    if count <= 0:
        _logger.warning("[Capture] 当前没有可用的显示器，触发时会报错")
    else:
        _logger.info("[Capture] 截屏后端就绪，显示器数量: %d", count)
    return count
