from __future__ import annotations

import ctypes
import logging
import sys
import tkinter as tk
from typing import Callable, Optional

from ui.tk_host import TkUnavailableError, call_in_tk_thread, post_to_tk_thread
from utils.config import AppConfig

# 透明色键，界面上不能出现这个颜色
_TRANSPARENT_COLOR = "#010101"
_TEXT_BG = "#ffffff"
_TEXT_FG = "#000000"

_GWL_EXSTYLE = -20
_WS_EX_LAYERED = 0x00080000
_WS_EX_TRANSPARENT = 0x00000020
_WS_EX_TOOLWINDOW = 0x00000080
_WS_EX_NOACTIVATE = 0x08000000


def _enable_mouse_passthrough(win: tk.Toplevel) -> None:
    """Windows 下给窗口加 WS_EX_TRANSPARENT，鼠标事件直接穿透到下层窗口"""
    if sys.platform != "win32":
        logging.debug("[Overlay] 当前平台不支持鼠标穿透: %s", sys.platform)
        return
    user32 = ctypes.windll.user32
    hwnd = user32.GetParent(win.winfo_id())
    style = user32.GetWindowLongW(hwnd, _GWL_EXSTYLE)
    style |= _WS_EX_LAYERED | _WS_EX_TRANSPARENT | _WS_EX_TOOLWINDOW | _WS_EX_NOACTIVATE
    user32.SetWindowLongW(hwnd, _GWL_EXSTYLE, style)


class OverlayWindow:
    """透明、置顶、鼠标穿透的全屏浮层。

    所有公开方法都是线程安全的：只往 Tk 线程投递任务，不直接碰控件。
    """

    def __init__(self, config: AppConfig, on_closed: Optional[Callable[[], None]] = None) -> None:
        self._font_size = config.font_size
        self._indicator_size = config.indicator_size
        self._on_closed = on_closed
        self._win: tk.Toplevel | None = None
        self._label: tk.Label | None = None
        self._tag: tk.Frame | None = None
        self._text: Optional[str] = None
        self._tint: Optional[str] = None
        self._visible = False

    def start(self) -> None:
        try:
            call_in_tk_thread(self._build)
        except tk.TclError as exc:
            raise TkUnavailableError(f"浮层窗口创建失败: {exc}") from exc
        logging.info("[Overlay] 浮层窗口已创建")

    def set_visible(self, visible: bool) -> None:
        post_to_tk_thread(lambda root: self._apply(visible=visible))

    def set_background_tint(self, color: Optional[str]) -> None:
        post_to_tk_thread(lambda root: self._apply(tint=color))

    def set_body_text(self, text: Optional[str]) -> None:
        post_to_tk_thread(lambda root: self._apply(text=text))

    # ---- 以下只在 Tk 线程中运行 ----

    def _build(self, root: tk.Tk) -> None:
        win = tk.Toplevel(root)
        win.overrideredirect(True)
        win.attributes("-topmost", True)
        if sys.platform == "win32":
            win.configure(bg=_TRANSPARENT_COLOR)
            win.attributes("-transparentcolor", _TRANSPARENT_COLOR)
            win.geometry(f"{win.winfo_screenwidth()}x{win.winfo_screenheight()}+0+0")
        else:
            win.geometry("+0+0")
        win.protocol("WM_DELETE_WINDOW", self._destroy)

        self._label = tk.Label(
            win,
            fg=_TEXT_FG,
            bg=_TEXT_BG,
            font=("Microsoft YaHei", self._font_size),
            justify="left",
            anchor="nw",
            wraplength=max(win.winfo_screenwidth() - 40, 200),
        )
        self._tag = tk.Frame(win, width=self._indicator_size, height=self._indicator_size)
        self._win = win
        win.withdraw()
        win.update_idletasks()
        _enable_mouse_passthrough(win)

    def _apply(self, **changes: object) -> None:
        if self._win is None:
            return
        for name, value in changes.items():
            setattr(self, "_" + name, value)
        self._relayout()

    def _relayout(self) -> None:
        self._label.pack_forget()
        self._tag.pack_forget()
        if not self._visible:
            self._win.withdraw()
            return
        if self._text is not None:
            self._label.configure(text=self._text)
            self._label.pack(side="top", anchor="nw")
        elif self._tint is not None:
            self._tag.configure(bg=self._tint)
            self._tag.pack(side="top", anchor="nw")
        if self._win.state() == "withdrawn":
            self._win.deiconify()
            self._win.attributes("-topmost", True)
            _enable_mouse_passthrough(self._win)

    def _destroy(self) -> None:
        if self._win is None:
            return
        self._win.destroy()
        self._win = None
        logging.info("[Overlay] 浮层窗口已关闭")
        if self._on_closed:
            self._on_closed()
