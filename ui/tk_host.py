from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, NamedTuple, Optional, TypeVar

import tkinter as tk

T = TypeVar("T")

# Tk 控件只能在创建它的线程里碰，其它线程一律通过这个队列投递
_POLL_INTERVAL_MS = 30


class _Job(NamedTuple):
    func: Callable[[tk.Tk], object]
    done: Optional[threading.Event]
    holder: dict


_jobs: "queue.Queue[_Job]" = queue.Queue()
_thread: Optional[threading.Thread] = None
_ready = threading.Event()
_startup_error: Optional[tk.TclError] = None


class TkUnavailableError(RuntimeError):
    pass


def _drain(root: tk.Tk) -> None:
    while True:
        try:
            job = _jobs.get_nowait()
        except queue.Empty:
            break
        try:
            job.holder["result"] = job.func(root)
        except Exception as exc:
            job.holder["error"] = exc
            if job.done is None:
                logging.exception("[TkHost] 投递的任务执行失败")
        finally:
            if job.done is not None:
                job.done.set()
    root.after(_POLL_INTERVAL_MS, _drain, root)


def _run_tk() -> None:
    global _startup_error
    try:
        root = tk.Tk()
    except tk.TclError as exc:
        # 没有显示环境时 Tk() 直接失败，也要放行等待方
        _startup_error = exc
        _ready.set()
        return
    root.withdraw()
    root.after(_POLL_INTERVAL_MS, _drain, root)
    _ready.set()
    root.mainloop()
    root.destroy()
    logging.info("[TkHost] Tk 线程退出")


def _ensure_thread() -> None:
    global _thread, _startup_error
    if _thread is not None and _thread.is_alive():
        return
    _ready.clear()
    _startup_error = None
    _thread = threading.Thread(target=_run_tk, name="tk-host", daemon=True)
    _thread.start()
    _ready.wait()
    if _startup_error is not None:
        raise TkUnavailableError(f"Tk 初始化失败: {_startup_error}") from _startup_error
    logging.info("[TkHost] Tk 线程已就绪")


def call_in_tk_thread(func: Callable[[tk.Tk], T]) -> T:
    """在 Tk 线程执行并等待返回，异常抛回调用线程"""
    _ensure_thread()
    job = _Job(func, threading.Event(), {})
    _jobs.put(job)
    job.done.wait()
    if "error" in job.holder:
        raise job.holder["error"]
    return job.holder["result"]  # type: ignore[return-value]


def post_to_tk_thread(func: Callable[[tk.Tk], object]) -> None:
    """投递后立即返回，任意线程可调用"""
    _ensure_thread()
    _jobs.put(_Job(func, None, {}))


def quit_tk_thread() -> None:
    if _thread is not None and _thread.is_alive():
        _jobs.put(_Job(lambda root: root.quit(), None, {}))
