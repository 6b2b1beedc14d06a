from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

HOME_ENV = "ANSWER_OVERLAY_HOME"


def resolve_app_root() -> Path:
    """数据根目录：环境变量优先，其次 EXE 所在目录（打包后），最后是源码目录"""
    override = os.getenv(HOME_ENV)
    if override:
        return Path(override).expanduser()
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    return Path(__file__).resolve().parents[1]


class PathAccessError(RuntimeError):
    pass


def _can_write(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=path, delete=True):
            return True
    except OSError:
        return False


def require_writable_dir(path: Path, label: str) -> Path:
    if not _can_write(path):
        raise PathAccessError(f"{label}目录不可写: {path}（可通过环境变量 {HOME_ENV} 指定其他位置）")
    return path


def get_data_dir() -> Path:
    return require_writable_dir(resolve_app_root() / "data", "数据")


def get_log_dir() -> Path:
    return require_writable_dir(get_data_dir() / "logs", "日志")
