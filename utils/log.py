from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler

from utils.paths import PathAccessError, get_log_dir

_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    """日志同时写 stderr 和 data/logs/overlay.log；日志目录不可写时只写 stderr"""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    try:
        log_path = get_log_dir() / "overlay.log"
        handlers.append(
            RotatingFileHandler(log_path, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
        )
    except PathAccessError as exc:
        print(f"日志文件不可用，仅输出到控制台: {exc}", file=sys.stderr)

    logging.basicConfig(level=level, format=_FORMAT, handlers=handlers, force=True)
    # openai/httpx 的请求日志太吵
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
