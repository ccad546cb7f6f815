from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_LOG_FILE: Path | None = None

CONSOLE_FORMAT = "<level>{message}</level>"


def init_logging(debug: bool = False, log_dir: Path | None = None) -> Path | None:
    """初始化 Loguru：始终输出到控制台，指定 log_dir 时额外写入滚动日志文件。"""
    global _LOG_FILE

    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "INFO",
        format=CONSOLE_FORMAT,
        backtrace=False,
        diagnose=False,
    )
    _LOG_FILE = None
    if log_dir is None:
        return None

    resolved_dir = Path(log_dir)
    resolved_dir.mkdir(parents=True, exist_ok=True)
    log_file = resolved_dir / "feishu-md.log"
    logger.add(
        log_file,
        level="DEBUG",
        mode="a",
        rotation="10 MB",
        retention="10 days",
        backtrace=True,
        diagnose=False,
    )
    logger.debug("日志系统已初始化，写入路径: {}", log_file)
    _LOG_FILE = log_file
    return log_file


def get_log_file() -> Path | None:
    return _LOG_FILE


__all__ = ["get_log_file", "init_logging"]
