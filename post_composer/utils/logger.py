"""日志工具模块.

控制台彩色输出 + 文件轮转，所有模块通过 ``setup_logger(__name__)`` 获取记录器。
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from post_composer.utils.constants import LOG_DIR

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB
LOG_FILE_BACKUP_COUNT = 3

# 记录器名称前缀，只配置本应用的记录器树
ROOT_LOGGER_NAME = "post_composer"

_log_level: int = logging.INFO
_configured: bool = False


class ColoredFormatter(logging.Formatter):
    """彩色日志格式化器."""

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, "")
        # 复制一份，避免文件处理器也写入颜色控制符
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _file_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def _configure(log_dir: Optional[Path] = None) -> None:
    """配置应用根记录器（只执行一次）."""
    global _configured
    if _configured:
        return

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(_log_level)
    root.propagate = False
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(_log_level)
    console.setFormatter(ColoredFormatter(LOG_FORMAT, DATE_FORMAT))
    root.addHandler(console)

    directory = log_dir or LOG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
        root.addHandler(_file_handler(directory / "app.log", _log_level))
        root.addHandler(_file_handler(directory / "error.log", logging.ERROR))
    except OSError as e:
        # 只读环境下仍然保留控制台输出
        root.warning(f"无法创建日志文件，仅输出到控制台: {e}")

    _configured = True


def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """获取已配置的日志记录器.

    Args:
        name: 日志记录器名称，通常使用 __name__
        level: 日志级别，默认使用全局配置

    Returns:
        日志记录器
    """
    _configure()
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_log_level(level: int | str) -> None:
    """设置全局日志级别."""
    global _log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    _log_level = level

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    for handler in root.handlers:
        if handler.level != logging.ERROR:
            handler.setLevel(level)


def get_log_level_name() -> str:
    """获取当前日志级别名称."""
    return logging.getLevelName(_log_level)
