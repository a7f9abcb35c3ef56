"""
日志管理模块

基于 loguru 的日志管理，提供初始化配置功能
所有代码可以直接使用: from loguru import logger
"""

import logging
import os
import sys
from typing import Any, Optional

from loguru import logger as loguru_logger

from .config import get_config, get_settings

logger = loguru_logger

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on")
    return bool(value)


def setup_logging(settings: Optional[Any] = None) -> None:
    """
    根据配置初始化 loguru 日志系统

    Args:
        settings: Dynaconf 设置实例，如果为 None 则使用全局配置
    """
    settings = settings if settings is not None else get_settings()

    # 移除默认的 handler
    loguru_logger.remove()

    log_level = str(get_config("logging.level", settings=settings)).upper()
    use_json = _as_bool(get_config("logging.json", settings=settings))

    if use_json:
        console_kwargs = {"serialize": True}
        file_kwargs = {"serialize": True}
    else:
        log_format = get_config("logging.format", DEFAULT_FORMAT, settings=settings)
        console_kwargs = {"format": log_format, "colorize": True}
        file_kwargs = {"format": log_format}

    loguru_logger.add(sys.stderr, level=log_level, backtrace=True, diagnose=True, **console_kwargs)

    log_file = get_config("logging.file", settings=settings)
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        loguru_logger.add(
            log_file,
            level=log_level,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            backtrace=True,
            diagnose=True,
            **file_kwargs
        )

    # 配置第三方库的日志级别（仅设置标准 logging 的级别）
    third_party_config = get_config("logging.third_party", {}, settings=settings)
    if isinstance(third_party_config, dict):
        for logger_name, level_name in third_party_config.items():
            if isinstance(level_name, str):
                level = getattr(logging, level_name.upper(), logging.INFO)
                logging.getLogger(logger_name).setLevel(level)


def get_logger(name: str = "lazyioc"):
    """
    获取绑定名称的日志器

    Args:
        name: 日志器名称

    Returns:
        loguru Logger 实例
    """
    return loguru_logger.bind(name=name)
