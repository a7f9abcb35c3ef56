"""
核心基础设施模块

包含配置、日志、模块加载和依赖注入容器
"""

from .config import get_settings, get_config, reload_config
from .logger import get_logger, logger, setup_logging
from .loader import ModuleLoader, MappingLoader
from .application import create_registry

__all__ = [
    "get_settings",
    "get_config",
    "reload_config",
    "get_logger",
    "logger",  # loguru logger，建议直接使用
    "setup_logging",
    "ModuleLoader",
    "MappingLoader",
    "create_registry",
]
