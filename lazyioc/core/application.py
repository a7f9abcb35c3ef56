"""
容器组装

按照配置创建容器注册表，并初始化日志系统
"""

from typing import Any, List, Optional, Union

from loguru import logger as loguru_logger

from .config import get_config, get_settings
from .di.registry import ContainerRegistry
from .loader import ModuleLoader
from .logger import setup_logging

logger = loguru_logger.bind(name=__name__)


def create_registry(
        search_paths: Union[str, List[str], None] = None,
        config_file: Optional[str] = None,
        loader: Optional[Any] = None,
        configure_logging: bool = True
) -> ContainerRegistry:
    """
    创建容器注册表

    Args:
        search_paths: 模块搜索路径，为空时读取配置项 registry.search_paths
        config_file: 配置文件路径
        loader: 自定义模块加载器，提供时忽略 search_paths
        configure_logging: 是否根据配置初始化日志系统

    Returns:
        容器注册表，其配置值为 Dynaconf 设置实例
    """
    settings = get_settings(config_file)

    if configure_logging:
        setup_logging(settings)

    if loader is None:
        loader = ModuleLoader(search_paths or list(get_config("registry.search_paths", settings=settings)))

    registry = ContainerRegistry(loader, settings)
    logger.debug(f"容器注册表已创建: {loader!r}")
    return registry
