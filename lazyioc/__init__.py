"""
lazyioc

按名称延迟加载的依赖注入容器：
- core/di/: 注册表、注册代理、依赖解析图
- core/loader.py: 模块加载器
- core/config.py: 配置
- core/logger.py: 日志
"""

from .core.application import create_registry
from .core.di import ContainerRegistration, ContainerRegistry, DependencyResolver
from .core.loader import MappingLoader, ModuleLoader

__version__ = "0.1.0"

__all__ = [
    "create_registry",
    "ContainerRegistration",
    "ContainerRegistry",
    "DependencyResolver",
    "MappingLoader",
    "ModuleLoader",
]
