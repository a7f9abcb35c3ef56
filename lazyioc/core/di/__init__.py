"""
依赖注入模块

提供按名称延迟加载的容器注册表
"""

from .providers import ComponentProvider, ProviderDefinition, normalize_builder
from .registration import ContainerRegistration
from .registry import ContainerRegistry
from .resolver import DependencyResolver
from ..decorators import component, factory, provider

__all__ = [
    'ComponentProvider',
    'ProviderDefinition',
    'normalize_builder',
    'ContainerRegistration',
    'ContainerRegistry',
    'DependencyResolver',
    'component',
    'factory',
    'provider',
]
