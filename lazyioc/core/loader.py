"""
模块加载器

把逻辑名称映射到模块的注册函数 register(container, config)
"""

import hashlib
import importlib
import importlib.util
import inspect
import sys
from pathlib import Path
from types import ModuleType
from typing import Callable, Dict, List, Optional, Union

from loguru import logger as loguru_logger

from ..exceptions import ConfigurationError, ProviderNotFoundError
from .decorators import get_builder_metadata, registration_function

logger = loguru_logger.bind(name=__name__)


def _module_names(name: str) -> List[str]:
    """候选模块名，名称中的 '-' 可对应文件名中的 '_'"""
    candidates = [name]
    snake = name.replace('-', '_')
    if snake != name:
        candidates.append(snake)
    return candidates


def find_registration(module: ModuleType) -> Optional[Callable]:
    """
    查找模块中的注册函数

    优先使用模块级的 register 函数，否则使用唯一一个被构建器装饰器标记的函数

    Args:
        module: 已加载的模块

    Returns:
        注册函数，如果不存在则返回 None
    """
    register_fn = getattr(module, 'register', None)
    if callable(register_fn):
        return register_fn

    marked = [
        obj for _, obj in inspect.getmembers(module, inspect.isfunction)
        if get_builder_metadata(obj) is not None and obj.__module__ == module.__name__
    ]
    if len(marked) > 1:
        raise ConfigurationError(
            f"模块 {module.__name__} 中有多个被标记的构建函数: {[f.__name__ for f in marked]}"
        )
    if marked:
        return registration_function(marked[0])
    return None


class ModuleLoader:
    """按搜索路径加载模块的加载器"""

    def __init__(self, search_paths: Union[str, Path, List[Union[str, Path]], None] = None):
        """
        初始化模块加载器

        Args:
            search_paths: 搜索路径，可以是目录，也可以是包名（如 "app.components"）

        Raises:
            ConfigurationError: 如果没有提供搜索路径
        """
        if isinstance(search_paths, (str, Path)):
            search_paths = [search_paths]
        if not search_paths:
            raise ConfigurationError("至少需要一个模块搜索路径", config_key='registry.search_paths')

        self.search_paths = [str(path) for path in search_paths]
        self._modules: Dict[str, ModuleType] = {}

    def resolve(self, name: str) -> Callable:
        """
        解析名称对应的注册函数

        Raises:
            ProviderNotFoundError: 如果所有搜索路径中都找不到该模块
        """
        module = self.load_module(name)
        register_fn = find_registration(module)
        if register_fn is None:
            raise ProviderNotFoundError(name, f"模块 '{name}' 中没有注册函数")
        return register_fn

    def load_module(self, name: str) -> ModuleType:
        """按搜索路径顺序加载模块"""
        if name in self._modules:
            return self._modules[name]

        for search_path in self.search_paths:
            module = self._load_from(search_path, name)
            if module is not None:
                logger.debug(f"已加载模块: '{name}' ({search_path})")
                self._modules[name] = module
                return module

        raise ProviderNotFoundError(name, f"在 {self.search_paths} 中找不到模块 '{name}'")

    def _load_from(self, search_path: str, name: str) -> Optional[ModuleType]:
        directory = Path(search_path)
        if directory.is_dir():
            return self._load_file(directory, name)
        return self._import(search_path, name)

    def _load_file(self, directory: Path, name: str) -> Optional[ModuleType]:
        for module_name in _module_names(name):
            for path in (directory / f"{module_name}.py", directory / module_name / '__init__.py'):
                if not path.is_file():
                    continue

                # 不同搜索目录中的同名模块互不覆盖
                digest = hashlib.md5(str(directory.resolve()).encode()).hexdigest()[:8]
                qualified_name = f"lazyioc_modules.{digest}.{module_name.replace('-', '_')}"
                spec = importlib.util.spec_from_file_location(qualified_name, path)
                module = importlib.util.module_from_spec(spec)
                sys.modules[qualified_name] = module
                try:
                    spec.loader.exec_module(module)
                except BaseException:
                    sys.modules.pop(qualified_name, None)
                    raise
                return module
        return None

    def _import(self, package: str, name: str) -> Optional[ModuleType]:
        for module_name in _module_names(name):
            full_name = f"{package}.{module_name}"
            try:
                return importlib.import_module(full_name)
            except ModuleNotFoundError as e:
                # 只忽略目标模块本身不存在的情况
                if e.name is None or not (full_name == e.name or full_name.startswith(e.name + '.')):
                    raise
        return None


class MappingLoader:
    """基于字典的内存加载器"""

    def __init__(self, registrations: Optional[Dict[str, Callable]] = None):
        self.registrations: Dict[str, Callable] = dict(registrations or {})

    def add(self, name: str, register_fn: Callable) -> None:
        """添加注册函数"""
        self.registrations[name] = register_fn

    def resolve(self, name: str) -> Callable:
        """解析名称对应的注册函数"""
        if name not in self.registrations:
            raise ProviderNotFoundError(name)
        return self.registrations[name]
