"""
容器注册表

负责提供者表、注册阶段的同步依赖解析以及组件阶段的异步构建
"""

import asyncio
import inspect
from contextlib import contextmanager
from pathlib import PurePath
from typing import Any, Awaitable, Callable, Dict, Iterator, Optional

from loguru import logger as loguru_logger

from ...exceptions import (
    BuilderError,
    DuplicateRegistrationError,
    LazyIocException,
    ProviderNotFoundError,
    ValidationError,
)
from ..loader import ModuleLoader
from .providers import ComponentProvider, ProviderDefinition, normalize_builder
from .registration import ContainerRegistration
from .resolver import DependencyResolver

logger = loguru_logger.bind(name=__name__)


class ContainerRegistry:
    """容器注册表"""

    def __init__(self, loader: Any = None, config: Any = None):
        """
        初始化容器注册表

        Args:
            loader: 模块加载器（提供 resolve(name) 方法），或搜索路径（字符串或列表）
            config: 配置值，原样传递给每个注册函数
        """
        if loader is None or isinstance(loader, (str, PurePath, list, tuple)):
            loader = ModuleLoader(loader)

        self.loader = loader
        self.config = config
        self.providers: Dict[str, ProviderDefinition] = {}  # name -> definition

        # 每次顶层解析都基于这两个依赖图的副本进行，解析结束后副本即被丢弃
        self.provider_resolver = DependencyResolver()
        self.component_resolver = DependencyResolver()
        self._provider_graph: Optional[DependencyResolver] = None

    @contextmanager
    def _provider_scope(self) -> Iterator[DependencyResolver]:
        """注册阶段的依赖图作用域，嵌套调用共享最外层的依赖图"""
        if self._provider_graph is not None:
            yield self._provider_graph
            return

        self._provider_graph = self.provider_resolver.copy()
        try:
            yield self._provider_graph
        finally:
            self._provider_graph = None

    def load(self, name: str) -> Callable:
        """
        加载名称对应的注册函数

        Raises:
            ProviderNotFoundError: 如果找不到注册函数
        """
        register_fn = self.loader.resolve(name)
        if register_fn is None:
            raise ProviderNotFoundError(name)
        return register_fn

    def register(self, name: str, spec: Any = None) -> ProviderDefinition:
        """
        注册提供者

        同步解析所有依赖的提供者定义，再以它们为参数执行构建器，
        构建器的返回值即组件阶段的构建规格

        Args:
            name: 注册名称
            spec: 构建器规格，可调用对象或 [...依赖名称, 可调用对象]

        Returns:
            提供者定义

        Raises:
            ValidationError: 如果名称为空或不是字符串
            MalformedBuilderError: 如果构建器规格格式不正确
            DuplicateRegistrationError: 如果名称已注册
            CircularReferenceError: 如果存在循环依赖
        """
        if not isinstance(name, str) or not name:
            raise ValidationError("注册名称必须是非空字符串", field='name', value=name)

        *dependencies, builder = normalize_builder(spec, 'Provider')

        if name in self.providers:
            raise DuplicateRegistrationError(name)

        with self._provider_scope() as resolver:
            resolver.add(name)
            values = []
            for dependency in dependencies:
                resolver.set_dependency(name, dependency)
                values.append(self.provider(dependency))

            try:
                build = builder(*values)
            except LazyIocException:
                raise
            except Exception as e:
                raise BuilderError(name, e) from e

        if name in self.providers:
            raise DuplicateRegistrationError(name)

        definition = ProviderDefinition.from_spec(name, build)
        self.providers[name] = definition

        logger.debug(f"已注册提供者: '{name}' (依赖: {list(definition.dependencies)})")
        return definition

    def provider(self, name: str) -> ProviderDefinition:
        """
        获取提供者定义，未注册时加载并执行对应的注册函数

        Args:
            name: 注册名称

        Returns:
            提供者定义

        Raises:
            ProviderNotFoundError: 如果找不到注册函数，或注册函数未注册该名称
        """
        if name in self.providers:
            return self.providers[name]

        with self._provider_scope():
            register_fn = self.load(name)
            logger.debug(f"已加载注册函数: '{name}'")
            register_fn(ContainerRegistration(self, name), self.config)

        if name not in self.providers:
            raise ProviderNotFoundError(name, f"模块 '{name}' 未注册同名提供者")

        return self.providers[name]

    def component(self, name: str) -> Awaitable[Any]:
        """
        获取组件

        提供者的加载和根组件直接依赖的循环检测同步进行，失败时直接抛出异常；
        更深层的依赖在返回的可等待对象中解析，失败时该对象被拒绝

        Args:
            name: 组件名称

        Returns:
            可等待的组件实例

        Example:
            registry = ContainerRegistry('app/components', settings)
            two = await registry.component('component-two')
        """
        return self._component(name, self.component_resolver.copy())

    def _component(self, name: str, resolver: DependencyResolver) -> Awaitable[Any]:
        definition = self.provider(name)

        resolver.add(name)
        for dependency in definition.dependencies:
            resolver.set_dependency(name, dependency)

        return self._construct(definition, resolver)

    async def _dependency(self, name: str, resolver: DependencyResolver) -> Any:
        return await self._component(name, resolver)

    async def _construct(self, definition: ProviderDefinition, resolver: DependencyResolver) -> Any:
        # 已构建的单例直接返回，不再解析依赖
        if isinstance(definition.builder, ComponentProvider) and definition.builder.built:
            return definition.builder.instance

        values = await asyncio.gather(
            *(self._dependency(dependency, resolver) for dependency in definition.dependencies)
        )

        try:
            component = definition.builder(*values)
            if inspect.isawaitable(component):
                component = await component
        except LazyIocException:
            raise
        except Exception as e:
            raise BuilderError(definition.name, e) from e

        logger.debug(f"已构建组件: '{definition.name}' ({definition.scope})")
        return component

    def has_provider(self, name: str) -> bool:
        """检查名称是否已注册"""
        return name in self.providers

    def __repr__(self) -> str:
        return f"<ContainerRegistry providers={sorted(self.providers)}>"
