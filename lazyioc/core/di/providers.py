"""
提供者定义与组件提供者

定义构建器规格的规范化、提供者定义以及组件的生命周期管理
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from dependency_injector import providers

from ...exceptions import MalformedBuilderError

SCOPE_ATTRIBUTE = '__lazyioc_scope__'


def normalize_builder(spec: Any, kind: str) -> Tuple:
    """
    规范化构建器规格

    可调用对象转换为无依赖的单元素元组；序列必须以依赖名称开头，
    并以可调用对象结尾

    Args:
        spec: 构建器规格
        kind: 构建器类型标签（Provider/Factory/Component），用于错误信息

    Returns:
        (...依赖名称, 构建器) 元组

    Raises:
        MalformedBuilderError: 如果规格格式不正确
    """
    if callable(spec):
        return (spec,)

    message = f"{kind} 必须是可调用对象，或以依赖名称为前缀的序列"

    if not isinstance(spec, (list, tuple)) or not spec:
        raise MalformedBuilderError(message, kind=kind, details={'spec': repr(spec)})

    *dependencies, builder = spec
    if not callable(builder):
        raise MalformedBuilderError(message, kind=kind, details={'spec': repr(spec)})

    for dependency in dependencies:
        if not isinstance(dependency, str) or not dependency:
            raise MalformedBuilderError(
                f"{kind} 的依赖名称必须是非空字符串: {dependency!r}",
                kind=kind,
                details={'spec': repr(spec)}
            )

    return tuple(spec)


@dataclass(frozen=True)
class ProviderDefinition:
    """
    提供者定义

    注册阶段的产物，描述如何构建某个名称对应的组件

    Attributes:
        name: 注册名称
        dependencies: 组件阶段需要解析的依赖名称
        builder: 接收已解析依赖值的构建器（返回值可以是可等待对象）
    """

    name: str
    dependencies: Tuple[str, ...]
    builder: Callable

    @classmethod
    def from_spec(cls, name: str, spec: Any) -> 'ProviderDefinition':
        """从构建器规格创建提供者定义"""
        *dependencies, builder = normalize_builder(spec, 'Provider')
        return cls(name, tuple(dependencies), builder)

    @property
    def build(self) -> Tuple:
        """(...依赖名称, 构建器) 形式的构建规格"""
        return self.dependencies + (self.builder,)

    @property
    def scope(self) -> str:
        """生命周期范围 (singleton/factory/provider)"""
        return getattr(self.builder, SCOPE_ATTRIBUTE, ComponentProvider.PROVIDER)


class _Construction:
    """一次正在进行的单例构建，创建时即启动"""

    def __init__(self, builder: Callable, on_settled: Callable, *dependencies):
        self.discarded = False
        self.future = asyncio.ensure_future(_settle(builder(*dependencies)))
        self.future.add_done_callback(lambda _: on_settled(self))


async def _settle(result: Any) -> Any:
    """将同步结果与可等待结果统一为一个值"""
    if inspect.isawaitable(result):
        return await result
    return result


class ComponentProvider:
    """组件提供者"""

    SINGLETON = 'singleton'
    FACTORY = 'factory'
    PROVIDER = 'provider'

    def __init__(
        self,
        builder: Callable,
        name: Optional[str] = None,
        scope: str = SINGLETON
    ):
        """
        初始化组件提供者

        Args:
            builder: 原始构建器
            name: 组件名称
            scope: 生命周期范围 (singleton/factory)
        """
        self.builder = builder
        self.name = name or getattr(builder, '__name__', repr(builder))
        self.scope = scope
        self.built = False
        self.instance = None
        setattr(self, SCOPE_ATTRIBUTE, scope)

        if scope == self.SINGLETON:
            # 缓存进行中的构建，并发请求共享同一个构建
            self._provider = providers.Singleton(_Construction, builder, self._settled)
        elif scope == self.FACTORY:
            self._provider = providers.Factory(builder)
        else:
            raise ValueError(f"不支持的生命周期范围: {scope}")

    async def __call__(self, *dependencies) -> Any:
        """
        构建组件

        单例范围下原始构建器最多成功执行一次；构建失败或被取消时丢弃缓存，
        之后的请求会重新构建

        Args:
            *dependencies: 按声明顺序排列的依赖值

        Returns:
            组件实例
        """
        if self.scope == self.FACTORY:
            return await _settle(self._provider(*dependencies))

        if self.built:
            return self.instance

        construction = self._provider(*dependencies)
        return await asyncio.shield(construction.future)

    def _settled(self, construction: _Construction) -> None:
        future = construction.future
        # 事件循环关闭时未完成的构建会被取消，同样需要丢弃
        if future.cancelled() or future.exception() is not None:
            if not construction.discarded:
                construction.discarded = True
                self._provider.reset()
            return

        self.instance = future.result()
        self.built = True

    def __repr__(self) -> str:
        return f"<ComponentProvider {self.name} ({self.scope})>"
