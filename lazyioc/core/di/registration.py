"""
组件注册代理

加载模块时，注册函数会收到一个 ContainerRegistration 实例，
通过它把 provider、factory 或 component 注册到容器中
"""

from typing import Any, Tuple, TYPE_CHECKING

from .providers import ComponentProvider, normalize_builder

if TYPE_CHECKING:
    from .registry import ContainerRegistry


class ContainerRegistration:
    """绑定到单个注册名称的注册代理"""

    def __init__(self, registry: 'ContainerRegistry', name: str):
        """
        初始化注册代理

        Args:
            registry: 容器注册表
            name: 注册名称
        """
        self.registry = registry
        self.name = name

    def normalize(self, spec: Any, kind: str) -> Tuple:
        """规范化构建器规格，参见 normalize_builder"""
        return normalize_builder(spec, kind)

    def provider(self, spec: Any) -> None:
        """
        注册提供者

        构建器在注册阶段同步执行一次，接收依赖的提供者定义，
        返回值为组件阶段使用的构建规格

        Example:
            def register(container, config):
                container.provider(['database', lambda database: database.build])
        """
        self.registry.register(self.name, self.normalize(spec, 'Provider'))

    def factory(self, spec: Any) -> None:
        """
        注册组件工厂

        每次请求组件都会重新执行构建器，可以创建多个实例
        """
        self._register_scoped(self.normalize(spec, 'Factory'), ComponentProvider.FACTORY)

    def component(self, spec: Any) -> None:
        """
        注册单例组件

        Example:
            def register(container, config):
                container.component(['component-one', lambda one: {'one': one}])
        """
        self._register_scoped(self.normalize(spec, 'Component'), ComponentProvider.SINGLETON)

    def _register_scoped(self, spec: Tuple, scope: str) -> None:
        *dependencies, builder = spec
        build = tuple(dependencies) + (ComponentProvider(builder, self.name, scope),)

        # 依赖声明推迟到组件阶段
        self.registry.register(self.name, lambda: build)

    def __repr__(self) -> str:
        return f"<ContainerRegistration {self.name}>"
