"""
构建器装饰器

用于在模块中标记构建函数，模块无需编写 register 函数即可被加载
"""

from typing import Callable, Optional

BUILDER_ATTRIBUTE = '__lazyioc_builder__'


def _mark(kind: str, dependencies: tuple) -> Callable:
    def decorator(func):
        setattr(func, BUILDER_ATTRIBUTE, {
            'kind': kind,
            'dependencies': list(dependencies),
        })
        return func
    return decorator


def component(*dependencies: str) -> Callable:
    """
    单例组件装饰器

    Example:
        @component('component-one')
        def build(one):
            return {'name': 'component-two', 'one': one}
    """
    return _mark('component', dependencies)


def factory(*dependencies: str) -> Callable:
    """组件工厂装饰器"""
    return _mark('factory', dependencies)


def provider(*dependencies: str) -> Callable:
    """提供者装饰器"""
    return _mark('provider', dependencies)


def get_builder_metadata(func) -> Optional[dict]:
    """获取构建器标记，未标记时返回 None"""
    return getattr(func, BUILDER_ATTRIBUTE, None)


def registration_function(func) -> Callable:
    """
    将标记过的构建函数转换为注册函数

    Args:
        func: 使用 component/factory/provider 装饰的函数

    Returns:
        注册函数 register(container, config)
    """
    metadata = get_builder_metadata(func)
    if metadata is None:
        raise ValueError(f"{func!r} 未使用构建器装饰器标记")

    def register(container, config):
        getattr(container, metadata['kind'])(metadata['dependencies'] + [func])

    register.__wrapped__ = func
    return register
