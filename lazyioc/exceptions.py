"""
lazyioc 异常模块

提供容器注册表相关的异常类
"""

from typing import Any, Dict, List, Optional


class LazyIocException(Exception):
    """lazyioc 异常基类"""
    
    def __init__(
        self,
        message: str = "lazyioc 容器错误",
        code: str = "LAZYIOC_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(LazyIocException):
    """配置错误异常"""
    
    def __init__(
        self,
        message: str = "配置错误",
        config_key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.config_key = config_key
        super().__init__(message, "CONFIGURATION_ERROR", details)


class ValidationError(LazyIocException):
    """验证错误异常"""
    
    def __init__(
        self,
        message: str = "验证失败",
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.field = field
        self.value = value
        super().__init__(message, "VALIDATION_ERROR", details)


class MalformedBuilderError(LazyIocException):
    """构建器格式错误：既不是可调用对象，也不是 [...依赖名称, 可调用对象] 序列"""
    
    def __init__(
        self,
        message: str = "构建器格式错误",
        kind: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.kind = kind
        super().__init__(message, "MALFORMED_BUILDER", details)


class DuplicateRegistrationError(LazyIocException):
    """重复注册异常"""
    
    def __init__(
        self,
        name: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.name = name
        super().__init__(f"提供者 '{name}' 已注册", "DUPLICATE_REGISTRATION", details)


class DependencyError(LazyIocException):
    """依赖错误异常"""
    
    def __init__(
        self,
        message: str = "依赖错误",
        dependency: Optional[str] = None,
        code: str = "DEPENDENCY_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.dependency = dependency
        super().__init__(message, code, details)


class ProviderNotFoundError(DependencyError):
    """找不到提供者异常"""
    
    def __init__(
        self,
        name: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message or f"找不到提供者 '{name}'",
            dependency=name,
            code="PROVIDER_NOT_FOUND",
            details=details
        )


class CircularReferenceError(DependencyError):
    """循环依赖异常"""
    
    def __init__(
        self,
        source: str,
        target: str,
        path: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.source = source
        self.target = target
        self.path = path or [source, target, source]
        super().__init__(
            f"检测到循环依赖: {' -> '.join(self.path)}",
            dependency=target,
            code="CIRCULAR_REFERENCE",
            details=details
        )


class BuilderError(LazyIocException):
    """构建器执行失败异常"""
    
    def __init__(
        self,
        name: str,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.name = name
        self.cause = cause
        super().__init__(f"'{name}' 的构建器执行失败: {cause}", "BUILDER_ERROR", details)
