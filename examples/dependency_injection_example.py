#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
依赖注入示例

展示 lazyioc 的三种注册方式：provider、factory、component
"""

import asyncio

from lazyioc import ContainerRegistry, MappingLoader
from lazyioc.exceptions import CircularReferenceError


# ==================== 基础组件 ====================

def database(container, config):
    """数据库客户端 - 单例"""
    def build():
        print("✅ DatabaseClient 已初始化")
        return {"dsn": config["database"]["dsn"]}

    container.component(build)


def cache(container, config):
    """缓存 - 异步初始化的单例"""
    async def build():
        await asyncio.sleep(0)
        print("✅ Cache 已初始化")
        return {}

    container.component(build)


# ==================== 仓储层 ====================

def user_repository(container, config):
    """用户仓储 - 依赖 database 和 cache"""
    container.component([
        'database',
        'cache',
        lambda db, store: {"db": db, "cache": store},
    ])


# ==================== 请求级对象 ====================

def request_context(container, config):
    """请求上下文 - 工厂，每次请求创建新实例"""
    counter = {"value": 0}

    def build(repository):
        counter["value"] += 1
        return {"id": counter["value"], "repository": repository}

    container.factory(['user-repository', build])


def audited_repository(container, config):
    """提供者 - 在注册阶段读取 user-repository 的定义并复用其依赖"""
    def build(definition):
        def audited(*dependencies):
            print(f"📝 构建 audited-repository，依赖: {list(definition.dependencies)}")
            return {"audited": True, "dependencies": dependencies}

        return list(definition.dependencies) + [audited]

    container.provider(['user-repository', build])


# ==================== 循环依赖 ====================

def ping(container, config):
    container.component(['pong', lambda pong: pong])


def pong(container, config):
    container.component(['ping', lambda ping: ping])


loader = MappingLoader({
    'database': database,
    'cache': cache,
    'user-repository': user_repository,
    'request-context': request_context,
    'audited-repository': audited_repository,
    'ping': ping,
    'pong': pong,
})


async def main():
    registry = ContainerRegistry(loader, {"database": {"dsn": "sqlite://"}})

    repository = await registry.component('user-repository')
    print(f"📦 user-repository: {repository}")

    first = await registry.component('request-context')
    second = await registry.component('request-context')
    print(f"📦 request-context: {first['id']}, {second['id']}（共享仓储: {first['repository'] is second['repository']}）")

    audited = await registry.component('audited-repository')
    print(f"📦 audited-repository: {audited}")

    try:
        await registry.component('ping')
    except CircularReferenceError as e:
        print(f"❌ {e.message}")


if __name__ == "__main__":
    asyncio.run(main())
