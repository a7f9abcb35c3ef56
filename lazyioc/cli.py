#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
lazyioc CLI 工具

按名称解析组件，或查看提供者定义
"""

import asyncio
import sys
from pprint import pformat

import click

from .core.application import create_registry
from .exceptions import LazyIocException


@click.group()
def cli():
    """lazyioc 命令行工具 - 组件解析与检查"""
    pass


def _registry(paths, config):
    return create_registry(search_paths=list(paths) or None, config_file=config)


@cli.command()
@click.argument('name')
@click.option('--path', '-p', 'paths', multiple=True, help='模块搜索路径（目录或包名），可多次指定')
@click.option('--config', '-c', default=None, help='配置文件路径或 URL')
def resolve(name: str, paths, config):
    """构建组件并输出结果"""
    try:
        registry = _registry(paths, config)
        component = asyncio.run(_resolve(registry, name))
    except LazyIocException as e:
        click.echo(f"❌ [{e.code}] {e.message}", err=True)
        sys.exit(1)

    click.echo(pformat(component))


async def _resolve(registry, name):
    return await registry.component(name)


@cli.command()
@click.argument('name')
@click.option('--path', '-p', 'paths', multiple=True, help='模块搜索路径（目录或包名），可多次指定')
@click.option('--config', '-c', default=None, help='配置文件路径或 URL')
def inspect(name: str, paths, config):
    """查看提供者定义（不构建组件）"""
    try:
        registry = _registry(paths, config)
        definition = registry.provider(name)
    except LazyIocException as e:
        click.echo(f"❌ [{e.code}] {e.message}", err=True)
        sys.exit(1)

    click.echo(f"📦 {definition.name}")
    click.echo(f"   范围: {definition.scope}")
    click.echo(f"   依赖: {', '.join(definition.dependencies) or '无'}")


def main():
    """CLI 入口"""
    cli()


if __name__ == '__main__':
    main()
