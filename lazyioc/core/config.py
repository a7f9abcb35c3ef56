"""
配置管理模块

使用 Dynaconf 加载配置，支持远程配置文件、配置文件优先级、环境变量覆盖等
"""

import hashlib
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import requests
from dynaconf import Dynaconf
from loguru import logger as loguru_logger

logger = loguru_logger.bind(name=__name__)

# 配置文件中未提供时使用的默认值
DEFAULTS = {
    "logging.level": "INFO",
    "logging.json": False,
    "registry.search_paths": [],
}


def _find_project_root() -> str:
    """查找项目根目录"""
    current_dir = Path(__file__).parent.absolute()

    while current_dir.parent != current_dir:
        if (current_dir / 'pyproject.toml').exists():
            return str(current_dir)
        current_dir = current_dir.parent

    return os.getcwd()


def _is_url(path: Optional[str]) -> bool:
    """检查是否为 URL"""
    return bool(path) and path.startswith(('http://', 'https://'))


def _download_config(url: str, cache_dir: str) -> str:
    """下载配置文件到缓存"""
    url_hash = hashlib.md5(url.encode()).hexdigest()
    cache_path = os.path.join(cache_dir, f"{url_hash}.yaml")

    try:
        logger.info(f"正在下载配置文件: {url}")
        response = requests.get(url, timeout=30)
        response.raise_for_status()

        with open(cache_path, 'w', encoding='utf-8') as f:
            f.write(response.text)

        logger.debug(f"配置文件已更新并缓存到: {cache_path}")
        return cache_path
    except requests.RequestException as e:
        if os.path.exists(cache_path):
            logger.warning(f"下载配置文件失败，使用缓存的配置文件: {cache_path} ({e})")
            return cache_path
        raise


def _get_config_files(config_file: Optional[str] = None) -> list:
    """获取配置文件列表，按优先级排序

    优先级：环境变量 > 参数指定 > 项目根目录/conf > 项目根目录
    """
    project_root = _find_project_root()
    cache_dir = os.path.join(tempfile.gettempdir(), 'lazyioc_config_cache')
    os.makedirs(cache_dir, exist_ok=True)

    config_files = []
    added_paths = set()

    config_paths = [
        os.getenv('CONFIG_FILE'),
        config_file,
        os.path.join(project_root, 'conf', 'config.yaml'),
        os.path.join(project_root, 'conf', 'config.yml'),
        os.path.join(project_root, 'config.yaml'),
        os.path.join(project_root, 'config.yml'),
    ]

    for config_path in config_paths:
        if not config_path:
            continue

        if _is_url(config_path):
            downloaded_path = _download_config(config_path, cache_dir)
            if downloaded_path not in added_paths:
                config_files.append(downloaded_path)
                added_paths.add(downloaded_path)
        elif os.path.exists(config_path) and config_path not in added_paths:
            config_files.append(config_path)
            added_paths.add(config_path)

    return config_files


def create_settings(config_file: Optional[str] = None) -> Dynaconf:
    """创建 Dynaconf 设置实例"""
    config_files = _get_config_files(config_file)

    return Dynaconf(
        settings_files=config_files,

        # 环境变量前缀，如 LAZYIOC_LOGGING__LEVEL=DEBUG
        envvar_prefix="LAZYIOC",
        envvar_separator="__",
        env_parse_values=True,
        merge_enabled=True,
    )


# 全局配置实例
_settings: Optional[Dynaconf] = None


def get_settings(config_file: Optional[str] = None) -> Dynaconf:
    """获取 Dynaconf 设置实例"""
    global _settings

    if _settings is None:
        _settings = create_settings(config_file)

    return _settings


def get_config(key: str, default: Any = None, settings: Optional[Dynaconf] = None) -> Any:
    """获取配置值的便捷函数，未配置时回退到内置默认值"""
    settings = settings if settings is not None else get_settings()
    if default is None:
        default = DEFAULTS.get(key)
    return settings.get(key, default)


def reload_config() -> None:
    """重新加载配置"""
    global _settings
    _settings = None
