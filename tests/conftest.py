from pathlib import Path

import pytest
from loguru import logger

from lazyioc.core.config import reload_config
from lazyioc.core.di import ContainerRegistry
from lazyioc.core.loader import MappingLoader

COMPONENTS_PATH = Path(__file__).parent / 'components'


@pytest.fixture
def components_path() -> Path:
    return COMPONENTS_PATH


@pytest.fixture
def config():
    return {'field': 'value'}


@pytest.fixture
def registry(components_path, config):
    return ContainerRegistry(str(components_path), config)


@pytest.fixture
def loader():
    return MappingLoader()


@pytest.fixture
def memory_registry(loader, config):
    return ContainerRegistry(loader, config)


@pytest.fixture
def log_messages():
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record['message']), level='DEBUG')
    yield messages
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    monkeypatch.delenv('CONFIG_FILE', raising=False)
    reload_config()
    yield
    reload_config()
