import asyncio

import pytest

from lazyioc.core.di import ComponentProvider, ContainerRegistration, ContainerRegistry, ProviderDefinition
from lazyioc.core.loader import ModuleLoader
from lazyioc.exceptions import (
    BuilderError,
    CircularReferenceError,
    ConfigurationError,
    DuplicateRegistrationError,
    MalformedBuilderError,
    ProviderNotFoundError,
    ValidationError,
)


class Recorder:
    """记录调用参数并返回固定结果的替身"""

    def __init__(self, result=None, side_effect=None):
        self.result = result
        self.side_effect = side_effect
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)
        if self.side_effect is not None:
            return self.side_effect(*args)
        return self.result


def definition(name, *build):
    return ProviderDefinition.from_spec(name, list(build))


# ==================== 构造 ====================

def test_requires_search_paths():
    with pytest.raises(ConfigurationError):
        ContainerRegistry()


def test_single_search_path():
    registry = ContainerRegistry('one')
    assert registry.loader.search_paths == ['one']


def test_multiple_search_paths():
    registry = ContainerRegistry(['one', 'two'])
    assert isinstance(registry.loader, ModuleLoader)
    assert registry.loader.search_paths == ['one', 'two']


def test_default_members(registry, config):
    assert registry.config is config
    assert registry.providers == {}
    assert len(registry.provider_resolver) == 0
    assert len(registry.component_resolver) == 0


# ==================== load() ====================

def test_load_existing(registry):
    assert callable(registry.load('component-one'))


def test_load_missing(registry):
    with pytest.raises(ProviderNotFoundError):
        registry.load('missing')


# ==================== provider() ====================

def test_provider_runs_registration_function_once(registry, monkeypatch):
    def module(registration, config):
        assert isinstance(registration, ContainerRegistration)
        assert registration.name == 'one'
        assert config is registry.config
        registry.providers['one'] = definition('one', lambda: 'one')

    load = Recorder(module)
    monkeypatch.setattr(registry, 'load', load)

    first = registry.provider('one')
    second = registry.provider('one')

    assert first is second
    assert load.calls == [('one',)]


def test_provider_missing_module(registry, monkeypatch):
    def load(name):
        raise ProviderNotFoundError(name)

    monkeypatch.setattr(registry, 'load', load)

    with pytest.raises(ProviderNotFoundError):
        registry.provider('missing')


def test_provider_requires_registration(registry):
    with pytest.raises(ProviderNotFoundError) as exc_info:
        registry.provider('silent')

    assert exc_info.value.dependency == 'silent'


def test_provider_cycle_is_synchronous(registry):
    with pytest.raises(CircularReferenceError) as exc_info:
        registry.provider('provider-cycle-a')

    assert exc_info.value.path == ['provider-cycle-b', 'provider-cycle-a', 'provider-cycle-b']
    assert registry.providers == {}
    assert registry._provider_graph is None


# ==================== register() ====================

def test_register_missing_name(registry):
    with pytest.raises(ValidationError):
        registry.register(None, lambda: 'component')
    with pytest.raises(ValidationError):
        registry.register('', lambda: 'component')


def test_register_non_string_name(registry):
    with pytest.raises(ValidationError) as exc_info:
        registry.register(5, lambda: (lambda: 'component'))

    assert exc_info.value.field == 'name'
    assert registry.providers == {}


def test_register_missing_builder(registry):
    with pytest.raises(MalformedBuilderError):
        registry.register('test')


def test_register_malformed_builder_touches_no_dependency(registry, monkeypatch):
    provider = Recorder(definition('two', lambda: 'two'))
    monkeypatch.setattr(registry, 'provider', provider)

    with pytest.raises(MalformedBuilderError):
        registry.register('one', ['two', 'not callable'])

    assert provider.calls == []


def test_register_duplicate(registry):
    original = registry.register('test', lambda: (lambda: 'first'))

    with pytest.raises(DuplicateRegistrationError) as exc_info:
        registry.register('test', lambda: (lambda: 'second'))

    assert exc_info.value.name == 'test'
    assert registry.providers['test'] is original


def test_register_without_dependencies(registry, monkeypatch):
    component_builder = lambda: 'component'
    builder = Recorder(component_builder)
    provider = Recorder()
    monkeypatch.setattr(registry, 'provider', provider)

    result = registry.register('test', [builder])

    assert builder.calls == [()]
    assert provider.calls == []
    assert registry.providers['test'] is result
    assert result.builder is component_builder


def test_register_missing_dependency(registry, monkeypatch):
    builder = Recorder(lambda: 'module')

    def provider(name):
        raise ProviderNotFoundError(name)

    monkeypatch.setattr(registry, 'provider', provider)

    with pytest.raises(ProviderNotFoundError):
        registry.register('one', ['two', builder])

    assert builder.calls == []
    assert 'one' not in registry.providers


def test_register_circular_dependency(registry, monkeypatch):
    builder = Recorder(lambda: 'module')
    monkeypatch.setattr(registry, 'provider', Recorder('dependency'))
    registry.provider_resolver.add('two')
    registry.provider_resolver.set_dependency('two', 'one')

    with pytest.raises(CircularReferenceError):
        registry.register('one', ['two', builder])

    assert builder.calls == []


def test_register_with_dependencies(registry, monkeypatch):
    builder = Recorder(lambda: 'module')
    provider = Recorder('dependency')
    monkeypatch.setattr(registry, 'provider', provider)

    registry.register('one', ['two', builder])

    assert provider.calls == [('two',)]
    assert builder.calls == [('dependency',)]


def test_register_builder_failure(registry):
    def builder():
        raise KeyError('boom')

    with pytest.raises(BuilderError) as exc_info:
        registry.register('one', builder)

    assert isinstance(exc_info.value.__cause__, KeyError)
    assert 'one' not in registry.providers


def test_register_builder_must_return_build_spec(registry):
    with pytest.raises(MalformedBuilderError):
        registry.register('one', lambda: 'module')


def test_register_does_not_leave_stale_edges(registry, monkeypatch):
    monkeypatch.setattr(registry, 'provider', Recorder(definition('two', lambda: 'two')))

    registry.register('one', ['two', lambda two: (lambda: 'one')])
    registry.register('two', ['one', lambda one: (lambda: 'two')])

    assert len(registry.provider_resolver) == 0
    assert registry._provider_graph is None


# ==================== component() ====================

def test_component_not_registered(registry):
    with pytest.raises(ProviderNotFoundError):
        registry.component('missing')


async def test_component_without_dependencies(registry, monkeypatch):
    builder = Recorder('component')
    provider = Recorder(definition('one', builder))
    monkeypatch.setattr(registry, 'provider', provider)

    component = await registry.component('one')

    assert component == 'component'
    assert provider.calls == [('one',)]
    assert builder.calls == [()]


async def test_component_missing_dependency_rejects(registry, monkeypatch):
    builder = Recorder('component')
    calls = []

    def provider(name):
        calls.append(name)
        if name == 'two':
            raise ProviderNotFoundError(name)
        return definition('one', 'two', builder)

    monkeypatch.setattr(registry, 'provider', provider)

    result = registry.component('one')
    with pytest.raises(ProviderNotFoundError):
        await result

    assert calls == ['one', 'two']
    assert builder.calls == []


def test_component_circular_dependency_is_synchronous(registry, monkeypatch):
    builder = Recorder('component')
    monkeypatch.setattr(registry, 'provider', Recorder(definition('one', 'two', builder)))
    registry.component_resolver.add('two')
    registry.component_resolver.set_dependency('two', 'one')

    with pytest.raises(CircularReferenceError):
        registry.component('one')

    assert builder.calls == []


async def test_component_with_dependencies(registry, monkeypatch):
    one = Recorder('one')
    two = Recorder('two')
    definitions = {
        'one': definition('one', 'two', one),
        'two': definition('two', two),
    }
    monkeypatch.setattr(registry, 'provider', definitions.__getitem__)

    component = await registry.component('one')

    assert component == 'one'
    assert two.calls == [()]
    assert one.calls == [('two',)]


async def test_component_arguments_follow_declaration_order(registry, monkeypatch):
    async def slow():
        await asyncio.sleep(0.01)
        return 'slow'

    definitions = {
        'root': definition('root', 'slow', 'fast', lambda *args: args),
        'slow': definition('slow', slow),
        'fast': definition('fast', lambda: 'fast'),
    }
    monkeypatch.setattr(registry, 'provider', definitions.__getitem__)

    assert await registry.component('root') == ('slow', 'fast')


async def test_component_builder_failure_rejects(registry, monkeypatch):
    def builder():
        raise RuntimeError('boom')

    monkeypatch.setattr(registry, 'provider', Recorder(definition('one', builder)))

    result = registry.component('one')
    with pytest.raises(BuilderError) as exc_info:
        await result

    assert exc_info.value.name == 'one'
    assert isinstance(exc_info.value.__cause__, RuntimeError)


async def test_component_nested_cycle_rejects(registry):
    result = registry.component('cycle-a')

    with pytest.raises(CircularReferenceError) as exc_info:
        await result

    assert exc_info.value.path == ['cycle-b', 'cycle-a', 'cycle-b']


async def test_component_does_not_leave_stale_edges(registry, monkeypatch):
    definitions = {
        'one': definition('one', 'two', lambda two: 'one'),
        'two': definition('two', lambda: 'two'),
    }
    monkeypatch.setattr(registry, 'provider', definitions.__getitem__)

    await registry.component('one')
    await registry.component('two')

    assert len(registry.component_resolver) == 0


async def test_cached_singleton_skips_dependencies(registry, monkeypatch):
    dependency = Recorder('dependency')
    definitions = {
        'one': definition('one', 'two', ComponentProvider(lambda two: {'two': two}, 'one')),
        'two': definition('two', ComponentProvider(dependency, 'two', ComponentProvider.FACTORY)),
    }
    monkeypatch.setattr(registry, 'provider', definitions.__getitem__)

    first = await registry.component('one')
    second = await registry.component('one')

    assert first is second
    assert dependency.calls == [()]


async def test_cached_singleton_ignores_failing_dependency(registry, monkeypatch):
    def fail_after_first():
        if dependency.calls[1:]:
            raise RuntimeError('unavailable')
        return 'dependency'

    dependency = Recorder(side_effect=fail_after_first)
    definitions = {
        'one': definition('one', 'two', ComponentProvider(lambda two: {'two': two}, 'one')),
        'two': definition('two', ComponentProvider(dependency, 'two', ComponentProvider.FACTORY)),
    }
    monkeypatch.setattr(registry, 'provider', definitions.__getitem__)

    first = await registry.component('one')

    assert await registry.component('one') is first
    with pytest.raises(BuilderError):
        await registry.component('two')


def test_singleton_rebuilt_after_event_loop_shutdown(registry, monkeypatch):
    calls = []

    async def slow():
        calls.append(1)
        await asyncio.sleep(0.05)
        return 'slow'

    async def fail():
        await asyncio.sleep(0.01)
        raise RuntimeError('boom')

    definitions = {
        'root': definition('root', 'fail', 'slow', lambda *args: args),
        'fail': definition('fail', ComponentProvider(fail, 'fail')),
        'slow': definition('slow', ComponentProvider(slow, 'slow')),
    }
    monkeypatch.setattr(registry, 'provider', definitions.__getitem__)

    with pytest.raises(BuilderError):
        asyncio.run(registry.component('root'))

    assert asyncio.run(registry.component('slow')) == 'slow'
    assert len(calls) == 2


def test_repr(registry):
    registry.register('one', lambda: (lambda: 'one'))
    assert 'one' in repr(registry)
    assert registry.has_provider('one')
