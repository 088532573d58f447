"""
Pytest 配置和共享 fixtures
"""
import pytest

from livelinks.config import get_settings
from livelinks.ontology.base import Entity
from livelinks.ontology.collection import EntitySet


@pytest.fixture
def settings():
    """当前全局设置（测试中可用 monkeypatch 修改）"""
    return get_settings()


@pytest.fixture
def isolate_errors(monkeypatch, settings):
    """处理器异常被记录而不是抛出"""
    monkeypatch.setattr(settings, "ISOLATE_HANDLER_ERRORS", True)
    return settings


@pytest.fixture
def make_entity():
    """实体工厂"""

    def factory(id=None, **attributes):
        if id is not None:
            attributes["id"] = id
        return Entity(attributes)

    return factory


@pytest.fixture
def abc_source():
    """包含 a, b, c 的源集合"""
    return EntitySet([{"id": "a"}, {"id": "b"}, {"id": "c"}])


@pytest.fixture
def recorder():
    """记录事件调用的工厂：recorder(emitter, *events) -> list"""

    def attach(emitter, *events):
        calls = []
        for name in events:
            emitter.subscribe(name, lambda *args, _name=name: calls.append((_name, args)))
        return calls

    return attach
