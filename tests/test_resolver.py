"""
测试 livelinks.links.resolver 单引用解析
"""
from livelinks.engine.ledger import SubscriptionLedger
from livelinks.links.resolver import ResolverState, SingleReferenceResolver
from livelinks.ontology.collection import EntitySet


def make_resolver(source):
    changes = []
    resolver = SingleReferenceResolver(source, changes.append)
    return resolver, changes


class TestResolve:
    def test_present_entity(self):
        """测试实体已存在时直接解析"""
        source = EntitySet([{"id": "1"}])
        resolver, changes = make_resolver(source)

        entity = resolver.resolve("1")

        assert entity is source.get("1")
        assert resolver.state is ResolverState.RESOLVED
        assert changes == []
        assert source.events.subscriber_count("remove") == 1
        assert source.events.subscriber_count("add") == 0

    def test_absent_entity_waits(self):
        """测试实体不存在时进入等待"""
        source = EntitySet()
        resolver, changes = make_resolver(source)

        assert resolver.resolve("1") is None
        assert resolver.state is ResolverState.WAITING
        assert source.events.subscriber_count("add") == 1
        assert source.events.subscriber_count("remove") == 0


class TestTransitions:
    def test_arrival(self):
        """测试等待的实体到达"""
        source = EntitySet()
        resolver, changes = make_resolver(source)
        resolver.resolve("1")

        source.add({"id": "other"})
        assert changes == []

        source.add({"id": "1"})

        assert changes == [source.get("1")]
        assert resolver.state is ResolverState.RESOLVED
        assert resolver.entity is source.get("1")

    def test_removal_then_return(self):
        """测试实体移除后再次加入"""
        source = EntitySet([{"id": "1"}])
        resolver, changes = make_resolver(source)
        original = resolver.resolve("1")

        source.remove("1")
        assert changes == [None]
        assert resolver.state is ResolverState.WAITING

        source.add({"id": "1"})
        assert len(changes) == 2
        assert changes[1] is source.get("1")
        assert changes[1] is not original
        assert resolver.state is ResolverState.RESOLVED

    def test_unrelated_removal_ignored(self):
        """测试无关实体移除不影响"""
        source = EntitySet([{"id": "1"}, {"id": "2"}])
        resolver, changes = make_resolver(source)
        resolver.resolve("1")

        source.remove("2")

        assert changes == []
        assert resolver.state is ResolverState.RESOLVED

    def test_one_subscription_per_state(self):
        """测试每个状态只有一个订阅"""
        source = EntitySet()
        resolver, _ = make_resolver(source)
        resolver.resolve("1")

        for _ in range(3):
            source.add({"id": "1"})
            assert source.events.subscriber_count() == 1
            source.remove("1")
            assert source.events.subscriber_count() == 1

    def test_resolve_again_replaces_subscription(self):
        """测试重复解析不会累积订阅"""
        source = EntitySet([{"id": "1"}])
        resolver, _ = make_resolver(source)
        resolver.resolve("1")
        resolver.resolve("2")

        assert source.events.subscriber_count() == 1
        assert resolver.state is ResolverState.WAITING

    def test_release(self):
        """测试释放后不再回调"""
        source = EntitySet()
        resolver, changes = make_resolver(source)
        resolver.resolve("1")

        resolver.release()
        source.add({"id": "1"})

        assert changes == []
        assert resolver.state is ResolverState.IDLE
        assert source.events.subscriber_count() == 0


def test_shared_ledger():
    """测试使用外部账本记录订阅"""
    source = EntitySet()
    ledger = SubscriptionLedger()
    resolver = SingleReferenceResolver(source, lambda entity: None, ledger=ledger)

    resolver.resolve("1")
    assert len(ledger) == 1

    ledger.release_all()
    assert source.events.subscriber_count() == 0
