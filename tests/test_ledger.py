"""
测试 livelinks.engine.ledger 订阅账本
"""
from livelinks.engine.events import EventEmitter
from livelinks.engine.ledger import SubscriptionLedger


def test_listen_to_records_subscription():
    """测试订阅被记录"""
    emitter = EventEmitter()
    ledger = SubscriptionLedger()

    ledger.listen_to(emitter, "add", print)
    ledger.listen_to(emitter, "remove", print)

    assert len(ledger) == 2
    assert emitter.subscriber_count() == 2


def test_release_all_unsubscribes_everything():
    """测试一次性释放所有订阅"""
    first, second = EventEmitter(), EventEmitter()
    ledger = SubscriptionLedger()
    calls = []
    ledger.listen_to(first, "x", lambda: calls.append("first"))
    ledger.listen_to(second, "y", lambda: calls.append("second"))

    assert ledger.release_all() == 2

    first.emit("x")
    second.emit("y")
    assert calls == []
    assert len(ledger) == 0
    assert not ledger
    assert first.subscriber_count() == 0
    assert second.subscriber_count() == 0


def test_release_all_is_idempotent():
    """测试重复释放"""
    ledger = SubscriptionLedger()
    ledger.listen_to(EventEmitter(), "x", print)
    ledger.release_all()
    assert ledger.release_all() == 0


def test_release_by_emitter():
    """测试按发布者释放"""
    first, second = EventEmitter(), EventEmitter()
    ledger = SubscriptionLedger()
    ledger.listen_to(first, "x", print)
    ledger.listen_to(second, "x", print)

    assert ledger.release(first) == 1

    assert first.subscriber_count() == 0
    assert second.subscriber_count() == 1
    assert ledger.emitters() == [second]


def test_release_by_event():
    """测试按事件名释放"""
    emitter = EventEmitter()
    ledger = SubscriptionLedger()
    ledger.listen_to(emitter, "add", print)
    ledger.listen_to(emitter, "remove", print)

    ledger.release(event="add")

    assert emitter.subscriber_count("add") == 0
    assert emitter.subscriber_count("remove") == 1


def test_externally_cancelled_subscription_not_counted():
    """测试已在外部取消的订阅不计入"""
    emitter = EventEmitter()
    ledger = SubscriptionLedger()
    sub = ledger.listen_to(emitter, "x", print, once=True)

    emitter.emit("x")

    assert not sub.active
    assert len(ledger) == 0
    assert ledger.release_all() == 0


def test_listen_to_many():
    """测试批量订阅"""
    emitter = EventEmitter()
    ledger = SubscriptionLedger()
    subs = ledger.listen_to_many(emitter, {"add": print, "remove": print})
    assert [s.event for s in subs] == ["add", "remove"]
    assert len(ledger) == 2
