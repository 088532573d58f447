"""
测试 livelinks.engine.events 可观察对象
"""
import pytest

from livelinks.engine.events import DispatchResult, EventEmitter, Subscription


class TestSubscribe:
    def test_emit_passes_arguments(self):
        """测试发布参数传递给处理器"""
        emitter = EventEmitter()
        received = []
        emitter.subscribe("change", lambda *args: received.append(args))

        emitter.emit("change", 1, "two")

        assert received == [(1, "two")]

    def test_emit_without_subscribers(self):
        """测试没有订阅者时返回空结果"""
        result = EventEmitter().emit("nothing")
        assert isinstance(result, DispatchResult)
        assert result.subscriber_count == 0
        assert result.success_count == 0

    def test_handlers_run_in_subscription_order(self):
        """测试按订阅顺序调用"""
        emitter = EventEmitter()
        order = []
        emitter.subscribe("x", lambda: order.append(1))
        emitter.subscribe("x", lambda: order.append(2))

        result = emitter.emit("x")

        assert order == [1, 2]
        assert result.success_count == 2

    def test_subscribe_returns_subscription(self):
        """测试订阅返回 Subscription"""
        emitter = EventEmitter()
        sub = emitter.subscribe("x", print)
        assert isinstance(sub, Subscription)
        assert sub.active
        assert sub.event == "x"
        assert emitter.subscriber_count("x") == 1

    def test_non_callable_handler_rejected(self):
        """测试不可调用的处理器"""
        with pytest.raises(TypeError):
            EventEmitter().subscribe("x", "not callable")

    def test_once(self):
        """测试只触发一次"""
        emitter = EventEmitter()
        calls = []
        emitter.once("x", lambda: calls.append(1))

        emitter.emit("x")
        emitter.emit("x")

        assert calls == [1]
        assert emitter.subscriber_count("x") == 0


class TestUnsubscribe:
    def test_cancel(self):
        """测试取消订阅"""
        emitter = EventEmitter()
        calls = []
        sub = emitter.subscribe("x", lambda: calls.append(1))

        sub.cancel()
        sub.cancel()
        emitter.emit("x")

        assert calls == []
        assert not sub.active

    def test_unsubscribe_by_handler(self):
        """测试按处理器取消"""
        emitter = EventEmitter()
        calls = []

        def first():
            calls.append("first")

        def second():
            calls.append("second")

        emitter.subscribe("x", first)
        emitter.subscribe("x", second)

        assert emitter.unsubscribe("x", first) == 1
        emitter.emit("x")

        assert calls == ["second"]

    def test_unsubscribe_everything(self):
        """测试取消所有事件的订阅"""
        emitter = EventEmitter()
        emitter.subscribe("a", print)
        emitter.subscribe("b", print)

        assert emitter.unsubscribe() == 2
        assert emitter.subscriber_count() == 0

    def test_cancelled_during_dispatch_is_skipped(self):
        """测试分发过程中被取消的订阅不再被调用"""
        emitter = EventEmitter()
        calls = []
        later = None

        def first():
            calls.append("first")
            later.cancel()

        emitter.subscribe("x", first)
        later = emitter.subscribe("x", lambda: calls.append("later"))

        emitter.emit("x")

        assert calls == ["first"]

    def test_subscribed_during_dispatch_waits_for_next_emit(self):
        """测试分发过程中新增的订阅在下一次发布才生效"""
        emitter = EventEmitter()
        calls = []

        def first():
            calls.append("first")
            emitter.subscribe("x", lambda: calls.append("added"))

        emitter.once("x", first)
        emitter.emit("x")
        assert calls == ["first"]

        emitter.emit("x")
        assert calls == ["first", "added"]

    def test_clear(self):
        """测试清空"""
        emitter = EventEmitter()
        sub = emitter.subscribe("x", print)
        emitter.clear()
        assert emitter.subscriber_count() == 0
        assert not sub.active


class TestHandlerErrors:
    def test_errors_propagate_by_default(self):
        """测试默认情况下处理器异常向上抛出"""
        emitter = EventEmitter()

        def boom():
            raise RuntimeError("boom")

        emitter.subscribe("x", boom)
        with pytest.raises(RuntimeError):
            emitter.emit("x")

    def test_isolated_errors_are_recorded(self, isolate_errors):
        """测试隔离模式下异常被记录，其他处理器继续执行"""
        emitter = EventEmitter(name="test")
        calls = []

        def boom():
            raise RuntimeError("boom")

        emitter.subscribe("x", boom)
        emitter.subscribe("x", lambda: calls.append("ok"))

        result = emitter.emit("x")

        assert calls == ["ok"]
        assert result.success_count == 1
        assert result.failure_count == 1
        assert result.errors[0][0] is boom
        assert isinstance(result.errors[0][1], RuntimeError)

    def test_get_subscribers(self):
        """测试订阅者信息"""
        emitter = EventEmitter()

        def on_add():
            pass

        emitter.subscribe("add", on_add)
        assert emitter.get_subscribers() == {"add": ["on_add"]}
