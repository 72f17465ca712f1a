"""Test event bus, outbound channels and channel template."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from rosterbridge.core.errors import ConfigurationError, MessageDeliveryError
from rosterbridge.events import EntriesAdded
from rosterbridge.gateway import Bus, BusChannel, ChannelTemplate, Dispatcher, QueueChannel
from rosterbridge.message import build_message
from tests.doubles import RaisingChannel, RecordingChannel, RefusingChannel, TimeoutChannel


class MockTarget:
    """Mock event target for testing."""

    def __init__(self, accept_filter=None, fail=False):
        self.received_events = []
        self.accept_filter = accept_filter or (lambda s, e: True)
        self.fail = fail

    def accept_event(self, source: str, evt: object) -> bool:
        return self.accept_filter(source, evt)

    def push_event(self, source: str, evt: object) -> None:
        if self.fail:
            raise RuntimeError("consumer down")
        self.received_events.append((source, evt))


def make_message(*jids):
    return build_message(EntriesAdded(frozenset(jids)))


class TestDispatcher:
    """Test event dispatcher."""

    def test_register_target(self):
        dispatcher = Dispatcher()
        target = MockTarget()
        dispatcher.register(target)
        assert target in dispatcher._targets

    def test_register_twice_keeps_one(self):
        dispatcher = Dispatcher()
        target = MockTarget()
        dispatcher.register(target)
        dispatcher.register(target)
        assert dispatcher._targets == [target]

    def test_unregister_nonexistent_target_is_safe(self):
        dispatcher = Dispatcher()
        dispatcher.unregister(MockTarget())  # never registered, should not raise

    def test_dispatch_counts_deliveries(self):
        # Arrange
        dispatcher = Dispatcher()
        accepting = MockTarget()
        rejecting = MockTarget(accept_filter=lambda s, e: False)
        failing = MockTarget(fail=True)
        for target in (accepting, rejecting, failing):
            dispatcher.register(target)
        message = make_message("alice")

        # Act
        delivered = dispatcher.dispatch("roster", message)

        # Assert
        assert delivered == 1
        assert accepting.received_events == [("roster", message)]
        assert rejecting.received_events == []


class TestBus:
    def test_publish_and_unregister(self):
        # Arrange
        bus = Bus()
        target = MockTarget()
        bus.register(target)

        # Act
        first = bus.publish("roster", make_message("alice"))
        bus.unregister(target)
        second = bus.publish("roster", make_message("bob"))

        # Assert
        assert (first, second) == (1, 0)
        assert bus.targets == []

    def test_targets_snapshot_taken_under_lock(self):
        # Arrange
        bus = Bus()
        target = MockTarget()
        bus.register(target)
        lock = MagicMock()
        bus._dispatcher._lock = lock

        # Act
        snapshot = bus.targets
        snapshot.clear()

        # Assert
        lock.__enter__.assert_called_once()
        lock.__exit__.assert_called_once()
        assert bus._dispatcher._targets == [target]


class TestBusChannel:
    def test_send_true_when_consumed(self):
        # Arrange
        bus = Bus()
        target = MockTarget()
        bus.register(target)
        channel = BusChannel(bus, source="roster-a")
        message = make_message("alice")

        # Act & Assert
        assert channel.send(message) is True
        assert target.received_events == [("roster-a", message)]

    def test_send_false_without_consumers(self):
        assert BusChannel(Bus()).send(make_message("alice")) is False

    def test_send_false_when_consumer_fails(self):
        bus = Bus()
        bus.register(MockTarget(fail=True))
        assert BusChannel(bus).send(make_message("alice")) is False


class TestQueueChannel:
    def test_send_and_receive_in_order(self):
        # Arrange
        channel = QueueChannel()
        first, second = make_message("a"), make_message("b")

        # Act
        channel.send(first)
        channel.send(second)

        # Assert
        assert len(channel) == 2
        assert channel.receive(timeout=0) is first
        assert channel.receive(timeout=0) is second
        assert channel.receive(timeout=0) is None

    def test_full_queue_refuses_after_timeout(self):
        channel = QueueChannel(capacity=1)
        assert channel.send(make_message("a"), timeout=0.01) is True
        assert channel.send(make_message("b"), timeout=0.01) is False

    def test_receive_times_out(self):
        assert QueueChannel().receive(timeout=0.01) is None

    def test_purge(self):
        # Arrange
        channel = QueueChannel()
        messages = [make_message(str(i)) for i in range(3)]
        for m in messages:
            channel.send(m)

        # Act & Assert
        assert channel.purge() == messages
        assert len(channel) == 0


class TestChannelTemplate:
    def test_sends_to_default_channel(self):
        channel = RecordingChannel()
        message = make_message("alice")
        ChannelTemplate(channel).send(message)
        assert channel.messages == [message]

    def test_explicit_channel_overrides_default(self):
        default, explicit = RecordingChannel(), RecordingChannel()
        ChannelTemplate(default).send(make_message("alice"), channel=explicit)
        assert default.messages == []
        assert len(explicit.messages) == 1

    def test_no_channel_raises(self):
        with pytest.raises(ConfigurationError):
            ChannelTemplate().send(make_message("alice"))

    def test_refusal_raises_delivery_error(self):
        message = make_message("alice")
        with pytest.raises(MessageDeliveryError) as exc_info:
            ChannelTemplate(RefusingChannel()).send(message)
        assert exc_info.value.failed_message is message
        assert exc_info.value.code == "delivery_failed"

    def test_channel_exception_propagates(self):
        with pytest.raises(KeyError):
            ChannelTemplate(RaisingChannel(KeyError("x"))).send(make_message("alice"))

    def test_timeout_only_for_channels_that_accept_it(self):
        # Arrange
        with_timeout = TimeoutChannel()
        without_timeout = RecordingChannel()
        template = ChannelTemplate(send_timeout=1.0)

        # Act
        template.send(make_message("a"), channel=with_timeout)
        template.send(make_message("b"), channel=without_timeout)

        # Assert
        assert with_timeout.timeouts == [1.0]
        assert len(without_timeout.messages) == 1

    def test_queue_channel_timeout_refusal(self):
        # Arrange
        channel = QueueChannel(capacity=1)
        template = ChannelTemplate(channel, send_timeout=0.01)
        template.send(make_message("a"))

        # Act & Assert
        with pytest.raises(MessageDeliveryError):
            template.send(make_message("b"))
