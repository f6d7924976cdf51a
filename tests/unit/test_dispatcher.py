"""
Unit tests for the dispatcher.
"""

import logging
from unittest.mock import Mock

from logexport.connectors.static_source import StaticRecordSource
from logexport.core.counters import ExportCounters
from logexport.core.exceptions import ChannelClosedError, TransportError
from logexport.runner.dispatcher import Dispatcher


class _RecordingPool:
    """Pool double that records submissions and close calls."""

    def __init__(self):
        self.submitted = []
        self.close_calls = 0

    def submit(self, hit):
        if self.close_calls:
            raise ChannelClosedError("send on closed channel")
        self.submitted.append(hit.doc_id)

    def close(self):
        self.close_calls += 1
        if self.close_calls > 1:
            raise ChannelClosedError("close of closed channel")


class TestDispatcher:
    """Tests for Dispatcher."""

    def test_dispatches_all_pages(self, hit_factory):
        """Test every hit is submitted and the channel is closed once."""
        pages = [
            [hit_factory(str(i), "2024-01-01T10:00:00Z", "m") for i in range(3)],
            [hit_factory(str(i), "2024-01-01T10:00:00Z", "m") for i in range(3, 5)],
        ]
        source = StaticRecordSource(pages)
        pool = _RecordingPool()
        counters = ExportCounters()

        dispatcher = Dispatcher(source, pool, counters)
        dispatcher.run()

        assert pool.submitted == ["0", "1", "2", "3", "4"]
        assert pool.close_calls == 1
        assert dispatcher.pages_fetched == 2
        assert dispatcher.transport_error is None
        assert counters.dispatched.value == 5
        assert source.closed

    def test_empty_source(self):
        """Test an empty source still closes the channel."""
        pool = _RecordingPool()

        dispatcher = Dispatcher(StaticRecordSource([]), pool, ExportCounters())
        dispatcher.run()

        assert pool.submitted == []
        assert pool.close_calls == 1
        assert dispatcher.pages_fetched == 0

    def test_transport_error_stops_fetching(self, hit_factory):
        """Test a transport error halts fetching but keeps dispatched hits."""
        pages = [[hit_factory(str(i), "2024-01-01T10:00:00Z", "m") for i in range(5)], []]
        source = StaticRecordSource(pages, fail_at_page=1)
        pool = _RecordingPool()

        dispatcher = Dispatcher(source, pool, ExportCounters())
        dispatcher.run()

        assert len(pool.submitted) == 5
        assert isinstance(dispatcher.transport_error, TransportError)
        assert pool.close_calls == 1
        assert source.page_calls == 2

    def test_unexpected_error_still_closes(self):
        """Test the channel is closed even when the source misbehaves."""
        source = Mock()
        source.next_page.side_effect = RuntimeError("boom")
        source.get_name.return_value = "mock"
        pool = _RecordingPool()

        dispatcher = Dispatcher(source, pool, ExportCounters())
        dispatcher.run()

        assert isinstance(dispatcher.error, RuntimeError)
        assert pool.close_calls == 1
        source.close.assert_called_once()

    def test_source_close_failure_is_logged(self, caplog):
        """Test a failing source close does not escape the dispatcher."""
        source = Mock()
        source.next_page.return_value = []
        source.close.side_effect = OSError("gone")
        source.get_name.return_value = "mock"
        pool = _RecordingPool()

        with caplog.at_level(logging.WARNING):
            Dispatcher(source, pool, ExportCounters()).run()

        assert pool.close_calls == 1
        assert "Failed to close source" in caplog.text

    def test_start_and_join(self, hit_factory):
        """Test the dispatcher runs on its own thread."""
        pool = _RecordingPool()
        source = StaticRecordSource([[hit_factory("1", "2024-01-01T10:00:00Z", "m")]])

        dispatcher = Dispatcher(source, pool, ExportCounters())
        dispatcher.start()
        dispatcher.join(timeout=5)

        assert pool.submitted == ["1"]
        assert pool.close_calls == 1
