"""Unit tests for the snapshot enumerator."""

import threading
from unittest.mock import patch

import pytest
from fswatch_bridge.enumeration import DirectoryEnumerator
from fswatch_bridge.enumeration import directory_enumerator as enumerator_module
from fswatch_bridge.models import EnumerationError, FileEventKind


def _populate(directory, count):
    for index in range(count):
        (directory / f"entry-{index:03d}").write_text("x")


class TestDirectoryEnumerator:
    """Test cases for DirectoryEnumerator."""

    @pytest.fixture
    def events(self):
        return []

    @pytest.fixture
    def cancellable(self):
        return threading.Event()

    @pytest.fixture
    def make_enumerator(self, events, cancellable):
        def factory(path, batch_size=10):
            return DirectoryEnumerator(str(path), events.append, cancellable, batch_size=batch_size)

        return factory

    @pytest.mark.asyncio
    async def test_lists_every_entry_then_done(self, make_enumerator, events, tmp_path):
        """Test N entries yield N present events followed by one present-done."""
        _populate(tmp_path, 7)
        enumerator = make_enumerator(tmp_path)

        await enumerator.run()

        assert [e.event for e in events] == [FileEventKind.PRESENT] * 7 + [FileEventKind.PRESENT_DONE]
        assert sorted(e.path for e in events[:-1]) == sorted(p.name for p in tmp_path.iterdir())
        assert events[-1].path is None
        assert enumerator.finished
        assert enumerator.entries_listed == 7

    @pytest.mark.asyncio
    async def test_empty_directory(self, make_enumerator, events, tmp_path):
        """Test an empty directory yields only present-done."""
        await make_enumerator(tmp_path).run()

        assert [e.to_message() for e in events] == [{"event": "present-done"}]

    @pytest.mark.asyncio
    async def test_entries_pulled_in_batches(self, make_enumerator, events, tmp_path):
        """Test each batch is forwarded before the next one is requested."""
        _populate(tmp_path, 25)
        forwarded_at_request = []
        real_read_batch = enumerator_module._read_batch

        def read_batch(listing, count):
            forwarded_at_request.append((len(events), count))
            return real_read_batch(listing, count)

        with patch.object(enumerator_module, "_read_batch", side_effect=read_batch):
            await make_enumerator(tmp_path).run()

        assert forwarded_at_request == [(0, 10), (10, 10), (20, 10), (25, 10)]
        assert len(events) == 26

    @pytest.mark.asyncio
    async def test_custom_batch_size(self, make_enumerator, events, tmp_path):
        _populate(tmp_path, 5)

        with patch.object(enumerator_module, "_read_batch", wraps=enumerator_module._read_batch) as read_batch:
            await make_enumerator(tmp_path, batch_size=2).run()

        assert read_batch.call_count == 4
        assert len(events) == 6

    @pytest.mark.asyncio
    async def test_missing_directory(self, make_enumerator, events, tmp_path):
        """Test that an open failure is reported once with no entries."""
        with pytest.raises(EnumerationError) as exc_info:
            await make_enumerator(tmp_path / "missing").run()

        assert "No such file or directory" in exc_info.value.message
        assert exc_info.value.context["entries_listed"] == 0
        assert events == []

    @pytest.mark.asyncio
    async def test_not_a_directory(self, make_enumerator, events, tmp_path):
        test_file = tmp_path / "file.txt"
        test_file.write_text("x")

        with pytest.raises(EnumerationError) as exc_info:
            await make_enumerator(test_file).run()

        assert "Not a directory" in exc_info.value.message
        assert events == []

    @pytest.mark.asyncio
    async def test_batch_failure_is_terminal(self, make_enumerator, events, tmp_path):
        """Test that a failed batch stops enumeration without present-done."""
        _populate(tmp_path, 3)

        with patch.object(
            enumerator_module, "_read_batch", side_effect=[["a", "b"], OSError(5, "Input/output error")]
        ):
            with pytest.raises(EnumerationError) as exc_info:
                await make_enumerator(tmp_path).run()

        assert "Input/output error" in exc_info.value.message
        assert exc_info.value.context["entries_listed"] == 2
        assert [e.event for e in events] == [FileEventKind.PRESENT, FileEventKind.PRESENT]

    @pytest.mark.asyncio
    async def test_cancel_while_batch_outstanding(self, make_enumerator, events, cancellable, tmp_path):
        """Test that a successful batch arriving after cancellation is discarded."""
        _populate(tmp_path, 3)

        def read_batch(listing, count):
            cancellable.set()
            return ["a", "b", "c"]

        with patch.object(enumerator_module, "_read_batch", side_effect=read_batch) as mocked:
            enumerator = make_enumerator(tmp_path)
            await enumerator.run()

        assert events == []
        assert mocked.call_count == 1
        assert not enumerator.finished

    @pytest.mark.asyncio
    async def test_cancel_while_failing_batch_outstanding(self, make_enumerator, events, cancellable, tmp_path):
        """Test that a failure arriving after cancellation is not reported."""

        def read_batch(listing, count):
            cancellable.set()
            raise OSError(5, "Input/output error")

        with patch.object(enumerator_module, "_read_batch", side_effect=read_batch):
            await make_enumerator(tmp_path).run()

        assert events == []

    @pytest.mark.asyncio
    async def test_cancel_while_open_outstanding(self, make_enumerator, events, cancellable, tmp_path):
        _populate(tmp_path, 2)
        real_open = enumerator_module._open_listing

        def open_listing(path):
            cancellable.set()
            return real_open(path)

        with patch.object(enumerator_module, "_open_listing", side_effect=open_listing):
            with patch.object(enumerator_module, "_read_batch") as read_batch:
                await make_enumerator(tmp_path).run()

        read_batch.assert_not_called()
        assert events == []

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, make_enumerator, events, cancellable, tmp_path):
        cancellable.set()

        with patch.object(enumerator_module, "_open_listing") as open_listing:
            await make_enumerator(tmp_path).run()

        open_listing.assert_not_called()
        assert events == []

    @pytest.mark.asyncio
    async def test_does_not_restart(self, make_enumerator, events, tmp_path):
        """Test that a finished enumeration issues no further requests."""
        enumerator = make_enumerator(tmp_path)
        await enumerator.run()

        with patch.object(enumerator_module, "_open_listing") as open_listing:
            await enumerator.run()

        open_listing.assert_not_called()
        assert len(events) == 1

    def test_invalid_batch_size(self, cancellable, tmp_path):
        with pytest.raises(ValueError):
            DirectoryEnumerator(str(tmp_path), print, cancellable, batch_size=0)
