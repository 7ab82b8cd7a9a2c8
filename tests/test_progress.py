"""Tests for git clone progress parsing."""

from gitwiki.repo.progress import ProgressEvent, ProgressParser, parse_progress


class TestParseProgress:
    def test_receiving(self):
        event = parse_progress("Receiving objects:  45% (1234/5678), 1.23 MiB | 1.45 MiB/s")
        assert event == ProgressEvent("receiving", 45)
        assert event.message == "Receiving objects"

    def test_resolving(self):
        assert parse_progress("Resolving deltas:  30% (123/456)") == ProgressEvent("resolving", 30)

    def test_remote_counting_ignored(self):
        assert parse_progress("remote: Counting objects: 100% (5/5), done.") is None

    def test_plain_line(self):
        assert parse_progress("Cloning into 'docs'...") is None


class TestProgressParser:
    def test_carriage_return_updates(self):
        parser = ProgressParser()
        events = list(parser.feed(
            "Receiving objects:  10% (1/10)\rReceiving objects:  50% (5/10)\r"
        ))
        assert [e.percent for e in events] == [10, 50]

    def test_partial_segment_buffered(self):
        parser = ProgressParser()
        assert list(parser.feed("Receiving obj")) == []
        events = list(parser.feed("ects:  70% (7/10)\r"))
        assert events == [ProgressEvent("receiving", 70)]

    def test_duplicates_suppressed(self):
        parser = ProgressParser()
        chunk = "Receiving objects:  10% (1/10)\rReceiving objects:  10% (1/10), 1 KiB\r"
        assert len(list(parser.feed(chunk))) == 1

    def test_phases_distinguished(self):
        parser = ProgressParser()
        events = list(parser.feed(
            "Receiving objects: 100% (10/10), done.\nResolving deltas: 100% (4/4), done.\n"
        ))
        assert [(e.phase, e.percent) for e in events] == [("receiving", 100), ("resolving", 100)]

    def test_close_flushes_tail(self):
        parser = ProgressParser()
        list(parser.feed("Resolving deltas:  90% (9/10)"))
        assert list(parser.close()) == [ProgressEvent("resolving", 90)]

