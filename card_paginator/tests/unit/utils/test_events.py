import logging

from card_paginator.utils.events import LoggingEventSink, NullEventSink, RecordingEventSink


def test_recording_sink_keeps_order_and_fields():
    sink = RecordingEventSink()
    sink.emit("main_page_emitted", post_id="p1", page_type="main")
    sink.emit("page_overflow", kind="main", limit=800)
    sink.emit("main_page_emitted", post_id="p1", page_type="main_continued")

    assert sink.names() == ["main_page_emitted", "page_overflow", "main_page_emitted"]
    assert [e["page_type"] for e in sink.of_type("main_page_emitted")] == ["main", "main_continued"]
    assert sink.of_type("comment_split") == []


def test_logging_sink_levels(caplog):
    sink = LoggingEventSink(logging.getLogger("card_paginator.test_events"))

    with caplog.at_level(logging.DEBUG, logger="card_paginator.test_events"):
        sink.emit("page_overflow", kind="comments_page", page_index=2)
        sink.emit("comments_page_emitted", page_index=2, comments=1)

    overflow, emitted = caplog.records
    assert overflow.levelno == logging.WARNING
    assert overflow.event == "page_overflow"
    assert overflow.fields == {"kind": "comments_page", "page_index": 2}
    assert "page_index=2" in overflow.getMessage()
    assert emitted.levelno == logging.DEBUG


def test_logging_sink_skips_disabled_levels(caplog):
    sink = LoggingEventSink(logging.getLogger("card_paginator.test_events_quiet"))

    with caplog.at_level(logging.WARNING, logger="card_paginator.test_events_quiet"):
        sink.emit("pagination_completed", pages=3)

    assert caplog.records == []


def test_null_sink_accepts_anything():
    assert NullEventSink().emit("anything", value=object()) is None
