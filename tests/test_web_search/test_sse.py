"""Tests for the event-stream decoder."""

import json

import pytest

from webtools.exceptions import SearchParseError
from webtools.web_search.providers.tavily import parse_results_payload
from webtools.web_search.sse import decode_event_stream, extract_content_text, iter_data_payloads


class TestIterDataPayloads:
    """Tests for iter_data_payloads."""

    def test_skips_non_data_lines_and_done(self):
        raw = ": heartbeat\nevent: message\ndata: {\"a\": 1}\n\ndata: [DONE]\ndata:   \n"

        assert list(iter_data_payloads(raw)) == ['{"a": 1}']

    def test_handles_crlf(self):
        raw = "data: first\r\ndata: second\r\n"

        assert list(iter_data_payloads(raw)) == ["first", "second"]


class TestExtractContentText:
    """Tests for extract_content_text."""

    def test_reads_first_content_text(self):
        envelope = {"result": {"content": [{"text": "one"}, {"text": "two"}]}}

        assert extract_content_text(envelope) == "one"

    @pytest.mark.parametrize(
        "envelope",
        [
            None,
            [],
            {"error": {"code": -32000}},
            {"result": {}},
            {"result": {"content": []}},
            {"result": {"content": [{"type": "image"}]}},
            {"result": {"content": [{"text": 5}]}},
        ],
    )
    def test_missing_text(self, envelope):
        assert extract_content_text(envelope) is None


class TestDecodeEventStream:
    """Tests for decode_event_stream."""

    def test_returns_first_content_text(self, sse_body):
        raw = sse_body("first result", "second result")

        assert decode_event_stream(raw) == "first result"

    def test_skips_malformed_lines(self, sse_body):
        raw = sse_body("good payload", preamble=("data: {not json", "data: also bad}"))

        assert decode_event_stream(raw) == "good payload"

    def test_skips_blank_text(self, sse_body):
        raw = sse_body("   ", "real")

        assert decode_event_stream(raw) == "real"

    def test_returns_none_without_data_lines(self):
        assert decode_event_stream("event: ping\n: comment\n\n") is None
        assert decode_event_stream("") is None

    def test_inner_parser_first_success_wins(self, sse_body):
        first = json.dumps({"results": [{"title": "A", "url": "https://a.example"}]})
        second = json.dumps({"results": [{"title": "B", "url": "https://b.example"}]})

        records = decode_event_stream(sse_body(first, second), parse_results_payload)

        assert [record.title for record in records] == ["A"]

    def test_inner_parser_none_continues(self, sse_body):
        raw = sse_body(json.dumps({"status": "working"}), json.dumps({"results": []}))

        assert decode_event_stream(raw, parse_results_payload) == []

    def test_single_unparseable_line_raises(self, sse_body):
        with pytest.raises(SearchParseError, match="Failed to parse search response"):
            decode_event_stream(sse_body("not json at all"), parse_results_payload)

    def test_unparseable_among_several_lines_is_skipped(self, sse_body):
        raw = sse_body("not json", json.dumps({"nothing": "here"}))

        assert decode_event_stream(raw, parse_results_payload) is None
