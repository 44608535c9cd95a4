import json

import pytest

from nlweb.core.logger import NLWebLogger
from nlweb.core.prompts import format_results_block, load_prompt, render_prompt
from tests.factories import make_result


class TestPrompts:
    def test_shipped_prompts_load(self):
        for name in ("summary", "answer"):
            text = load_prompt(name)
            assert "{query}" in text and "{results}" in text

    def test_render_limits_results(self):
        results = [make_result(f"https://x.test/{i}", name=f"R{i}", description="d") for i in range(7)]

        prompt = render_prompt("summary", "dune", results, limit=2)

        assert '"dune"' in prompt
        assert "Title: R1\nDescription: d" in prompt
        assert "R2" not in prompt

    def test_result_text_is_not_reformatted(self):
        block = format_results_block([make_result("u", name="{query}", description="x")])
        assert block == "Title: {query}\nDescription: x"

    def test_missing_placeholder_rejected(self, tmp_path):
        (tmp_path / "broken.md").write_text("Only {query} here")
        with pytest.raises(ValueError, match="results"):
            load_prompt("broken", tmp_path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_prompt("absent", tmp_path)


class TestEventLog:
    def test_events_written_with_query_id(self, tmp_path):
        path = tmp_path / "logs" / "events.jsonl"
        log = NLWebLogger(log_file=path, level="WARNING")

        token = log.bind_query("q-42")
        log.request_received("dune", "list")
        log.tool_fallback("compare", "Could not identify two items to compare")
        log.response_sent(3)
        log.unbind_query(token)
        log.search_completed("dune", 3, 0.2)
        log.close()

        events = [json.loads(line) for line in path.read_text().splitlines()]
        assert [e["event_type"] for e in events] == [
            "REQUEST_RECEIVED",
            "TOOL_FALLBACK",
            "RESPONSE_SENT",
            "SEARCH_COMPLETED",
        ]
        assert [e["query_id"] for e in events] == ["q-42", "q-42", "q-42", None]
        assert events[2]["data"]["result_count"] == 3

    def test_no_file_no_events(self):
        log = NLWebLogger()
        log.request_received("dune", "list")
        assert log.current_query_id() is None
