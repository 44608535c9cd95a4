import math

import pytest
from pydantic import ValidationError

from nlweb.contracts.nlweb_v1 import (
    BackendInfo,
    NLWebRequest,
    NLWebResponse,
    NLWebResult,
    QueryMode,
)


class TestRequest:
    def test_defaults(self):
        request = NLWebRequest()
        assert request.query == ""
        assert request.mode == QueryMode.LIST
        assert request.prev == []
        assert request.max_results is None

    def test_camel_case_input(self):
        request = NLWebRequest.model_validate(
            {
                "query": "dune",
                "mode": "generate",
                "maxResults": 5,
                "decontextualizedQuery": "dune 2021",
                "queryId": "q1",
                "timeoutSeconds": 2.5,
            }
        )
        assert request.mode == QueryMode.GENERATE
        assert request.max_results == 5
        assert request.decontextualized_query == "dune 2021"
        assert request.query_id == "q1"
        assert request.timeout_seconds == 2.5

    def test_prev_from_comma_string(self):
        assert NLWebRequest(prev=" a , b,, c ").prev == ["a", "b", "c"]

    def test_prev_from_list_drops_blanks(self):
        assert NLWebRequest(prev=["a", "  ", "b"]).prev == ["a", "b"]

    def test_none_query_is_empty(self):
        assert NLWebRequest(query=None).query == ""

    @pytest.mark.parametrize("field", [{"max_results": 0}, {"timeout_seconds": 0}, {"mode": "poem"}])
    def test_rejects_bad_values(self, field):
        with pytest.raises(ValidationError):
            NLWebRequest(query="x", **field)


class TestResult:
    @pytest.mark.parametrize("score", [math.inf, -math.inf, math.nan])
    def test_score_must_be_finite(self, score):
        with pytest.raises(ValidationError):
            NLWebResult(url="https://x.test", score=score)


class TestResponse:
    def test_wire_format_drops_unset_text(self):
        response = NLWebResponse(
            query_id="q1",
            query="dune",
            results=[NLWebResult(url="https://x.test/dune", name="Dune", score=2)],
            processing_time_ms=1.5,
        )

        wire = response.to_wire()

        assert wire["queryId"] == "q1"
        assert wire["processingTimeMs"] == 1.5
        assert wire["isStreaming"] is False and wire["isComplete"] is True
        assert wire["mode"] == "list"
        assert "summary" not in wire and "error" not in wire
        assert "generatedResponse" not in wire
        assert "schemaObject" not in wire["results"][0]

    def test_wire_format_keeps_set_fields(self):
        response = NLWebResponse(
            summary="s",
            error="e",
            results=[NLWebResult(url="u", schema_object={"type": "Movie"})],
        )
        wire = response.to_wire()
        assert wire["summary"] == "s"
        assert wire["error"] == "e"
        assert wire["results"][0]["schemaObject"] == {"type": "Movie"}

    def test_ok(self):
        assert NLWebResponse().ok
        assert not NLWebResponse(error="boom").ok


def test_backend_info_is_frozen():
    info = BackendInfo(id="mock")
    with pytest.raises(ValidationError):
        info.priority = 3
