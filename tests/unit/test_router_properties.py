from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from nlweb.contracts.nlweb_v1 import NLWebRequest, QueryMode
from nlweb.core.config import NLWebSettings
from nlweb.orchestrators.search.constants import ROUTING_FAMILIES, ToolType
from nlweb.orchestrators.search.router import ToolSelector, classify_query

_ALL_KEYWORDS = [k for family in ROUTING_FAMILIES for k in family.keywords]


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("find cheap flights", ToolType.SEARCH),
        ("Locate the nearest pharmacy", ToolType.SEARCH),
        ("compare React and Angular", ToolType.COMPARE),
        ("python VS rust", ToolType.COMPARE),
        ("what is the difference between tea and coffee", ToolType.COMPARE),
        ("tell me about Docker", ToolType.DETAILS),
        ("Describe the Eiffel Tower", ToolType.DETAILS),
        ("recommend a set of wines", ToolType.ENSEMBLE),
        ("what should I cook tonight", ToolType.ENSEMBLE),
        ("best pizza in town", ToolType.SEARCH),
    ],
)
def test_classify_examples(query: str, expected: ToolType):
    assert classify_query(query) == expected


def test_first_family_wins():
    # Both "find" and "compare" appear; the search family is checked first.
    assert classify_query("find and compare laptops") == ToolType.SEARCH
    assert classify_query("describe the difference") == ToolType.COMPARE


@pytest.mark.property
@given(st.text(max_size=200))
def test_classification_is_deterministic(query: str):
    assert classify_query(query) == classify_query(query)


@pytest.mark.property
@given(st.text(alphabet=st.characters(categories=("Nd", "Zs")), max_size=50))
def test_keyword_free_queries_default_to_search(query: str):
    assert not any(k in query.lower() for k in _ALL_KEYWORDS)
    assert classify_query(query) == ToolType.SEARCH


@pytest.mark.property
@given(
    st.sampled_from([(f.tool, k) for f in ROUTING_FAMILIES for k in f.keywords]),
    st.sampled_from(["", "please ", "PLEASE "]),
)
def test_keyword_selects_at_most_its_family(pair, prefix: str):
    tool, keyword = pair
    selected = classify_query(prefix + keyword.upper())
    order = [f.tool for f in ROUTING_FAMILIES]
    # An earlier family may claim a keyword by substring, never a later one.
    assert order.index(selected) <= order.index(tool)


class TestShouldRoute:
    def test_disabled_by_config(self):
        selector = ToolSelector(NLWebSettings(tool_selection_enabled=False))
        request = NLWebRequest(query="compare a vs b")
        assert selector.should_route(request) is False
        assert selector.select_tool(request) is None

    def test_generate_mode_skips_routing(self, settings):
        selector = ToolSelector(settings)
        request = NLWebRequest(query="compare a vs b", mode=QueryMode.GENERATE)
        assert selector.select_tool(request) is None

    def test_precomputed_decontextualized_query_skips_routing(self, settings):
        selector = ToolSelector(settings)
        request = NLWebRequest(query="compare it", decontextualized_query="compare x vs y")
        assert selector.should_route(request) is False

    @pytest.mark.parametrize("mode", [QueryMode.LIST, QueryMode.SUMMARIZE])
    def test_routes_list_and_summarize(self, settings, mode):
        selector = ToolSelector(settings)
        request = NLWebRequest(query="compare a vs b", mode=mode)
        assert selector.select_tool(request) == ToolType.COMPARE
