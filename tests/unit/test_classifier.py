"""Tests for span classification."""

import pytest

from trace_insights.classifier import CATEGORY_RULES, CategoryRule, classify_span
from trace_insights.models import Category


class TestCategoryFromName:

    def test_agent_from_name(self, make_span):
        assert classify_span(make_span(name="agent.run")) == Category.AGENT

    @pytest.mark.parametrize("name", ["llm.call", "bedrock.invoke", "converse.api"])
    def test_llm_from_name(self, make_span, name):
        assert classify_span(make_span(name=name)) == Category.LLM

    def test_tool_from_name(self, make_span):
        assert classify_span(make_span(name="tool.execute")) == Category.TOOL

    def test_name_match_is_case_insensitive(self, make_span):
        assert classify_span(make_span(name="InvokeAgent")) == Category.AGENT
        assert classify_span(make_span(name="Bedrock Runtime")) == Category.LLM

    def test_defaults_to_other(self, make_span):
        assert classify_span(make_span(name="random-span")) == Category.OTHER


class TestCategoryFromAttributes:

    def test_agent_from_attribute(self, make_span):
        span = make_span(name="some-span", attributes={"gen_ai.agent.name": "my-agent"})
        assert classify_span(span) == Category.AGENT

    def test_llm_from_gen_ai_system(self, make_span):
        span = make_span(name="some-span", attributes={"gen_ai.system": "openai"})
        assert classify_span(span) == Category.LLM

    def test_tool_from_attribute(self, make_span):
        span = make_span(name="some-span", attributes={"gen_ai.tool.name": "search_tool"})
        assert classify_span(span) == Category.TOOL

    @pytest.mark.parametrize("empty", [None, ""])
    def test_empty_attribute_is_absent(self, make_span, empty):
        span = make_span(name="some-span", attributes={"gen_ai.system": empty})
        assert classify_span(span) == Category.OTHER


class TestPrecedence:
    """Rules are checked in order and the first match wins, not the best match."""

    def test_agent_tool_name_is_agent(self, make_span):
        assert classify_span(make_span(name="agent-tool")) == Category.AGENT

    def test_agent_beats_llm(self, make_span):
        span = make_span(name="agent", attributes={"gen_ai.system": "openai"})
        assert classify_span(span) == Category.AGENT

    def test_llm_attribute_beats_tool_name(self, make_span):
        """Rule 2 matches on attribute before rule 3 gets a look at the name."""
        span = make_span(name="tool.execute", attributes={"gen_ai.system": "openai"})
        assert classify_span(span) == Category.LLM

    def test_llm_name_beats_tool_attribute(self, make_span):
        span = make_span(name="llm.call", attributes={"gen_ai.tool.name": "search"})
        assert classify_span(span) == Category.LLM

    def test_rules_are_ordered_agent_llm_tool(self):
        assert [rule.category for rule in CATEGORY_RULES] == [
            Category.AGENT,
            Category.LLM,
            Category.TOOL,
        ]

    def test_custom_rules(self, make_span):
        rules = [CategoryRule(Category.TOOL, ("retriever",), ())]
        assert classify_span(make_span(name="vector-retriever"), rules) == Category.TOOL
        assert classify_span(make_span(name="agent.run"), rules) == Category.OTHER
