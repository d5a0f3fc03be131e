"""Shared pytest fixtures for trace processing tests."""

import pytest
from datetime import datetime, timedelta, UTC

from trace_insights.models import Span

BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


def at(seconds: float) -> datetime:
    """Timestamp `seconds` after BASE_TIME."""
    return BASE_TIME + timedelta(seconds=seconds)


@pytest.fixture
def make_span():
    """Factory for spans with sensible defaults.

    start/end are offsets in seconds from BASE_TIME.
    """
    def _make_span(
        span_id: str = "test-span-id",
        name: str = "test-span",
        parent_span_id=None,
        start: float = 0,
        end: float = 1,
        trace_id: str = "test-trace-id",
        status: str = "OK",
        attributes=None,
    ) -> Span:
        return Span(
            span_id=span_id,
            trace_id=trace_id,
            parent_span_id=parent_span_id,
            name=name,
            start_time=at(start),
            end_time=at(end),
            status=status,
            attributes=attributes or {},
        )

    return _make_span


@pytest.fixture
def sample_records():
    """Span records as a storage layer would hand them over (camelCase, ISO strings)."""
    return [
        {
            "spanId": "root",
            "traceId": "trace-1",
            "parentSpanId": None,
            "name": "invoke_agent travel-planner",
            "startTime": "2024-01-01T00:00:00Z",
            "endTime": "2024-01-01T00:00:05Z",
            "status": "OK",
            "attributes": {
                "service.name": "planner-service",
                "gen_ai.agent.name": "travel-planner",
                "gen_ai.agent.input": "Plan a weekend in Lisbon",
                "gen_ai.agent.output": "Here is your itinerary",
            },
        },
        {
            "spanId": "llm-1",
            "traceId": "trace-1",
            "parentSpanId": "root",
            "name": "bedrock.converse",
            "startTime": "2024-01-01T00:00:01Z",
            "endTime": "2024-01-01T00:00:02Z",
            "status": "OK",
            "attributes": {
                "gen_ai.system": "aws.bedrock",
                "gen_ai.request.model": "claude-3-sonnet",
                "gen_ai.prompt": [{"role": "user", "content": "Plan a weekend"}],
                "gen_ai.completion": "Call the search tool",
            },
        },
        {
            "spanId": "tool-1",
            "traceId": "trace-1",
            "parentSpanId": "root",
            "name": "execute_tool search",
            "startTime": "2024-01-01T00:00:03Z",
            "endTime": "2024-01-01T00:00:04Z",
            "status": "ERROR",
            "attributes": {
                "gen_ai.tool.name": "search",
                "gen_ai.tool.input": '{"query": "Lisbon"}',
            },
        },
        {
            "spanId": "http-1",
            "traceId": "trace-1",
            "parentSpanId": "tool-1",
            "name": "GET /search",
            "startTime": "2024-01-01T00:00:03.100Z",
            "endTime": "2024-01-01T00:00:03.900Z",
            "status": "UNSET",
            "attributes": {},
        },
    ]
