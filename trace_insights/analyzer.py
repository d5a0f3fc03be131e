"""Trace analyzer, runs the processing components over raw span records.

Records usually come straight from storage as dicts. The analyzer parses them,
applies the configured settings, and returns everything a trace detail view
needs in one object.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, Field

from .config import Settings, get_settings
from .extractor import collect_span_io
from .histogram import build_latency_histogram
from .models import (
    HistogramBucket,
    SpanIOResult,
    SpanNode,
    SpanRow,
    SpanStats,
    TimeRange,
    parse_spans,
)
from .summary import compute_span_stats, summarize_traces, trace_durations
from .time_range import calculate_time_range
from .tree import build_span_tree, dedupe_spans, tree_rows

logger = logging.getLogger(__name__)


class MalformedSpan(BaseModel):
    """A record that was left out of the analysis, and why."""

    span_id: Optional[str] = None
    reason: str


class TraceAnalysis(BaseModel):
    """Derived views of one trace's spans.

    `roots` is the nested tree for Python callers and is left out of dumps;
    `rows` carries the same tree flattened, which serializes at any depth.
    """

    roots: List[SpanNode] = Field(default_factory=list, exclude=True)
    rows: List[SpanRow] = Field(default_factory=list)
    time_range: TimeRange
    spans_io: List[SpanIOResult] = Field(default_factory=list)
    stats: SpanStats = Field(default_factory=SpanStats)
    malformed: List[MalformedSpan] = Field(default_factory=list)


class TraceAnalyzer:
    """Applies Settings to the trace processing functions.

    Parameters
    ----------
    settings : Optional[Settings]
        Settings to use; read from the environment when omitted.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def analyze(
        self,
        records: Iterable[Any],
        now: Optional[datetime] = None,
    ) -> TraceAnalysis:
        """Analyze the spans of one trace.

        Records that cannot be parsed are reported in `malformed` and left out;
        the rest of the trace is still analyzed. Duplicate span_ids are resolved
        once, so the tree, time range, IO list and stats cover the same spans.

        Parameters
        ----------
        records : Iterable[Any]
            Span dicts or Span instances.
        now : Optional[datetime]
            Anchor of the time range when no span survives parsing.
        """
        parsed, errors = parse_spans(records)
        spans = dedupe_spans(parsed, self.settings.duplicate_span_policy)
        roots = build_span_tree(spans)

        analysis = TraceAnalysis(
            roots=roots,
            rows=tree_rows(roots),
            time_range=calculate_time_range(spans, now=now),
            spans_io=collect_span_io(spans, include_empty=self.settings.include_empty_io),
            stats=compute_span_stats(spans),
            malformed=[MalformedSpan(span_id=e.span_id, reason=e.reason) for e in errors],
        )
        logger.info(
            f"Analyzed {len(spans)} spans into {len(roots)} roots "
            f"({len(errors)} malformed, {len(parsed) - len(spans)} duplicates)"
        )
        return analysis

    def latency_histogram(self, records: Iterable[Any]) -> List[HistogramBucket]:
        """Bucket the duration of every trace found in `records`."""
        spans, _ = parse_spans(records)
        summaries = summarize_traces(spans, self.settings.duplicate_span_policy)
        return build_latency_histogram(trace_durations(summaries), self.settings.bands)
