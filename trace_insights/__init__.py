"""Trace Insights - turns flat agent trace spans into trees, categories and payloads"""

from .analyzer import MalformedSpan, TraceAnalysis, TraceAnalyzer
from .classifier import CATEGORY_RULES, CategoryRule, classify_span
from .config import Settings, get_settings
from .errors import MalformedInputError, TraceInsightsError
from .extractor import collect_span_io, extract_span_io
from .histogram import DEFAULT_LATENCY_BANDS, build_latency_histogram, latency_bands
from .models import (
    Category,
    HistogramBucket,
    LatencyBand,
    Span,
    SpanIOResult,
    SpanNode,
    SpanRow,
    SpanStats,
    SpanStatus,
    TimeRange,
    TraceSummary,
    parse_spans,
)
from .summary import (
    compute_span_stats,
    group_by_trace,
    summarize_trace,
    summarize_traces,
    trace_durations,
)
from .time_range import calculate_time_range
from .tree import DuplicatePolicy, build_span_tree, dedupe_spans, flatten_tree, tree_rows

__all__ = [
    "TraceAnalyzer",
    "TraceAnalysis",
    "MalformedSpan",
    "Settings",
    "get_settings",
    "TraceInsightsError",
    "MalformedInputError",
    "Span",
    "SpanNode",
    "SpanRow",
    "SpanStatus",
    "Category",
    "SpanIOResult",
    "TimeRange",
    "LatencyBand",
    "HistogramBucket",
    "TraceSummary",
    "SpanStats",
    "parse_spans",
    "build_span_tree",
    "flatten_tree",
    "tree_rows",
    "dedupe_spans",
    "DuplicatePolicy",
    "calculate_time_range",
    "classify_span",
    "CategoryRule",
    "CATEGORY_RULES",
    "extract_span_io",
    "collect_span_io",
    "build_latency_histogram",
    "latency_bands",
    "DEFAULT_LATENCY_BANDS",
    "group_by_trace",
    "summarize_trace",
    "summarize_traces",
    "trace_durations",
    "compute_span_stats",
]

__version__ = "0.1.0"
