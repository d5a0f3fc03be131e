"""Trace-level summaries and span statistics"""

from typing import Dict, List, Sequence

from .classifier import classify_span
from .models import Span, SpanStats, SpanStatus, TraceSummary
from .time_range import calculate_time_range
from .tree import DuplicatePolicy, build_span_tree, dedupe_spans

UNKNOWN_SERVICE = "unknown"

_STATUS_KEYS = {
    SpanStatus.OK: "ok",
    SpanStatus.ERROR: "error",
    SpanStatus.UNSET: "unset",
}


def group_by_trace(spans: Sequence[Span]) -> Dict[str, List[Span]]:
    """Group spans by trace_id, keeping input order within each trace."""
    groups: Dict[str, List[Span]] = {}
    for span in spans:
        groups.setdefault(span.trace_id, []).append(span)
    return groups


def summarize_trace(
    spans: Sequence[Span],
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST,
) -> TraceSummary:
    """Reduce the spans of a single trace to a TraceSummary.

    The earliest root of the rebuilt tree names the trace and supplies the
    service name (its `service.name` attribute). Duplicate span_ids are
    dropped before anything is counted or timed.

    Parameters
    ----------
    spans : Sequence[Span]
        Non-empty list of spans sharing one trace_id.
    duplicate_policy : DuplicatePolicy
        Which record to keep for a repeated span_id.

    Raises
    ------
    ValueError
        If `spans` is empty.
    """
    if not spans:
        raise ValueError("Cannot summarize a trace without spans")

    spans = dedupe_spans(spans, duplicate_policy)
    roots = build_span_tree(spans)
    root = roots[0].span
    time_range = calculate_time_range(spans)
    service_name = root.attributes.get("service.name") or UNKNOWN_SERVICE

    return TraceSummary(
        trace_id=root.trace_id,
        root_span_name=root.name,
        service_name=str(service_name),
        start_time=time_range.start,
        duration_ms=time_range.duration_ms,
        span_count=len(spans),
        has_errors=any(span.status == SpanStatus.ERROR for span in spans),
    )


def summarize_traces(
    spans: Sequence[Span],
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST,
) -> List[TraceSummary]:
    """Summarize every trace present in a span list, oldest first."""
    summaries = [
        summarize_trace(group, duplicate_policy)
        for group in group_by_trace(spans).values()
    ]
    return sorted(summaries, key=lambda s: s.start_time)


def trace_durations(summaries: Sequence[TraceSummary]) -> List[float]:
    return [summary.duration_ms for summary in summaries]


def compute_span_stats(spans: Sequence[Span]) -> SpanStats:
    """Count spans by status and by category."""
    stats = SpanStats()
    for span in spans:
        stats.by_status[_STATUS_KEYS[span.status]] += 1
        stats.by_category[classify_span(span).value] += 1
    return stats
