"""Time window of a span collection"""

from datetime import datetime
from typing import Optional, Sequence

from .models import EPOCH, Span, TimeRange


def calculate_time_range(
    spans: Sequence[Span],
    now: Optional[datetime] = None,
) -> TimeRange:
    """Return the smallest window containing every span.

    For an empty collection the result is a zero-width range anchored at `now`,
    or at the Unix epoch when `now` is not given. The range is not clamped;
    consumers dividing by its width must guard against zero themselves.

    Parameters
    ----------
    spans : Sequence[Span]
        Spans of one trace.
    now : Optional[datetime]
        Anchor for the empty-input sentinel.
    """
    if not spans:
        anchor = now if now is not None else EPOCH
        return TimeRange(start=anchor, end=anchor)

    return TimeRange(
        start=min(span.start_time for span in spans),
        end=max(span.end_time for span in spans),
    )
