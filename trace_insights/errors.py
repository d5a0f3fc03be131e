"""Exceptions raised by the trace processing core"""

from typing import Any, Optional


class TraceInsightsError(Exception):
    """Base class for all trace-insights errors."""


class MalformedInputError(TraceInsightsError):
    """A span record that cannot be turned into a Span.

    Raised for non-parseable timestamps, and by `parse_spans` for records that
    fail validation. Carries the offending span's id so a caller can flag that
    one span and keep rendering the rest of the trace.

    Attributes
    ----------
    span_id : Optional[str]
        ID of the offending span, None if the record had none.
    field : Optional[str]
        Name of the field that failed, if known.
    value : Any
        Raw value that failed to parse.
    """

    def __init__(
        self,
        span_id: Optional[str],
        reason: str,
        field: Optional[str] = None,
        value: Any = None,
    ):
        self.span_id = span_id
        self.reason = reason
        self.field = field
        self.value = value
        super().__init__(f"Malformed span {span_id!r}: {reason}")
