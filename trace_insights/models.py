"""Data models for trace processing"""

import logging
import re
from datetime import datetime, timedelta, UTC
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .errors import MalformedInputError

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# OTLP exports carry nanosecond fractions, datetime keeps microseconds
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")

# OTLP numeric status codes
_STATUS_CODES = {0: "UNSET", 1: "OK", 2: "ERROR"}


class SpanStatus(str, Enum):
    OK = "OK"
    ERROR = "ERROR"
    UNSET = "UNSET"


class Category(str, Enum):
    """Semantic role of a span within an agent run."""

    AGENT = "agent"
    LLM = "llm"
    TOOL = "tool"
    OTHER = "other"


def parse_timestamp(
    value: Any,
    span_id: Optional[str] = None,
    field: Optional[str] = None,
) -> datetime:
    """Parse a span timestamp into a timezone-aware datetime.

    Accepts ISO 8601 strings, datetime objects and numbers (epoch milliseconds).
    Naive values are taken as UTC.

    Parameters
    ----------
    value : Any
        Raw timestamp.
    span_id : Optional[str]
        Span the timestamp belongs to, used in the error.
    field : Optional[str]
        Field name, used in the error.

    Raises
    ------
    MalformedInputError
        If the value cannot be interpreted as a timestamp.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool) or value is None:
        raise MalformedInputError(span_id, f"{field} is not a timestamp", field, value)
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedInputError(
                span_id, f"{field} out of range: {value!r}", field, value
            ) from e
    elif isinstance(value, str):
        try:
            # "2025-12-13T01:04:27Z" -> "2025-12-13T01:04:27+00:00"
            text = _FRACTION_RE.sub(r"\1", value.strip().replace("Z", "+00:00"))
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise MalformedInputError(
                span_id, f"unparseable {field}: {value!r}", field, value
            ) from e
    else:
        raise MalformedInputError(
            span_id,
            f"unsupported {field} type {type(value).__name__}",
            field,
            value,
        )

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class Span(BaseModel):
    """A single traced operation.

    Accepts both snake_case and camelCase keys (`span_id` / `spanId`).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    span_id: str
    trace_id: str
    parent_span_id: Optional[str] = None
    name: str
    start_time: datetime
    end_time: datetime
    status: SpanStatus = SpanStatus.UNSET
    attributes: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("parent_span_id", mode="before")
    @classmethod
    def empty_parent_is_root(cls, v):
        """Exporters write root parents as null or ""."""
        if v == "":
            return None
        return v

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_datetime(cls, v, info: ValidationInfo):
        """Parse timestamps, reporting failures against the span id.

        MalformedInputError is not a ValueError, so pydantic lets it through
        instead of folding it into a ValidationError.
        """
        return parse_timestamp(v, span_id=info.data.get("span_id"), field=info.field_name)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        """Map exporter status spellings to SpanStatus, unknown values to UNSET."""
        if isinstance(v, SpanStatus):
            return v
        if isinstance(v, int) and not isinstance(v, bool):
            return _STATUS_CODES.get(v, "UNSET")
        if isinstance(v, str):
            code = v.strip().upper().removeprefix("STATUS_CODE_")
            if code in SpanStatus.__members__:
                return code
        return "UNSET"

    @field_validator("attributes", mode="before")
    @classmethod
    def null_attributes(cls, v):
        if v is None:
            return {}
        return v

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time) / timedelta(milliseconds=1)


class SpanNode(BaseModel):
    """A span in tree form, with its children ordered by start time.

    Dumping a node serializes its subtree recursively, and pydantic-core stops
    at a few hundred levels. Export deep trees with `tree_rows` instead.
    """

    span: Span
    depth: int = 0
    children: List["SpanNode"] = Field(default_factory=list)

    @property
    def span_id(self) -> str:
        return self.span.span_id


class SpanRow(BaseModel):
    """One SpanNode without its children, for flat listings of a tree."""

    span: Span
    depth: int = 0
    # parent in the rebuilt tree, None for roots
    parent_id: Optional[str] = None


class TimeRange(BaseModel):
    """Window covering every span of a trace."""

    start: datetime
    end: datetime

    @property
    def duration_ms(self) -> float:
        return (self.end - self.start) / timedelta(milliseconds=1)


class SpanIOResult(BaseModel):
    """Human readable input/output resolved from a span's attributes."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    span: Span
    category: Category
    input: Optional[str] = None
    output: Optional[str] = None
    tool_name: Optional[str] = None
    model_id: Optional[str] = None

    @property
    def has_io(self) -> bool:
        return self.input is not None or self.output is not None


class LatencyBand(BaseModel):
    """A latency band in milliseconds, `[min, max)`; max None is open-ended."""

    label: str
    min: float
    max: Optional[float] = None

    def contains(self, duration_ms: float) -> bool:
        if duration_ms < self.min:
            return False
        return self.max is None or duration_ms < self.max


class HistogramBucket(BaseModel):
    label: str
    min: float
    max: Optional[float] = None
    count: int = 0


class TraceSummary(BaseModel):
    """One row of the trace list: a trace reduced to its headline numbers."""

    trace_id: str
    root_span_name: str
    service_name: str
    start_time: datetime
    duration_ms: float
    span_count: int
    has_errors: bool = False


class SpanStats(BaseModel):
    """Span counts of a trace by status and by category."""

    by_status: Dict[str, int] = Field(
        default_factory=lambda: {"ok": 0, "error": 0, "unset": 0}
    )
    by_category: Dict[str, int] = Field(
        default_factory=lambda: {c.value: 0 for c in Category}
    )


def _record_span_id(record: Any) -> Optional[str]:
    if isinstance(record, dict):
        span_id = record.get("span_id", record.get("spanId"))
        return str(span_id) if span_id is not None else None
    return None


def _describe_validation_error(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}"
        for err in error.errors()
    )


def parse_spans(
    records: Iterable[Any],
) -> Tuple[List[Span], List[MalformedInputError]]:
    """Turn raw span records into Span models, keeping the good ones.

    A record that fails (bad timestamp, missing required field) is logged and
    reported in the error list; the remaining records are still returned.

    Parameters
    ----------
    records : Iterable[Any]
        Span dicts as delivered by storage, or Span instances.

    Returns
    -------
    Tuple[List[Span], List[MalformedInputError]]
        Parsed spans in input order, and one error per rejected record.
    """
    spans: List[Span] = []
    errors: List[MalformedInputError] = []

    for record in records:
        if isinstance(record, Span):
            spans.append(record)
            continue
        try:
            spans.append(Span.model_validate(record))
        except MalformedInputError as e:
            logger.warning(f"Skipping span {e.span_id}: {e.reason}")
            errors.append(e)
        except ValidationError as e:
            error = MalformedInputError(
                _record_span_id(record), _describe_validation_error(e)
            )
            logger.warning(f"Skipping span {error.span_id}: {error.reason}")
            errors.append(error)

    return spans, errors
