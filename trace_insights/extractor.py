"""Input/output extraction from span attributes.

Tracing vendors disagree on where a span's payload lives: OpenTelemetry gen_ai
conventions, OpenLLMetry `llm.*` keys, OpenInference `input.value` and a long
tail of ad hoc names. Each category has an ordered list of candidate keys;
the first one holding a value wins, and generic keys catch the rest.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .classifier import classify_span
from .models import Category, Span, SpanIOResult

logger = logging.getLogger(__name__)

INPUT_KEYS: Dict[Category, Tuple[str, ...]] = {
    Category.LLM: (
        "gen_ai.prompt",
        "gen_ai.prompt.0.content",
        "llm.prompts",
        "llm.input_messages",
        "input.value",
    ),
    Category.TOOL: (
        "gen_ai.tool.input",
        "tool.input",
        "input.value",
        "tool.parameters",
    ),
    Category.AGENT: (
        "gen_ai.agent.input",
        "agent.input",
        "input.value",
        "user.message",
    ),
}

OUTPUT_KEYS: Dict[Category, Tuple[str, ...]] = {
    Category.LLM: (
        "gen_ai.completion",
        "gen_ai.completion.0.content",
        "llm.completions",
        "llm.output_messages",
        "output.value",
    ),
    Category.TOOL: (
        "gen_ai.tool.output",
        "tool.output",
        "output.value",
        "tool.result",
    ),
    Category.AGENT: (
        "gen_ai.agent.output",
        "agent.output",
        "output.value",
        "assistant.message",
    ),
}

# Tried for every category once the category keys come up empty
GENERIC_INPUT_KEYS: Tuple[str, ...] = ("input", "request", "message")
GENERIC_OUTPUT_KEYS: Tuple[str, ...] = ("output", "response", "result")

TOOL_NAME_KEYS: Tuple[str, ...] = ("gen_ai.tool.name", "tool.name")
MODEL_ID_KEYS: Tuple[str, ...] = ("gen_ai.request.model", "llm.model_name", "gen_ai.system")


def first_value(attributes: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Return the value of the first key set to something other than null or ""."""
    for key in keys:
        value = attributes.get(key)
        if value is not None and value != "":
            return value
    return None


def to_text(value: Any) -> Optional[str]:
    """Render an attribute value for display.

    Strings pass through, dicts and lists become JSON indented by 2 spaces,
    other scalars become their JSON text.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def extract_span_io(
    span: Span,
    category: Optional[Category] = None,
    input_keys: Mapping[Category, Sequence[str]] = INPUT_KEYS,
    output_keys: Mapping[Category, Sequence[str]] = OUTPUT_KEYS,
) -> SpanIOResult:
    """Resolve a span's input, output, tool name and model id.

    Parameters
    ----------
    span : Span
        Span to read.
    category : Optional[Category]
        Category from the classifier; computed when omitted.
    input_keys, output_keys : Mapping[Category, Sequence[str]]
        Ordered candidate keys per category.

    Returns
    -------
    SpanIOResult
        Input and output are None independently when nothing matches.
    """
    if category is None:
        category = classify_span(span)
    attrs = span.attributes

    raw_input = first_value(attrs, input_keys.get(category, ()))
    if raw_input is None:
        raw_input = first_value(attrs, GENERIC_INPUT_KEYS)

    raw_output = first_value(attrs, output_keys.get(category, ()))
    if raw_output is None:
        raw_output = first_value(attrs, GENERIC_OUTPUT_KEYS)

    tool_name = first_value(attrs, TOOL_NAME_KEYS)
    model_id = first_value(attrs, MODEL_ID_KEYS)

    return SpanIOResult(
        span=span,
        category=category,
        input=to_text(raw_input),
        output=to_text(raw_output),
        tool_name=str(tool_name) if tool_name is not None else None,
        model_id=str(model_id) if model_id is not None else None,
    )


def collect_span_io(
    spans: Sequence[Span],
    include_empty: bool = False,
) -> List[SpanIOResult]:
    """Extract input/output for every span, ordered by start time.

    Parameters
    ----------
    spans : Sequence[Span]
        Spans of one trace.
    include_empty : bool
        Keep spans that have neither input nor output.
    """
    results = [extract_span_io(span) for span in spans]
    if not include_empty:
        results = [r for r in results if r.has_io]

    logger.debug(f"Resolved input/output for {len(results)} of {len(spans)} spans")
    return sorted(results, key=lambda r: r.span.start_time)
