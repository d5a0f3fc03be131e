"""Span classification into agent / llm / tool / other"""

from typing import Any, Dict, NamedTuple, Sequence, Tuple

from .models import Category, Span


class CategoryRule(NamedTuple):
    """A span matches if its lower-cased name contains any of `name_fragments`
    or it carries any of `attribute_keys`."""

    category: Category
    name_fragments: Tuple[str, ...]
    attribute_keys: Tuple[str, ...]


# Evaluated in order, first match wins. Agent spans orchestrate everything
# below them, so "agent" is checked before "tool": "agent-tool" is an agent.
CATEGORY_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule(Category.AGENT, ("agent",), ("gen_ai.agent.name",)),
    CategoryRule(Category.LLM, ("llm", "bedrock", "converse"), ("gen_ai.system",)),
    CategoryRule(Category.TOOL, ("tool",), ("gen_ai.tool.name",)),
)


def has_attribute(attributes: Dict[str, Any], key: str) -> bool:
    """True if the attribute is set to something other than null or ""."""
    value = attributes.get(key)
    return value is not None and value != ""


def classify_span(
    span: Span,
    rules: Sequence[CategoryRule] = CATEGORY_RULES,
) -> Category:
    """Assign a span its semantic category.

    Parameters
    ----------
    span : Span
        Span to classify.
    rules : Sequence[CategoryRule]
        Ordered rules, the first matching rule decides.

    Returns
    -------
    Category
        Category of the first matching rule, Category.OTHER if none match.
    """
    name = span.name.lower()
    for rule in rules:
        if any(fragment in name for fragment in rule.name_fragments):
            return rule.category
        if any(has_attribute(span.attributes, key) for key in rule.attribute_keys):
            return rule.category
    return Category.OTHER
