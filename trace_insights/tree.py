"""Span tree builder, reconstructs the span hierarchy from a flat span list."""

import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .models import Span, SpanNode, SpanRow

logger = logging.getLogger(__name__)

# Walk state per span while resolving parent links
_UNSEEN, _ON_PATH, _DONE = 0, 1, 2


class DuplicatePolicy(str, Enum):
    """Which record wins when several spans share a span_id."""

    LAST = "last"
    FIRST = "first"


def _dedupe(spans: Sequence[Span], policy: DuplicatePolicy) -> Dict[str, int]:
    """Map span_id to the input position of the record that is kept."""
    index: Dict[str, int] = {}
    for pos, span in enumerate(spans):
        if span.span_id in index:
            logger.warning(
                f"Duplicate span_id {span.span_id!r} in trace {span.trace_id!r}, "
                f"keeping {policy.value} occurrence"
            )
            if policy == DuplicatePolicy.FIRST:
                continue
        index[span.span_id] = pos
    return index


def dedupe_spans(
    spans: Sequence[Span],
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST,
) -> List[Span]:
    """Drop repeated span_ids according to `duplicate_policy`.

    The kept records stay in the input position of the record they came from,
    so every component downstream sees the same spans the tree is built from.
    """
    index = _dedupe(spans, duplicate_policy)
    return [spans[pos] for pos in sorted(index.values())]


def _break_cycles(kept: List[int], parent_of: Dict[int, Optional[int]], spans: Sequence[Span]) -> None:
    """Cut parent links that close a loop, in place.

    Parent chains are followed from each span in input order. When a chain
    reaches a span already on the current walk, the span whose parent link
    closes the loop becomes a root. For a two-span cycle that is the
    second-encountered member.
    """
    state = {pos: _UNSEEN for pos in kept}

    for start in kept:
        path: List[int] = []
        current: Optional[int] = start
        while current is not None and state[current] == _UNSEEN:
            state[current] = _ON_PATH
            path.append(current)
            parent = parent_of[current]
            if parent is not None and state[parent] == _ON_PATH:
                logger.warning(
                    f"Parent cycle through span {spans[current].span_id!r}, "
                    "treating it as a root"
                )
                parent_of[current] = None
                parent = None
            current = parent
        for pos in path:
            state[pos] = _DONE


def build_span_tree(
    spans: Sequence[Span],
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST,
) -> List[SpanNode]:
    """Build the span forest from a flat span list.

    - Spans without parent_span_id, or whose parent is not in the list, are roots
    - A span that names itself as parent is a root
    - Parent cycles are broken, the span closing the loop becomes a root
    - Duplicate span_ids follow `duplicate_policy`
    - Children and roots are sorted by start_time, ties keep input order

    Never raises for inconsistent hierarchies; bad links only produce more roots.

    Parameters
    ----------
    spans : Sequence[Span]
        Spans of one trace in any order.
    duplicate_policy : DuplicatePolicy
        LAST (default) keeps the last record for a repeated span_id, FIRST the first.

    Returns
    -------
    List[SpanNode]
        Root nodes, each holding its nested children.
    """
    if not spans:
        return []

    index = _dedupe(spans, duplicate_policy)
    kept = sorted(index.values())

    # Arena links: input position -> parent position
    parent_of: Dict[int, Optional[int]] = {}
    for pos in kept:
        span = spans[pos]
        parent_id = span.parent_span_id
        if parent_id and parent_id != span.span_id and parent_id in index:
            parent_of[pos] = index[parent_id]
        else:
            parent_of[pos] = None

    _break_cycles(kept, parent_of, spans)

    children_of: Dict[int, List[int]] = {pos: [] for pos in kept}
    root_positions: List[int] = []
    for pos in kept:
        parent = parent_of[pos]
        if parent is None:
            root_positions.append(pos)
        else:
            children_of[parent].append(pos)

    def by_start(pos: int):
        return spans[pos].start_time

    # sorted() is stable, so equal start times keep input order
    root_positions = sorted(root_positions, key=by_start)
    roots = [SpanNode(span=spans[pos], depth=0) for pos in root_positions]

    stack = list(zip(roots, root_positions))
    while stack:
        node, pos = stack.pop()
        for child_pos in sorted(children_of[pos], key=by_start):
            child = SpanNode(span=spans[child_pos], depth=node.depth + 1)
            node.children.append(child)
            stack.append((child, child_pos))

    return roots


def flatten_tree(roots: List[SpanNode]) -> List[SpanNode]:
    """List a span forest depth-first, parents before their children."""
    result: List[SpanNode] = []
    stack = list(reversed(roots))
    while stack:
        node = stack.pop()
        result.append(node)
        stack.extend(reversed(node.children))
    return result


def tree_rows(roots: List[SpanNode]) -> List[SpanRow]:
    """List a span forest as flat rows, in the order of `flatten_tree`.

    Each row names its parent in the rebuilt tree, which differs from the
    span's own parent_span_id for orphans and broken cycles. Rows serialize
    at any tree depth, nested SpanNode dumps do not.
    """
    rows: List[SpanRow] = []
    stack = [(node, None) for node in reversed(roots)]
    while stack:
        node, parent_id = stack.pop()
        rows.append(SpanRow(span=node.span, depth=node.depth, parent_id=parent_id))
        stack.extend((child, node.span_id) for child in reversed(node.children))
    return rows
