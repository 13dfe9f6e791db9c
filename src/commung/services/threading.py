"""Assemble flat reply rows into trees and flatten them for display.

Rows arrive flat (``in_reply_to_id``/``depth``). Parents that are missing or
filtered out orphan their subtree, and a node is emitted at most once even if
the data contains a cycle.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass
class ReplyNode(Generic[T]):
    """A reply together with its children, ordered by creation time."""

    item: T
    id: str
    parent_id: str | None
    replies: list[ReplyNode[T]] = field(default_factory=list)


def build_reply_tree(
    rows: Iterable[T],
    *,
    get_id: Callable[[T], str] = lambda row: row.id,  # type: ignore[attr-defined]
    get_parent_id: Callable[[T], str | None] = lambda row: row.in_reply_to_id,  # type: ignore[attr-defined]
    root_parent_id: str | None = None,
) -> list[ReplyNode[T]]:
    """Return the root nodes of the tree formed by ``rows``.

    Nodes whose parent is ``root_parent_id`` are roots. Nodes pointing at a
    parent that is absent from ``rows`` are dropped together with their
    descendants. Input order is preserved among siblings.
    """
    nodes: dict[str, ReplyNode[T]] = {}
    for row in rows:
        row_id = get_id(row)
        if row_id in nodes:
            continue
        nodes[row_id] = ReplyNode(item=row, id=row_id, parent_id=get_parent_id(row))

    roots: list[ReplyNode[T]] = []
    for node in nodes.values():
        if node.parent_id == root_parent_id or node.parent_id is None:
            roots.append(node)
            continue
        parent = nodes.get(node.parent_id)
        if parent is not None and parent is not node:
            parent.replies.append(node)
    return roots


def flatten_for_display(
    roots: Iterable[ReplyNode[T]],
    max_indent: int,
) -> Iterator[tuple[ReplyNode[T], int]]:
    """Yield ``(node, indent)`` depth-first with ``indent`` capped at ``max_indent``.

    Only nodes reachable from ``roots`` are produced, so a cycle that never
    touches a root is invisible and one that does is cut at the repeat.
    """
    cap = max(0, max_indent)
    seen: set[str] = set()
    stack: list[tuple[ReplyNode[T], int]] = [(node, 0) for node in reversed(list(roots))]
    while stack:
        node, depth = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        yield node, min(depth, cap)
        for child in reversed(node.replies):
            stack.append((child, depth + 1))


def serialize_tree(
    roots: Iterable[ReplyNode[T]],
    serialize: Callable[[T], dict[str, Any]],
    max_indent: int,
) -> list[dict[str, Any]]:
    """Render a tree as nested dicts with ``replies`` and a capped ``indent``."""

    seen: set[str] = set()

    def render(node: ReplyNode[T], depth: int) -> dict[str, Any]:
        seen.add(node.id)
        payload = serialize(node.item)
        payload["indent"] = min(depth, max(0, max_indent))
        payload["replies"] = [
            render(child, depth + 1) for child in node.replies if child.id not in seen
        ]
        return payload

    return [render(root, 0) for root in roots if root.id not in seen]
