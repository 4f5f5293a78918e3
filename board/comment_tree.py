"""
Comment tree builder.

Turns the flat comment rows of one article into the ordered forest the
detail view renders:

- roots (no parent, or a parent missing from the input) newest first;
- replies under every node oldest first, to any depth;
- equal timestamps fall back to ascending id so the order is reproducible.

Children are attached from a parent-id index in a single pass, so there is
no recursion and no depth limit.  Input that cannot form a forest (duplicate
ids, a comment that is its own parent, a parent cycle) raises
``CommentTreeError``; nothing is silently dropped.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from board.exceptions import CommentTreeError


@dataclass(frozen=True)
class CommentRecord:
    id: int
    parent_comment_id: int | None
    created_at: datetime
    content: str = ""
    user_id: int | None = None
    created_by: str | None = None

    @classmethod
    def from_comment(cls, comment) -> "CommentRecord":
        """Build a record from a ``board.models.Comment`` row."""
        return cls(
            id=comment.id,
            parent_comment_id=comment.parent_comment_id,
            created_at=comment.created_at,
            content=comment.content,
            user_id=comment.user_id,
            created_by=comment.created_by,
        )


@dataclass
class CommentNode:
    record: CommentRecord
    children: list[CommentNode] = field(default_factory=list)

    @property
    def id(self) -> int:
        return self.record.id


def _timestamp(record: CommentRecord) -> datetime:
    # Rows read back from SQLite come out naive; compare everything as UTC.
    created_at = record.created_at
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=timezone.utc)
    return created_at


def _ordered(nodes: list[CommentNode], newest_first: bool) -> list[CommentNode]:
    # Two stable sorts: id ascending first, then time, so ties keep id order.
    by_id = sorted(nodes, key=lambda n: n.record.id)
    return sorted(by_id, key=lambda n: _timestamp(n.record), reverse=newest_first)


def build_comment_tree(records: Iterable[CommentRecord]) -> list[CommentNode]:
    """
    Return the root nodes of the comment forest for *records*.

    Every record appears exactly once in the result.
    """
    nodes: dict[int, CommentNode] = {}
    for record in records:
        if record.id in nodes:
            raise CommentTreeError(f"Duplicate comment id {record.id}", record.id)
        if record.parent_comment_id is not None and record.parent_comment_id == record.id:
            raise CommentTreeError(f"Comment {record.id} is its own parent", record.id)
        nodes[record.id] = CommentNode(record)

    roots: list[CommentNode] = []
    children_index: dict[int, list[CommentNode]] = defaultdict(list)
    for node in nodes.values():
        parent_id = node.record.parent_comment_id
        if parent_id is None or parent_id not in nodes:
            # Orphans are promoted to the top level.
            roots.append(node)
        else:
            children_index[parent_id].append(node)

    for parent_id, children in children_index.items():
        nodes[parent_id].children = _ordered(children, newest_first=False)

    # Anything unreachable from a root hangs off a parent cycle.
    reached = {node.id for node in _walk(roots)}
    if len(reached) != len(nodes):
        cyclic = sorted(set(nodes) - reached)
        raise CommentTreeError(f"Comments {cyclic} form a parent cycle", cyclic[0])

    return _ordered(roots, newest_first=True)


def _walk(roots: list[CommentNode]) -> Iterable[CommentNode]:
    """Yield every node of the forest, depth first, parents before children."""
    stack = list(reversed(roots))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def subtree_ids(records: Iterable[CommentRecord], root_id: int) -> list[int]:
    """
    Return *root_id* plus the ids of all its descendants in *records*.

    Used for cascading deletes; parent cycles are not followed twice.
    """
    children_index: dict[int, list[int]] = defaultdict(list)
    for record in records:
        if record.parent_comment_id is not None:
            children_index[record.parent_comment_id].append(record.id)

    seen: set[int] = set()
    ordered: list[int] = []
    stack = [root_id]
    while stack:
        comment_id = stack.pop()
        if comment_id in seen:
            continue
        seen.add(comment_id)
        ordered.append(comment_id)
        stack.extend(children_index.get(comment_id, ()))
    return ordered
