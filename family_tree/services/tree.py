"""Rebuild the family forest from flat parent-pointer records."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Protocol


class MemberLike(Protocol):
    id: int
    name: str
    parent_id: int | None
    position: int


@dataclass
class TreeNode:
    member: MemberLike
    children: list[TreeNode] = field(default_factory=list)

    @property
    def id(self) -> int:
        return self.member.id


def sibling_sort_key(node: TreeNode) -> tuple[int, str, str, int]:
    # Position, then name ignoring case as a people-facing list reads; exact name and id
    # keep the order total.
    name = node.member.name
    return (node.member.position, name.casefold(), name, node.member.id)


def find_cycle_breaks(members: Iterable[MemberLike]) -> set[int]:
    """
    Return the ids whose parent link must be ignored to make the forest acyclic.

    Each parent cycle (a self reference is a cycle of one) contributes its lowest id.
    """
    parent_of = {member.id: member.parent_id for member in members}
    breaks: set[int] = set()
    resolved: set[int] = set()

    for start in sorted(parent_of):
        path: list[int] = []
        index_on_path: dict[int, int] = {}
        current: int | None = start
        while current is not None and current in parent_of and current not in resolved:
            if current in index_on_path:
                breaks.add(min(path[index_on_path[current]:]))
                break
            index_on_path[current] = len(path)
            path.append(current)
            current = parent_of[current]
        resolved.update(path)

    return breaks


def build_forest(members: Sequence[MemberLike]) -> list[TreeNode]:
    """
    Build the ordered forest for ``members``.

    Members without a parent, with a parent id that is not in the list, or that close
    a parent cycle become roots. Every member appears exactly once.
    """
    nodes: dict[int, TreeNode] = {member.id: TreeNode(member=member) for member in members}
    breaks = find_cycle_breaks(members)

    roots: list[TreeNode] = []
    for node in nodes.values():
        parent_id = node.member.parent_id
        if parent_id is not None and parent_id in nodes and node.id not in breaks:
            nodes[parent_id].children.append(node)
        else:
            roots.append(node)

    for node in nodes.values():
        node.children.sort(key=sibling_sort_key)
    roots.sort(key=sibling_sort_key)
    return roots


def iter_tree(roots: Iterable[TreeNode]) -> Iterator[tuple[TreeNode, int]]:
    """Pre-order walk yielding ``(node, depth)`` with roots at depth 0."""
    stack = [(node, 0) for node in reversed(list(roots))]
    visited: set[int] = set()
    while stack:
        node, depth = stack.pop()
        if node.id in visited:
            continue
        visited.add(node.id)
        yield node, depth
        stack.extend((child, depth + 1) for child in reversed(node.children))


def count_descendants(node: TreeNode) -> int:
    return sum(1 for _ in iter_tree(node.children))
