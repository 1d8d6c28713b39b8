"""
Layered tree layout for the visible part of the family forest.

All roots hang under a synthetic super-root so separate families sit side by side.
The super-root is laid out but never emitted. Coordinates follow the d3 ``tree()``
convention: x grows to the right across ``width``, y grows downward by depth across
``height``, and both extents scale with what is visible.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field

from family_tree.services.tree import MemberLike, TreeNode, count_descendants


@dataclass(frozen=True)
class LayoutConfig:
    # Horizontal room per visible leaf before the canvas grows past the viewport.
    node_width: float = 220.0

    # Vertical room per generation.
    level_height: float = 250.0

    # Chrome reserved at the top of the viewport (header bar).
    viewport_padding: float = 100.0

    # Where connectors attach relative to a card's center.
    link_source_offset: float = 40.0
    link_target_offset: float = 60.0


DEFAULT_CONFIG = LayoutConfig()


@dataclass
class LayoutNode:
    member: MemberLike
    x: float
    y: float
    depth: int
    has_children: bool
    is_expanded: bool
    # Members hidden under a collapsed node, shown as a badge on its card.
    hidden_descendants: int = 0

    @property
    def id(self) -> int:
        return self.member.id

    @property
    def level(self) -> int:
        # Depth counts the synthetic super-root; the first real generation is level 0.
        return self.depth - 1


@dataclass
class LayoutLink:
    source: LayoutNode
    target: LayoutNode


@dataclass
class TreeLayout:
    nodes: list[LayoutNode]
    links: list[LayoutLink]
    width: float
    height: float

    def find(self, member_id: int) -> LayoutNode | None:
        return find_node(self, member_id)


@dataclass
class _Visible:
    node: TreeNode | None
    depth: int
    parent: _Visible | None = None
    children: list[_Visible] = field(default_factory=list)
    offset: float = 0.0
    x: float = 0.0


def _filter_visible(roots: Sequence[TreeNode], expanded: Collection[int]) -> _Visible:
    super_root = _Visible(node=None, depth=0)
    stack: list[tuple[_Visible, Sequence[TreeNode]]] = [(super_root, roots)]
    seen: set[int] = set()
    while stack:
        parent, children = stack.pop()
        for child in children:
            if child.id in seen:
                continue
            seen.add(child.id)
            visible = _Visible(node=child, depth=parent.depth + 1, parent=parent)
            parent.children.append(visible)
            if child.id in expanded:
                stack.append((visible, child.children))
    return super_root


def _separation(a: _Visible, b: _Visible) -> float:
    return 1.0 if a.parent is b.parent else 2.0


def _preorder(root: _Visible) -> list[_Visible]:
    ordered: list[_Visible] = []
    stack = [root]
    while stack:
        v = stack.pop()
        ordered.append(v)
        stack.extend(reversed(v.children))
    return ordered


def _place(ordered: list[_Visible]) -> None:
    """
    Set each node's offset from its parent.

    ``ordered`` is pre-order, so walking it backwards finishes every child before its
    parent. Contours are the per-depth left/right extents of a subtree relative to its root.
    """
    contours: dict[int, tuple[list[float], list[float]]] = {}
    for v in reversed(ordered):
        if not v.children:
            contours[id(v)] = ([0.0], [0.0])
            continue

        child_contours = [contours.pop(id(child)) for child in v.children]
        left, right = child_contours[0]
        offsets = [0.0]
        for child_left, child_right in child_contours[1:]:
            # Depth 0 of each contour is a sibling pair; deeper levels are cousins.
            shift = max(
                right[level] - child_left[level] + (1.0 if level == 0 else 2.0)
                for level in range(min(len(right), len(child_left)))
            )
            offsets.append(shift)
            for level, value in enumerate(child_right):
                if level < len(right):
                    right[level] = value + shift
                else:
                    right.append(value + shift)
            for level, value in enumerate(child_left):
                if level >= len(left):
                    left.append(value + shift)

        middle = (offsets[0] + offsets[-1]) / 2.0
        for child, offset in zip(v.children, offsets):
            child.offset = offset - middle
        contours[id(v)] = (
            [0.0] + [value - middle for value in left],
            [0.0] + [value - middle for value in right],
        )


def _assign_x(ordered: list[_Visible]) -> None:
    for v in ordered:
        if v.parent is not None:
            v.x = v.parent.x + v.offset


def compute_layout(
    roots: Sequence[TreeNode],
    expanded: Collection[int],
    *,
    viewport_width: float = 1280.0,
    viewport_height: float = 800.0,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> TreeLayout | None:
    """
    Position every visible member of ``roots``.

    A member's children are visible only when its id is in ``expanded``. Returns
    ``None`` for an empty forest.
    """
    if not roots:
        return None

    super_root = _filter_visible(roots, set(expanded))
    ordered = _preorder(super_root)
    _place(ordered)
    _assign_x(ordered)

    leaf_count = sum(1 for v in ordered if not v.children)
    tree_height = max(v.depth for v in ordered)
    width = max(viewport_width, leaf_count * config.node_width)
    height = max(viewport_height - config.viewport_padding, tree_height * config.level_height)

    left = min(ordered, key=lambda v: v.x)
    right = max(ordered, key=lambda v: v.x)
    half = 1.0 if left is right else _separation(left, right) / 2.0
    tx = half - left.x
    kx = width / (right.x + half + tx)
    ky = height / (tree_height or 1)

    placed: dict[int, LayoutNode] = {}
    nodes: list[LayoutNode] = []
    links: list[LayoutLink] = []
    for v in ordered:
        if v.node is None:
            continue
        layout_node = LayoutNode(
            member=v.node.member,
            x=(v.x + tx) * kx,
            y=v.depth * ky,
            depth=v.depth,
            has_children=bool(v.node.children),
            is_expanded=v.node.id in expanded,
            hidden_descendants=0 if v.children else count_descendants(v.node),
        )
        placed[v.node.id] = layout_node
        nodes.append(layout_node)
        if v.parent is not None and v.parent.node is not None:
            links.append(LayoutLink(source=placed[v.parent.node.id], target=layout_node))

    return TreeLayout(nodes=nodes, links=links, width=width, height=height)


def find_node(layout: TreeLayout | None, member_id: int) -> LayoutNode | None:
    if layout is None:
        return None
    for node in layout.nodes:
        if node.id == member_id:
            return node
    return None


def link_path(link: LayoutLink, config: LayoutConfig = DEFAULT_CONFIG) -> str:
    """SVG cubic connector from the bottom of the parent card to the top of the child card."""
    sx, sy = link.source.x, link.source.y
    tx, ty = link.target.x, link.target.y
    mid = (sy + ty) / 2.0
    return (
        f"M{sx:.1f},{sy + config.link_source_offset:.1f} "
        f"C{sx:.1f},{mid:.1f} {tx:.1f},{mid:.1f} {tx:.1f},{ty - config.link_target_offset:.1f}"
    )
