import pytest

from family_tree.schemas.members import FamilyMemberResponse
from family_tree.services.layout import LayoutConfig, compute_layout, find_node, link_path
from family_tree.services.tree import build_forest, iter_tree


def member(member_id, name, parent_id=None, position=0):
    return FamilyMemberResponse(
        id=member_id,
        name=name,
        parent_id=parent_id,
        mother_name=None,
        phone_number=None,
        is_deceased=False,
        position=position,
    )


FAMILY = [
    member(1, "Grandpa John"),
    member(2, "Grandma Mary", position=1),
    member(3, "Uncle Bob", parent_id=1),
    member(4, "Dad", parent_id=1, position=1),
    member(5, "Aunt Alice", parent_id=2),
    member(6, "Kid One", parent_id=4),
    member(7, "Kid Two", parent_id=4, position=1),
    member(8, "Kid Three", parent_id=4, position=2),
    member(9, "Cousin", parent_id=3),
]
ALL_IDS = {m.id for m in FAMILY}


def visible_ids(layout):
    return {node.id for node in layout.nodes}


def subtree_ids(forest, member_id):
    for node, _ in iter_tree(forest):
        if node.id == member_id:
            return {item.id for item, _ in iter_tree([node])}
    return set()


def test_empty_forest_has_no_layout():
    assert compute_layout([], set()) is None
    assert find_node(None, 1) is None


def test_collapsed_roots_only_show_roots():
    layout = compute_layout(build_forest(FAMILY), set())
    assert visible_ids(layout) == {1, 2}
    assert layout.links == []
    assert all(node.level == 0 for node in layout.nodes)
    assert [node.member.name for node in sorted(layout.nodes, key=lambda n: n.x)] == ["Grandpa John", "Grandma Mary"]


def test_expanded_nodes_reveal_children_and_links():
    layout = compute_layout(build_forest(FAMILY), {1, 4})
    assert visible_ids(layout) == {1, 2, 3, 4, 6, 7, 8}
    assert {(link.source.id, link.target.id) for link in layout.links} == {(1, 3), (1, 4), (4, 6), (4, 7), (4, 8)}

    dad = layout.find(4)
    assert dad.depth == 2
    assert dad.level == 1
    assert dad.has_children is True
    assert dad.is_expanded is True
    assert layout.find(3).has_children is True
    assert layout.find(3).is_expanded is False


def test_collapsing_hides_descendants_but_keeps_node():
    forest = build_forest(FAMILY)
    layout_before = compute_layout(forest, {1, 3, 4})
    assert {3, 4, 6, 7, 8, 9} <= visible_ids(layout_before)

    layout_after = compute_layout(forest, {3, 4})
    descendants = subtree_ids(forest, 1) - {1}
    assert 1 in visible_ids(layout_after)
    assert not descendants & visible_ids(layout_after)
    assert visible_ids(layout_before) - visible_ids(layout_after) == descendants


def test_siblings_follow_builder_order_left_to_right():
    layout = compute_layout(build_forest(FAMILY), ALL_IDS)
    kids = [layout.find(member_id) for member_id in (6, 7, 8)]
    assert kids[0].x < kids[1].x < kids[2].x
    assert kids[0].y == kids[1].y == kids[2].y


def test_parent_is_centered_over_children():
    layout = compute_layout(build_forest(FAMILY), ALL_IDS)
    for parent_id, first_id, last_id in ((4, 6, 8), (1, 3, 4)):
        parent = layout.find(parent_id)
        first, last = layout.find(first_id), layout.find(last_id)
        assert parent.x == pytest.approx((first.x + last.x) / 2)
        assert parent.y < first.y


def test_sibling_subtrees_never_overlap():
    forest = build_forest(FAMILY)
    layout = compute_layout(forest, ALL_IDS)

    def span_by_depth(member_id):
        spans = {}
        for node_id in subtree_ids(forest, member_id):
            node = layout.find(node_id)
            low, high = spans.get(node.depth, (node.x, node.x))
            spans[node.depth] = (min(low, node.x), max(high, node.x))
        return spans

    for node, _ in iter_tree([*forest]):
        siblings = node.children
        for left, right in zip(siblings, siblings[1:]):
            left_spans, right_spans = span_by_depth(left.id), span_by_depth(right.id)
            for depth in left_spans.keys() & right_spans.keys():
                assert left_spans[depth][1] < right_spans[depth][0]

    for left, right in zip(forest, forest[1:]):
        left_spans, right_spans = span_by_depth(left.id), span_by_depth(right.id)
        for depth in left_spans.keys() & right_spans.keys():
            assert left_spans[depth][1] < right_spans[depth][0]


def test_canvas_grows_with_visible_leaves_and_depth():
    config = LayoutConfig(node_width=100.0, level_height=50.0, viewport_padding=0.0)
    small = compute_layout(build_forest(FAMILY), set(), viewport_width=10, viewport_height=10, config=config)
    large = compute_layout(build_forest(FAMILY), ALL_IDS, viewport_width=10, viewport_height=10, config=config)

    assert small.width == 200.0
    assert small.height == 50.0
    # Leaves: Cousin, Kid One, Kid Two, Kid Three, Aunt Alice.
    assert large.width == 500.0
    assert large.height == 150.0
    assert all(0 < node.x < large.width for node in large.nodes)


def test_viewport_sets_minimum_canvas():
    layout = compute_layout(build_forest(FAMILY), set(), viewport_width=1280, viewport_height=800)
    assert layout.width == 1280
    assert layout.height == 700


def test_link_path_connects_card_edges():
    layout = compute_layout(build_forest(FAMILY), {1})
    link = next(link for link in layout.links if link.target.id == 3)
    path = link_path(link)
    assert path.startswith(f"M{link.source.x:.1f},{link.source.y + 40:.1f} C")
    assert path.endswith(f"{link.target.x:.1f},{link.target.y - 60:.1f}")


def test_cyclic_data_still_lays_out():
    members = [member(1, "A", parent_id=2), member(2, "B", parent_id=1)]
    layout = compute_layout(build_forest(members), {1, 2})
    assert visible_ids(layout) == {1, 2}
    assert [(link.source.id, link.target.id) for link in layout.links] == [(1, 2)]


def test_collapsed_node_counts_hidden_descendants():
    layout = compute_layout(build_forest(FAMILY), {1})
    assert layout.find(1).hidden_descendants == 0
    assert layout.find(2).hidden_descendants == 1
    assert layout.find(3).hidden_descendants == 1
    assert layout.find(4).hidden_descendants == 3
    assert layout.find(9) is None

    layout = compute_layout(build_forest(FAMILY), set())
    assert layout.find(1).hidden_descendants == 6


def test_deep_lineage_lays_out_without_recursion():
    depth = 1500
    chain = [member(1, "Founder")] + [member(i, f"Gen {i}", parent_id=i - 1) for i in range(2, depth + 1)]
    layout = compute_layout(build_forest(chain), set(range(1, depth + 1)))

    assert len(layout.nodes) == depth
    assert len(layout.links) == depth - 1
    assert [node.level for node in layout.nodes] == list(range(depth))
    assert len({round(node.x, 6) for node in layout.nodes}) == 1
    assert layout.height == depth * 250
