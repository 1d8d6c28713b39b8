from family_tree.models.entities import FamilyMember


def test_tree_nests_children_in_sibling_order(client, seeded_family):
    grandpa = seeded_family["grandpa"]
    client.post("/api/family", json={"name": "Aaron", "parentId": grandpa["id"], "position": 1})

    response = client.get("/api/family/tree")
    assert response.status_code == 200
    tree = response.json()
    assert [node["name"] for node in tree] == ["Grandpa John", "Grandma Mary"]
    assert [child["name"] for child in tree[0]["children"]] == ["Uncle Bob", "Aaron"]
    assert tree[0]["children"][0]["parentId"] == grandpa["id"]
    assert tree[1]["children"][0]["isDeceased"] is False


def test_tree_of_a_long_lineage(client, db_session):
    parent_id = None
    for generation in range(60):
        member = FamilyMember(name=f"Gen {generation}", parent_id=parent_id)
        db_session.add(member)
        db_session.flush()
        parent_id = member.id
    db_session.commit()

    (node,) = client.get("/api/family/tree").json()
    depth = 0
    while node["children"]:
        (node,) = node["children"]
        depth += 1
    assert depth == 59
    assert node["name"] == "Gen 59"


def test_layout_respects_expanded_query(client, seeded_family):
    grandpa, bob = seeded_family["grandpa"], seeded_family["bob"]

    collapsed = client.get("/api/family/layout").json()
    assert [node["member"]["name"] for node in collapsed["nodes"]] == ["Grandpa John", "Grandma Mary"]
    assert collapsed["links"] == []
    assert collapsed["width"] == 1280
    assert collapsed["height"] == 700
    assert [node["hiddenDescendants"] for node in collapsed["nodes"]] == [1, 1]

    expanded = client.get(f"/api/family/layout?expanded={grandpa['id']}&width=100&height=100").json()
    names = {node["member"]["name"] for node in expanded["nodes"]}
    assert names == {"Grandpa John", "Grandma Mary", "Uncle Bob"}
    assert expanded["width"] == 440
    assert expanded["height"] == 500
    (link,) = expanded["links"]
    assert link["sourceId"] == grandpa["id"]
    assert link["targetId"] == bob["id"]
    assert link["path"].startswith("M")

    by_name = {node["member"]["name"]: node for node in expanded["nodes"]}
    assert by_name["Grandpa John"]["isExpanded"] is True
    assert by_name["Grandpa John"]["hiddenDescendants"] == 0
    assert by_name["Grandpa John"]["level"] == 0
    assert by_name["Uncle Bob"]["level"] == 1
    assert by_name["Grandma Mary"]["hasChildren"] is True
    assert by_name["Grandma Mary"]["isExpanded"] is False


def test_layout_of_empty_family(client):
    body = client.get("/api/family/layout").json()
    assert body == {"width": 1280.0, "height": 800.0, "nodes": [], "links": []}
