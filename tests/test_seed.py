from sqlalchemy import select

from family_tree.models.entities import FamilyMember
from family_tree.services.seed import seed_demo_family


def test_seed_creates_demo_family_once(db_session):
    assert seed_demo_family(db_session) is True
    assert seed_demo_family(db_session) is False

    members = {m.name: m for m in db_session.execute(select(FamilyMember)).scalars().all()}
    assert sorted(members) == ["Aunt Alice", "Grandma Mary", "Grandpa John", "Uncle Bob"]
    assert members["Uncle Bob"].parent_id == members["Grandpa John"].id
    assert members["Aunt Alice"].parent_id == members["Grandma Mary"].id
    assert members["Aunt Alice"].is_deceased is True
    assert members["Grandpa John"].parent_id is None
