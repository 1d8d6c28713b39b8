from __future__ import annotations

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from family_tree.models.entities import FamilyMember


def seed_demo_family(db: Session) -> bool:
    """Create two grandparents with one child each when the table is empty."""
    existing = db.execute(select(FamilyMember.id).limit(1)).scalar_one_or_none()
    if existing is not None:
        return False

    grandpa = FamilyMember(name="Grandpa John", phone_number="555-0100", is_deceased=False)
    grandma = FamilyMember(name="Grandma Mary", phone_number="555-0101", is_deceased=False)
    db.add_all([grandpa, grandma])
    db.flush()
    db.add_all(
        [
            FamilyMember(name="Uncle Bob", parent_id=grandpa.id, phone_number="555-0102", is_deceased=False),
            FamilyMember(name="Aunt Alice", parent_id=grandma.id, phone_number="555-0103", is_deceased=True),
        ]
    )
    db.commit()
    logger.info("Seeded demo family")
    return True
