from __future__ import annotations

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from family_tree.core.errors import NotFoundError, StoreError, ValidationError
from family_tree.models.entities import FamilyMember
from family_tree.schemas.members import FamilyMemberCreate, FamilyMemberUpdate


def list_members(db: Session) -> list[FamilyMember]:
    return list(db.execute(select(FamilyMember).order_by(FamilyMember.id.asc())).scalars().all())


def get_member(db: Session, member_id: int) -> FamilyMember | None:
    return db.get(FamilyMember, member_id)


def require_member(db: Session, member_id: int) -> FamilyMember:
    member = get_member(db, member_id)
    if member is None:
        raise NotFoundError("Family member not found")
    return member


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to {action}: {error}", action=action, error=exc)
        raise StoreError(f"Failed to {action}") from exc


def _require_parent(db: Session, parent_id: int) -> FamilyMember:
    parent = get_member(db, parent_id)
    if parent is None:
        raise ValidationError(f"Parent member {parent_id} does not exist", field="parentId")
    return parent


def is_ancestor(db: Session, candidate_id: int, member_id: int) -> bool:
    """Return True if ``candidate_id`` is on the parent chain starting at ``member_id`` (inclusive)."""
    seen: set[int] = set()
    current: int | None = member_id
    while current is not None and current not in seen:
        if current == candidate_id:
            return True
        seen.add(current)
        row = get_member(db, current)
        if row is None:
            return False
        current = row.parent_id
    return False


def create_member(db: Session, payload: FamilyMemberCreate) -> FamilyMember:
    if payload.parent_id is not None:
        _require_parent(db, payload.parent_id)

    member = FamilyMember(**payload.model_dump())
    db.add(member)
    _commit(db, "create family member")
    db.refresh(member)
    logger.info(
        "Created family member {member_id} ({name}) with parent {parent_id}",
        member_id=member.id,
        name=member.name,
        parent_id=member.parent_id,
    )
    return member


def update_member(db: Session, member_id: int, payload: FamilyMemberUpdate) -> FamilyMember:
    member = require_member(db, member_id)
    changes = payload.model_dump(exclude_unset=True)

    new_parent_id = changes.get("parent_id")
    if new_parent_id is not None and new_parent_id != member.parent_id:
        _require_parent(db, new_parent_id)
        # The new parent must not sit underneath this member.
        if is_ancestor(db, member_id, new_parent_id):
            raise ValidationError("A member cannot be its own ancestor", field="parentId")

    for field, value in changes.items():
        setattr(member, field, value)

    _commit(db, "update family member")
    db.refresh(member)
    logger.info(
        "Updated family member {member_id}: {fields}",
        member_id=member_id,
        fields=sorted(changes),
    )
    return member


def delete_member(db: Session, member_id: int) -> None:
    """Delete a member. Children keep their parent id and surface as roots on the next build."""
    member = require_member(db, member_id)
    db.delete(member)
    _commit(db, "delete family member")
    logger.info("Deleted family member {member_id}", member_id=member_id)


def _require_swap_member(db: Session, member_id: int, field: str) -> FamilyMember:
    member = get_member(db, member_id)
    if member is None:
        raise ValidationError("One or both members not found", field=field)
    return member


def swap_positions(db: Session, id1: int, id2: int) -> tuple[FamilyMember, FamilyMember]:
    """
    Exchange the sibling ``position`` of two members.

    Only ``position`` changes; ``parent_id`` is left alone, so swapping members that
    belong to different parents reorders each one within its own sibling group.
    Both writes share one transaction: if either fails, neither position changes.
    """
    first = _require_swap_member(db, id1, "id1")
    second = _require_swap_member(db, id2, "id2")
    if first.id == second.id:
        return first, second

    first_position, second_position = first.position, second.position
    try:
        first.position = second_position
        db.flush()
        second.position = first_position
        db.flush()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            "Swap of members {id1} and {id2} failed, positions unchanged: {error}",
            id1=id1,
            id2=id2,
            error=exc,
        )
        raise StoreError("Swap failed; positions were left unchanged") from exc

    db.refresh(first)
    db.refresh(second)
    logger.info(
        "Swapped positions of members {id1} and {id2} ({p1} <-> {p2})",
        id1=id1,
        id2=id2,
        p1=first_position,
        p2=second_position,
    )
    return first, second


def add_parent(db: Session, member_id: int, payload: FamilyMemberCreate) -> tuple[FamilyMember, FamilyMember]:
    """Create a new root member and move the root ``member_id`` underneath it."""
    member = require_member(db, member_id)
    if member.parent_id is not None and get_member(db, member.parent_id) is not None:
        raise ValidationError("Member already has a parent", field="parentId")

    parent = FamilyMember(**payload.model_dump(exclude={"parent_id"}))
    try:
        db.add(parent)
        db.flush()
        member.parent_id = parent.id
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to add parent for member {member_id}: {error}", member_id=member_id, error=exc)
        raise StoreError("Failed to add parent") from exc

    db.refresh(parent)
    db.refresh(member)
    logger.info(
        "Added parent {parent_id} ({name}) above member {member_id}",
        parent_id=parent.id,
        name=parent.name,
        member_id=member_id,
    )
    return parent, member
