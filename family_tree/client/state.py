"""
UI-local state for the tree view as immutable snapshots.

Every user gesture or server reply is an event; ``reduce`` maps the current snapshot
and one event to the next snapshot without side effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal, Union

from family_tree.schemas.members import FamilyMemberResponse


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    variant: Literal["default", "destructive"] = "default"


@dataclass(frozen=True)
class ControllerState:
    members: tuple[FamilyMemberResponse, ...] = ()
    selected_id: int | None = None
    expanded: frozenset[int] = field(default_factory=frozenset)
    drag_source_id: int | None = None
    drag_target_id: int | None = None
    notification: Notification | None = None
    focus_id: int | None = None

    @property
    def selected(self) -> FamilyMemberResponse | None:
        return self.member(self.selected_id)

    def member(self, member_id: int | None) -> FamilyMemberResponse | None:
        if member_id is None:
            return None
        for member in self.members:
            if member.id == member_id:
                return member
        return None


@dataclass(frozen=True)
class MembersLoaded:
    members: tuple[FamilyMemberResponse, ...]


@dataclass(frozen=True)
class SelectMember:
    member_id: int


@dataclass(frozen=True)
class ClearSelection:
    pass


@dataclass(frozen=True)
class ToggleExpanded:
    member_id: int


@dataclass(frozen=True)
class ExpandedRestored:
    expanded: frozenset[int]


@dataclass(frozen=True)
class DragStarted:
    member_id: int


@dataclass(frozen=True)
class DragHovered:
    member_id: int | None


@dataclass(frozen=True)
class DragEnded:
    pass


@dataclass(frozen=True)
class PositionsSwapped:
    """Replace the local copies of two members, e.g. for an optimistic swap or its rollback."""

    first: FamilyMemberResponse
    second: FamilyMemberResponse


@dataclass(frozen=True)
class Notify:
    notification: Notification


@dataclass(frozen=True)
class DismissNotification:
    pass


Event = Union[
    MembersLoaded,
    SelectMember,
    ClearSelection,
    ToggleExpanded,
    ExpandedRestored,
    DragStarted,
    DragHovered,
    DragEnded,
    PositionsSwapped,
    Notify,
    DismissNotification,
]


def reduce(state: ControllerState, event: Event) -> ControllerState:
    if isinstance(event, MembersLoaded):
        members = tuple(event.members)
        ids = {member.id for member in members}
        selected_id = state.selected_id if state.selected_id in ids else None
        return replace(state, members=members, selected_id=selected_id)

    if isinstance(event, SelectMember):
        return replace(state, selected_id=event.member_id)

    if isinstance(event, ClearSelection):
        return replace(state, selected_id=None)

    if isinstance(event, ToggleExpanded):
        if event.member_id in state.expanded:
            # Collapsing keeps the viewport on the collapsed node.
            return replace(state, expanded=state.expanded - {event.member_id}, focus_id=event.member_id)
        return replace(state, expanded=state.expanded | {event.member_id}, focus_id=None)

    if isinstance(event, ExpandedRestored):
        return replace(state, expanded=frozenset(event.expanded))

    if isinstance(event, DragStarted):
        return replace(state, drag_source_id=event.member_id, drag_target_id=None)

    if isinstance(event, DragHovered):
        if state.drag_source_id is None:
            return state
        return replace(state, drag_target_id=event.member_id)

    if isinstance(event, DragEnded):
        return replace(state, drag_source_id=None, drag_target_id=None)

    if isinstance(event, PositionsSwapped):
        updated = {event.first.id: event.first, event.second.id: event.second}
        return replace(state, members=tuple(updated.get(member.id, member) for member in state.members))

    if isinstance(event, Notify):
        return replace(state, notification=event.notification)

    if isinstance(event, DismissNotification):
        return replace(state, notification=None)

    raise TypeError(f"unknown event: {event!r}")
