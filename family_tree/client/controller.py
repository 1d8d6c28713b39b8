from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loguru import logger

from family_tree.client.api import ApiError, FamilyApiClient, StaleResponseError
from family_tree.client.cache import ExpansionCache
from family_tree.client.state import (
    ClearSelection,
    ControllerState,
    DismissNotification,
    DragEnded,
    DragHovered,
    DragStarted,
    Event,
    ExpandedRestored,
    MembersLoaded,
    Notification,
    Notify,
    PositionsSwapped,
    SelectMember,
    ToggleExpanded,
    reduce,
)
from family_tree.schemas.members import FamilyMemberResponse
from family_tree.services.layout import DEFAULT_CONFIG, LayoutConfig, TreeLayout, compute_layout, find_node
from family_tree.services.tree import build_forest

Confirm = Callable[[FamilyMemberResponse], bool]


class InteractionController:
    """
    Owns the tree view: current state snapshot, the latest layout, and the calls that
    turn gestures into API requests.

    Every change to the member list or the expanded set recomputes the full layout.
    """

    def __init__(
        self,
        api: FamilyApiClient,
        cache: ExpansionCache | None = None,
        *,
        optimistic_swap: bool = False,
        viewport_width: float = 1280.0,
        viewport_height: float = 800.0,
        layout_config: LayoutConfig = DEFAULT_CONFIG,
    ) -> None:
        self.api = api
        self.cache = cache
        self.optimistic_swap = optimistic_swap
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.layout_config = layout_config
        self.state = ControllerState()
        self.layout: TreeLayout | None = None
        if cache is not None:
            self.dispatch(ExpandedRestored(frozenset(cache.load())))

    def dispatch(self, event: Event) -> ControllerState:
        previous = self.state
        self.state = reduce(previous, event)
        if self.state.members != previous.members or self.state.expanded != previous.expanded:
            self.relayout()
        return self.state

    def relayout(self) -> TreeLayout | None:
        forest = build_forest(list(self.state.members))
        self.layout = compute_layout(
            forest,
            self.state.expanded,
            viewport_width=self.viewport_width,
            viewport_height=self.viewport_height,
            config=self.layout_config,
        )
        return self.layout

    def _fail(self, title: str, exc: ApiError) -> None:
        self.dispatch(Notify(Notification(title=title, message=exc.message, variant="destructive")))

    # -- loading -------------------------------------------------------------

    def refresh(self) -> bool:
        """Re-fetch all members. Returns False when the result was discarded or failed."""
        try:
            members = self.api.list_members()
        except StaleResponseError:
            logger.debug("Discarding superseded member list")
            return False
        except ApiError as exc:
            self._fail("Could not load family tree", exc)
            return False
        self.dispatch(MembersLoaded(tuple(members)))
        return True

    # -- selection and expansion --------------------------------------------

    def select(self, member_id: int) -> None:
        self.dispatch(SelectMember(member_id))

    def clear_selection(self) -> None:
        self.dispatch(ClearSelection())

    def dismiss_notification(self) -> None:
        self.dispatch(DismissNotification())

    def toggle_expanded(self, member_id: int) -> tuple[float, float] | None:
        """
        Expand or collapse ``member_id`` and return the point to recenter the viewport
        on, which is the node's new position after collapsing and ``None`` otherwise.
        """
        self.dispatch(ToggleExpanded(member_id))
        if self.cache is not None:
            self.cache.save(self.state.expanded)
        if self.state.focus_id is None:
            return None
        node = find_node(self.layout, self.state.focus_id)
        if node is None:
            return None
        return node.x, node.y

    # -- drag to reorder -----------------------------------------------------

    def drag_start(self, member_id: int) -> None:
        self.dispatch(DragStarted(member_id))

    def drag_over(self, member_id: int | None) -> None:
        self.dispatch(DragHovered(member_id))

    def drag_cancel(self) -> None:
        self.dispatch(DragEnded())

    def drop(self, target_id: int) -> bool:
        """Swap the dragged member with ``target_id``. Drag state is cleared either way."""
        source_id = self.state.drag_source_id
        try:
            if source_id is None or source_id == target_id:
                return False
            return self._swap(source_id, target_id)
        finally:
            self.dispatch(DragEnded())

    def _swap(self, source_id: int, target_id: int) -> bool:
        source = self.state.member(source_id)
        target = self.state.member(target_id)
        optimistic = self.optimistic_swap and source is not None and target is not None
        if optimistic:
            self.dispatch(
                PositionsSwapped(
                    source.model_copy(update={"position": target.position}),
                    target.model_copy(update={"position": source.position}),
                )
            )

        try:
            self.api.swap_members(source_id, target_id)
        except ApiError as exc:
            if optimistic:
                # Put back the exact prior copies instead of waiting for a refetch.
                self.dispatch(PositionsSwapped(source, target))
            self._fail("Could not reorder", exc)
            return False

        self.refresh()
        return True

    # -- editing -------------------------------------------------------------

    def _mutate(self, title: str, call: Callable[[], Any]) -> Any:
        try:
            result = call()
        except ApiError as exc:
            self._fail(title, exc)
            return None
        self.refresh()
        return result

    def create_root(self, name: str, **fields: Any) -> FamilyMemberResponse | None:
        return self._mutate(
            "Could not add member",
            lambda: self.api.create_member(name=name, parent_id=None, **fields),
        )

    def add_child(self, parent_id: int, name: str, **fields: Any) -> FamilyMemberResponse | None:
        child = self._mutate(
            "Could not add child",
            lambda: self.api.create_member(name=name, parent_id=parent_id, **fields),
        )
        if child is not None and parent_id not in self.state.expanded:
            self.toggle_expanded(parent_id)
        return child

    def add_parent(self, member_id: int, name: str, **fields: Any) -> FamilyMemberResponse | None:
        result = self._mutate(
            "Could not add parent",
            lambda: self.api.add_parent(member_id, name=name, **fields),
        )
        if result is None:
            return None
        parent, _ = result
        if parent.id not in self.state.expanded:
            self.toggle_expanded(parent.id)
        return parent

    def update(self, member_id: int, **fields: Any) -> FamilyMemberResponse | None:
        return self._mutate("Could not update member", lambda: self.api.update_member(member_id, **fields))

    def delete(self, member_id: int, confirm: Confirm) -> bool:
        """Delete ``member_id`` only if ``confirm`` approves it."""
        member = self.state.member(member_id)
        if member is None or not confirm(member):
            return False

        try:
            self.api.delete_member(member_id)
        except ApiError as exc:
            self._fail("Could not remove member", exc)
            return False

        if self.state.selected_id == member_id:
            self.dispatch(ClearSelection())
        self.refresh()
        return True
