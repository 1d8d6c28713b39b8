from __future__ import annotations

from pydantic import Field

from family_tree.schemas.members import CamelModel, FamilyMemberResponse


class TreeNodeResponse(FamilyMemberResponse):
    children: list[TreeNodeResponse] = Field(default_factory=list)


class LayoutNodeResponse(CamelModel):
    member: FamilyMemberResponse
    x: float
    y: float
    depth: int
    level: int
    has_children: bool
    is_expanded: bool
    hidden_descendants: int = 0


class LayoutLinkResponse(CamelModel):
    source_id: int
    target_id: int
    source_x: float
    source_y: float
    target_x: float
    target_y: float
    path: str


class LayoutResponse(CamelModel):
    width: float
    height: float
    nodes: list[LayoutNodeResponse] = Field(default_factory=list)
    links: list[LayoutLinkResponse] = Field(default_factory=list)


TreeNodeResponse.model_rebuild()
