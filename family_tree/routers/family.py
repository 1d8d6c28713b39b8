from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from family_tree.core.db import get_db
from family_tree.schemas.members import (
    AddParentResponse,
    FamilyMemberCreate,
    FamilyMemberResponse,
    FamilyMemberUpdate,
    SwapRequest,
    SwapResponse,
)
from family_tree.schemas.tree import LayoutLinkResponse, LayoutNodeResponse, LayoutResponse, TreeNodeResponse
from family_tree.services import members as member_service
from family_tree.services.layout import compute_layout, link_path
from family_tree.services.tree import TreeNode, build_forest

router = APIRouter(prefix="/api/family", tags=["family"])


def _member_response(member) -> FamilyMemberResponse:
    return FamilyMemberResponse.model_validate(member, from_attributes=True)


def _tree_responses(forest: list[TreeNode]) -> list[TreeNodeResponse]:
    # Built with an explicit stack; lineages can be deeper than the recursion limit.
    roots: list[TreeNodeResponse] = []
    stack = [(node, roots) for node in reversed(forest)]
    while stack:
        node, siblings = stack.pop()
        response = TreeNodeResponse(**_member_response(node.member).model_dump())
        siblings.append(response)
        stack.extend((child, response.children) for child in reversed(node.children))
    return roots


@router.get("", response_model=list[FamilyMemberResponse])
def list_members(db: Session = Depends(get_db)):
    return [_member_response(item) for item in member_service.list_members(db)]


@router.post("", response_model=FamilyMemberResponse, status_code=201)
def create_member(payload: FamilyMemberCreate, db: Session = Depends(get_db)):
    return _member_response(member_service.create_member(db, payload))


@router.get("/tree", response_model=list[TreeNodeResponse])
def get_tree(db: Session = Depends(get_db)):
    forest = build_forest(member_service.list_members(db))
    return _tree_responses(forest)


@router.get("/layout", response_model=LayoutResponse)
def get_layout(
    expanded: list[int] = Query(default=[]),
    width: float = Query(default=1280.0, gt=0),
    height: float = Query(default=800.0, gt=0),
    db: Session = Depends(get_db),
):
    forest = build_forest(member_service.list_members(db))
    layout = compute_layout(forest, set(expanded), viewport_width=width, viewport_height=height)
    if layout is None:
        return LayoutResponse(width=width, height=height)

    return LayoutResponse(
        width=layout.width,
        height=layout.height,
        nodes=[
            LayoutNodeResponse(
                member=_member_response(node.member),
                x=node.x,
                y=node.y,
                depth=node.depth,
                level=node.level,
                has_children=node.has_children,
                is_expanded=node.is_expanded,
                hidden_descendants=node.hidden_descendants,
            )
            for node in layout.nodes
        ],
        links=[
            LayoutLinkResponse(
                source_id=link.source.id,
                target_id=link.target.id,
                source_x=link.source.x,
                source_y=link.source.y,
                target_x=link.target.x,
                target_y=link.target.y,
                path=link_path(link),
            )
            for link in layout.links
        ],
    )


@router.post("/swap", response_model=SwapResponse)
def swap_members(payload: SwapRequest, db: Session = Depends(get_db)):
    member1, member2 = member_service.swap_positions(db, payload.id1, payload.id2)
    return SwapResponse(member1=_member_response(member1), member2=_member_response(member2))


@router.get("/{member_id}", response_model=FamilyMemberResponse)
def get_member(member_id: int, db: Session = Depends(get_db)):
    return _member_response(member_service.require_member(db, member_id))


@router.put("/{member_id}", response_model=FamilyMemberResponse)
def update_member(member_id: int, payload: FamilyMemberUpdate, db: Session = Depends(get_db)):
    return _member_response(member_service.update_member(db, member_id, payload))


@router.delete("/{member_id}", status_code=204)
def delete_member(member_id: int, db: Session = Depends(get_db)):
    member_service.delete_member(db, member_id)
    return Response(status_code=204)


@router.post("/{member_id}/parent", response_model=AddParentResponse, status_code=201)
def add_parent(member_id: int, payload: FamilyMemberCreate, db: Session = Depends(get_db)):
    parent, member = member_service.add_parent(db, member_id, payload)
    return AddParentResponse(parent=_member_response(parent), member=_member_response(member))
