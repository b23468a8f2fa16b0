"""Admin REST routes - list, filter, like and delete stories.

Every route here sits behind ``require_admin``; the shared secret is
checked per request, there is no login endpoint.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from story_recorder.api.auth import require_admin
from story_recorder.api.schemas import DeleteResponse, LikeResponse
from story_recorder.models.filters import ALL_CATEGORIES, FilteredView, FilterSpec
from story_recorder.models.story import StoryRecord
from story_recorder.services.admin_service import AdminService

router = APIRouter(
    prefix="/api/admin/stories",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def _get_admin_service(request: Request) -> AdminService:
    svc = getattr(request.app.state, "admin_service", None)
    if svc is None:
        raise HTTPException(status_code=503, detail="Admin service unavailable")
    return svc


AdminServiceDep = Annotated[AdminService, Depends(_get_admin_service)]


@router.get("", response_model=list[StoryRecord])
async def list_stories(svc: AdminServiceDep) -> list[StoryRecord]:
    """All stories, newest first."""
    return await svc.list_stories()


@router.get("/view", response_model=FilteredView)
async def filtered_view(
    svc: AdminServiceDep,
    for_whom: str = Query(default=ALL_CATEGORIES),
    by_whom: list[str] = Query(default=[]),
    only_liked: bool = Query(default=False),
) -> FilteredView:
    """Filtered stories with the facet counts for the filter dialog."""
    if for_whom != ALL_CATEGORIES and for_whom not in svc.categories:
        raise HTTPException(status_code=400, detail=f"Unknown category: {for_whom}")
    spec = FilterSpec(
        for_whom=for_whom,
        by_whom=frozenset(a for a in by_whom if a),
        only_liked=only_liked,
    )
    return await svc.query(spec)


@router.post("/{story_id}/like", response_model=LikeResponse)
async def toggle_like(story_id: str, svc: AdminServiceDep) -> LikeResponse:
    updated = await svc.toggle_like(story_id)
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Story not found: {story_id}")
    return LikeResponse(id=updated.id, liked=updated.liked)


@router.delete("/{story_id}", response_model=DeleteResponse)
async def delete_story(story_id: str, svc: AdminServiceDep) -> DeleteResponse:
    removed = await svc.delete_story(story_id)
    if removed is None:
        raise HTTPException(status_code=404, detail=f"Story not found: {story_id}")
    return DeleteResponse(id=removed.id)
