"""
Video endpoints.

Same read/write rules as articles. Videos additionally carry a like
counter and a YouTube identifier that must be unique across videos.
"""

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from newsroom.api.dependencies import AdminCaller, OptionalCaller, VideoLifecycle
from newsroom.api.v1.content import is_admin, list_params, page_payload, serialize
from newsroom.schemas.common import success_response
from newsroom.schemas.content import VideoCreate, VideoUpdate, VideoView

router = APIRouter()

ListParams = Annotated[Dict[str, Any], Depends(list_params)]


@router.get("")
async def list_videos(params: ListParams, lifecycle: VideoLifecycle, caller: OptionalCaller) -> dict:
    page = await lifecycle.list(params, caller_is_admin=is_admin(caller))
    return success_response(page_payload(VideoView, "videos", page))


@router.get("/featured")
async def featured_videos(lifecycle: VideoLifecycle, limit: int = 5) -> dict:
    videos = await lifecycle.featured(limit)
    return success_response({"videos": serialize(VideoView, videos)})


@router.get("/trending")
async def trending_videos(lifecycle: VideoLifecycle, limit: int = 10) -> dict:
    """Published videos by views, then likes."""
    videos = await lifecycle.trending(limit)
    return success_response({"videos": serialize(VideoView, videos)})


@router.get("/search")
async def search_videos(
    lifecycle: VideoLifecycle,
    q: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> dict:
    result = await lifecycle.list({"search": q or "", "page": page, "limit": limit}, caller_is_admin=False)
    payload = page_payload(VideoView, "videos", result)
    payload["query"] = q
    return success_response(payload)


@router.get("/category/{category}")
async def videos_by_category(
    category: str,
    lifecycle: VideoLifecycle,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> dict:
    result = await lifecycle.list({"category": category, "page": page, "limit": limit}, caller_is_admin=False)
    payload = page_payload(VideoView, "videos", result)
    payload["category"] = category
    return success_response(payload)


@router.get("/{video_id}")
async def get_video(
    video_id: str,
    lifecycle: VideoLifecycle,
    caller: OptionalCaller,
    increment_view: Annotated[bool, Query()] = True,
) -> dict:
    video, related = await lifecycle.view(video_id, is_admin(caller), increment_view)
    return success_response({
        "video": VideoView.model_validate(video),
        "related_videos": serialize(VideoView, related),
    })


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_video(request: VideoCreate, lifecycle: VideoLifecycle, caller: AdminCaller) -> dict:
    """
    Create a video from a YouTube URL.

    Errors:
        400 ValidationError, 400 DuplicateVideo (same derived YouTube id)
    """
    video = await lifecycle.create(request.model_dump(exclude_unset=True), owner_id=caller.user_id)
    return success_response({"video": VideoView.model_validate(video)}, "Video created successfully")


@router.put("/{video_id}")
async def update_video(video_id: str, request: VideoUpdate, lifecycle: VideoLifecycle, caller: AdminCaller) -> dict:
    video = await lifecycle.update(video_id, request.model_dump(exclude_unset=True))
    return success_response({"video": VideoView.model_validate(video)}, "Video updated successfully")


@router.delete("/{video_id}")
async def delete_video(video_id: str, lifecycle: VideoLifecycle, caller: AdminCaller) -> dict:
    await lifecycle.delete(video_id)
    return success_response(message="Video deleted successfully")


@router.post("/{video_id}/share")
async def share_video(video_id: str, lifecycle: VideoLifecycle) -> dict:
    shares = await lifecycle.record_engagement(video_id, "share")
    return success_response({"shares": shares}, "Video shared successfully")


@router.post("/{video_id}/like")
async def like_video(video_id: str, lifecycle: VideoLifecycle) -> dict:
    likes = await lifecycle.record_engagement(video_id, "like")
    return success_response({"likes": likes}, "Video liked successfully")
