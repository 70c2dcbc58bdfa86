import logging
from typing import Any, Dict, Optional

from vidtube import config
from vidtube.db.init_collections import check_document
from vidtube.db.store import EntityStore
from vidtube.errors import NotFoundError, ValidationError
from vidtube.ids import ensure_id, new_id, utc_now
from vidtube.relations import cascade_delete
from vidtube.services.common import (
    not_found,
    optional_text,
    owner_scoped_delete,
    owner_scoped_update,
    require_text,
)
from vidtube.views import build_one, build_paged_view
from vidtube.views.filters import combine, visibility_filter
from vidtube.views.pagination import Page

logger = logging.getLogger(__name__)


def publish_video(store: EntityStore, owner_id: str, title: str, description: str, video_file: str,
                  thumbnail: Optional[str] = None, duration: float = 0,
                  is_published: bool = True) -> Dict[str, Any]:
    """Create a video record for an already-uploaded media file"""
    ensure_id(owner_id, "user ID")
    now = utc_now()
    video = {
        "id": new_id(),
        "owner": owner_id,
        "title": require_text(title, "Title"),
        "description": require_text(description, "Description"),
        "video_file": require_text(video_file, "Video file"),
        "thumbnail": thumbnail,
        "duration": duration,
        "views": 0,
        "is_published": is_published,
        "created_at": now,
        "updated_at": now,
    }
    check_document("videos", video)
    store.insert_one("videos", video)

    logger.info(f"🎬 Video {video['id']} published by {owner_id}")
    return get_video(store, video["id"], owner_id)


def get_video(store: EntityStore, video_id: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """Unpublished videos are only visible to their owner"""
    ensure_id(video_id, "video ID")
    filter = combine({"id": video_id}, visibility_filter(viewer_id))
    return build_one(store, "video", filter, viewer_id, label="Video")


def list_videos(store: EntityStore, viewer_id: Optional[str] = None, page: int = 1,
                limit: int = config.DEFAULT_PAGE_LIMIT, query: Optional[str] = None,
                sort_by: Optional[str] = None, sort_type: Optional[str] = "desc",
                owner_id: Optional[str] = None) -> Page:
    filter = None
    if owner_id:
        filter = {"owner": ensure_id(owner_id, "user ID")}
    return build_paged_view(store, "video", filter, sort_by=sort_by, sort_type=sort_type,
                            page=page, limit=limit, viewer_id=viewer_id, search=query)


def update_video(store: EntityStore, video_id: str, owner_id: str, title: Optional[str] = None,
                 description: Optional[str] = None, thumbnail: Optional[str] = None) -> Dict[str, Any]:
    ensure_id(video_id, "video ID")
    ensure_id(owner_id, "user ID")

    changes: Dict[str, Any] = {}
    for field, value in (("title", optional_text(title, "Title")),
                         ("description", optional_text(description, "Description")),
                         ("thumbnail", optional_text(thumbnail, "Thumbnail"))):
        if value is not None:
            changes[field] = value
    if not changes:
        raise ValidationError("Nothing to update")

    owner_scoped_update(store, "videos", video_id, owner_id, {"$set": changes}, "Video")
    return get_video(store, video_id, owner_id)


def delete_video(store: EntityStore, video_id: str, owner_id: str) -> Dict[str, Any]:
    ensure_id(video_id, "video ID")
    ensure_id(owner_id, "user ID")
    owner_scoped_delete(store, "videos", video_id, owner_id, "Video")
    logger.info(f"🗑️  Video {video_id} deleted by {owner_id}")

    cascade_delete(store, "video", video_id)
    return {"deleted_video_id": video_id}


def toggle_publish_status(store: EntityStore, video_id: str, owner_id: str) -> Dict[str, Any]:
    """Flip is_published; the write only lands if the flag is still what was read"""
    ensure_id(video_id, "video ID")
    ensure_id(owner_id, "user ID")

    video = store.find_one("videos", {"id": video_id, "owner": owner_id}, {"is_published": 1})
    if video is None:
        raise not_found(store, "videos", video_id, "Video")

    current = video.get("is_published", True)
    updated = store.find_one_and_update(
        "videos",
        {"id": video_id, "owner": owner_id, "is_published": current},
        {"$set": {"is_published": not current, "updated_at": utc_now()}},
    )
    if updated is None:
        # Someone else flipped it first; report where it landed
        updated = store.find_one("videos", {"id": video_id, "owner": owner_id})
        if updated is None:
            raise not_found(store, "videos", video_id, "Video")

    return {"id": video_id, "is_published": updated["is_published"]}


def record_view(store: EntityStore, video_id: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """Count a view and add the video to the viewer's watch history"""
    ensure_id(video_id, "video ID")
    if viewer_id is not None:
        ensure_id(viewer_id, "user ID")

    filter = combine({"id": video_id}, visibility_filter(viewer_id))
    video = store.find_one_and_update("videos", filter, {"$inc": {"views": 1}})
    if video is None:
        raise NotFoundError("Video not found")

    if viewer_id is not None:
        store.update_one("users", {"id": viewer_id}, {"$addToSet": {"watch_history": video_id}})

    return {"id": video_id, "views": video["views"]}
