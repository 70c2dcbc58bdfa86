import logging
from typing import Any, Dict, Optional

from vidtube import config
from vidtube.db.init_collections import check_document
from vidtube.db.store import EntityStore
from vidtube.errors import NotFoundError
from vidtube.ids import ensure_id, new_id, utc_now
from vidtube.relations import cascade_delete
from vidtube.services.common import owner_scoped_delete, owner_scoped_update, require_text
from vidtube.views import build_one, build_paged_view
from vidtube.views.filters import combine, visibility_filter
from vidtube.views.pagination import Page

logger = logging.getLogger(__name__)


def list_video_comments(store: EntityStore, video_id: str, viewer_id: Optional[str] = None,
                        page: int = 1, limit: int = config.DEFAULT_PAGE_LIMIT,
                        sort_type: Optional[str] = "desc") -> Page:
    ensure_id(video_id, "video ID")
    return build_paged_view(store, "comment", {"video": video_id}, sort_type=sort_type,
                            page=page, limit=limit, viewer_id=viewer_id)


def add_comment(store: EntityStore, video_id: str, owner_id: str, content: str) -> Dict[str, Any]:
    """Comment on a video the commenter can see"""
    ensure_id(video_id, "video ID")
    ensure_id(owner_id, "user ID")
    content = require_text(content, "Content")

    if not store.count("videos", combine({"id": video_id}, visibility_filter(owner_id))):
        raise NotFoundError("Video not found")

    now = utc_now()
    comment = {
        "id": new_id(),
        "owner": owner_id,
        "video": video_id,
        "content": content,
        "created_at": now,
        "updated_at": now,
    }
    check_document("comments", comment)
    store.insert_one("comments", comment)
    return build_one(store, "comment", {"id": comment["id"]}, owner_id, label="Comment")


def update_comment(store: EntityStore, comment_id: str, owner_id: str, content: str) -> Dict[str, Any]:
    ensure_id(comment_id, "comment ID")
    ensure_id(owner_id, "user ID")
    content = require_text(content, "Content")
    owner_scoped_update(store, "comments", comment_id, owner_id, {"$set": {"content": content}}, "Comment")
    return build_one(store, "comment", {"id": comment_id}, owner_id, label="Comment")


def delete_comment(store: EntityStore, comment_id: str, owner_id: str) -> Dict[str, Any]:
    ensure_id(comment_id, "comment ID")
    ensure_id(owner_id, "user ID")
    owner_scoped_delete(store, "comments", comment_id, owner_id, "Comment")
    logger.info(f"🗑️  Comment {comment_id} deleted by {owner_id}")

    cascade_delete(store, "comment", comment_id)
    return {"deleted_comment_id": comment_id}
