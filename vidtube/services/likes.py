from typing import Optional

from vidtube import config
from vidtube.db.store import EntityStore
from vidtube.ids import ensure_id
from vidtube.relations import ToggleResult, toggle_like
from vidtube.views import build_paged_view
from vidtube.views.pagination import Page


def toggle_video_like(store: EntityStore, user_id: str, video_id: str) -> ToggleResult:
    return toggle_like(store, user_id, "video", video_id)


def toggle_comment_like(store: EntityStore, user_id: str, comment_id: str) -> ToggleResult:
    return toggle_like(store, user_id, "comment", comment_id)


def toggle_tweet_like(store: EntityStore, user_id: str, tweet_id: str) -> ToggleResult:
    return toggle_like(store, user_id, "tweet", tweet_id)


def get_liked_videos(store: EntityStore, user_id: str, page: int = 1,
                     limit: int = config.DEFAULT_PAGE_LIMIT,
                     sort_type: Optional[str] = "desc") -> Page:
    """Video likes of ``user_id``, newest first; deleted or hidden videos join as None"""
    ensure_id(user_id, "user ID")
    filter = {"liked_by": user_id, "video": {"$ne": None}}
    return build_paged_view(store, "like", filter, sort_type=sort_type,
                            page=page, limit=limit, viewer_id=user_id)
