from typing import Any, Dict, Optional

from vidtube import config
from vidtube.db.store import EntityStore
from vidtube.ids import ensure_id
from vidtube.views import build_paged_view, build_view
from vidtube.views.pagination import Page


def get_channel_stats(store: EntityStore, owner_id: str) -> Dict[str, Any]:
    """Totals across every video of the channel, published or not"""
    ensure_id(owner_id, "user ID")
    videos = build_view(store, "channel_video", {"owner": owner_id}, viewer_id=owner_id)
    return {
        "total_videos": len(videos),
        "total_views": sum(v.get("views", 0) for v in videos),
        "total_likes": sum(v.get("like_count", 0) for v in videos),
        "total_subscribers": store.count("subscriptions", {"channel": owner_id}),
    }


def get_channel_videos(store: EntityStore, owner_id: str, page: int = 1,
                       limit: int = config.DEFAULT_PAGE_LIMIT, sort_by: Optional[str] = None,
                       sort_type: Optional[str] = "desc") -> Page:
    ensure_id(owner_id, "user ID")
    return build_paged_view(store, "channel_video", {"owner": owner_id}, sort_by=sort_by,
                            sort_type=sort_type, page=page, limit=limit, viewer_id=owner_id)
