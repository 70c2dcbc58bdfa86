from typing import Optional

from vidtube import config
from vidtube.db.store import EntityStore
from vidtube.errors import NotFoundError
from vidtube.ids import ensure_id
from vidtube.relations import ToggleResult
from vidtube.relations import toggle_subscription as toggle_subscription_edge
from vidtube.views import build_paged_view
from vidtube.views.pagination import Page


def toggle_subscription(store: EntityStore, subscriber_id: str, channel_id: str) -> ToggleResult:
    """Subscribe to a channel, or unsubscribe when already subscribed"""
    ensure_id(subscriber_id, "user ID")
    ensure_id(channel_id, "channel ID")
    if subscriber_id != channel_id and not store.count("users", {"id": channel_id}):
        raise NotFoundError("Channel not found")
    return toggle_subscription_edge(store, subscriber_id, channel_id)


def get_channel_subscribers(store: EntityStore, channel_id: str, viewer_id: Optional[str] = None,
                            page: int = 1, limit: int = config.DEFAULT_PAGE_LIMIT) -> Page:
    ensure_id(channel_id, "channel ID")
    return build_paged_view(store, "subscriber", {"channel": channel_id},
                            page=page, limit=limit, viewer_id=viewer_id)


def get_subscribed_channels(store: EntityStore, subscriber_id: str, viewer_id: Optional[str] = None,
                            page: int = 1, limit: int = config.DEFAULT_PAGE_LIMIT) -> Page:
    ensure_id(subscriber_id, "subscriber ID")
    return build_paged_view(store, "subscribed_channel", {"subscriber": subscriber_id},
                            page=page, limit=limit, viewer_id=viewer_id)
