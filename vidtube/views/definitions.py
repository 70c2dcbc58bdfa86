"""
Named views.

Each definition says which collection a view reads, how rows are enriched for
a given viewer, and which fields the pagination layer may search and sort by.
Enrichment always runs after matching and windowing, so it only touches the
rows that are returned.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from vidtube.views.filters import visibility_filter
from vidtube.views.plan import ViewPlan

# Public-safe user fields; never password_hash, refresh_token or email
OWNER_FIELDS = ("id", "username", "full_name", "avatar")

CHANNEL_FIELDS = (
    "id", "username", "full_name", "avatar", "cover_image",
    "subscriber_count", "subscribed_to_count", "is_subscribed",
    "created_at", "updated_at",
)

VIDEO_CARD_FIELDS = (
    "id", "title", "description", "thumbnail", "video_file", "duration",
    "views", "owner", "owner_details", "created_at",
)


@dataclass(frozen=True)
class ViewDefinition:
    name: str
    collection: str
    enrich: Callable[[Optional[str]], ViewPlan]
    search_fields: Tuple[str, ...] = ()
    sort_fields: Tuple[str, ...] = ("created_at",)
    default_sort: str = "created_at"
    # Set for collections with a publish state; rows outside it are hidden
    # from everyone but their owner
    published_field: Optional[str] = None
    owner_field: str = "owner"


def with_owner(plan: ViewPlan, local_field: str = "owner", as_: str = "owner_details") -> ViewPlan:
    return plan.join_one("users", local_field, "id", as_, fields=OWNER_FIELDS)


def _video_card(viewer_id: Optional[str]) -> ViewPlan:
    plan = ViewPlan().match(visibility_filter(viewer_id))
    return with_owner(plan)


def _liked(plan: ViewPlan, target_field: str, viewer_id: Optional[str]) -> ViewPlan:
    return (plan
            .count("likes", "id", target_field, "like_count")
            .flag("likes", "id", target_field, "liked_by", viewer_id, "is_liked"))


# =============================================================================
# ENRICHMENT PLANS
# =============================================================================

def video_view(viewer_id: Optional[str]) -> ViewPlan:
    return _liked(with_owner(ViewPlan()), "video", viewer_id)


def tweet_view(viewer_id: Optional[str]) -> ViewPlan:
    return _liked(with_owner(ViewPlan()), "tweet", viewer_id)


def comment_view(viewer_id: Optional[str]) -> ViewPlan:
    return _liked(with_owner(ViewPlan()), "comment", viewer_id)


def playlist_view(viewer_id: Optional[str]) -> ViewPlan:
    """Playlist with owner and its videos, each carrying its own owner"""
    plan = with_owner(ViewPlan())
    return plan.join_many("videos", "videos", "id", "videos",
                          fields=VIDEO_CARD_FIELDS, nested=_video_card(viewer_id))


def like_view(viewer_id: Optional[str]) -> ViewPlan:
    plan = with_owner(ViewPlan(), local_field="liked_by", as_="user_details")
    return (plan
            .join_one("videos", "video", "id", "video_details",
                      fields=VIDEO_CARD_FIELDS, nested=_video_card(viewer_id))
            .join_one("comments", "comment", "id", "comment_details",
                      fields=("id", "content", "video", "owner", "created_at"))
            .join_one("tweets", "tweet", "id", "tweet_details",
                      fields=("id", "content", "owner", "created_at")))


def _channel_card(viewer_id: Optional[str]) -> ViewPlan:
    return (ViewPlan()
            .count("subscriptions", "id", "channel", "subscriber_count")
            .flag("subscriptions", "id", "channel", "subscriber", viewer_id, "is_subscribed"))


def subscriber_view(viewer_id: Optional[str]) -> ViewPlan:
    return ViewPlan().join_one("users", "subscriber", "id", "subscriber_details",
                               fields=OWNER_FIELDS + ("subscriber_count", "is_subscribed"),
                               nested=_channel_card(viewer_id))


def subscribed_channel_view(viewer_id: Optional[str]) -> ViewPlan:
    return ViewPlan().join_one("users", "channel", "id", "channel_details",
                               fields=OWNER_FIELDS + ("subscriber_count", "is_subscribed"),
                               nested=_channel_card(viewer_id))


def channel_view(viewer_id: Optional[str]) -> ViewPlan:
    return (_channel_card(viewer_id)
            .count("subscriptions", "id", "subscriber", "subscribed_to_count")
            .project(*CHANNEL_FIELDS))


def watch_history_view(viewer_id: Optional[str]) -> ViewPlan:
    # Only published videos show up in a history, newest first
    nested = with_owner(ViewPlan().match({"is_published": True})).sort(("created_at", -1), ("id", -1))
    return (ViewPlan()
            .join_many("videos", "watch_history", "id", "watch_history",
                       fields=VIDEO_CARD_FIELDS, nested=nested)
            .project("id", "watch_history"))


def channel_video_view(viewer_id: Optional[str]) -> ViewPlan:
    return ViewPlan().count("likes", "id", "video", "like_count")


VIEWS: Dict[str, ViewDefinition] = {
    definition.name: definition
    for definition in (
        ViewDefinition("video", "videos", video_view,
                       search_fields=("title", "description"),
                       sort_fields=("created_at", "views", "title", "duration"),
                       published_field="is_published"),
        ViewDefinition("tweet", "tweets", tweet_view,
                       search_fields=("content",),
                       sort_fields=("created_at", "updated_at")),
        ViewDefinition("comment", "comments", comment_view,
                       search_fields=("content",),
                       sort_fields=("created_at", "updated_at")),
        ViewDefinition("playlist", "playlists", playlist_view,
                       search_fields=("name", "description"),
                       sort_fields=("created_at", "updated_at", "name")),
        ViewDefinition("like", "likes", like_view),
        ViewDefinition("subscriber", "subscriptions", subscriber_view),
        ViewDefinition("subscribed_channel", "subscriptions", subscribed_channel_view),
        ViewDefinition("channel", "users", channel_view,
                       search_fields=("username", "full_name"),
                       sort_fields=("created_at", "username"),
                       owner_field="id"),
        ViewDefinition("watch_history", "users", watch_history_view, owner_field="id"),
        ViewDefinition("channel_video", "videos", channel_video_view,
                       sort_fields=("created_at", "views", "title")),
    )
}
