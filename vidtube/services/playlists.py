import logging
from typing import Any, Dict, Optional

from vidtube import config
from vidtube.db.init_collections import check_document
from vidtube.db.store import EntityStore
from vidtube.errors import NotFoundError, ValidationError
from vidtube.ids import ensure_id, new_id, utc_now
from vidtube.services.common import (
    optional_text,
    owner_scoped_delete,
    owner_scoped_update,
    require_text,
)
from vidtube.views import build_one, build_paged_view
from vidtube.views.pagination import Page

logger = logging.getLogger(__name__)


def create_playlist(store: EntityStore, owner_id: str, name: str, description: str) -> Dict[str, Any]:
    ensure_id(owner_id, "user ID")
    now = utc_now()
    playlist = {
        "id": new_id(),
        "owner": owner_id,
        "name": require_text(name, "Name"),
        "description": require_text(description, "Description"),
        "videos": [],
        "created_at": now,
        "updated_at": now,
    }
    check_document("playlists", playlist)
    store.insert_one("playlists", playlist)
    logger.info(f"📃 Playlist {playlist['id']} created by {owner_id}")
    return get_playlist(store, playlist["id"], owner_id)


def get_playlist(store: EntityStore, playlist_id: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """Playlist with its videos; unpublished videos only show for their owner"""
    ensure_id(playlist_id, "playlist ID")
    return build_one(store, "playlist", {"id": playlist_id}, viewer_id, label="Playlist")


def get_user_playlists(store: EntityStore, user_id: str, viewer_id: Optional[str] = None,
                       page: int = 1, limit: int = config.DEFAULT_PAGE_LIMIT) -> Page:
    ensure_id(user_id, "user ID")
    return build_paged_view(store, "playlist", {"owner": user_id}, page=page, limit=limit,
                            viewer_id=viewer_id)


def _require_video(store: EntityStore, video_id: str) -> None:
    if not store.count("videos", {"id": video_id}):
        raise NotFoundError("Video not found")


def add_video_to_playlist(store: EntityStore, playlist_id: str, video_id: str, owner_id: str) -> Dict[str, Any]:
    """Adding a video that is already there leaves the playlist unchanged"""
    ensure_id(playlist_id, "playlist ID")
    ensure_id(video_id, "video ID")
    ensure_id(owner_id, "user ID")
    _require_video(store, video_id)

    owner_scoped_update(store, "playlists", playlist_id, owner_id,
                        {"$addToSet": {"videos": video_id}}, "Playlist")
    return get_playlist(store, playlist_id, owner_id)


def remove_video_from_playlist(store: EntityStore, playlist_id: str, video_id: str, owner_id: str) -> Dict[str, Any]:
    ensure_id(playlist_id, "playlist ID")
    ensure_id(video_id, "video ID")
    ensure_id(owner_id, "user ID")

    owner_scoped_update(store, "playlists", playlist_id, owner_id,
                        {"$pull": {"videos": video_id}}, "Playlist")
    return get_playlist(store, playlist_id, owner_id)


def update_playlist(store: EntityStore, playlist_id: str, owner_id: str, name: Optional[str] = None,
                    description: Optional[str] = None) -> Dict[str, Any]:
    ensure_id(playlist_id, "playlist ID")
    ensure_id(owner_id, "user ID")

    changes: Dict[str, Any] = {}
    name = optional_text(name, "Name")
    description = optional_text(description, "Description")
    if name:
        changes["name"] = name
    if description:
        changes["description"] = description
    if not changes:
        raise ValidationError("Name or description is required")

    owner_scoped_update(store, "playlists", playlist_id, owner_id, {"$set": changes}, "Playlist")
    return get_playlist(store, playlist_id, owner_id)


def delete_playlist(store: EntityStore, playlist_id: str, owner_id: str) -> Dict[str, Any]:
    ensure_id(playlist_id, "playlist ID")
    ensure_id(owner_id, "user ID")
    owner_scoped_delete(store, "playlists", playlist_id, owner_id, "Playlist")
    logger.info(f"🗑️  Playlist {playlist_id} deleted by {owner_id}")
    return {"deleted_playlist_id": playlist_id}
