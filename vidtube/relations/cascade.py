"""
Cascade cleanup after a parent entity is deleted.

Best effort: every step runs on its own, a failing step is logged and the
next one still runs, and nothing is raised to the caller. Edges left behind
by a failed step show up as null joins in views.
"""

import logging
from typing import Callable, List, Tuple

from vidtube.db.store import EntityStore

logger = logging.getLogger(__name__)

PARENT_KINDS = ("tweet", "comment", "video")


def _video_steps(store: EntityStore, video_id: str) -> List[Tuple[str, Callable[[], int]]]:
    def comment_likes() -> int:
        comment_ids = [c["id"] for c in store.find("comments", {"video": video_id}, {"id": 1})]
        if not comment_ids:
            return 0
        return store.delete_many("likes", {"comment": {"$in": comment_ids}})

    return [
        ("video likes", lambda: store.delete_many("likes", {"video": video_id})),
        # Likes of the comments go before the comments themselves
        ("comment likes", comment_likes),
        ("comments", lambda: store.delete_many("comments", {"video": video_id})),
        ("playlist entries", lambda: store.update_many(
            "playlists", {"videos": video_id}, {"$pull": {"videos": video_id}})),
        ("watch history entries", lambda: store.update_many(
            "users", {"watch_history": video_id}, {"$pull": {"watch_history": video_id}})),
    ]


def cascade_steps(store: EntityStore, parent_kind: str, parent_id: str) -> List[Tuple[str, Callable[[], int]]]:
    if parent_kind == "video":
        return _video_steps(store, parent_id)
    # tweet, comment
    return [("likes", lambda: store.delete_many("likes", {parent_kind: parent_id}))]


def cascade_delete(store: EntityStore, parent_kind: str, parent_id: str) -> None:
    """Remove records that depend on a deleted tweet, comment or video"""
    if parent_kind not in PARENT_KINDS:
        logger.warning(f"⚠️  No cascade defined for {parent_kind}")
        return

    for description, step in cascade_steps(store, parent_kind, parent_id):
        try:
            affected = step()
            logger.info(f"🧹 Cascade {parent_kind} {parent_id}: {description} ({affected})")
        except Exception as e:
            # Don't fail the parent deletion if cleanup fails
            logger.error(f"❌ Cascade {parent_kind} {parent_id}: {description} failed: {e}")
