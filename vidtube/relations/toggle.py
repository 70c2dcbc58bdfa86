"""
Toggle relationship manager.

A like or subscription is an edge between an actor and a target. Each toggle
flips the edge: remove it when present, create it when absent. The unique
indexes on (actor, target) are what keep the edge single-valued; the
find-then-write sequence here only picks the common-case branch, and a
duplicate-key error on create is read as "another request created it first".
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError

from vidtube.db.init_collections import check_document
from vidtube.db.store import EntityStore
from vidtube.errors import ValidationError
from vidtube.ids import ensure_id, new_id, utc_now

logger = logging.getLogger(__name__)


class EdgeType(str, Enum):
    LIKE = "like"
    SUBSCRIPTION = "subscription"


class ToggleState(str, Enum):
    CREATED = "created"
    ALREADY_EXISTED = "already_existed"
    REMOVED = "removed"


@dataclass
class ToggleResult:
    state: ToggleState
    edge: Optional[Dict[str, Any]] = None

    @property
    def present(self) -> bool:
        return self.state != ToggleState.REMOVED

    def to_dict(self) -> Dict[str, Any]:
        return {"present": self.present, "state": self.state.value, "edge": self.edge}


EDGE_COLLECTIONS = {
    EdgeType.LIKE: "likes",
    EdgeType.SUBSCRIPTION: "subscriptions",
}

LIKE_TARGETS = ("video", "comment", "tweet")


def edge_key(edge_type: EdgeType, actor_id: str, target_kind: str, target_id: str) -> Dict[str, Any]:
    """The full (actor, target) filter identifying one edge"""
    if edge_type == EdgeType.LIKE:
        if target_kind not in LIKE_TARGETS:
            raise ValidationError(f"Cannot like a {target_kind}")
        # The unused target fields are stored as null so the compound unique
        # index covers every like kind
        key: Dict[str, Any] = {"liked_by": actor_id}
        key.update({kind: None for kind in LIKE_TARGETS})
        key[target_kind] = target_id
        return key

    if target_kind != "channel":
        raise ValidationError(f"Cannot subscribe to a {target_kind}")
    return {"subscriber": actor_id, "channel": target_id}


def toggle_edge(store: EntityStore, edge_type: Any, actor_id: str,
                target_kind: str, target_id: str) -> ToggleResult:
    """Create the edge if absent, remove it if present"""
    try:
        edge_type = EdgeType(edge_type)
    except ValueError:
        raise ValidationError(f"Unknown edge type: {edge_type}") from None

    ensure_id(actor_id, "user ID")
    ensure_id(target_id, f"{target_kind} ID")
    if edge_type == EdgeType.SUBSCRIPTION and actor_id == target_id:
        raise ValidationError("You cannot subscribe to your own channel")

    collection = EDGE_COLLECTIONS[edge_type]
    key = edge_key(edge_type, actor_id, target_kind, target_id)

    existing = store.find_one(collection, key)
    if existing:
        deleted = store.delete_one(collection, {"id": existing["id"]})
        if not deleted:
            logger.info(f"↩️  {edge_type.value} {existing['id']} was already removed by a concurrent toggle")
        return ToggleResult(ToggleState.REMOVED)

    edge = {"id": new_id(), **key, "created_at": utc_now()}
    check_document(collection, edge)
    try:
        store.insert_one(collection, edge)
    except DuplicateKeyError:
        logger.info(f"🔁 {edge_type.value} {key} created concurrently; reporting present")
        return ToggleResult(ToggleState.ALREADY_EXISTED, store.find_one(collection, key))

    return ToggleResult(ToggleState.CREATED, edge)


def toggle_like(store: EntityStore, actor_id: str, target_kind: str, target_id: str) -> ToggleResult:
    return toggle_edge(store, EdgeType.LIKE, actor_id, target_kind, target_id)


def toggle_subscription(store: EntityStore, subscriber_id: str, channel_id: str) -> ToggleResult:
    return toggle_edge(store, EdgeType.SUBSCRIPTION, subscriber_id, "channel", channel_id)
