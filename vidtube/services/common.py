import logging
from typing import Any, Dict, Optional

from vidtube.db.store import EntityStore
from vidtube.errors import NotFoundError, ValidationError
from vidtube.ids import utc_now

logger = logging.getLogger(__name__)


def require_text(value: Any, label: str) -> str:
    """Stripped non-empty string or ValidationError"""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()


def optional_text(value: Any, label: str) -> Optional[str]:
    if value is None:
        return None
    return require_text(value, label)


def not_found(store: EntityStore, collection: str, entity_id: str, label: str) -> NotFoundError:
    """
    Build the error for an owner-scoped write that matched nothing.

    Only runs on the failure path: one count on ``id`` alone tells a missing
    entity from one owned by someone else. Clients see 404 either way.
    """
    reason = NotFoundError.NOT_OWNER if store.count(collection, {"id": entity_id}) else NotFoundError.MISSING
    logger.info(f"🔒 {label} {entity_id}: write matched nothing ({reason})")
    return NotFoundError(f"{label} not found", reason=reason)


def owner_scoped_update(store: EntityStore, collection: str, entity_id: str, owner_id: str,
                        update: Dict[str, Any], label: str) -> Dict[str, Any]:
    update = dict(update)
    update.setdefault("$set", {})["updated_at"] = utc_now()
    document = store.find_one_and_update(collection, {"id": entity_id, "owner": owner_id}, update)
    if document is None:
        raise not_found(store, collection, entity_id, label)
    return document


def owner_scoped_delete(store: EntityStore, collection: str, entity_id: str, owner_id: str,
                        label: str) -> Dict[str, Any]:
    document = store.find_one_and_delete(collection, {"id": entity_id, "owner": owner_id})
    if document is None:
        raise not_found(store, collection, entity_id, label)
    return document
