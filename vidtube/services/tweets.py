import logging
from typing import Any, Dict, Optional

from vidtube import config
from vidtube.db.init_collections import check_document
from vidtube.db.store import EntityStore
from vidtube.ids import ensure_id, new_id, utc_now
from vidtube.relations import cascade_delete
from vidtube.services.common import owner_scoped_delete, owner_scoped_update, require_text
from vidtube.views import build_one, build_paged_view
from vidtube.views.pagination import Page

logger = logging.getLogger(__name__)


def create_tweet(store: EntityStore, owner_id: str, content: str) -> Dict[str, Any]:
    ensure_id(owner_id, "user ID")
    now = utc_now()
    tweet = {
        "id": new_id(),
        "owner": owner_id,
        "content": require_text(content, "Content"),
        "created_at": now,
        "updated_at": now,
    }
    check_document("tweets", tweet)
    store.insert_one("tweets", tweet)
    return get_tweet(store, tweet["id"], owner_id)


def get_tweet(store: EntityStore, tweet_id: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    ensure_id(tweet_id, "tweet ID")
    return build_one(store, "tweet", {"id": tweet_id}, viewer_id, label="Tweet")


def list_user_tweets(store: EntityStore, user_id: str, viewer_id: Optional[str] = None,
                     page: int = 1, limit: int = config.DEFAULT_PAGE_LIMIT,
                     sort_type: Optional[str] = "desc") -> Page:
    ensure_id(user_id, "user ID")
    return build_paged_view(store, "tweet", {"owner": user_id}, sort_type=sort_type,
                            page=page, limit=limit, viewer_id=viewer_id)


def update_tweet(store: EntityStore, tweet_id: str, owner_id: str, content: str) -> Dict[str, Any]:
    ensure_id(tweet_id, "tweet ID")
    ensure_id(owner_id, "user ID")
    content = require_text(content, "Content")
    owner_scoped_update(store, "tweets", tweet_id, owner_id, {"$set": {"content": content}}, "Tweet")
    return get_tweet(store, tweet_id, owner_id)


def delete_tweet(store: EntityStore, tweet_id: str, owner_id: str) -> Dict[str, Any]:
    ensure_id(tweet_id, "tweet ID")
    ensure_id(owner_id, "user ID")
    owner_scoped_delete(store, "tweets", tweet_id, owner_id, "Tweet")
    logger.info(f"🗑️  Tweet {tweet_id} deleted by {owner_id}")

    cascade_delete(store, "tweet", tweet_id)
    return {"deleted_tweet_id": tweet_id}
