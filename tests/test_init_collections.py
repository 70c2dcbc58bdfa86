import pytest
from pymongo.errors import DuplicateKeyError

from vidtube.db.init_collections import (
    COLLECTIONS_CONFIG,
    SAMPLE_DATA_TEMPLATES,
    check_document,
    init_collections,
    validate_document,
    validate_sample_data,
)
from vidtube.db.memory_store import MemoryStore
from vidtube.errors import ValidationError


def test_sample_data_matches_schemas():
    assert validate_sample_data()


def test_init_creates_unique_edge_indexes():
    store = MemoryStore()

    assert init_collections(store, insert_samples=True)

    likes = {tuple(idx["key"]) for idx in store.list_indexes("likes") if idx["unique"]}
    subscriptions = {tuple(idx["key"]) for idx in store.list_indexes("subscriptions") if idx["unique"]}
    assert ("liked_by", "video", "comment", "tweet") in likes
    assert ("subscriber", "channel") in subscriptions
    assert store.count("users") == len(SAMPLE_DATA_TEMPLATES["users"])
    assert set(COLLECTIONS_CONFIG) <= set(store.list_collection_names())


def test_init_is_repeatable():
    store = MemoryStore()
    init_collections(store, insert_samples=True)
    init_collections(store, insert_samples=True)

    assert store.count("videos") == len(SAMPLE_DATA_TEMPLATES["videos"])


def test_check_document_names_the_field():
    tweet = {"id": "64c0a6f4e5b1a2c3d4e5f801", "owner": "bad", "content": "x", "created_at": "now"}

    with pytest.raises(ValidationError, match="owner"):
        check_document("tweets", tweet)
    assert validate_document("tweets", tweet) is False


def test_unique_index_treats_null_and_missing_alike():
    store = MemoryStore()
    store.create_index("likes", ["liked_by", "video", "tweet"], unique=True)
    store.insert_one("likes", {"id": "1", "liked_by": "a", "video": "v"})

    with pytest.raises(DuplicateKeyError):
        store.insert_one("likes", {"id": "2", "liked_by": "a", "video": "v", "tweet": None})
    store.insert_one("likes", {"id": "3", "liked_by": "a", "video": "v", "tweet": "t"})

    assert store.count("likes") == 2
