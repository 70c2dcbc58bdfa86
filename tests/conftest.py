import itertools
import os

# Settings are read at import time
os.environ["API_TOKEN"] = "test-token"
os.environ["STORE_BACKEND"] = "memory"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["MAX_REQUESTS_PER_MINUTE"] = "10000"
os.environ["SEED_SAMPLE_DATA"] = "false"

import pytest
from fastapi.testclient import TestClient

from vidtube.db.connection import set_store
from vidtube.db.init_collections import init_collections
from vidtube.db.memory_store import MemoryStore
from vidtube.ids import new_id
from vidtube.services import users

TOKEN = "test-token"


@pytest.fixture()
def store():
    store = MemoryStore()
    assert init_collections(store)
    return store


@pytest.fixture()
def make_user(store):
    def _make(username, **fields):
        return users.register_user(
            store,
            username=username,
            email=f"{username}@test.com",
            full_name=fields.pop("full_name", username.title()),
            password="secret",
            **fields,
        )
    return _make


@pytest.fixture()
def make_video(store):
    counter = itertools.count()

    def _make(owner_id, **fields):
        n = next(counter)
        stamp = f"2024-01-01T00:{n // 60:02d}:{n % 60:02d}+00:00"
        video = {
            "id": new_id(),
            "owner": owner_id,
            "title": f"Video {n}",
            "description": "A test video",
            "video_file": f"https://cdn.test/videos/{n}.mp4",
            "thumbnail": None,
            "duration": 60,
            "views": 0,
            "is_published": True,
            "created_at": stamp,
            "updated_at": stamp,
        }
        video.update(fields)
        store.insert_one("videos", video)
        return video
    return _make


@pytest.fixture()
def client(store):
    from vidtube.http_api import rate_limiter
    from vidtube.main import app

    rate_limiter.rate_limit_data.clear()
    set_store(store)
    with TestClient(app) as test_client:
        yield test_client
    set_store(None)
