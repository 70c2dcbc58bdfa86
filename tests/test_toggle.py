import threading

import pytest
from pymongo.errors import DuplicateKeyError

from vidtube.db.init_collections import init_collections
from vidtube.db.memory_store import MemoryStore
from vidtube.errors import ValidationError
from vidtube.ids import new_id
from vidtube.relations import ToggleState, toggle_edge, toggle_like, toggle_subscription
from vidtube.services import users


class RacingStore(MemoryStore):
    """Holds the first ``parties`` edge reads until all of them have read"""

    def __init__(self, parties):
        super().__init__()
        self.barrier = threading.Barrier(parties, timeout=5)
        self._gated = 0
        self._gate_lock = threading.Lock()

    def find_one(self, collection, filter, projection=None):
        result = super().find_one(collection, filter, projection)
        with self._gate_lock:
            gate = collection in ("likes", "subscriptions") and self._gated < self.barrier.parties
            if gate:
                self._gated += 1
        if gate:
            self.barrier.wait()
        return result


def _run_concurrently(parties, target):
    results = []
    errors = []
    lock = threading.Lock()

    def worker():
        try:
            result = target()
            with lock:
                results.append(result)
        except Exception as e:
            with lock:
                errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(parties)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    assert errors == []
    return results


@pytest.mark.parametrize("toggles", [1, 2, 3, 4, 5])
def test_edge_present_iff_toggled_odd_times(store, toggles):
    actor, video = new_id(), new_id()

    for _ in range(toggles):
        result = toggle_like(store, actor, "video", video)

    assert result.present == (toggles % 2 == 1)
    assert store.count("likes", {"liked_by": actor, "video": video}) == toggles % 2


def test_toggle_states(store):
    actor, tweet = new_id(), new_id()

    created = toggle_like(store, actor, "tweet", tweet)
    removed = toggle_like(store, actor, "tweet", tweet)

    assert created.state == ToggleState.CREATED
    assert created.edge["tweet"] == tweet
    assert created.edge["video"] is None
    assert created.edge["comment"] is None
    assert removed.state == ToggleState.REMOVED
    assert removed.present is False


def test_likes_on_different_targets_are_independent(store):
    actor, target = new_id(), new_id()

    toggle_like(store, actor, "video", target)
    toggle_like(store, actor, "comment", target)

    assert store.count("likes", {"liked_by": actor}) == 2


def test_concurrent_creates_leave_one_edge():
    parties = 8
    store = RacingStore(parties)
    init_collections(store)
    actor, video = new_id(), new_id()

    results = _run_concurrently(parties, lambda: toggle_like(store, actor, "video", video))

    states = sorted(r.state.value for r in results)
    assert states == ["already_existed"] * (parties - 1) + ["created"]
    assert all(r.present for r in results)
    assert store.count("likes", {"liked_by": actor, "video": video}) == 1


def test_concurrent_removes_are_benign():
    store = RacingStore(2)
    init_collections(store)
    subscriber, channel = new_id(), new_id()
    store.insert_one("subscriptions", {
        "id": new_id(),
        "subscriber": subscriber,
        "channel": channel,
        "created_at": "2024-01-01T00:00:00+00:00",
    })

    results = _run_concurrently(2, lambda: toggle_subscription(store, subscriber, channel))

    assert [r.state for r in results] == [ToggleState.REMOVED, ToggleState.REMOVED]
    assert store.count("subscriptions") == 0


def test_unique_index_rejects_duplicate_edges(store):
    edge = {
        "liked_by": new_id(),
        "video": new_id(),
        "comment": None,
        "tweet": None,
        "created_at": "2024-01-01T00:00:00+00:00",
    }
    store.insert_one("likes", {"id": new_id(), **edge})

    with pytest.raises(DuplicateKeyError):
        store.insert_one("likes", {"id": new_id(), **edge})


def test_self_subscription_is_rejected(store):
    user = new_id()

    with pytest.raises(ValidationError):
        toggle_subscription(store, user, user)
    assert store.count("subscriptions") == 0


@pytest.mark.parametrize("edge_type, actor, kind, target", [
    ("like", "not-an-id", "video", "64c0a6f4e5b1a2c3d4e5f701"),
    ("like", "64c0a6f4e5b1a2c3d4e5f601", "video", ""),
    ("like", "64c0a6f4e5b1a2c3d4e5f601", "playlist", "64c0a6f4e5b1a2c3d4e5f701"),
    ("subscription", "64c0a6f4e5b1a2c3d4e5f601", "video", "64c0a6f4e5b1a2c3d4e5f701"),
    ("follow", "64c0a6f4e5b1a2c3d4e5f601", "channel", "64c0a6f4e5b1a2c3d4e5f602"),
])
def test_invalid_toggles_raise_validation_error(store, edge_type, actor, kind, target):
    with pytest.raises(ValidationError):
        toggle_edge(store, edge_type, actor, kind, target)


def test_subscription_toggle_restores_count(store, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    assert toggle_subscription(store, bob["id"], alice["id"]).present is True
    channel = users.get_channel_profile(store, "alice", viewer_id=bob["id"])
    assert channel["subscriber_count"] == 1
    assert channel["is_subscribed"] is True

    assert toggle_subscription(store, bob["id"], alice["id"]).present is False
    channel = users.get_channel_profile(store, "alice", viewer_id=bob["id"])
    assert channel["subscriber_count"] == 0
    assert channel["is_subscribed"] is False
