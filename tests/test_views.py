import pytest

from vidtube.db.memory_store import MemoryStore
from vidtube.db.mongo_store import compile_pipeline
from vidtube.errors import NotFoundError
from vidtube.ids import new_id
from vidtube.relations import toggle_like, toggle_subscription
from vidtube.services import playlists, users
from vidtube.views import build_one, build_view
from vidtube.views.definitions import OWNER_FIELDS
from vidtube.views.plan import ViewPlan
from vidtube.views.stages import Count, Flag, JoinOne, Match


class RecordingStore(MemoryStore):
    def __init__(self):
        super().__init__()
        self.aggregate_calls = []

    def aggregate(self, collection, stages):
        self.aggregate_calls.append((collection, tuple(stages)))
        return super().aggregate(collection, stages)


def test_owner_details_is_public_projection(store, make_user, make_video):
    alice = make_user("alice", avatar="https://cdn.test/a.png")
    video = make_video(alice["id"])

    row = build_one(store, "video", {"id": video["id"]})

    assert row["owner_details"] == {f: alice[f] for f in OWNER_FIELDS}
    assert "email" not in row["owner_details"]
    assert "password_hash" not in row["owner_details"]


def test_dangling_owner_collapses_to_none(store, make_video):
    video = make_video(new_id())

    rows = build_view(store, "video", {"id": video["id"]})

    assert len(rows) == 1
    assert rows[0]["owner_details"] is None


def test_zero_rows_is_not_an_error(store):
    assert build_view(store, "video", {"id": new_id()}) == []
    with pytest.raises(NotFoundError):
        build_one(store, "video", {"id": new_id()}, label="Video")


def test_like_count_and_viewer_flag(store, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")
    video = make_video(alice["id"])
    toggle_like(store, bob["id"], "video", video["id"])
    toggle_like(store, carol["id"], "video", video["id"])
    toggle_like(store, carol["id"], "video", video["id"])

    as_bob = build_one(store, "video", {"id": video["id"]}, viewer_id=bob["id"])
    as_carol = build_one(store, "video", {"id": video["id"]}, viewer_id=carol["id"])
    anonymous = build_one(store, "video", {"id": video["id"]})

    assert as_bob["like_count"] == 1
    assert as_bob["is_liked"] is True
    assert as_carol["is_liked"] is False
    assert anonymous["is_liked"] is False


def test_playlist_videos_carry_their_own_owner(store, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    own = make_video(alice["id"])
    other = make_video(bob["id"])
    hidden = make_video(bob["id"], is_published=False)
    playlist = playlists.create_playlist(store, alice["id"], "Mix", "Things I like")
    for video in (own, other, hidden):
        playlists.add_video_to_playlist(store, playlist["id"], video["id"], alice["id"])

    row = playlists.get_playlist(store, playlist["id"], viewer_id=alice["id"])

    owners = {v["id"]: v["owner_details"]["username"] for v in row["videos"]}
    assert owners == {own["id"]: "alice", other["id"]: "bob"}
    assert row["owner_details"]["username"] == "alice"


def test_channel_view_hides_private_fields(store, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    toggle_subscription(store, bob["id"], alice["id"])

    channel = users.get_channel_profile(store, "  Alice ", viewer_id=bob["id"])

    assert channel["id"] == alice["id"]
    assert channel["subscriber_count"] == 1
    assert channel["subscribed_to_count"] == 0
    assert channel["is_subscribed"] is True
    for field in ("email", "password_hash", "refresh_token", "watch_history"):
        assert field not in channel


def test_subscriber_view_nests_channel_card(store, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    toggle_subscription(store, bob["id"], alice["id"])
    toggle_subscription(store, alice["id"], bob["id"])

    rows = build_view(store, "subscriber", {"channel": alice["id"]}, viewer_id=alice["id"])

    assert len(rows) == 1
    details = rows[0]["subscriber_details"]
    assert details["username"] == "bob"
    assert details["subscriber_count"] == 1
    assert details["is_subscribed"] is True


def test_build_view_filters_first_in_one_round_trip():
    store = RecordingStore()
    build_view(store, "video", {"owner": new_id()}, viewer_id=new_id())

    assert len(store.aggregate_calls) == 1
    collection, stages = store.aggregate_calls[0]
    assert collection == "videos"
    assert isinstance(stages[0], Match)
    assert any(isinstance(s, JoinOne) for s in stages[1:])


# =============================================================================
# PIPELINE COMPILATION
# =============================================================================

def test_join_one_compiles_to_lookup_and_collapse():
    stages = ViewPlan().join_one("users", "owner", "id", "owner_details", fields=("id", "username")).build()

    pipeline = compile_pipeline(stages)

    assert pipeline[0] == {
        "$lookup": {
            "from": "users",
            "localField": "owner",
            "foreignField": "id",
            "as": "owner_details",
            "pipeline": [{"$project": {"id": 1, "username": 1, "_id": 0}}],
        }
    }
    assert pipeline[1] == {"$addFields": {"owner_details": {"$ifNull": [{"$first": "$owner_details"}, None]}}}


def test_nested_join_compiles_inside_sub_pipeline():
    nested = ViewPlan().match({"is_published": True}).join_one("users", "owner", "id", "owner_details")
    stages = ViewPlan().join_many("videos", "videos", "id", "videos", nested=nested).build()

    pipeline = compile_pipeline(stages)

    assert len(pipeline) == 1
    sub_pipeline = pipeline[0]["$lookup"]["pipeline"]
    assert sub_pipeline[0] == {"$match": {"is_published": True}}
    assert sub_pipeline[1]["$lookup"]["from"] == "users"
    assert sub_pipeline[-1] == {"$unset": "_id"}


def test_count_and_flag_compile():
    count = compile_pipeline([Count("likes", "id", "video", "like_count")])
    assert count[1] == {"$addFields": {"like_count": {"$size": "$_like_count_edges"}}}
    assert count[2] == {"$unset": "_like_count_edges"}

    anonymous = compile_pipeline([Flag("likes", "id", "video", "liked_by", None, "is_liked")])
    assert anonymous == [{"$addFields": {"is_liked": {"$literal": False}}}]

    viewer = new_id()
    flagged = compile_pipeline([Flag("likes", "id", "video", "liked_by", viewer, "is_liked")])
    assert flagged[0]["$lookup"]["pipeline"][0] == {"$match": {"liked_by": viewer}}
    assert flagged[1] == {"$addFields": {"is_liked": {"$gt": [{"$size": "$_is_liked_edges"}, 0]}}}
