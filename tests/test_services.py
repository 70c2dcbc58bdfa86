import pytest

from vidtube.errors import ConflictError, NotFoundError, ValidationError
from vidtube.ids import new_id
from vidtube.relations import toggle_like
from vidtube.services import comments, dashboard, likes, playlists, subscriptions, tweets, users, videos


# =============================================================================
# USERS
# =============================================================================

def test_register_normalizes_and_hides_secrets(store):
    user = users.register_user(store, "  Alice ", "Alice@Test.com", "Alice", "secret")

    stored = store.find_one("users", {"id": user["id"]})
    assert user["username"] == "alice"
    assert user["email"] == "alice@test.com"
    assert stored["password_hash"].startswith("$2")
    assert stored["password_hash"] != "secret"
    assert "password_hash" not in user
    assert "refresh_token" not in user


def test_register_conflicts_on_username_or_email(store, make_user):
    make_user("alice")

    with pytest.raises(ConflictError):
        users.register_user(store, "ALICE", "other@test.com", "Alice Two", "secret")
    with pytest.raises(ConflictError):
        users.register_user(store, "alice2", "ALICE@test.com", "Alice Two", "secret")


def test_register_rejects_bad_input(store):
    with pytest.raises(ValidationError):
        users.register_user(store, "", "a@test.com", "A", "secret")
    with pytest.raises(ValidationError):
        users.register_user(store, "alice", "not-an-email", "A", "secret")


def test_update_account_details(store, make_user):
    alice = make_user("alice")
    make_user("bob")

    updated = users.update_account_details(store, alice["id"], full_name="Alice Liddell")
    assert updated["full_name"] == "Alice Liddell"

    with pytest.raises(ConflictError):
        users.update_account_details(store, alice["id"], email="BOB@test.com")
    with pytest.raises(ValidationError):
        users.update_account_details(store, alice["id"])


def test_change_password(store, make_user):
    alice = make_user("alice")

    with pytest.raises(ValidationError, match="Incorrect old password"):
        users.change_password(store, alice["id"], "wrong", "better")
    with pytest.raises(ValidationError):
        users.change_password(store, alice["id"], "secret", "secret")
    with pytest.raises(ValidationError):
        users.change_password(store, alice["id"], "", "better")
    with pytest.raises(NotFoundError):
        users.change_password(store, new_id(), "secret", "better")

    users.change_password(store, alice["id"], "secret", "better")

    hashed = store.find_one("users", {"id": alice["id"]})["password_hash"]
    assert users.verify_password("better", hashed)
    assert not users.verify_password("secret", hashed)


def test_update_avatar_and_cover_image(store, make_user):
    alice = make_user("alice")

    assert users.update_avatar(store, alice["id"], "https://cdn.test/a.png")["avatar"] == "https://cdn.test/a.png"
    updated = users.update_cover_image(store, alice["id"], "https://cdn.test/c.png")
    assert updated["cover_image"] == "https://cdn.test/c.png"
    assert updated["avatar"] == "https://cdn.test/a.png"
    assert "password_hash" not in updated

    with pytest.raises(ValidationError):
        users.update_avatar(store, alice["id"], "  ")
    with pytest.raises(NotFoundError):
        users.update_cover_image(store, new_id(), "https://cdn.test/c.png")


def test_watch_history_shows_published_videos_only(store, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    public = make_video(bob["id"])
    draft = make_video(alice["id"], is_published=False)

    videos.record_view(store, public["id"], viewer_id=alice["id"])
    videos.record_view(store, public["id"], viewer_id=alice["id"])
    videos.record_view(store, draft["id"], viewer_id=alice["id"])

    history = users.get_watch_history(store, alice["id"])
    assert [v["id"] for v in history] == [public["id"]]
    assert history[0]["owner_details"]["username"] == "bob"
    assert store.find_one("videos", {"id": public["id"]})["views"] == 2


# =============================================================================
# VIDEOS
# =============================================================================

def test_publish_and_update_video(store, make_user):
    alice = make_user("alice")
    video = videos.publish_video(store, alice["id"], "Title", "Description", "https://cdn.test/v.mp4")

    assert video["is_published"] is True
    assert video["views"] == 0
    assert video["like_count"] == 0

    updated = videos.update_video(store, video["id"], alice["id"], title="New title")
    assert updated["title"] == "New title"
    assert updated["description"] == "Description"

    with pytest.raises(ValidationError):
        videos.update_video(store, video["id"], alice["id"])


def test_owner_scoped_mutation_reports_reason(store, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    tweet = tweets.create_tweet(store, alice["id"], "mine")

    with pytest.raises(NotFoundError) as not_owner:
        tweets.update_tweet(store, tweet["id"], bob["id"], "hijacked")
    with pytest.raises(NotFoundError) as missing:
        tweets.update_tweet(store, new_id(), bob["id"], "nothing")

    assert not_owner.value.reason == NotFoundError.NOT_OWNER
    assert missing.value.reason == NotFoundError.MISSING
    assert not_owner.value.status_code == missing.value.status_code == 404
    assert tweets.get_tweet(store, tweet["id"])["content"] == "mine"


def test_toggle_publish_status(store, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    video = make_video(alice["id"])

    assert videos.toggle_publish_status(store, video["id"], alice["id"])["is_published"] is False
    assert videos.toggle_publish_status(store, video["id"], alice["id"])["is_published"] is True
    with pytest.raises(NotFoundError):
        videos.toggle_publish_status(store, video["id"], bob["id"])


def test_list_videos_by_owner(store, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    make_video(alice["id"])
    make_video(bob["id"])

    result = videos.list_videos(store, owner_id=alice["id"])
    assert [v["owner"] for v in result.records] == [alice["id"]]

    with pytest.raises(ValidationError):
        videos.list_videos(store, owner_id="nope")


def test_invalid_ids_fail_before_lookup(store):
    with pytest.raises(ValidationError):
        videos.get_video(store, "123")
    with pytest.raises(ValidationError):
        videos.delete_video(store, new_id(), "bad")


# =============================================================================
# COMMENTS, PLAYLISTS
# =============================================================================

def test_comment_needs_visible_video(store, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    draft = make_video(alice["id"], is_published=False)

    with pytest.raises(NotFoundError):
        comments.add_comment(store, new_id(), bob["id"], "hi")
    with pytest.raises(NotFoundError):
        comments.add_comment(store, draft["id"], bob["id"], "hi")
    with pytest.raises(ValidationError):
        comments.add_comment(store, draft["id"], alice["id"], "   ")

    comment = comments.add_comment(store, draft["id"], alice["id"], "note to self")
    assert comment["owner_details"]["username"] == "alice"
    assert comments.list_video_comments(store, draft["id"]).total_count == 1


def test_update_comment_is_owner_scoped(store, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    video = make_video(alice["id"])
    comment = comments.add_comment(store, video["id"], bob["id"], "frist")

    fixed = comments.update_comment(store, comment["id"], bob["id"], "first")
    assert fixed["content"] == "first"

    with pytest.raises(NotFoundError) as error:
        comments.update_comment(store, comment["id"], alice["id"], "edited by someone else")
    assert error.value.reason == NotFoundError.NOT_OWNER


def test_playlist_add_is_idempotent(store, make_user, make_video):
    alice = make_user("alice")
    video = make_video(alice["id"])
    playlist = playlists.create_playlist(store, alice["id"], "Mix", "Best of")

    playlists.add_video_to_playlist(store, playlist["id"], video["id"], alice["id"])
    result = playlists.add_video_to_playlist(store, playlist["id"], video["id"], alice["id"])

    assert [v["id"] for v in result["videos"]] == [video["id"]]
    assert store.find_one("playlists", {"id": playlist["id"]})["videos"] == [video["id"]]


def test_playlist_mutations_are_owner_scoped(store, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    video = make_video(alice["id"])
    playlist = playlists.create_playlist(store, alice["id"], "Mix", "Best of")

    with pytest.raises(NotFoundError):
        playlists.add_video_to_playlist(store, playlist["id"], video["id"], bob["id"])
    with pytest.raises(NotFoundError):
        playlists.add_video_to_playlist(store, playlist["id"], new_id(), alice["id"])
    with pytest.raises(NotFoundError):
        playlists.delete_playlist(store, playlist["id"], bob["id"])

    playlists.add_video_to_playlist(store, playlist["id"], video["id"], alice["id"])
    result = playlists.remove_video_from_playlist(store, playlist["id"], video["id"], alice["id"])
    assert result["videos"] == []

    renamed = playlists.update_playlist(store, playlist["id"], alice["id"], name="Renamed")
    assert renamed["name"] == "Renamed"
    assert playlists.get_user_playlists(store, alice["id"]).total_count == 1

    playlists.delete_playlist(store, playlist["id"], alice["id"])
    with pytest.raises(NotFoundError):
        playlists.get_playlist(store, playlist["id"])


# =============================================================================
# LIKES, SUBSCRIPTIONS, DASHBOARD
# =============================================================================

def test_liked_videos_lists_video_likes_only(store, make_user, make_video):
    alice = make_user("alice")
    video = make_video(alice["id"])
    tweet = tweets.create_tweet(store, alice["id"], "hi")
    likes.toggle_video_like(store, alice["id"], video["id"])
    likes.toggle_tweet_like(store, alice["id"], tweet["id"])

    result = likes.get_liked_videos(store, alice["id"])

    assert result.total_count == 1
    assert result.records[0]["video_details"]["id"] == video["id"]
    assert result.records[0]["video_details"]["owner_details"]["username"] == "alice"


def test_subscription_lists(store, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")
    subscriptions.toggle_subscription(store, bob["id"], alice["id"])
    subscriptions.toggle_subscription(store, carol["id"], alice["id"])

    subscribers = subscriptions.get_channel_subscribers(store, alice["id"])
    channels = subscriptions.get_subscribed_channels(store, bob["id"], viewer_id=bob["id"])

    assert {s["subscriber_details"]["username"] for s in subscribers.records} == {"bob", "carol"}
    assert channels.records[0]["channel_details"]["username"] == "alice"
    assert channels.records[0]["channel_details"]["is_subscribed"] is True

    with pytest.raises(NotFoundError):
        subscriptions.toggle_subscription(store, bob["id"], new_id())


def test_channel_stats(store, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    first = make_video(alice["id"], views=5)
    make_video(alice["id"], views=7, is_published=False)
    toggle_like(store, bob["id"], "video", first["id"])
    subscriptions.toggle_subscription(store, bob["id"], alice["id"])

    stats = dashboard.get_channel_stats(store, alice["id"])

    assert stats == {"total_videos": 2, "total_views": 12, "total_likes": 1, "total_subscribers": 1}
    assert dashboard.get_channel_videos(store, alice["id"]).total_count == 2
