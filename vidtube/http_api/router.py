from fastapi import APIRouter, Request, Query, Body
from typing import Optional, Dict, Any

from vidtube import __version__, config
from vidtube.http_api.users import (
    register_handler,
    get_current_user_handler,
    update_account_handler,
    get_channel_profile_handler,
    search_channels_handler,
    get_watch_history_handler,
    change_password_handler,
    update_avatar_handler,
    update_cover_image_handler,
    RegisterRequest,
)
from vidtube.http_api.videos import (
    get_videos_handler,
    publish_video_handler,
    get_video_handler,
    update_video_handler,
    delete_video_handler,
    toggle_publish_handler,
    record_view_handler,
)
from vidtube.http_api.tweets import (
    create_tweet_handler,
    get_user_tweets_handler,
    get_tweet_handler,
    update_tweet_handler,
    delete_tweet_handler,
)
from vidtube.http_api.comments import (
    get_video_comments_handler,
    add_comment_handler,
    update_comment_handler,
    delete_comment_handler,
)
from vidtube.http_api.playlists import (
    create_playlist_handler,
    get_user_playlists_handler,
    get_playlist_handler,
    add_playlist_video_handler,
    remove_playlist_video_handler,
    update_playlist_handler,
    delete_playlist_handler,
)
from vidtube.http_api.likes import toggle_like_handler, get_liked_videos_handler
from vidtube.http_api.subscriptions import (
    toggle_subscription_handler,
    get_channel_subscribers_handler,
    get_subscribed_channels_handler,
)
from vidtube.http_api.dashboard import get_channel_stats_handler, get_channel_videos_handler

router = APIRouter()

# Health check endpoint
@router.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": __version__}

# User endpoints
@router.post("/users/register", status_code=201)
def register(request: Request, register_data: RegisterRequest):
    """User registration"""
    return register_handler(request, register_data)

@router.get("/users/me")
def get_current_user(request: Request, token: str = Query(...), user_id: str = Query(...)):
    return get_current_user_handler(request, token, user_id)

@router.patch("/users/me")
def update_account(request: Request, account_data: Dict[str, Any] = Body(...)):
    return update_account_handler(request, account_data)

@router.post("/users/change-password")
def change_password(request: Request, password_data: Dict[str, Any] = Body(...)):
    return change_password_handler(request, password_data)

@router.patch("/users/avatar")
def update_avatar(request: Request, avatar_data: Dict[str, Any] = Body(...)):
    return update_avatar_handler(request, avatar_data)

@router.patch("/users/cover-image")
def update_cover_image(request: Request, cover_data: Dict[str, Any] = Body(...)):
    return update_cover_image_handler(request, cover_data)

@router.get("/users/history")
def get_watch_history(request: Request, token: str = Query(...), user_id: str = Query(...)):
    return get_watch_history_handler(request, token, user_id)

@router.get("/channels")
def search_channels(request: Request, token: str = Query(...), query: Optional[str] = Query(None),
                    page: int = Query(1), limit: int = Query(config.DEFAULT_PAGE_LIMIT),
                    user_id: Optional[str] = Query(None)):
    """Search channels by username or full name"""
    return search_channels_handler(request, token, query, page, limit, user_id)

@router.get("/channels/{username}")
def get_channel_profile(request: Request, username: str, token: str = Query(...),
                        user_id: Optional[str] = Query(None)):
    return get_channel_profile_handler(request, username, token, user_id)

# Video endpoints
@router.get("/videos")
def get_videos(request: Request, token: str = Query(...), page: int = Query(1),
               limit: int = Query(config.DEFAULT_PAGE_LIMIT), query: Optional[str] = Query(None),
               sort_by: Optional[str] = Query(None), sort_type: Optional[str] = Query("desc"),
               owner_id: Optional[str] = Query(None), user_id: Optional[str] = Query(None)):
    """Paged video feed"""
    return get_videos_handler(request, token, page, limit, query, sort_by, sort_type, owner_id, user_id)

@router.post("/videos", status_code=201)
def publish_video(request: Request, video_data: Dict[str, Any] = Body(...)):
    return publish_video_handler(request, video_data)

@router.get("/videos/{video_id}")
def get_video(request: Request, video_id: str, token: str = Query(...), user_id: Optional[str] = Query(None)):
    return get_video_handler(request, video_id, token, user_id)

@router.patch("/videos/{video_id}")
def update_video(request: Request, video_id: str, update_data: Dict[str, Any] = Body(...)):
    return update_video_handler(request, video_id, update_data)

@router.delete("/videos/{video_id}")
def delete_video(request: Request, video_id: str, token: str = Query(...), user_id: str = Query(...)):
    return delete_video_handler(request, video_id, token, user_id)

@router.patch("/videos/{video_id}/publish")
def toggle_publish(request: Request, video_id: str, toggle_data: Dict[str, Any] = Body(...)):
    return toggle_publish_handler(request, video_id, toggle_data)

@router.post("/videos/{video_id}/views")
def record_view(request: Request, video_id: str, view_data: Dict[str, Any] = Body(...)):
    return record_view_handler(request, video_id, view_data)

# Comment endpoints
@router.get("/videos/{video_id}/comments")
def get_video_comments(request: Request, video_id: str, token: str = Query(...), page: int = Query(1),
                       limit: int = Query(config.DEFAULT_PAGE_LIMIT), user_id: Optional[str] = Query(None)):
    return get_video_comments_handler(request, video_id, token, page, limit, user_id)

@router.post("/videos/{video_id}/comments", status_code=201)
def add_comment(request: Request, video_id: str, comment_data: Dict[str, Any] = Body(...)):
    return add_comment_handler(request, video_id, comment_data)

@router.patch("/comments/{comment_id}")
def update_comment(request: Request, comment_id: str, update_data: Dict[str, Any] = Body(...)):
    return update_comment_handler(request, comment_id, update_data)

@router.delete("/comments/{comment_id}")
def delete_comment(request: Request, comment_id: str, token: str = Query(...), user_id: str = Query(...)):
    return delete_comment_handler(request, comment_id, token, user_id)

# Tweet endpoints
@router.post("/tweets", status_code=201)
def create_tweet(request: Request, tweet_data: Dict[str, Any] = Body(...)):
    return create_tweet_handler(request, tweet_data)

@router.get("/tweets/user/{owner_id}")
def get_user_tweets(request: Request, owner_id: str, token: str = Query(...), page: int = Query(1),
                    limit: int = Query(config.DEFAULT_PAGE_LIMIT), user_id: Optional[str] = Query(None)):
    return get_user_tweets_handler(request, owner_id, token, page, limit, user_id)

@router.get("/tweets/{tweet_id}")
def get_tweet(request: Request, tweet_id: str, token: str = Query(...), user_id: Optional[str] = Query(None)):
    return get_tweet_handler(request, tweet_id, token, user_id)

@router.patch("/tweets/{tweet_id}")
def update_tweet(request: Request, tweet_id: str, update_data: Dict[str, Any] = Body(...)):
    return update_tweet_handler(request, tweet_id, update_data)

@router.delete("/tweets/{tweet_id}")
def delete_tweet(request: Request, tweet_id: str, token: str = Query(...), user_id: str = Query(...)):
    return delete_tweet_handler(request, tweet_id, token, user_id)

# Playlist endpoints
@router.post("/playlists", status_code=201)
def create_playlist(request: Request, playlist_data: Dict[str, Any] = Body(...)):
    return create_playlist_handler(request, playlist_data)

@router.get("/playlists/user/{owner_id}")
def get_user_playlists(request: Request, owner_id: str, token: str = Query(...), page: int = Query(1),
                       limit: int = Query(config.DEFAULT_PAGE_LIMIT), user_id: Optional[str] = Query(None)):
    return get_user_playlists_handler(request, owner_id, token, page, limit, user_id)

@router.get("/playlists/{playlist_id}")
def get_playlist(request: Request, playlist_id: str, token: str = Query(...),
                 user_id: Optional[str] = Query(None)):
    return get_playlist_handler(request, playlist_id, token, user_id)

@router.patch("/playlists/{playlist_id}")
def update_playlist(request: Request, playlist_id: str, update_data: Dict[str, Any] = Body(...)):
    return update_playlist_handler(request, playlist_id, update_data)

@router.delete("/playlists/{playlist_id}")
def delete_playlist(request: Request, playlist_id: str, token: str = Query(...), user_id: str = Query(...)):
    return delete_playlist_handler(request, playlist_id, token, user_id)

@router.put("/playlists/{playlist_id}/videos/{video_id}")
def add_playlist_video(request: Request, playlist_id: str, video_id: str,
                       video_data: Dict[str, Any] = Body(...)):
    return add_playlist_video_handler(request, playlist_id, video_id, video_data)

@router.delete("/playlists/{playlist_id}/videos/{video_id}")
def remove_playlist_video(request: Request, playlist_id: str, video_id: str, token: str = Query(...),
                          user_id: str = Query(...)):
    return remove_playlist_video_handler(request, playlist_id, video_id, token, user_id)

# Like endpoints
@router.get("/likes/videos")
def get_liked_videos(request: Request, token: str = Query(...), user_id: str = Query(...),
                     page: int = Query(1), limit: int = Query(config.DEFAULT_PAGE_LIMIT)):
    return get_liked_videos_handler(request, token, user_id, page, limit)

@router.post("/likes/{target_kind}/{target_id}")
def toggle_like(request: Request, target_kind: str, target_id: str, like_data: Dict[str, Any] = Body(...)):
    """Toggle a like on a video, comment or tweet"""
    return toggle_like_handler(request, target_kind, target_id, like_data)

# Subscription endpoints
@router.post("/subscriptions/channels/{channel_id}")
def toggle_subscription(request: Request, channel_id: str, subscription_data: Dict[str, Any] = Body(...)):
    return toggle_subscription_handler(request, channel_id, subscription_data)

@router.get("/subscriptions/channels/{channel_id}/subscribers")
def get_channel_subscribers(request: Request, channel_id: str, token: str = Query(...), page: int = Query(1),
                            limit: int = Query(config.DEFAULT_PAGE_LIMIT), user_id: Optional[str] = Query(None)):
    return get_channel_subscribers_handler(request, channel_id, token, page, limit, user_id)

@router.get("/subscriptions/users/{subscriber_id}/channels")
def get_subscribed_channels(request: Request, subscriber_id: str, token: str = Query(...), page: int = Query(1),
                            limit: int = Query(config.DEFAULT_PAGE_LIMIT), user_id: Optional[str] = Query(None)):
    return get_subscribed_channels_handler(request, subscriber_id, token, page, limit, user_id)

# Dashboard endpoints
@router.get("/dashboard/stats")
def get_channel_stats(request: Request, token: str = Query(...), user_id: str = Query(...)):
    return get_channel_stats_handler(request, token, user_id)

@router.get("/dashboard/videos")
def get_channel_videos(request: Request, token: str = Query(...), user_id: str = Query(...),
                       page: int = Query(1), limit: int = Query(config.DEFAULT_PAGE_LIMIT)):
    return get_channel_videos_handler(request, token, user_id, page, limit)
