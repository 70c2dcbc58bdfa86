from typing import Any, Dict, Optional

from fastapi import HTTPException, Request

from vidtube.errors import CoreError
from vidtube.http_api.common import get_db, verify_token
from vidtube.services import playlists as playlist_service

def create_playlist_handler(request: Request, playlist_data: Dict[str, Any]):
    try:
        verify_token(playlist_data.get("token", ""))
        return playlist_service.create_playlist(
            get_db(),
            playlist_data.get("user_id"),
            playlist_data.get("name"),
            playlist_data.get("description"),
        )

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create playlist: {str(e)}")

def get_user_playlists_handler(request: Request, owner_id: str, token: str, page: int, limit: int,
                               user_id: Optional[str] = None):
    try:
        verify_token(token)
        result = playlist_service.get_user_playlists(get_db(), owner_id, viewer_id=user_id, page=page, limit=limit)
        return result.to_dict("playlists")

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get playlists: {str(e)}")

def get_playlist_handler(request: Request, playlist_id: str, token: str, user_id: Optional[str] = None):
    try:
        verify_token(token)
        return playlist_service.get_playlist(get_db(), playlist_id, viewer_id=user_id)

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get playlist: {str(e)}")

def add_playlist_video_handler(request: Request, playlist_id: str, video_id: str, video_data: Dict[str, Any]):
    """Add a video to a playlist; adding it twice is a no-op"""
    try:
        verify_token(video_data.get("token", ""))
        return playlist_service.add_video_to_playlist(get_db(), playlist_id, video_id, video_data.get("user_id"))

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to add video to playlist: {str(e)}")

def remove_playlist_video_handler(request: Request, playlist_id: str, video_id: str, token: str, user_id: str):
    try:
        verify_token(token)
        return playlist_service.remove_video_from_playlist(get_db(), playlist_id, video_id, user_id)

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to remove video from playlist: {str(e)}")

def update_playlist_handler(request: Request, playlist_id: str, update_data: Dict[str, Any]):
    try:
        verify_token(update_data.get("token", ""))
        return playlist_service.update_playlist(
            get_db(),
            playlist_id,
            update_data.get("user_id"),
            name=update_data.get("name"),
            description=update_data.get("description"),
        )

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update playlist: {str(e)}")

def delete_playlist_handler(request: Request, playlist_id: str, token: str, user_id: str):
    try:
        verify_token(token)
        return playlist_service.delete_playlist(get_db(), playlist_id, user_id)

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete playlist: {str(e)}")
