from typing import Any, Dict, Optional

from fastapi import HTTPException, Request

from vidtube.errors import CoreError
from vidtube.http_api.common import get_db, verify_token
from vidtube.services import videos as video_service

def get_videos_handler(request: Request, token: str, page: int, limit: int, query: Optional[str] = None,
                       sort_by: Optional[str] = None, sort_type: Optional[str] = "desc",
                       owner_id: Optional[str] = None, user_id: Optional[str] = None):
    """Paged video feed, optionally searched and filtered by owner"""
    try:
        verify_token(token)

        result = video_service.list_videos(
            get_db(),
            viewer_id=user_id,
            page=page,
            limit=limit,
            query=query,
            sort_by=sort_by,
            sort_type=sort_type,
            owner_id=owner_id,
        )
        return result.to_dict("videos")

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get videos: {str(e)}")

def publish_video_handler(request: Request, video_data: Dict[str, Any]):
    """Create a video record"""
    try:
        verify_token(video_data.get("token", ""))

        return video_service.publish_video(
            get_db(),
            video_data.get("user_id"),
            title=video_data.get("title"),
            description=video_data.get("description"),
            video_file=video_data.get("video_file"),
            thumbnail=video_data.get("thumbnail"),
            duration=video_data.get("duration", 0),
            is_published=video_data.get("is_published", True),
        )

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to publish video: {str(e)}")

def get_video_handler(request: Request, video_id: str, token: str, user_id: Optional[str] = None):
    """Get video by ID"""
    try:
        verify_token(token)
        return video_service.get_video(get_db(), video_id, viewer_id=user_id)

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get video: {str(e)}")

def update_video_handler(request: Request, video_id: str, update_data: Dict[str, Any]):
    try:
        verify_token(update_data.get("token", ""))

        return video_service.update_video(
            get_db(),
            video_id,
            update_data.get("user_id"),
            title=update_data.get("title"),
            description=update_data.get("description"),
            thumbnail=update_data.get("thumbnail"),
        )

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update video: {str(e)}")

def delete_video_handler(request: Request, video_id: str, token: str, user_id: str):
    """Delete a video and everything hanging off it"""
    try:
        verify_token(token)
        return video_service.delete_video(get_db(), video_id, user_id)

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete video: {str(e)}")

def toggle_publish_handler(request: Request, video_id: str, toggle_data: Dict[str, Any]):
    try:
        verify_token(toggle_data.get("token", ""))
        return video_service.toggle_publish_status(get_db(), video_id, toggle_data.get("user_id"))

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to toggle publish status: {str(e)}")

def record_view_handler(request: Request, video_id: str, view_data: Dict[str, Any]):
    """Count a view; signed-in viewers also get a watch history entry"""
    try:
        verify_token(view_data.get("token", ""))
        return video_service.record_view(get_db(), video_id, viewer_id=view_data.get("user_id"))

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to record view: {str(e)}")
