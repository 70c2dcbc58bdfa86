from typing import Any, Dict

from fastapi import HTTPException, Request

from vidtube.errors import CoreError
from vidtube.http_api.common import get_db, verify_token
from vidtube.services import likes as like_service

TOGGLES = {
    "video": like_service.toggle_video_like,
    "comment": like_service.toggle_comment_like,
    "tweet": like_service.toggle_tweet_like,
}

def toggle_like_handler(request: Request, target_kind: str, target_id: str, like_data: Dict[str, Any]):
    """Like the target, or remove the like if it is already there"""
    try:
        verify_token(like_data.get("token", ""))

        toggle = TOGGLES.get(target_kind)
        if toggle is None:
            raise HTTPException(status_code=404, detail=f"Cannot like a {target_kind}")

        result = toggle(get_db(), like_data.get("user_id"), target_id)
        return {"is_liked": result.present, **result.to_dict()}

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to toggle like: {str(e)}")

def get_liked_videos_handler(request: Request, token: str, user_id: str, page: int, limit: int):
    try:
        verify_token(token)
        result = like_service.get_liked_videos(get_db(), user_id, page=page, limit=limit)
        return result.to_dict("liked_videos")

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get liked videos: {str(e)}")
