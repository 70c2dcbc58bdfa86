from typing import Any, Dict, Optional

from fastapi import HTTPException, Request

from vidtube.errors import CoreError
from vidtube.http_api.common import get_db, verify_token
from vidtube.services import comments as comment_service

def get_video_comments_handler(request: Request, video_id: str, token: str, page: int, limit: int,
                               user_id: Optional[str] = None):
    try:
        verify_token(token)
        result = comment_service.list_video_comments(get_db(), video_id, viewer_id=user_id, page=page, limit=limit)
        return result.to_dict("comments")

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get comments: {str(e)}")

def add_comment_handler(request: Request, video_id: str, comment_data: Dict[str, Any]):
    try:
        verify_token(comment_data.get("token", ""))
        return comment_service.add_comment(
            get_db(), video_id, comment_data.get("user_id"), comment_data.get("content")
        )

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to add comment: {str(e)}")

def update_comment_handler(request: Request, comment_id: str, update_data: Dict[str, Any]):
    try:
        verify_token(update_data.get("token", ""))
        return comment_service.update_comment(
            get_db(), comment_id, update_data.get("user_id"), update_data.get("content")
        )

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update comment: {str(e)}")

def delete_comment_handler(request: Request, comment_id: str, token: str, user_id: str):
    try:
        verify_token(token)
        return comment_service.delete_comment(get_db(), comment_id, user_id)

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete comment: {str(e)}")
