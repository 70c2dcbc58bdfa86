from fastapi import HTTPException, Request

from vidtube.errors import CoreError
from vidtube.http_api.common import get_db, verify_token
from vidtube.services import dashboard as dashboard_service

def get_channel_stats_handler(request: Request, token: str, user_id: str):
    """Totals for the calling user's channel"""
    try:
        verify_token(token)
        return dashboard_service.get_channel_stats(get_db(), user_id)

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get channel stats: {str(e)}")

def get_channel_videos_handler(request: Request, token: str, user_id: str, page: int, limit: int):
    """All of the caller's videos, published or not"""
    try:
        verify_token(token)
        result = dashboard_service.get_channel_videos(get_db(), user_id, page=page, limit=limit)
        return result.to_dict("videos")

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get channel videos: {str(e)}")
