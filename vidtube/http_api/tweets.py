from typing import Any, Dict, Optional

from fastapi import HTTPException, Request

from vidtube.errors import CoreError
from vidtube.http_api.common import get_db, verify_token
from vidtube.services import tweets as tweet_service

def create_tweet_handler(request: Request, tweet_data: Dict[str, Any]):
    try:
        verify_token(tweet_data.get("token", ""))
        return tweet_service.create_tweet(get_db(), tweet_data.get("user_id"), tweet_data.get("content"))

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create tweet: {str(e)}")

def get_user_tweets_handler(request: Request, owner_id: str, token: str, page: int, limit: int,
                            user_id: Optional[str] = None):
    """Tweets of one user, newest first"""
    try:
        verify_token(token)
        result = tweet_service.list_user_tweets(get_db(), owner_id, viewer_id=user_id, page=page, limit=limit)
        return result.to_dict("tweets")

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get tweets: {str(e)}")

def get_tweet_handler(request: Request, tweet_id: str, token: str, user_id: Optional[str] = None):
    try:
        verify_token(token)
        return tweet_service.get_tweet(get_db(), tweet_id, viewer_id=user_id)

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get tweet: {str(e)}")

def update_tweet_handler(request: Request, tweet_id: str, update_data: Dict[str, Any]):
    try:
        verify_token(update_data.get("token", ""))
        return tweet_service.update_tweet(get_db(), tweet_id, update_data.get("user_id"), update_data.get("content"))

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update tweet: {str(e)}")

def delete_tweet_handler(request: Request, tweet_id: str, token: str, user_id: str):
    try:
        verify_token(token)
        return tweet_service.delete_tweet(get_db(), tweet_id, user_id)

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete tweet: {str(e)}")
