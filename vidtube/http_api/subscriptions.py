from typing import Any, Dict, Optional

from fastapi import HTTPException, Request

from vidtube.errors import CoreError
from vidtube.http_api.common import get_db, verify_token
from vidtube.services import subscriptions as subscription_service

def toggle_subscription_handler(request: Request, channel_id: str, subscription_data: Dict[str, Any]):
    try:
        verify_token(subscription_data.get("token", ""))

        result = subscription_service.toggle_subscription(get_db(), subscription_data.get("user_id"), channel_id)
        return {"is_subscribed": result.present, **result.to_dict()}

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to toggle subscription: {str(e)}")

def get_channel_subscribers_handler(request: Request, channel_id: str, token: str, page: int, limit: int,
                                    user_id: Optional[str] = None):
    try:
        verify_token(token)
        result = subscription_service.get_channel_subscribers(
            get_db(), channel_id, viewer_id=user_id, page=page, limit=limit
        )
        return result.to_dict("subscribers")

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get subscribers: {str(e)}")

def get_subscribed_channels_handler(request: Request, subscriber_id: str, token: str, page: int, limit: int,
                                    user_id: Optional[str] = None):
    try:
        verify_token(token)
        result = subscription_service.get_subscribed_channels(
            get_db(), subscriber_id, viewer_id=user_id, page=page, limit=limit
        )
        return result.to_dict("channels")

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get subscribed channels: {str(e)}")
