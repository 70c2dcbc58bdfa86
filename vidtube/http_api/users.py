from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from pydantic import BaseModel

from vidtube.errors import CoreError
from vidtube.http_api.common import get_db, verify_token
from vidtube.services import users as user_service

# Pydantic models for request/response
class RegisterRequest(BaseModel):
    token: str
    username: str
    email: str
    full_name: str
    password: str
    avatar: Optional[str] = None
    cover_image: Optional[str] = None

# API Endpoints
def register_handler(request: Request, register_data: RegisterRequest):
    """Register new user"""
    try:
        verify_token(register_data.token)

        user = user_service.register_user(
            get_db(),
            username=register_data.username,
            email=register_data.email,
            full_name=register_data.full_name,
            password=register_data.password,
            avatar=register_data.avatar,
            cover_image=register_data.cover_image,
        )
        return {"success": True, "user": user, "message": "User registered successfully"}

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Registration failed: {str(e)}")

def get_current_user_handler(request: Request, token: str, user_id: str):
    """Account of the calling user"""
    try:
        verify_token(token)
        return user_service.get_current_user(get_db(), user_id)

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get user: {str(e)}")

def update_account_handler(request: Request, account_data: Dict[str, Any]):
    """Update full name and/or email"""
    try:
        verify_token(account_data.get("token", ""))

        return user_service.update_account_details(
            get_db(),
            account_data.get("user_id"),
            full_name=account_data.get("full_name"),
            email=account_data.get("email"),
        )

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update account: {str(e)}")

def get_channel_profile_handler(request: Request, username: str, token: str, user_id: Optional[str] = None):
    """Public channel profile with subscription counts"""
    try:
        verify_token(token)
        return user_service.get_channel_profile(get_db(), username, viewer_id=user_id)

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get channel: {str(e)}")

def search_channels_handler(request: Request, token: str, query: Optional[str], page: int, limit: int,
                            user_id: Optional[str] = None):
    """Search channels by username or full name"""
    try:
        verify_token(token)
        result = user_service.search_channels(get_db(), query, viewer_id=user_id, page=page, limit=limit)
        return result.to_dict("channels")

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to search channels: {str(e)}")

def get_watch_history_handler(request: Request, token: str, user_id: str):
    """Watched videos of the calling user"""
    try:
        verify_token(token)
        return {"watch_history": user_service.get_watch_history(get_db(), user_id)}

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get watch history: {str(e)}")

def change_password_handler(request: Request, password_data: Dict[str, Any]):
    """Change password after checking the old one"""
    try:
        verify_token(password_data.get("token", ""))

        user_service.change_password(
            get_db(),
            password_data.get("user_id"),
            password_data.get("old_password"),
            password_data.get("new_password"),
        )
        return {"success": True, "message": "Password changed successfully"}

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to change password: {str(e)}")

def update_avatar_handler(request: Request, avatar_data: Dict[str, Any]):
    """Point the account at an already-uploaded avatar"""
    try:
        verify_token(avatar_data.get("token", ""))
        return user_service.update_avatar(get_db(), avatar_data.get("user_id"), avatar_data.get("avatar"))

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update avatar: {str(e)}")

def update_cover_image_handler(request: Request, cover_data: Dict[str, Any]):
    try:
        verify_token(cover_data.get("token", ""))
        return user_service.update_cover_image(get_db(), cover_data.get("user_id"), cover_data.get("cover_image"))

    except HTTPException:
        raise
    except CoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update cover image: {str(e)}")
