import logging
from typing import Any, Dict, List, Optional

import bcrypt
from pymongo.errors import DuplicateKeyError

from vidtube import config
from vidtube.db.init_collections import check_document
from vidtube.db.store import EntityStore
from vidtube.errors import ConflictError, NotFoundError, ValidationError
from vidtube.ids import ensure_id, new_id, utc_now
from vidtube.services.common import optional_text, require_text
from vidtube.views import build_one, build_paged_view, build_view
from vidtube.views.pagination import Page

logger = logging.getLogger(__name__)

# Never leaves the service layer
PRIVATE_FIELDS = {"password_hash": 0, "refresh_token": 0}


def normalize_username(username: Any) -> str:
    return require_text(username, "Username").lower()


def normalize_email(email: Any) -> str:
    return require_text(email, "Email").lower()


def hash_password(password: str) -> str:
    """Hash password with bcrypt"""
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against hash"""
    return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))


def register_user(store: EntityStore, username: str, email: str, full_name: str, password: str,
                  avatar: Optional[str] = None, cover_image: Optional[str] = None) -> Dict[str, Any]:
    """Create an account; username and email are unique case-insensitively"""
    username = normalize_username(username)
    email = normalize_email(email)
    full_name = require_text(full_name, "Full name")
    password = require_text(password, "Password")

    existing = store.find_one("users", {"$or": [{"username": username}, {"email": email}]}, {"id": 1})
    if existing:
        raise ConflictError("User with email or username already exists")

    now = utc_now()
    user = {
        "id": new_id(),
        "username": username,
        "email": email,
        "full_name": full_name,
        "avatar": avatar,
        "cover_image": cover_image,
        "password_hash": hash_password(password),
        "refresh_token": None,
        "watch_history": [],
        "created_at": now,
        "updated_at": now,
    }
    check_document("users", user)

    try:
        store.insert_one("users", user)
    except DuplicateKeyError:
        # Lost a race with a concurrent registration
        raise ConflictError("User with email or username already exists") from None

    logger.info(f"👤 Registered user {username} ({user['id']})")
    return get_current_user(store, user["id"])


def get_current_user(store: EntityStore, user_id: str) -> Dict[str, Any]:
    ensure_id(user_id, "user ID")
    user = store.find_one("users", {"id": user_id}, PRIVATE_FIELDS)
    if not user:
        raise NotFoundError("User not found")
    return user


def update_account_details(store: EntityStore, user_id: str, full_name: Optional[str] = None,
                           email: Optional[str] = None) -> Dict[str, Any]:
    ensure_id(user_id, "user ID")
    changes: Dict[str, Any] = {}
    full_name = optional_text(full_name, "Full name")
    if full_name:
        changes["full_name"] = full_name
    if email is not None:
        changes["email"] = normalize_email(email)
    if not changes:
        raise ValidationError("Full name or email is required")

    if "email" in changes and store.count("users", {"email": changes["email"], "id": {"$ne": user_id}}):
        raise ConflictError("Email already registered")

    changes["updated_at"] = utc_now()
    try:
        matched = store.update_one("users", {"id": user_id}, {"$set": changes})
    except DuplicateKeyError:
        raise ConflictError("Email already registered") from None
    if not matched:
        raise NotFoundError("User not found")

    return get_current_user(store, user_id)


def change_password(store: EntityStore, user_id: str, old_password: str, new_password: str) -> None:
    """Replace the password hash once the old password checks out"""
    ensure_id(user_id, "user ID")
    if not old_password or not new_password:
        raise ValidationError("Old and new passwords are required")
    if old_password == new_password:
        raise ValidationError("New password cannot be the same as the old password")
    new_password = require_text(new_password, "New password")

    user = store.find_one("users", {"id": user_id}, {"password_hash": 1})
    if not user:
        raise NotFoundError("User not found")
    if not verify_password(old_password, user["password_hash"]):
        raise ValidationError("Incorrect old password")

    store.update_one("users", {"id": user_id}, {"$set": {
        "password_hash": hash_password(new_password),
        "updated_at": utc_now(),
    }})
    logger.info(f"🔑 Password changed for user {user_id}")


def update_avatar(store: EntityStore, user_id: str, avatar_url: str) -> Dict[str, Any]:
    return _set_image(store, user_id, "avatar", require_text(avatar_url, "Avatar URL"))


def update_cover_image(store: EntityStore, user_id: str, cover_image_url: str) -> Dict[str, Any]:
    return _set_image(store, user_id, "cover_image", require_text(cover_image_url, "Cover image URL"))


def _set_image(store: EntityStore, user_id: str, field: str, url: str) -> Dict[str, Any]:
    # URLs point at already-uploaded media
    ensure_id(user_id, "user ID")
    if not store.update_one("users", {"id": user_id}, {"$set": {field: url, "updated_at": utc_now()}}):
        raise NotFoundError("User not found")
    return get_current_user(store, user_id)


def get_channel_profile(store: EntityStore, username: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """Public channel card with subscriber counts and the viewer's subscription flag"""
    username = normalize_username(username)
    return build_one(store, "channel", {"username": username}, viewer_id, label="Channel")


def search_channels(store: EntityStore, query: Optional[str] = None, viewer_id: Optional[str] = None,
                    page: int = 1, limit: int = config.DEFAULT_PAGE_LIMIT,
                    sort_by: Optional[str] = None, sort_type: Optional[str] = "desc") -> Page:
    return build_paged_view(store, "channel", sort_by=sort_by, sort_type=sort_type,
                            page=page, limit=limit, viewer_id=viewer_id, search=query)


def get_watch_history(store: EntityStore, user_id: str) -> List[Dict[str, Any]]:
    ensure_id(user_id, "user ID")
    rows = build_view(store, "watch_history", {"id": user_id}, viewer_id=user_id)
    if not rows:
        raise NotFoundError("User not found")
    return rows[0].get("watch_history", [])
