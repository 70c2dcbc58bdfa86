from datetime import datetime, timezone
from typing import Any

from bson import ObjectId

from vidtube.errors import ValidationError


def new_id() -> str:
    """Mongo-style 24-hex id"""
    return str(ObjectId())


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value)


def ensure_id(value: Any, label: str = "ID") -> str:
    if not is_valid_id(value):
        raise ValidationError(f"Invalid {label}")
    return value


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()
