import re
from typing import Any, Dict, List, Optional, Sequence


def search_filter(search: str, fields: Sequence[str]) -> Dict[str, Any]:
    """Case-insensitive substring match on any of ``fields``"""
    pattern = re.escape(search.strip())
    return {"$or": [{f: {"$regex": pattern, "$options": "i"}} for f in fields]}


def visibility_filter(viewer_id: Optional[str], published_field: str = "is_published",
                      owner_field: str = "owner") -> Dict[str, Any]:
    """Published rows, plus the viewer's own unpublished ones"""
    if viewer_id is None:
        return {published_field: True}
    return {"$or": [{published_field: True}, {owner_field: viewer_id}]}


def combine(*clauses: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    parts: List[Dict[str, Any]] = [c for c in clauses if c]
    if not parts:
        return {}
    if len(parts) == 1:
        return parts[0]
    return {"$and": parts}
