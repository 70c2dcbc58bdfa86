"""
View stage algebra.

A view is an ordered tuple of these stages. Stores either compile them to a
MongoDB aggregation pipeline (``MongoStore``) or evaluate them directly
(``MemoryStore``); either way the whole tuple runs as one ``aggregate`` call.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Match:
    filter: Dict[str, Any]


@dataclass(frozen=True)
class JoinOne:
    """Join a single related document and collapse it to the first match or None"""
    from_: str
    local_field: str
    foreign_field: str
    as_: str
    fields: Optional[Tuple[str, ...]] = None
    stages: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class JoinMany:
    """Join every related document, keeping the list"""
    from_: str
    local_field: str
    foreign_field: str
    as_: str
    fields: Optional[Tuple[str, ...]] = None
    stages: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class Count:
    """Number of documents in ``from_`` whose foreign field equals the local field"""
    from_: str
    local_field: str
    foreign_field: str
    as_: str


@dataclass(frozen=True)
class Flag:
    """
    True when an edge exists between ``actor_id`` and this row.

    With no actor the flag is always False.
    """
    from_: str
    local_field: str
    foreign_field: str
    actor_field: str
    actor_id: Optional[str]
    as_: str


@dataclass(frozen=True)
class Project:
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Sort:
    # (field, 1 | -1) pairs, most significant first
    keys: Tuple[Tuple[str, int], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Skip:
    n: int


@dataclass(frozen=True)
class Limit:
    n: int
