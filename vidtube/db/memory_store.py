"""
In-process entity store.

Keeps every collection as a list of dicts behind one re-entrant lock, so each
public call is atomic with respect to every other call, the same guarantee a
MongoDB server gives single-document operations. Unique indexes are enforced
on insert and update and surface as pymongo's ``DuplicateKeyError``.

View stages are evaluated directly instead of being compiled to a pipeline.
"""

import copy
import logging
import operator
import re
import threading
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pymongo.errors import DuplicateKeyError

from vidtube.db.store import Document, EntityStore
from vidtube.views.stages import Count, Flag, JoinMany, JoinOne, Limit, Match, Project, Skip, Sort

logger = logging.getLogger(__name__)

_MISSING = object()

_COMPARISONS = {
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
}


# =============================================================================
# QUERY EVALUATION
# =============================================================================

def _lookup(document: Document, path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return _MISSING
    return value


def _equals(value: Any, expected: Any) -> bool:
    # null matches a missing field
    if value is _MISSING:
        value = None
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _apply_operator(value: Any, op: str, arg: Any, condition: Dict[str, Any]) -> bool:
    if op == "$eq":
        return _equals(value, arg)
    if op == "$ne":
        return not _equals(value, arg)
    if op == "$in":
        return any(_equals(value, item) for item in arg)
    if op == "$nin":
        return not any(_equals(value, item) for item in arg)
    if op == "$exists":
        return (value is not _MISSING) == bool(arg)
    if op in _COMPARISONS:
        if value is _MISSING or value is None:
            return False
        return _COMPARISONS[op](value, arg)
    if op == "$regex":
        flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
        return isinstance(value, str) and re.search(arg, value, flags) is not None
    raise ValueError(f"Unsupported query operator: {op}")


def _match_field(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
        return all(
            _apply_operator(value, op, arg, condition)
            for op, arg in condition.items()
            if op != "$options"
        )
    return _equals(value, condition)


def matches(document: Document, query: Optional[Document]) -> bool:
    """Evaluate a MongoDB-style filter against one document"""
    for key, condition in (query or {}).items():
        if key == "$or":
            if not any(matches(document, q) for q in condition):
                return False
        elif key == "$and":
            if not all(matches(document, q) for q in condition):
                return False
        elif not _match_field(_lookup(document, key), condition):
            return False
    return True


def _joins(local: Any, foreign: Any) -> bool:
    local = None if local is _MISSING else local
    foreign = None if foreign is _MISSING else foreign
    local_values = local if isinstance(local, list) else [local]
    foreign_values = foreign if isinstance(foreign, list) else [foreign]
    return any(l == f for l in local_values for f in foreign_values)


def _project(document: Document, projection: Optional[Dict[str, int]]) -> Document:
    if not projection:
        return copy.deepcopy(document)
    projection = {k: v for k, v in projection.items() if k != "_id"}
    if any(projection.values()):
        return {k: copy.deepcopy(document[k]) for k, v in projection.items() if v and k in document}
    return {k: copy.deepcopy(v) for k, v in document.items() if k not in projection}


def _sort_key(value: Any) -> Tuple[int, Any]:
    if value is _MISSING or value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (4, int(value))
    if isinstance(value, (int, float)):
        return (1, value)
    return (2, str(value))


def _sort(documents: List[Document], keys: Sequence[Tuple[str, int]]) -> List[Document]:
    result = list(documents)
    # Stable sorts applied from the least significant key
    for name, direction in reversed(list(keys)):
        result.sort(key=lambda d: _sort_key(_lookup(d, name)), reverse=direction < 0)
    return result


def _apply_update(document: Document, update: Document) -> None:
    for op, changes in update.items():
        for path, arg in changes.items():
            if op == "$set":
                document[path] = copy.deepcopy(arg)
            elif op == "$inc":
                document[path] = document.get(path, 0) + arg
            elif op == "$addToSet":
                items = arg["$each"] if isinstance(arg, dict) and "$each" in arg else [arg]
                current = document.setdefault(path, [])
                for item in items:
                    if item not in current:
                        current.append(item)
            elif op == "$pull":
                document[path] = [i for i in document.get(path, []) if not _match_field(i, arg)]
            else:
                raise ValueError(f"Unsupported update operator: {op}")


# =============================================================================
# STORE
# =============================================================================

class MemoryStore(EntityStore):
    """Thread-safe in-memory collections with unique index enforcement"""

    def __init__(self):
        self._collections: Dict[str, List[Document]] = defaultdict(list)
        self._indexes: Dict[str, List[Tuple[Tuple[str, ...], bool]]] = defaultdict(list)
        self._lock = threading.RLock()

    # -- indexes ----------------------------------------------------------

    def create_index(self, collection: str, fields: Sequence[str], unique: bool = False) -> None:
        key = tuple(fields)
        with self._lock:
            if any(existing == key for existing, _ in self._indexes[collection]):
                return
            if unique:
                seen = set()
                for document in self._collections[collection]:
                    value = self._index_value(document, key)
                    if value in seen:
                        raise DuplicateKeyError(f"E11000 duplicate key error building index {key}", 11000)
                    seen.add(value)
            self._indexes[collection].append((key, unique))
            logger.debug(f"Index created on {collection}: {key} (unique={unique})")

    def list_indexes(self, collection: str) -> List[Document]:
        with self._lock:
            return [
                {"name": "_".join(f"{f}_1" for f in fields), "key": {f: 1 for f in fields}, "unique": unique}
                for fields, unique in self._indexes[collection]
            ]

    @staticmethod
    def _index_value(document: Document, fields: Tuple[str, ...]) -> Tuple[Any, ...]:
        values = []
        for name in fields:
            value = _lookup(document, name)
            values.append(None if value is _MISSING or value is None else repr(value))
        return tuple(values)

    def _check_unique(self, collection: str, document: Document, ignore: Optional[Document] = None) -> None:
        for fields, unique in self._indexes[collection]:
            if not unique:
                continue
            value = self._index_value(document, fields)
            for other in self._collections[collection]:
                if other is ignore:
                    continue
                if self._index_value(other, fields) == value:
                    raise DuplicateKeyError(
                        f"E11000 duplicate key error collection: {collection} "
                        f"index: {'_'.join(fields)} dup key: {value}",
                        11000,
                    )

    # -- writes -----------------------------------------------------------

    def insert_one(self, collection: str, document: Document) -> Document:
        stored = copy.deepcopy(document)
        with self._lock:
            self._check_unique(collection, stored)
            self._collections[collection].append(stored)
        return document

    def _update(self, collection: str, filter: Document, update: Document, many: bool) -> List[Document]:
        updated = []
        for document in self._collections[collection]:
            if not matches(document, filter):
                continue
            candidate = copy.deepcopy(document)
            _apply_update(candidate, update)
            self._check_unique(collection, candidate, ignore=document)
            document.clear()
            document.update(candidate)
            updated.append(document)
            if not many:
                break
        return updated

    def update_one(self, collection: str, filter: Document, update: Document) -> int:
        with self._lock:
            return len(self._update(collection, filter, update, many=False))

    def update_many(self, collection: str, filter: Document, update: Document) -> int:
        with self._lock:
            return len(self._update(collection, filter, update, many=True))

    def find_one_and_update(self, collection: str, filter: Document, update: Document) -> Optional[Document]:
        with self._lock:
            updated = self._update(collection, filter, update, many=False)
            return copy.deepcopy(updated[0]) if updated else None

    def _delete(self, collection: str, filter: Document, many: bool) -> List[Document]:
        removed = []
        kept = []
        for document in self._collections[collection]:
            if matches(document, filter) and (many or not removed):
                removed.append(document)
            else:
                kept.append(document)
        self._collections[collection] = kept
        return removed

    def delete_one(self, collection: str, filter: Document) -> int:
        with self._lock:
            return len(self._delete(collection, filter, many=False))

    def delete_many(self, collection: str, filter: Document) -> int:
        with self._lock:
            return len(self._delete(collection, filter, many=True))

    def find_one_and_delete(self, collection: str, filter: Document) -> Optional[Document]:
        with self._lock:
            removed = self._delete(collection, filter, many=False)
            return removed[0] if removed else None

    def drop(self, collection: str) -> None:
        with self._lock:
            self._collections.pop(collection, None)
            self._indexes.pop(collection, None)

    # -- reads ------------------------------------------------------------

    def find(
        self,
        collection: str,
        filter: Optional[Document] = None,
        projection: Optional[Dict[str, int]] = None,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Document]:
        with self._lock:
            rows = [d for d in self._collections[collection] if matches(d, filter)]
            if sort:
                rows = _sort(rows, sort)
            rows = rows[skip:]
            if limit:
                rows = rows[:limit]
            return [_project(d, projection) for d in rows]

    def find_one(self, collection: str, filter: Document, projection: Optional[Dict[str, int]] = None) -> Optional[Document]:
        rows = self.find(collection, filter, projection, limit=1)
        return rows[0] if rows else None

    def count(self, collection: str, filter: Optional[Document] = None) -> int:
        with self._lock:
            return sum(1 for d in self._collections[collection] if matches(d, filter))

    def list_collection_names(self) -> List[str]:
        with self._lock:
            return sorted(set(self._collections) | set(self._indexes))

    def aggregate(self, collection: str, stages: Sequence[Any]) -> List[Document]:
        with self._lock:
            rows = [copy.deepcopy(d) for d in self._collections[collection]]
            return self._run(rows, stages)

    def _run(self, rows: List[Document], stages: Sequence[Any]) -> List[Document]:
        for stage in stages:
            if isinstance(stage, Match):
                rows = [row for row in rows if matches(row, stage.filter)]
            elif isinstance(stage, (JoinOne, JoinMany)):
                rows = [self._join(row, stage) for row in rows]
            elif isinstance(stage, Count):
                foreign = self._collections[stage.from_]
                for row in rows:
                    local = _lookup(row, stage.local_field)
                    row[stage.as_] = sum(1 for d in foreign if _joins(local, _lookup(d, stage.foreign_field)))
            elif isinstance(stage, Flag):
                foreign = self._collections[stage.from_]
                for row in rows:
                    if stage.actor_id is None:
                        row[stage.as_] = False
                        continue
                    local = _lookup(row, stage.local_field)
                    row[stage.as_] = any(
                        _joins(local, _lookup(d, stage.foreign_field))
                        and _equals(_lookup(d, stage.actor_field), stage.actor_id)
                        for d in foreign
                    )
            elif isinstance(stage, Project):
                if stage.include:
                    rows = [_project(row, {f: 1 for f in stage.include}) for row in rows]
                else:
                    rows = [_project(row, {f: 0 for f in stage.exclude}) for row in rows]
            elif isinstance(stage, Sort):
                rows = _sort(rows, stage.keys)
            elif isinstance(stage, Skip):
                rows = rows[stage.n:]
            elif isinstance(stage, Limit):
                rows = rows[:stage.n]
            else:
                raise ValueError(f"Unsupported view stage: {stage!r}")
        return rows

    def _join(self, row: Document, stage: Any) -> Document:
        local = _lookup(row, stage.local_field)
        related = [
            copy.deepcopy(d)
            for d in self._collections[stage.from_]
            if _joins(local, _lookup(d, stage.foreign_field))
        ]
        related = self._run(related, stage.stages)
        if stage.fields:
            related = [_project(d, {f: 1 for f in stage.fields}) for d in related]
        if isinstance(stage, JoinOne):
            row[stage.as_] = related[0] if related else None
        else:
            row[stage.as_] = related
        return row
