"""
MongoDB-backed entity store.

View stages are compiled into one aggregation pipeline. Joins become
``$lookup`` stages carrying a sub-pipeline (localField/foreignField together
with ``pipeline`` needs MongoDB 5.0+), single-valued joins are collapsed with
``$first`` and defaulted to null, counts and viewer flags are lookups reduced
with ``$size``.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database

from vidtube.db.store import Document, EntityStore
from vidtube.views.stages import Count, Flag, JoinMany, JoinOne, Limit, Match, Project, Skip, Sort

logger = logging.getLogger(__name__)


# =============================================================================
# PIPELINE COMPILATION
# =============================================================================

def _lookup(stage: Any, as_: str, pipeline: List[Document]) -> Document:
    return {
        "$lookup": {
            "from": stage.from_,
            "localField": stage.local_field,
            "foreignField": stage.foreign_field,
            "as": as_,
            "pipeline": pipeline,
        }
    }


def _compile_stage(stage: Any) -> List[Document]:
    if isinstance(stage, Match):
        return [{"$match": stage.filter}]

    if isinstance(stage, (JoinOne, JoinMany)):
        sub_pipeline = compile_pipeline(stage.stages)
        if stage.fields:
            sub_pipeline.append({"$project": {**{f: 1 for f in stage.fields}, "_id": 0}})
        else:
            sub_pipeline.append({"$unset": "_id"})
        lookup = _lookup(stage, stage.as_, sub_pipeline)
        if isinstance(stage, JoinMany):
            return [lookup]
        # Dangling foreign keys collapse to null instead of a missing field
        return [lookup, {"$addFields": {stage.as_: {"$ifNull": [{"$first": f"${stage.as_}"}, None]}}}]

    if isinstance(stage, Count):
        edges = f"_{stage.as_}_edges"
        return [
            _lookup(stage, edges, [{"$project": {"_id": 1}}]),
            {"$addFields": {stage.as_: {"$size": f"${edges}"}}},
            {"$unset": edges},
        ]

    if isinstance(stage, Flag):
        if stage.actor_id is None:
            return [{"$addFields": {stage.as_: {"$literal": False}}}]
        edges = f"_{stage.as_}_edges"
        exists = [{"$match": {stage.actor_field: stage.actor_id}}, {"$limit": 1}, {"$project": {"_id": 1}}]
        return [
            _lookup(stage, edges, exists),
            {"$addFields": {stage.as_: {"$gt": [{"$size": f"${edges}"}, 0]}}},
            {"$unset": edges},
        ]

    if isinstance(stage, Project):
        if stage.include:
            return [{"$project": {**{f: 1 for f in stage.include}, "_id": 0}}]
        return [{"$project": {f: 0 for f in stage.exclude}}]

    if isinstance(stage, Sort):
        return [{"$sort": dict(stage.keys)}]
    if isinstance(stage, Skip):
        return [{"$skip": stage.n}]
    if isinstance(stage, Limit):
        return [{"$limit": stage.n}]

    raise ValueError(f"Unsupported view stage: {stage!r}")


def compile_pipeline(stages: Sequence[Any]) -> List[Document]:
    """Translate view stages into a MongoDB aggregation pipeline"""
    pipeline: List[Document] = []
    for stage in stages:
        pipeline.extend(_compile_stage(stage))
    return pipeline


def _with_hidden_id(projection: Optional[Dict[str, int]]) -> Dict[str, int]:
    if not projection:
        return {"_id": 0}
    return {**projection, "_id": 0}


# =============================================================================
# STORE
# =============================================================================

class MongoStore(EntityStore):

    def __init__(self, database: Database):
        self.db = database

    def create_index(self, collection: str, fields: Sequence[str], unique: bool = False) -> None:
        self.db[collection].create_index([(f, ASCENDING) for f in fields], unique=unique)

    def list_indexes(self, collection: str) -> List[Document]:
        return [
            {"name": idx["name"], "key": dict(idx["key"]), "unique": bool(idx.get("unique"))}
            for idx in self.db[collection].list_indexes()
        ]

    def insert_one(self, collection: str, document: Document) -> Document:
        # Insert a shallow copy so the caller's dict isn't mutated with Mongo's _id
        self.db[collection].insert_one({**document})
        return document

    def find(
        self,
        collection: str,
        filter: Optional[Document] = None,
        projection: Optional[Dict[str, int]] = None,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Document]:
        cursor = self.db[collection].find(filter or {}, _with_hidden_id(projection))
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def find_one(self, collection: str, filter: Document, projection: Optional[Dict[str, int]] = None) -> Optional[Document]:
        return self.db[collection].find_one(filter, _with_hidden_id(projection))

    def update_one(self, collection: str, filter: Document, update: Document) -> int:
        return self.db[collection].update_one(filter, update).matched_count

    def update_many(self, collection: str, filter: Document, update: Document) -> int:
        return self.db[collection].update_many(filter, update).matched_count

    def find_one_and_update(self, collection: str, filter: Document, update: Document) -> Optional[Document]:
        return self.db[collection].find_one_and_update(
            filter,
            update,
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER,
        )

    def delete_one(self, collection: str, filter: Document) -> int:
        return self.db[collection].delete_one(filter).deleted_count

    def delete_many(self, collection: str, filter: Document) -> int:
        return self.db[collection].delete_many(filter).deleted_count

    def find_one_and_delete(self, collection: str, filter: Document) -> Optional[Document]:
        return self.db[collection].find_one_and_delete(filter, projection={"_id": 0})

    def count(self, collection: str, filter: Optional[Document] = None) -> int:
        return self.db[collection].count_documents(filter or {})

    def aggregate(self, collection: str, stages: Sequence[Any]) -> List[Document]:
        pipeline = compile_pipeline(stages) + [{"$unset": "_id"}]
        logger.debug(f"Aggregating {collection}: {pipeline}")
        return list(self.db[collection].aggregate(pipeline))

    def drop(self, collection: str) -> None:
        self.db[collection].drop()

    def list_collection_names(self) -> List[str]:
        return self.db.list_collection_names()
