"""
Entity store interface.

One document collection per entity type, addressed by name. Documents are
plain dicts keyed by a string ``id``; the backend's own ``_id`` never leaks
out. Filters use the MongoDB query language subset described in
``memory_store.matches``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

Document = Dict[str, Any]


class EntityStore(ABC):

    @abstractmethod
    def create_index(self, collection: str, fields: Sequence[str], unique: bool = False) -> None:
        ...

    @abstractmethod
    def insert_one(self, collection: str, document: Document) -> Document:
        """Insert a document; raises pymongo's DuplicateKeyError on a unique index clash"""

    @abstractmethod
    def find(
        self,
        collection: str,
        filter: Optional[Document] = None,
        projection: Optional[Dict[str, int]] = None,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Document]:
        ...

    @abstractmethod
    def find_one(self, collection: str, filter: Document, projection: Optional[Dict[str, int]] = None) -> Optional[Document]:
        ...

    @abstractmethod
    def update_one(self, collection: str, filter: Document, update: Document) -> int:
        """Returns the matched count (0 or 1)"""

    @abstractmethod
    def update_many(self, collection: str, filter: Document, update: Document) -> int:
        ...

    @abstractmethod
    def find_one_and_update(self, collection: str, filter: Document, update: Document) -> Optional[Document]:
        """Returns the document after the update, or None when nothing matched"""

    @abstractmethod
    def delete_one(self, collection: str, filter: Document) -> int:
        ...

    @abstractmethod
    def delete_many(self, collection: str, filter: Document) -> int:
        ...

    @abstractmethod
    def find_one_and_delete(self, collection: str, filter: Document) -> Optional[Document]:
        ...

    @abstractmethod
    def count(self, collection: str, filter: Optional[Document] = None) -> int:
        ...

    @abstractmethod
    def aggregate(self, collection: str, stages: Sequence[Any]) -> List[Document]:
        """Run a tuple of view stages as a single round trip"""

    @abstractmethod
    def drop(self, collection: str) -> None:
        ...

    @abstractmethod
    def list_collection_names(self) -> List[str]:
        ...

    @abstractmethod
    def list_indexes(self, collection: str) -> List[Document]:
        """Index descriptions as ``{"name", "key", "unique"}`` dicts"""
