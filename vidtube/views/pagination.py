"""
Pagination & filter composition for list views.

Search, equality and visibility filters are merged into one match that runs
before enrichment; the same match feeds a separate count query, so the total
never depends on the requested window.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from vidtube import config
from vidtube.db.store import EntityStore
from vidtube.errors import ValidationError
from vidtube.views.builder import get_view
from vidtube.views.definitions import ViewDefinition
from vidtube.views.filters import combine, search_filter, visibility_filter
from vidtube.views.plan import ViewPlan

logger = logging.getLogger(__name__)


@dataclass
class Page:
    records: List[Dict[str, Any]]
    total_count: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit) if self.total_count else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    def to_dict(self, key: str = "records") -> Dict[str, Any]:
        return {
            key: self.records,
            "pagination": {
                "total": self.total_count,
                "page": self.page,
                "limit": self.limit,
                "total_pages": self.total_pages,
                "has_more": self.has_next_page,
            },
        }


def validate_window(page: Any, limit: Any):
    """page and limit must be positive integers; nothing is clamped"""
    for name, value in (("page", page), ("limit", limit)):
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValidationError(f"{name} must be a positive integer")
    if limit > config.MAX_PAGE_LIMIT:
        raise ValidationError(f"limit must not exceed {config.MAX_PAGE_LIMIT}")


def resolve_sort(definition: ViewDefinition, sort_by: Optional[str],
                 sort_type: Optional[str]) -> Tuple[Tuple[str, int], ...]:
    field = sort_by if sort_by in definition.sort_fields else definition.default_sort
    direction = 1 if (sort_type or "").lower() == "asc" else -1
    # id breaks ties so pages never overlap on equal sort values
    return ((field, direction), ("id", direction))


def compose_filter(definition: ViewDefinition, filter: Optional[Dict[str, Any]],
                   viewer_id: Optional[str], search: Optional[str]) -> Dict[str, Any]:
    search_clause = None
    if search and search.strip() and definition.search_fields:
        search_clause = search_filter(search, definition.search_fields)

    visibility_clause = None
    if definition.published_field:
        visibility_clause = visibility_filter(viewer_id, definition.published_field, definition.owner_field)

    return combine(filter, search_clause, visibility_clause)


def build_paged_view(store: EntityStore, view: str, filter: Optional[Dict[str, Any]] = None,
                     sort_by: Optional[str] = None, sort_type: Optional[str] = "desc",
                     page: int = 1, limit: int = config.DEFAULT_PAGE_LIMIT,
                     viewer_id: Optional[str] = None, search: Optional[str] = None) -> Page:
    """One page of ``view`` plus the total row count across all pages"""
    validate_window(page, limit)
    definition = get_view(view)
    match = compose_filter(definition, filter, viewer_id, search)

    total_count = store.count(definition.collection, match)

    plan = ViewPlan()
    if match:
        plan.match(match)
    plan.sort(*resolve_sort(definition, sort_by, sort_type))
    if page > 1:
        plan.skip((page - 1) * limit)
    plan.limit(limit)
    plan.extend(definition.enrich(viewer_id))

    records = store.aggregate(definition.collection, plan.build())
    logger.debug(f"Paged {view}: page={page} limit={limit} returned={len(records)} total={total_count}")
    return Page(records=records, total_count=total_count, page=page, limit=limit)
