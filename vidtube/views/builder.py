import logging
from typing import Any, Dict, List, Optional

from vidtube.db.store import EntityStore
from vidtube.errors import NotFoundError
from vidtube.views.definitions import VIEWS, ViewDefinition
from vidtube.views.plan import ViewPlan

logger = logging.getLogger(__name__)


def get_view(name: str) -> ViewDefinition:
    try:
        return VIEWS[name]
    except KeyError:
        raise ValueError(f"Unknown view: {name}") from None


def build_view(store: EntityStore, view: str, filter: Optional[Dict[str, Any]] = None,
               viewer_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Rows of ``view`` matching ``filter``, enriched for ``viewer_id``.

    The filter is applied before any join and the whole plan runs as a single
    aggregate call. Zero rows is a normal result here; callers that need a
    row use build_one.
    """
    definition = get_view(view)
    plan = ViewPlan()
    if filter:
        plan.match(filter)
    plan.extend(definition.enrich(viewer_id))
    return store.aggregate(definition.collection, plan.build())


def build_one(store: EntityStore, view: str, filter: Dict[str, Any],
              viewer_id: Optional[str] = None, label: str = "Resource") -> Dict[str, Any]:
    rows = build_view(store, view, filter, viewer_id)
    if not rows:
        raise NotFoundError(f"{label} not found")
    return rows[0]
