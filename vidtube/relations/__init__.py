from vidtube.relations.cascade import cascade_delete
from vidtube.relations.toggle import (
    EdgeType,
    ToggleResult,
    ToggleState,
    toggle_edge,
    toggle_like,
    toggle_subscription,
)

__all__ = [
    "cascade_delete",
    "EdgeType",
    "ToggleResult",
    "ToggleState",
    "toggle_edge",
    "toggle_like",
    "toggle_subscription",
]
