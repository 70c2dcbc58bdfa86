from vidtube.views.builder import build_one, build_view, get_view
from vidtube.views.pagination import Page, build_paged_view

__all__ = ["build_view", "build_one", "build_paged_view", "get_view", "Page"]
