from __future__ import annotations

from ofsc.core.models import PaginationStrategy
from ofsc.endpoints.base import BaseEndpoint


class ResourcesEndpoint(BaseEndpoint):
    name = "resources"
    path = "resources/"
    strategy = PaginationStrategy.TOTAL_RESULTS
    page_size = 100


class UsersEndpoint(BaseEndpoint):
    name = "users"
    path = "users/"
    strategy = PaginationStrategy.TOTAL_RESULTS
    page_size = 100


class WorkZonesEndpoint(BaseEndpoint):
    """Work zones answer with ``hasMore`` alongside ``totalResults``."""

    name = "workZones"
    path = "workZones/"
    strategy = PaginationStrategy.TOTAL_RESULTS
    page_size = 100
