from __future__ import annotations

from abc import ABC
from urllib.parse import urlencode

from ofsc.core.models import Credentials, PaginationStrategy
from ofsc.core.pagination import EndpointBuilder


class BaseEndpoint(ABC):
    """
    Abstract description of a paginated collection on the core API.

    Subclasses set the class attributes and, when the collection takes
    filters, override build_params and validate.

    Attributes:
        name (str): Registry name (e.g. "resources")
        path (str): Path below /rest/ofscCore/v1 (e.g. "resources/")
        strategy (PaginationStrategy): How this collection paginates
        page_size (int): Limit requested for the first page

    Example Implementation:
        >>> class InventoryTypesEndpoint(BaseEndpoint):
        ...     name = "inventoryTypes"
        ...     path = "inventoryTypes/"
    """

    name: str
    path: str
    strategy: PaginationStrategy = PaginationStrategy.TOTAL_RESULTS
    page_size: int = 100

    def validate(self) -> None:
        """Check caller input before any network call. Raises ValidationError."""

    def build_params(self, offset: int, limit: int) -> dict[str, str]:
        return {"offset": str(offset), "limit": str(limit)}

    def url(self, credentials: Credentials, offset: int, limit: int) -> str:
        query = urlencode(self.build_params(offset, limit))
        return f"{credentials.core_url}/{self.path}?{query}"

    def endpoint_builder(self, credentials: Credentials) -> EndpointBuilder:
        def build(offset: int, limit: int) -> str:
            return self.url(credentials, offset, limit)

        return build
