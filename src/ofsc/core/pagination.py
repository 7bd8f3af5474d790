from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from ofsc.core.models import (
    CollectionResult,
    Page,
    PageProgress,
    PaginationStrategy,
    ThrottleConfig,
)
from ofsc.core.requester import ResilientRequester
from ofsc.core.throttle import CallThrottle
from ofsc.exceptions import RequestError

EndpointBuilder = Callable[[int, int], str]
ProgressCallback = Callable[[PageProgress], None]


class PaginatedCollector:
    """
    Walks an offset-paginated collection until it is exhausted.

    Two strategies are supported because different backend collections
    paginate differently:

    - LIMIT_ADVANCE: advance by the limit the server echoed back and stop
      on the first empty page.
    - TOTAL_RESULTS: advance by the number of items received and stop once
      ``offset + received >= totalResults`` (or ``hasMore`` is false for
      zone-style payloads).

    An empty page always ends the pass.
    """

    def __init__(
        self,
        requester: ResilientRequester,
        strategy: PaginationStrategy = PaginationStrategy.TOTAL_RESULTS,
        page_size: int = 100,
        throttle: ThrottleConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.requester = requester
        self.strategy = PaginationStrategy(strategy)
        self.page_size = page_size
        self.throttle = throttle or ThrottleConfig()
        self.sleep = sleep or requester.sleep
        self.on_progress = on_progress

    async def collect_all(
        self, endpoint_builder: EndpointBuilder, token: str
    ) -> CollectionResult:
        """
        Fetch every page and accumulate the items.

        Args:
            endpoint_builder (EndpointBuilder): Maps (offset, limit) to a page URL
            token (str): Current bearer token

        Returns:
            CollectionResult: All items and the latest valid token
        """
        throttle = CallThrottle.start(self.throttle)
        items: list[dict[str, Any]] = []
        offset = 0
        limit = self.page_size
        pages = 0

        while True:
            await throttle.before_call(self.sleep)
            logger.info(f"Fetching offset={offset}, limit={limit}")
            url = endpoint_builder(offset, limit)
            result = await self.requester.execute(url, token)
            token = result.token
            pages += 1

            if not isinstance(result.data, dict):
                kind = type(result.data).__name__
                logger.error(f"Expected a page object from {url}, got {kind}")
                raise RequestError(200, f"Malformed page: {result.data!r}", url)
            page = Page.from_payload(result.data)
            received = len(page.items)
            if received == 0:
                logger.info("No more items found. Stopping pagination.")
                break

            items.extend(page.items)
            logger.info(f"Received {received} items (Total: {len(items)})")
            if self.on_progress is not None:
                self.on_progress(PageProgress(pages, received, len(items)))

            if self.strategy is PaginationStrategy.LIMIT_ADVANCE:
                if page.limit:
                    limit = page.limit
                offset += limit
                continue

            if page.total_results is not None:
                if offset + received >= page.total_results:
                    break
            elif page.has_more is False:
                break
            offset += received

        return CollectionResult(items=items, token=token, pages_fetched=pages)
