from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from aiohttp import ClientSession
from loguru import logger

from ofsc.core.auth import TokenProvider
from ofsc.core.batch import BatchMutator, EmailResetMutation
from ofsc.core.models import (
    BatchConfig,
    Credentials,
    MutationResult,
    RetryConfig,
    ThrottleConfig,
)
from ofsc.core.pagination import PaginatedCollector, ProgressCallback
from ofsc.core.requester import RequestStats, ResilientRequester
from ofsc.endpoints import (
    ActivitiesEndpoint,
    BaseEndpoint,
    ResourcesEndpoint,
    UsersEndpoint,
    WorkZonesEndpoint,
)
from ofsc.utils import setup_logger


class OFSCClient:
    """
    Async client for one OFSC instance.

    Owns the HTTP session (unless one is passed in) and the current bearer
    token. Every operation hands its token to the core and keeps the one it
    gets back, so consecutive operations never authenticate twice for
    nothing.

    Example:
        >>> async with OFSCClient(Credentials.from_env()) as client:
        ...     resources = await client.get_all_resources()
        ...     results = await client.reset_resources_email("noreply.com")
    """

    def __init__(
        self,
        credentials: Credentials,
        token: str = "",
        retry: RetryConfig | None = None,
        throttle: ThrottleConfig | None = None,
        batch: BatchConfig | None = None,
        session: ClientSession | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        show_progress: bool = False,
        logging_level: int | None = None,
    ) -> None:
        if logging_level is not None:
            setup_logger(logging_level)
        self.credentials = credentials
        self.token = token
        self.retry = retry or RetryConfig()
        self.throttle = throttle or ThrottleConfig()
        self.batch = batch or BatchConfig()
        self.sleep = sleep
        self.show_progress = show_progress
        self.stats = RequestStats()
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "OFSCClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def session(self) -> ClientSession:
        if self._session is None:
            self._session = ClientSession()
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _requester(self) -> ResilientRequester:
        return ResilientRequester(
            session=self.session,
            credentials=self.credentials,
            token_provider=TokenProvider(self.session),
            retry=self.retry,
            sleep=self.sleep,
            stats=self.stats,
        )

    async def get_token(self) -> str:
        """Fetch a fresh token and make it the current one."""
        self.token = await TokenProvider(self.session).acquire_token(self.credentials)
        return self.token

    async def collect(
        self, endpoint: BaseEndpoint, on_progress: ProgressCallback | None = None
    ) -> list[dict[str, Any]]:
        """
        Fetch every item of a paginated collection.

        Args:
            endpoint (BaseEndpoint): Collection to walk
            on_progress (ProgressCallback | None): Called after each non-empty page

        Returns:
            list[dict[str, Any]]: All items in server order

        Raises:
            ValidationError: If the endpoint's parameters are invalid
        """
        endpoint.validate()
        collector = PaginatedCollector(
            self._requester(),
            strategy=endpoint.strategy,
            page_size=endpoint.page_size,
            throttle=self.throttle,
            sleep=self.sleep,
            on_progress=on_progress,
        )
        result = await collector.collect_all(
            endpoint.endpoint_builder(self.credentials), self.token
        )
        self.token = result.token
        logger.info(
            f"Collected {len(result.items)} {endpoint.name} "
            f"in {result.pages_fetched} pages"
        )
        return result.items

    async def get_all_resources(self) -> list[dict[str, Any]]:
        return await self.collect(ResourcesEndpoint())

    async def get_all_users(self) -> list[dict[str, Any]]:
        return await self.collect(UsersEndpoint())

    async def get_all_work_zones(self) -> list[dict[str, Any]]:
        return await self.collect(WorkZonesEndpoint())

    async def get_all_activities(
        self,
        resources: str,
        date_from: str,
        date_to: str,
        q: str | None = None,
        fields: str | None = None,
        include_non_scheduled: bool = False,
    ) -> list[dict[str, Any]]:
        """
        Fetch every activity of ``resources`` between two dates (YYYY-MM-DD).

        Raises:
            ValidationError: If a date is malformed or resources is empty
        """
        endpoint = ActivitiesEndpoint(
            resources=resources,
            date_from=date_from,
            date_to=date_to,
            q=q,
            fields=fields,
            include_non_scheduled=include_non_scheduled,
        )
        return await self.collect(endpoint)

    async def get_activity_by_id(self, activity_id: int) -> Any:
        url = f"{self.credentials.core_url}/activities/{int(activity_id)}/"
        logger.info(f"Fetching activity by ID: {url}")
        result = await self._requester().execute(url, self.token)
        self.token = result.token
        return result.data

    async def update_resource(self, resource_id: str, payload: dict[str, Any]) -> Any:
        url = f"{self.credentials.core_url}/resources/{resource_id}"
        result = await self._requester().execute(
            url, self.token, method="PATCH", json_body=payload
        )
        self.token = result.token
        return result.data

    async def reset_resources_email(
        self,
        new_domain: str = "noreply.com",
        results: list[MutationResult] | None = None,
    ) -> list[MutationResult]:
        """
        Point every resource e-mail address at ``new_domain``.

        Resources without an e-mail are ignored; resources already on the new
        domain produce SKIPPED results without any call.

        Args:
            new_domain (str): Target domain, without "@"
            results (list[MutationResult] | None): List to append results to as
                they are produced

        Returns:
            list[MutationResult]: One result per resource with an e-mail
        """
        mutation = EmailResetMutation(self.credentials, new_domain)
        resources = await self.get_all_resources()
        with_email = [resource for resource in resources if resource.get("email")]
        logger.info(f"{len(with_email)} of {len(resources)} resources have an e-mail")

        mutator = BatchMutator(
            self._requester(),
            config=self.batch,
            sleep=self.sleep,
            show_progress=self.show_progress,
        )
        outcome = await mutator.apply_in_batches(
            with_email, mutation, self.token, results
        )
        self.token = outcome.token
        return outcome.results
