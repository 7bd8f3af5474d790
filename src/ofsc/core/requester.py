from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import aiohttp
from aiohttp import ClientSession
from loguru import logger

from ofsc.core.auth import TokenProvider
from ofsc.core.models import Credentials, FetchResult, RetryConfig
from ofsc.core.retry import Backoff
from ofsc.exceptions import AuthError, RateLimitExhausted, RequestError

"""
Resilient execution of a single logical HTTP operation.

One call to ResilientRequester.execute() may hit the network several times:
once more after renewing an expired token, and once per rate-limit retry.
The caller always gets back the token that finally succeeded.
"""

HTTP_UNAUTHORIZED = 401
HTTP_TOO_MANY_REQUESTS = 429


@dataclass
class RequestStats:
    """
    Counters for one requester.

    Attributes:
        num_requests (int): HTTP requests actually sent
        num_token_renewals (int): Tokens fetched after a 401
        num_rate_limit_errors (int): 429 answers received
        num_api_errors (int): Terminal non-2xx answers (excluding 429)
    """

    num_requests: int = 0
    num_token_renewals: int = 0
    num_rate_limit_errors: int = 0
    num_api_errors: int = 0


class ResilientRequester:
    """
    Sends requests with a bearer token, renewing it and backing off as needed.

    Behaviour per logical operation:
    1. Send the request with the current token
    2. On 401, renew the token once and resend; a second 401 is an AuthError
    3. On 429, wait (Retry-After or exponential backoff) and resend while
       the retry budget lasts, then raise RateLimitExhausted
    4. Any other non-2xx answer raises RequestError
    5. On success return the parsed JSON with the token that succeeded
    """

    def __init__(
        self,
        session: ClientSession,
        credentials: Credentials,
        token_provider: TokenProvider | None = None,
        retry: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        stats: RequestStats | None = None,
    ) -> None:
        self.session = session
        self.credentials = credentials
        self.token_provider = token_provider or TokenProvider(session)
        self.retry = retry or RetryConfig()
        self.backoff = Backoff(
            base_delay_seconds=self.retry.base_delay_seconds,
            max_delay_seconds=self.retry.max_delay_seconds,
            jitter=self.retry.jitter,
        )
        self.sleep = sleep
        self.stats = stats or RequestStats()

    async def execute(
        self,
        url: str,
        token: str,
        method: str = "GET",
        json_body: dict[str, Any] | None = None,
    ) -> FetchResult:
        """
        Run one logical operation against ``url``.

        Args:
            url (str): Fully built request URL
            token (str): Current bearer token (may be empty)
            method (str): HTTP method, GET for reads and PATCH for mutations
            json_body (dict[str, Any] | None): JSON body for mutations

        Returns:
            FetchResult: Parsed payload and the token to use for the next call

        Raises:
            AuthError: If renewal fails or the renewed token is rejected
            RateLimitExhausted: If every retry was answered with 429
            RequestError: For any other non-2xx answer or transport failure
        """
        retries_left = self.retry.max_retries
        attempt_index = 0
        renewed = False

        while True:
            status, headers, body = await self._send(method, url, token, json_body)

            if status == HTTP_UNAUTHORIZED:
                if renewed:
                    logger.error(f"Renewed token rejected for {url}")
                    raise AuthError(
                        "Unauthorized after token renewal", status=status, body=body
                    )
                logger.warning("Token expired, renewing token")
                token = await self.token_provider.acquire_token(self.credentials)
                renewed = True
                self.stats.num_token_renewals += 1
                continue

            if status == HTTP_TOO_MANY_REQUESTS:
                self.stats.num_rate_limit_errors += 1
                if retries_left <= 0:
                    logger.error(
                        f"Rate limit persisted after {self.retry.max_retries} retries"
                    )
                    raise RateLimitExhausted(status, body, url)
                delay = self.backoff.compute_delay(
                    attempt_index, headers.get("Retry-After")
                )
                logger.warning(
                    f"429 received. Retrying in {delay:.2f}s "
                    f"({retries_left} retries left)"
                )
                await self.sleep(delay)
                retries_left -= 1
                attempt_index += 1
                continue

            if not 200 <= status < 300:
                self.stats.num_api_errors += 1
                raise RequestError(status, body, url)

            return FetchResult(data=self._parse(status, body, url), token=token)

    async def _send(
        self,
        method: str,
        url: str,
        token: str,
        json_body: dict[str, Any] | None,
    ) -> tuple[int, Mapping[str, str], str]:
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        logger.debug(f"{method} {url}")
        self.stats.num_requests += 1
        try:
            async with self.session.request(
                method, url, headers=headers, json=json_body
            ) as response:
                body = await response.text()
                return response.status, response.headers, body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"{method} {url} failed: {type(e).__name__}: {e}")
            raise RequestError(None, str(e), url) from e

    @staticmethod
    def _parse(status: int, body: str, url: str) -> Any:
        if not body.strip():
            return None
        try:
            return json.loads(body)
        except ValueError as e:
            raise RequestError(status, f"Malformed JSON body: {body}", url) from e
