from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ofsc.exceptions import ValidationError

DEFAULT_BACKEND_HOST = "fs.ocs.oraclecloud.com"
TOKEN_PATH = "/rest/oauthTokenService/v2/token"
CORE_API_PATH = "/rest/ofscCore/v1"


@dataclass(frozen=True)
class Credentials:
    """
    Client credentials for one OFSC instance.

    Attributes:
        client_id (str): OAuth client ID registered on the instance
        client_secret (str): OAuth client secret (hidden from repr)
        instance_url (str): Instance name, the first label of the backend host
        backend_host (str): Domain that serves the instance
    """

    client_id: str
    client_secret: str = field(repr=False)
    instance_url: str
    backend_host: str = DEFAULT_BACKEND_HOST

    @property
    def base_url(self) -> str:
        return f"https://{self.instance_url}.{self.backend_host}"

    @property
    def token_url(self) -> str:
        return f"{self.base_url}{TOKEN_PATH}"

    @property
    def core_url(self) -> str:
        return f"{self.base_url}{CORE_API_PATH}"

    @classmethod
    def from_env(cls, prefix: str = "OFSC_") -> "Credentials":
        """
        Build credentials from environment variables.

        Reads ``{prefix}CLIENT_ID``, ``{prefix}CLIENT_SECRET``,
        ``{prefix}INSTANCE_URL`` and the optional ``{prefix}BACKEND_HOST``.

        Raises:
            ValidationError: If any required variable is missing or empty
        """
        names = ("CLIENT_ID", "CLIENT_SECRET", "INSTANCE_URL")
        values = {name: os.getenv(prefix + name, "") for name in names}
        missing = [prefix + name for name, value in values.items() if not value]
        if missing:
            raise ValidationError(
                f"Missing environment variables: {', '.join(missing)}"
            )
        return cls(
            client_id=values["CLIENT_ID"],
            client_secret=values["CLIENT_SECRET"],
            instance_url=values["INSTANCE_URL"],
            backend_host=os.getenv(prefix + "BACKEND_HOST") or DEFAULT_BACKEND_HOST,
        )


@dataclass
class RetryConfig:
    """
    Configuration for retrying rate-limited (429) requests.

    Attributes:
        max_retries (int): Number of retries allowed after the first 429
        base_delay_seconds (float): Delay before the first retry without Retry-After
        max_delay_seconds (float): Cap on the exponential delay (hints are not capped)
        jitter (float): Random variation factor (0.0-1.0) for the exponential delay
    """

    max_retries: int = 5
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 60.0
    jitter: float = 0.0


@dataclass
class ThrottleConfig:
    """
    Preemptive pause applied during a collection pass.

    Attributes:
        every_n_calls (int): Pause before every n-th page fetch (0 disables)
        pause_seconds (float): Length of the pause
    """

    every_n_calls: int = 20
    pause_seconds: float = 10.0


@dataclass
class BatchConfig:
    """
    Configuration for batched mutations.

    Attributes:
        batch_size (int): Number of entities per batch
        cooldown_seconds (float): Pause between two consecutive batches
    """

    batch_size: int = 200
    cooldown_seconds: float = 10.0


@dataclass
class FetchResult:
    """Parsed payload of one resilient call and the token that produced it."""

    data: Any
    token: str


class PaginationStrategy(str, Enum):
    """How a collection pass advances its offset and decides to stop."""

    LIMIT_ADVANCE = "limit_advance"
    TOTAL_RESULTS = "total_results"


@dataclass
class Page:
    items: list[dict[str, Any]]
    offset: int | None = None
    limit: int | None = None
    total_results: int | None = None
    has_more: bool | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Page":
        if not isinstance(payload, dict):
            return cls(items=[])
        return cls(
            items=list(payload.get("items") or []),
            offset=_optional_int(payload.get("offset")),
            limit=_optional_int(payload.get("limit")),
            total_results=_optional_int(payload.get("totalResults")),
            has_more=payload.get("hasMore"),
        )


@dataclass
class PageProgress:
    """Progress signal emitted after each non-empty page."""

    page_number: int
    items_in_page: int
    items_so_far: int


@dataclass
class CollectionResult:
    items: list[dict[str, Any]]
    token: str
    pages_fetched: int = 0


class MutationStatus(str, Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"


@dataclass
class MutationResult:
    """
    Outcome of mutating one entity.

    Attributes:
        entity_id (Any): Identifier of the entity, None if it had none
        status (MutationStatus): Whether a call was issued or the entity was skipped
        data (dict[str, Any]): Mutation-specific details of the outcome
        comment (str): Human-readable reason, set for skipped entities
    """

    entity_id: Any
    status: MutationStatus
    data: dict[str, Any] = field(default_factory=dict)
    comment: str = ""


@dataclass
class BatchOutcome:
    results: list[MutationResult]
    token: str
    batches: int = 0


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
