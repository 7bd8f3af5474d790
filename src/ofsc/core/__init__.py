"""Resilient request layer: authentication, retries, pagination and batching."""

from ofsc.core.auth import TokenProvider
from ofsc.core.batch import BatchMutator, EmailResetMutation, EntityMutation
from ofsc.core.models import (
    BatchConfig,
    BatchOutcome,
    CollectionResult,
    Credentials,
    FetchResult,
    MutationResult,
    MutationStatus,
    Page,
    PageProgress,
    PaginationStrategy,
    RetryConfig,
    ThrottleConfig,
)
from ofsc.core.pagination import PaginatedCollector
from ofsc.core.requester import RequestStats, ResilientRequester
from ofsc.core.retry import Backoff
from ofsc.core.throttle import CallThrottle

__all__ = [
    # Components
    "TokenProvider",
    "ResilientRequester",
    "PaginatedCollector",
    "BatchMutator",
    "EntityMutation",
    "EmailResetMutation",
    # Configuration models
    "Credentials",
    "RetryConfig",
    "ThrottleConfig",
    "BatchConfig",
    "PaginationStrategy",
    # Result models
    "FetchResult",
    "Page",
    "PageProgress",
    "CollectionResult",
    "MutationResult",
    "MutationStatus",
    "BatchOutcome",
    "RequestStats",
    # Utilities
    "Backoff",
    "CallThrottle",
]
