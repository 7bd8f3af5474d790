"""
ofsc: Resilient async client for Oracle Field Service Cloud.

A Python library for talking to the OFSC REST API with:
- OAuth client-credentials authentication with transparent token renewal
- Automatic retry with exponential backoff on rate limiting (HTTP 429)
- Offset pagination over whole collections
- Batched bulk mutations with cooldown pauses
- CSV/XML export helpers and a local record store

Example:
    >>> from ofsc import Credentials, OFSCClient
    >>>
    >>> credentials = Credentials(
    ...     client_id="my-client",
    ...     client_secret="...",
    ...     instance_url="my-instance",
    ... )
    >>>
    >>> async with OFSCClient(credentials) as client:
    ...     resources = await client.get_all_resources()
    ...     activities = await client.get_all_activities(
    ...         resources="FIELD_TEAM", date_from="2024-01-01", date_to="2024-01-31"
    ...     )
"""

from ofsc.client import OFSCClient
from ofsc.core.models import (
    BatchConfig,
    Credentials,
    FetchResult,
    MutationResult,
    MutationStatus,
    PaginationStrategy,
    RetryConfig,
    ThrottleConfig,
)
from ofsc.endpoints import BaseEndpoint, get_endpoint, register_endpoint
from ofsc.exceptions import (
    AuthError,
    OFSCError,
    RateLimitExhausted,
    RequestError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "OFSCClient",
    # Configuration models
    "Credentials",
    "RetryConfig",
    "ThrottleConfig",
    "BatchConfig",
    "PaginationStrategy",
    # Result models
    "FetchResult",
    "MutationResult",
    "MutationStatus",
    # Endpoints
    "BaseEndpoint",
    "get_endpoint",
    "register_endpoint",
    # Errors
    "OFSCError",
    "ValidationError",
    "AuthError",
    "RequestError",
    "RateLimitExhausted",
    # Version
    "__version__",
]
