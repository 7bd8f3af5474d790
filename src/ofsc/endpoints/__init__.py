"""Collection endpoints and registry."""

from ofsc.endpoints.activities import ActivitiesEndpoint
from ofsc.endpoints.base import BaseEndpoint
from ofsc.endpoints.registry import get_endpoint, register_endpoint
from ofsc.endpoints.resources import ResourcesEndpoint, UsersEndpoint, WorkZonesEndpoint

__all__ = [
    "BaseEndpoint",
    "ResourcesEndpoint",
    "UsersEndpoint",
    "WorkZonesEndpoint",
    "ActivitiesEndpoint",
    "get_endpoint",
    "register_endpoint",
]
