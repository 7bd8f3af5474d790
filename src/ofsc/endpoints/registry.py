from __future__ import annotations

from typing import Any, Callable, Dict

from ofsc.endpoints.activities import ActivitiesEndpoint
from ofsc.endpoints.base import BaseEndpoint
from ofsc.endpoints.resources import ResourcesEndpoint, UsersEndpoint, WorkZonesEndpoint

EndpointFactory = Callable[..., BaseEndpoint]

_REGISTRY: Dict[str, EndpointFactory] = {
    "resources": lambda **kwargs: ResourcesEndpoint(**kwargs),
    "users": lambda **kwargs: UsersEndpoint(**kwargs),
    "workzones": lambda **kwargs: WorkZonesEndpoint(**kwargs),
    "activities": lambda **kwargs: ActivitiesEndpoint(**kwargs),
}


def get_endpoint(name: str, **kwargs: Any) -> BaseEndpoint:
    key = name.lower()
    if key not in _REGISTRY:
        raise ValueError(f"Unknown endpoint: {name}")
    return _REGISTRY[key](**kwargs)


def register_endpoint(name: str, factory: EndpointFactory) -> None:
    key = name.lower()
    if key in _REGISTRY:
        raise ValueError(f"Endpoint already registered: {name}")
    _REGISTRY[key] = factory
