"""Core functionalities: stateless primitives.

Architecture Note:
    core/ contains pure, stateless building blocks: slot key identity,
    the proxy factory, and behavior module definitions.
    For stateful services, see storage/ and composition/.
"""

from encapsulate.core.behavior import BehaviorModule, as_behavior, behavior, is_private_name
from encapsulate.core.errors import (
    CompositionError,
    DuplicateApplicationKeyError,
    InvalidReceiverError,
)
from encapsulate.core.identity import SlotKey
from encapsulate.core.proxy import (
    Proxy,
    build_proxy,
    enumerate_methods,
    forwarded_names,
    proxy_target,
)
from encapsulate.core.types import Method

__all__ = [
    # Types
    "Method",
    # Errors
    "CompositionError",
    "InvalidReceiverError",
    "DuplicateApplicationKeyError",
    # Identity
    "SlotKey",
    # Proxy
    "Proxy",
    "build_proxy",
    "enumerate_methods",
    "forwarded_names",
    "proxy_target",
    # Behavior
    "BehaviorModule",
    "behavior",
    "as_behavior",
    "is_private_name",
]
