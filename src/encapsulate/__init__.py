"""encapsulate: behavior composition with private per-instance state.

Usage:
    from encapsulate import apply, behavior

    @behavior
    class HasName:
        def name(self):
            return self._name

        def set_name(self, name):
            self._name = name
            return self

    @behavior
    class IsSelfDescribing:
        def description(self):
            return f"My name is {self.name()}"

    class Person:
        pass

    apply(Person, HasName)
    apply(Person, IsSelfDescribing)

    ada = Person().set_name("Ada")
    ada.description()  # "My name is Ada"
    # Behaviors never see each other's state, only each other's methods.
"""

__version__ = "0.1.0"

# Composition
from encapsulate.composition import (
    Application,
    application_of,
    applications,
    apply,
    reachable_methods,
    with_behaviors,
)

# Configuration
from encapsulate.config import CompositionSettings, configure_logging, get_settings

# Core primitives
from encapsulate.core import (
    BehaviorModule,
    CompositionError,
    DuplicateApplicationKeyError,
    InvalidReceiverError,
    Proxy,
    SlotKey,
    as_behavior,
    behavior,
    build_proxy,
)

# Storage
from encapsulate.storage import (
    ContextStore,
    SafekeepingStore,
    SlotKeyAllocator,
    get_allocator,
    get_store,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "BehaviorModule",
    "behavior",
    "as_behavior",
    "Proxy",
    "build_proxy",
    "SlotKey",
    # Errors
    "CompositionError",
    "InvalidReceiverError",
    "DuplicateApplicationKeyError",
    # Storage
    "ContextStore",
    "SafekeepingStore",
    "get_store",
    "SlotKeyAllocator",
    "get_allocator",
    # Composition
    "apply",
    "with_behaviors",
    "Application",
    "application_of",
    "applications",
    "reachable_methods",
    # Config
    "CompositionSettings",
    "get_settings",
    "configure_logging",
]
