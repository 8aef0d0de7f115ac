"""Behavior composition: applying behaviors and reading sessions back.

Architecture Note:
    composition/ ties the stateless core/ primitives to the stateful
    storage/ services. apply() only installs stubs; contexts are created
    in storage when the stubs are first called.
"""

from encapsulate.composition.applier import application_of, apply, with_behaviors
from encapsulate.composition.models import Application
from encapsulate.composition.session import applications, reachable_methods

__all__ = [
    "Application",
    "apply",
    "with_behaviors",
    "application_of",
    "applications",
    "reachable_methods",
]
