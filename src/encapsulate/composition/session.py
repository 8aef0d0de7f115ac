"""Composition session introspection.

A session is not an object: it is the set of applications installed on a
receiver over time. These helpers read it back from the installed methods.
"""

from __future__ import annotations

import inspect

from encapsulate.composition.applier import application_of
from encapsulate.composition.models import Application


def applications(receiver: object) -> tuple[Application, ...]:
    """List the applications still reachable by name on a receiver.

    Methods inherited from base classes (or from the class of an instance)
    count. An application whose methods were all shadowed by later ones is
    no longer reachable and is not listed.

    Args:
        receiver: Class or object to inspect.

    Returns:
        Applications ordered by slot key, oldest first.
    """
    found: dict[int, Application] = {}
    for name in dir(receiver):
        app = application_of(inspect.getattr_static(receiver, name, None))
        if app is not None:
            found.setdefault(app.slot_key.index, app)
    return tuple(found[index] for index in sorted(found))


def reachable_methods(receiver: object, application: Application) -> tuple[str, ...]:
    """Names of an application's methods still resolving to its own stubs.

    Args:
        receiver: Class or object the application was installed on.
        application: Record returned by application_of() or applications().

    Returns:
        Method names not shadowed by a later application.
    """
    reachable = []
    for name in application.methods:
        app = application_of(inspect.getattr_static(receiver, name, None))
        if app is not None and app.slot_key == application.slot_key:
            reachable.append(name)
    return tuple(reachable)
