"""Exceptions raised by the composition engine.

All errors surface synchronously at the call site. Nothing is retried or
swallowed; failures raised by a behavior's own method bodies propagate
unchanged and are never wrapped in these types.
"""


class CompositionError(Exception):
    """Base class for composition engine failures."""

    pass


class InvalidReceiverError(CompositionError, TypeError):
    """Raised when a receiver or calling context is not a usable object.

    Covers a missing or None calling context, objects that cannot be weakly
    referenced, objects that refuse new attributes, and proxies whose
    receiver has already been collected.
    """

    pass


class DuplicateApplicationKeyError(CompositionError, RuntimeError):
    """Raised when the slot key source hands out an index twice.

    This is an internal invariant violation and is never recovered.
    """

    pass
