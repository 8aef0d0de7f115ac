"""Behavior functionality: models, decorator, and normalization."""

from encapsulate.core.behavior.core import as_behavior, behavior
from encapsulate.core.behavior.models import BehaviorModule, is_private_name

__all__ = [
    # Models
    "BehaviorModule",
    "is_private_name",
    # Core
    "behavior",
    "as_behavior",
]
