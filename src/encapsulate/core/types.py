"""Core type definitions for encapsulate."""

from collections.abc import Callable
from typing import Any, TypeAlias

Method: TypeAlias = Callable[..., Any]
"""A behavior method body. Called with the private context as its first argument."""
