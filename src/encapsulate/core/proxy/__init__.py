"""Proxy functionality: forwarding surfaces with self identity rewriting."""

from encapsulate.core.proxy.core import (
    Proxy,
    build_proxy,
    enumerate_methods,
    forwarded_names,
    proxy_target,
)

__all__ = [
    "Proxy",
    "build_proxy",
    "enumerate_methods",
    "forwarded_names",
    "proxy_target",
]
