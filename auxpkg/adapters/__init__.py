"""Adapters — tool bindings for clone, build and install.

Public re-exports for convenient access.
"""

from auxpkg.adapters.base import Adapter, ExecutionContext
from auxpkg.adapters.build.makedeb import MakedebAdapter
from auxpkg.adapters.mock import MockAdapter
from auxpkg.adapters.registry import AdapterRegistry
from auxpkg.adapters.system.apt import AptAdapter
from auxpkg.adapters.vcs.git import GitAdapter

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "AptAdapter",
    "ExecutionContext",
    "GitAdapter",
    "MakedebAdapter",
    "MockAdapter",
]
