"""ORM base and model lookup.

`Base` is importable without pulling in the domain modules, which themselves
import `app.core.database`. Model classes (`app.models.Idea`, ...) resolve on
first attribute access through `app.models.registry`.
"""

import importlib

from app.models.base import Base

__all__ = ["Base"]


def __getattr__(name: str):
    registry = importlib.import_module("app.models.registry")
    if name in registry.__all__:
        return getattr(registry, name)
    raise AttributeError(f"module 'app.models' has no attribute {name!r}")
