"""Tool catalogue.

Importing this package registers every tool in :data:`REGISTRY`.
"""

from schemagov.tools import catalog, concepts, datasets, meta, ontology, territory, vocabulary  # noqa: F401
from schemagov.tools.registry import REGISTRY, ToolSpec, describe_tools, tool

__all__ = [
    "REGISTRY",
    "ToolSpec",
    "describe_tools",
    "tool",
]
