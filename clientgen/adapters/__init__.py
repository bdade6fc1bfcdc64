"""Generators — bindings for the external code generators.

Public re-exports for convenient access.
"""

from clientgen.adapters.base import Generator
from clientgen.adapters.mock import MockGenerator
from clientgen.adapters.registry import GeneratorRegistry

__all__ = [
    "Generator",
    "GeneratorRegistry",
    "MockGenerator",
]
