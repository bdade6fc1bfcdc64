"""
Generator registry — lookup of generators by kind.

The use cases never instantiate generators themselves; they ask the
registry for the kind named in the configuration.
"""

from __future__ import annotations

import logging
from typing import Any

from clientgen.adapters.base import Generator
from clientgen.core.models.generation import GeneratorSettings

logger = logging.getLogger(__name__)


class GeneratorRegistry:
    """Registry of generators keyed by name."""

    def __init__(self) -> None:
        self._generators: dict[str, Generator] = {}

    def register(self, generator: Generator) -> None:
        name = generator.name
        if name in self._generators:
            logger.warning("Overwriting existing generator: %s", name)
        self._generators[name] = generator
        logger.debug("Registered generator: %s", name)

    def get(self, name: str) -> Generator | None:
        """Look up a generator by name."""
        return self._generators.get(name)

    def list_generators(self) -> list[str]:
        return list(self._generators.keys())

    def generator_status(self) -> dict[str, dict[str, Any]]:
        """Availability of every registered generator."""
        status = {}
        for name, generator in self._generators.items():
            try:
                available = generator.is_available()
            except Exception:
                available = False
            status[name] = {
                "name": name,
                "available": available,
                "type": generator.__class__.__name__,
            }
        return status

    @classmethod
    def from_settings(cls, settings: GeneratorSettings) -> GeneratorRegistry:
        """Registry holding the real generators configured by ``settings``."""
        from clientgen.adapters.containers.docker import ContainerGenerator
        from clientgen.adapters.shell.command import LocalGenerator

        registry = cls()
        registry.register(ContainerGenerator(runtime=settings.runtime))
        registry.register(LocalGenerator(command=settings.command))
        return registry
