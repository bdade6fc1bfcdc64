"""
Domain models — Pydantic types for client generation.

All models are re-exported here for convenient access:

    from clientgen.core.models import GenerationConfig, GeneratorInvocation, Receipt
"""

from clientgen.core.models.generation import (
    CONTAINER_MOUNT,
    GenerationConfig,
    GeneratorInvocation,
    GeneratorSettings,
    PermissionSettings,
)
from clientgen.core.models.receipt import Receipt

__all__ = [
    # generation.py
    "CONTAINER_MOUNT",
    "GenerationConfig",
    "GeneratorInvocation",
    "GeneratorSettings",
    "PermissionSettings",
    # receipt.py
    "Receipt",
]
