"""clientgen — regenerate OpenAPI clients through a containerized generator."""

__version__ = "0.1.0"
