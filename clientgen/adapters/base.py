"""
Generator base — the contract between the pipeline and code generators.

The pipeline only talks to generators through this protocol, never
directly to docker or to a generator CLI. Tests substitute
``MockGenerator`` without needing a container runtime.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from clientgen.core.models.generation import GeneratorInvocation
from clientgen.core.models.receipt import Receipt

# Receipt.metadata["reason"] values for failed generate steps.
REASON_INVALID = "invalid"
REASON_UNAVAILABLE = "unavailable"
REASON_TIMEOUT = "timeout"
REASON_EXIT = "exit"


class Generator(ABC):
    """Abstract base class for all generators.

    Generators write source files into ``invocation.output_dir`` and
    return a receipt. They NEVER raise for an expected failure (non-zero
    exit, timeout, missing binary); those are captured in the Receipt
    with ``metadata["reason"]`` set.

    To create a new generator:
        1. Subclass Generator
        2. Implement name, is_available, validate, command, generate
        3. Register it in the GeneratorRegistry
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The generator identifier (e.g., 'container', 'local')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the execution environment can be reached.

        Should be reasonably fast and never raise.
        """

    @abstractmethod
    def validate(self, invocation: GeneratorInvocation) -> tuple[bool, str]:
        """Validate that the invocation can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def command(self, invocation: GeneratorInvocation) -> list[str]:
        """The command line this generator would run for the invocation."""

    @abstractmethod
    def generate(self, invocation: GeneratorInvocation) -> Receipt:
        """Run the generator and return a receipt.

        MUST NOT raise for failures of the external process. A
        ``KeyboardInterrupt`` is the one exception allowed through,
        after the child process has been stopped.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
