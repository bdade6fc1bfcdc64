"""
Mock generator — test double for the external code generator.

Used in mock mode and in tests to exercise the whole pipeline without a
container runtime. Writes a small, configurable file tree into the
output directory, or fails on demand.
"""

from __future__ import annotations

from clientgen.adapters.base import REASON_EXIT, REASON_INVALID, Generator
from clientgen.core.models.generation import GeneratorInvocation
from clientgen.core.models.receipt import Receipt

DEFAULT_FILES = {
    "Cargo.toml": '[package]\nname = "openapi"\nversion = "1.0.0"\n',
    "src/lib.rs": "pub mod apis;\npub mod models;\n",
}


class MockGenerator(Generator):
    """Generator that writes canned files instead of running a tool.

    By default it succeeds, like the real generator, and fails with a
    non-zero return code when the specification document is missing.
    """

    def __init__(
        self,
        available: bool = True,
        files: dict[str, str] | None = None,
    ):
        self._available = available
        self._files = dict(DEFAULT_FILES if files is None else files)
        self._failure: Receipt | None = None
        self._call_log: list[GeneratorInvocation] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[GeneratorInvocation]:
        """All invocations this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_failure(
        self,
        error: str = "Mock failure",
        return_code: int = 1,
        reason: str = REASON_EXIT,
    ) -> None:
        """Make the next generate() calls fail with this receipt."""
        self._failure = Receipt.failure(
            step="generate",
            error=error,
            metadata={"reason": reason, "return_code": return_code, "mock": True},
        )

    def validate(self, invocation: GeneratorInvocation) -> tuple[bool, str]:
        if not invocation.spec_path.is_file():
            return False, f"Specification not found: {invocation.spec_path}"
        return True, ""

    def command(self, invocation: GeneratorInvocation) -> list[str]:
        return ["mock", *invocation.generator_args(str(invocation.spec_path), str(invocation.output_dir))]

    def generate(self, invocation: GeneratorInvocation) -> Receipt:
        self._call_log.append(invocation)

        if self._failure is not None:
            return self._failure

        valid, message = self.validate(invocation)
        if not valid:
            return Receipt.failure(
                step="generate",
                error=message,
                metadata={"reason": REASON_INVALID, "mock": True},
            )

        for rel, content in self._files.items():
            target = invocation.output_dir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

        return Receipt.success(
            step="generate",
            output=f"[mock] wrote {len(self._files)} files for {invocation.target_language}",
            metadata={"return_code": 0, "mock": True, "files": sorted(self._files)},
        )

    def reset(self) -> None:
        """Clear call log and configured failure."""
        self._call_log.clear()
        self._failure = None
