"""
Shell command helpers — run external processes with a timeout.

Every external process clientgen starts (container runtime, local
generator CLI, sudo) goes through ``run_command`` so that a hung child
is killed on timeout or Ctrl-C instead of hanging the pipeline.

Also home of ``LocalGenerator``, which runs a host-installed
openapi-generator CLI instead of a container.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from clientgen.adapters.base import (
    REASON_EXIT,
    REASON_INVALID,
    REASON_TIMEOUT,
    REASON_UNAVAILABLE,
    Generator,
)
from clientgen.core.models.generation import DEFAULT_LOCAL_COMMAND, GeneratorInvocation
from clientgen.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def run_command(
    argv: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: int | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command, capture its output, and kill it if it overstays.

    Args:
        argv: Command and arguments (never run through a shell).
        cwd: Working directory.
        timeout: Seconds before the child is killed. ``None`` or 0 waits forever.

    Raises:
        FileNotFoundError: The executable does not exist.
        subprocess.TimeoutExpired: The child was killed after ``timeout``.
        KeyboardInterrupt: Re-raised after the child was killed.
    """
    argv = list(argv)
    logger.debug("Executing: %s (cwd=%s)", shlex.join(argv), cwd)
    proc = subprocess.Popen(
        argv,
        cwd=str(cwd) if cwd else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    try:
        stdout, stderr = proc.communicate(timeout=timeout or None)
    except (subprocess.TimeoutExpired, KeyboardInterrupt):
        proc.kill()
        proc.communicate()
        raise
    return subprocess.CompletedProcess(argv, proc.returncode, stdout, stderr)


class LocalGenerator(Generator):
    """Run a host-installed openapi-generator CLI.

    The command may carry its own arguments, e.g.
    ``npx @openapitools/openapi-generator-cli``. Paths are passed as
    host paths; no container is involved, so the output is owned by the
    invoking user from the start.
    """

    def __init__(self, command: str = DEFAULT_LOCAL_COMMAND, runner: Runner = run_command):
        self._argv = shlex.split(command)
        self._runner = runner

    @property
    def name(self) -> str:
        return "local"

    def is_available(self) -> bool:
        return bool(self._argv) and shutil.which(self._argv[0]) is not None

    def validate(self, invocation: GeneratorInvocation) -> tuple[bool, str]:
        if not self._argv:
            return False, "Empty generator command"
        if not invocation.spec_path.is_file():
            return False, f"Specification not found: {invocation.spec_path}"
        return True, ""

    def command(self, invocation: GeneratorInvocation) -> list[str]:
        return [
            *self._argv,
            *invocation.generator_args(str(invocation.spec_path), str(invocation.output_dir)),
        ]

    def generate(self, invocation: GeneratorInvocation) -> Receipt:
        valid, message = self.validate(invocation)
        if not valid:
            return Receipt.failure(
                step="generate",
                error=message,
                metadata={"reason": REASON_INVALID, "generator": self.name},
            )

        argv = self.command(invocation)
        start = time.monotonic()
        try:
            result = self._runner(argv, cwd=invocation.mount_root, timeout=invocation.timeout)
        except FileNotFoundError:
            return Receipt.failure(
                step="generate",
                error=f"Generator command not found: {self._argv[0]}",
                metadata={"reason": REASON_UNAVAILABLE, "command": argv},
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                step="generate",
                error=f"Generator timed out after {invocation.timeout}s",
                metadata={"reason": REASON_TIMEOUT, "command": argv, "timeout": invocation.timeout},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if result.returncode == 0:
            return Receipt.success(
                step="generate",
                output=result.stdout.strip(),
                duration_ms=elapsed_ms,
                metadata={"command": argv, "return_code": 0},
            )
        return Receipt.failure(
            step="generate",
            error=result.stderr.strip() or f"Generator exited with code {result.returncode}",
            duration_ms=elapsed_ms,
            metadata={
                "reason": REASON_EXIT,
                "command": argv,
                "return_code": result.returncode,
                "stdout": result.stdout.strip(),
            },
        )
