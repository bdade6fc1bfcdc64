"""
Container generator — run openapi-generator inside docker (or podman).

Uses the runtime CLI, never the Docker API directly. The mount root is
bind-mounted at ``/local`` and the generator reads and writes through it.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from clientgen.adapters.base import (
    REASON_EXIT,
    REASON_INVALID,
    REASON_TIMEOUT,
    REASON_UNAVAILABLE,
    Generator,
)
from clientgen.adapters.shell.command import Runner, run_command
from clientgen.core.models.generation import GeneratorInvocation
from clientgen.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

# `docker run` exits 125 when the daemon itself fails, not the container.
_RUNTIME_ERROR_CODE = 125
_DAEMON_MARKERS = (
    "cannot connect to the docker daemon",
    "is the docker daemon running",
    "error during connect",
    "cannot connect to podman",
)


class ContainerGenerator(Generator):
    """Containerized openapi-generator.

    Args:
        runtime: Container runtime CLI, ``docker`` or ``podman``.
        runner: Process runner (injectable for tests).
    """

    def __init__(self, runtime: str = "docker", runner: Runner = run_command):
        self.runtime = runtime
        self._runner = runner

    @property
    def name(self) -> str:
        return "container"

    def is_available(self) -> bool:
        """Runtime binary on PATH and its daemon answering ``info``."""
        if shutil.which(self.runtime) is None:
            logger.debug("%s CLI not found on PATH", self.runtime)
            return False
        try:
            result = self._runner(
                [self.runtime, "info", "--format", "{{.ServerVersion}}"],
                timeout=10,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("%s info failed: %s", self.runtime, e)
            return False
        if result.returncode != 0:
            logger.debug("%s daemon unreachable: %s", self.runtime, result.stderr.strip())
        return result.returncode == 0

    def version(self) -> str | None:
        """Runtime client version string, or None when unavailable."""
        try:
            result = self._runner([self.runtime, "--version"], timeout=5)
        except (OSError, subprocess.TimeoutExpired):
            return None
        return result.stdout.strip() if result.returncode == 0 else None

    def validate(self, invocation: GeneratorInvocation) -> tuple[bool, str]:
        for label, path in (("Specification", invocation.spec_path), ("Output directory", invocation.output_dir)):
            try:
                invocation.container_path(path)
            except ValueError:
                return False, f"{label} {path} is outside the mounted directory {invocation.mount_root}"
        if not invocation.spec_path.is_file():
            return False, f"Specification not found: {invocation.spec_path}"
        return True, ""

    def command(self, invocation: GeneratorInvocation) -> list[str]:
        return invocation.model_copy(update={"runtime": self.runtime}).container_command()

    def generate(self, invocation: GeneratorInvocation) -> Receipt:
        valid, message = self.validate(invocation)
        if not valid:
            return Receipt.failure(
                step="generate",
                error=message,
                metadata={"reason": REASON_INVALID, "generator": self.name},
            )

        argv = self.command(invocation)
        logger.info("Running %s in %s", invocation.image, self.runtime)
        start = time.monotonic()
        try:
            result = self._runner(argv, cwd=invocation.mount_root, timeout=invocation.timeout)
        except FileNotFoundError:
            return Receipt.failure(
                step="generate",
                error=f"{self.runtime} CLI not installed",
                metadata={"reason": REASON_UNAVAILABLE, "command": argv},
            )
        except subprocess.TimeoutExpired:
            self._remove_container(invocation)
            return Receipt.failure(
                step="generate",
                error=f"Generator timed out after {invocation.timeout}s",
                metadata={"reason": REASON_TIMEOUT, "command": argv, "timeout": invocation.timeout},
            )
        except KeyboardInterrupt:
            self._remove_container(invocation)
            raise

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stderr = result.stderr.strip()
        if result.returncode == 0:
            return Receipt.success(
                step="generate",
                output=result.stdout.strip(),
                duration_ms=elapsed_ms,
                metadata={"command": argv, "return_code": 0, "stderr": stderr},
            )

        reason = REASON_EXIT
        if result.returncode == _RUNTIME_ERROR_CODE and any(m in stderr.lower() for m in _DAEMON_MARKERS):
            reason = REASON_UNAVAILABLE
        return Receipt.failure(
            step="generate",
            error=stderr or f"{self.runtime} run exited with code {result.returncode}",
            duration_ms=elapsed_ms,
            metadata={
                "reason": reason,
                "command": argv,
                "return_code": result.returncode,
                "stdout": result.stdout.strip(),
            },
        )

    def _remove_container(self, invocation: GeneratorInvocation) -> None:
        """Stop a named container left behind by a killed ``run`` client."""
        if not invocation.container_name:
            return
        try:
            self._runner([self.runtime, "rm", "-f", invocation.container_name], timeout=30)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Could not remove container %s: %s", invocation.container_name, e)
