"""
Pipeline errors — one exception per way a generation run can stop.

The pipeline raises these fail-fast; nothing inside it catches or
retries them. Each carries the partial ``PipelineReport`` (when one
exists) and the process exit code the CLI should use.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clientgen.core.engine.pipeline import PipelineReport


class PipelineError(Exception):
    """Base class for every generation pipeline failure."""

    exit_code = 1
    step = ""

    def __init__(self, message: str, report: PipelineReport | None = None):
        super().__init__(message)
        self.report = report


class WorkspaceCollisionError(PipelineError):
    """The output directory already exists."""

    exit_code = 3
    step = "workspace"

    def __init__(self, path: Path, report: PipelineReport | None = None):
        super().__init__(
            f"Output directory already exists: {path} (remove it and run again)",
            report,
        )
        self.path = path


class WorkspaceCreationError(PipelineError):
    """The output directory could not be created (bad parent, no write access)."""

    exit_code = 3
    step = "workspace"

    def __init__(self, path: Path, reason: str, report: PipelineReport | None = None):
        super().__init__(f"Cannot create output directory {path}: {reason}", report)
        self.path = path


class ExecutionEnvironmentUnavailable(PipelineError):
    """The container runtime (or local generator) cannot be reached."""

    exit_code = 4
    step = "generate"


class GeneratorInvocationFailure(PipelineError):
    """The external generator exited non-zero or could not be started."""

    exit_code = 5
    step = "generate"

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        stderr: str = "",
        report: PipelineReport | None = None,
    ):
        super().__init__(message, report)
        self.returncode = returncode
        self.stderr = stderr


class GeneratorTimeout(GeneratorInvocationFailure):
    """The external generator did not finish within the configured timeout."""

    def __init__(self, timeout: int, report: PipelineReport | None = None):
        super().__init__(f"Generator timed out after {timeout}s", report=report)
        self.timeout = timeout


class PermissionChangeFailure(PipelineError):
    """The generated tree's permissions could not be updated."""

    exit_code = 6
    step = "permissions"
