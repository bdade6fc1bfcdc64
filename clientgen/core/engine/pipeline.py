"""
Generation pipeline — the three-step orchestration loop.

Flow:
    environment check → prepare workspace → invoke generator → normalize permissions

Each step's receipt is checked before the next one runs. The first
failure moves the pipeline to ``FAILED`` and raises the matching
``PipelineError``; partially created state is left in place.
"""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from clientgen.adapters.base import REASON_TIMEOUT, REASON_UNAVAILABLE, Generator
from clientgen.core.errors import (
    ExecutionEnvironmentUnavailable,
    GeneratorInvocationFailure,
    GeneratorTimeout,
    PermissionChangeFailure,
    PipelineError,
    WorkspaceCollisionError,
    WorkspaceCreationError,
)
from clientgen.core.models.generation import GenerationConfig, GeneratorInvocation
from clientgen.core.models.receipt import Receipt
from clientgen.core.services.permissions import PermissionNormalizer
from clientgen.core.services.workspace import prepare_workspace

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    START = "start"
    WORKSPACE_PREPARED = "workspace_prepared"
    INVOKED = "invoked"
    NORMALIZED = "normalized"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineReport:
    """What happened during one pipeline run."""

    run_id: str = ""
    state: PipelineState = PipelineState.START
    command: list[str] = field(default_factory=list)
    receipts: list[Receipt] = field(default_factory=list)
    failed_step: str | None = None
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return self.state == PipelineState.DONE

    @property
    def duration_ms(self) -> int:
        return sum(r.duration_ms for r in self.receipts)

    def receipt(self, step: str) -> Receipt | None:
        """The receipt recorded for ``step``, if that step ran."""
        for r in self.receipts:
            if r.step == step:
                return r
        return None

    def advance(self, state: PipelineState, receipt: Receipt | None = None) -> None:
        if receipt is not None:
            self.receipts.append(receipt)
        logger.debug("Pipeline %s: %s → %s", self.run_id, self.state.value, state.value)
        self.state = state

    def fail(self, step: str, receipt: Receipt | None = None) -> None:
        if receipt is not None:
            self.receipts.append(receipt)
        self.failed_step = step
        self.state = PipelineState.FAILED

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "state": self.state.value,
            "ok": self.ok,
            "dry_run": self.dry_run,
            "failed_step": self.failed_step,
            "command": self.command,
            "duration_ms": self.duration_ms,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


def generate_run_id() -> str:
    """Short unique identifier for a run (also names the container)."""
    return uuid.uuid4().hex[:12]


def build_invocation(
    config: GenerationConfig,
    base_dir: Path,
    run_id: str = "",
) -> GeneratorInvocation:
    """Resolve configuration against ``base_dir`` into a GeneratorInvocation.

    ``base_dir`` is the directory relative paths are resolved against and
    the one mounted into the container.
    """
    settings = config.generator
    user = None
    if settings.run_as_invoking_user:
        user = f"{os.getuid()}:{os.getgid()}"

    return GeneratorInvocation(
        spec_path=config.spec_path(base_dir),
        output_dir=config.output_dir(base_dir),
        target_language=config.language,
        mount_root=base_dir.resolve(),
        image=settings.image,
        runtime=settings.runtime,
        container_name=f"clientgen-{run_id}" if run_id else None,
        user=user,
        extra_args=list(settings.extra_args),
        timeout=settings.timeout,
    )


class GenerationPipeline:
    """Prepare → invoke → normalize, fail-fast.

    Args:
        invocation: The fully resolved generator call.
        generator: Which generator performs the invocation.
        normalizer: Permission normalizer applied to the output tree.
        run_id: Identifier stamped on the report.
    """

    def __init__(
        self,
        invocation: GeneratorInvocation,
        generator: Generator,
        normalizer: PermissionNormalizer,
        run_id: str = "",
    ):
        self.invocation = invocation
        self.generator = generator
        self.normalizer = normalizer
        self.run_id = run_id or generate_run_id()

    def plan(self) -> PipelineReport:
        """Dry run: validate the invocation and render the command, no side effects."""
        report = PipelineReport(
            run_id=self.run_id,
            command=self.generator.command(self.invocation),
            dry_run=True,
        )
        valid, message = self.generator.validate(self.invocation)
        if not valid:
            report.fail("generate", Receipt.failure(step="generate", error=message))
            return report
        if self.invocation.output_dir.exists():
            report.fail(
                "workspace",
                Receipt.failure(step="workspace", error=f"Output directory already exists: {self.invocation.output_dir}"),
            )
            return report
        report.advance(
            PipelineState.DONE,
            Receipt.skip(step="generate", reason=f"[dry-run] would run {self.generator.name} generator"),
        )
        return report

    def run(self) -> PipelineReport:
        """Execute the pipeline.

        Returns:
            The report, in state ``DONE``.

        Raises:
            ExecutionEnvironmentUnavailable: Runtime unreachable; nothing was written.
            WorkspaceCollisionError: Output directory already exists; generator not started.
            WorkspaceCreationError: Output directory could not be created.
            GeneratorInvocationFailure: Generator failed (GeneratorTimeout on timeout).
            PermissionChangeFailure: The output tree could not be normalized.
        """
        inv = self.invocation
        report = PipelineReport(run_id=self.run_id, command=self.generator.command(inv))
        logger.info("Run %s: %s → %s (%s)", self.run_id, inv.spec_path, inv.output_dir, inv.target_language)

        # ── Execution environment ───────────────────────────────────
        if not self.generator.is_available():
            report.fail("generate")
            raise ExecutionEnvironmentUnavailable(
                f"Generator '{self.generator.name}' is not available "
                "(is the container runtime installed and its daemon running?)",
                report,
            )

        # ── Workspace ───────────────────────────────────────────────
        try:
            receipt = prepare_workspace(inv.output_dir)
        except (WorkspaceCollisionError, WorkspaceCreationError) as e:
            report.fail("workspace", Receipt.failure(step="workspace", error=str(e)))
            e.report = report
            raise
        report.advance(PipelineState.WORKSPACE_PREPARED, receipt)

        # ── Generator ───────────────────────────────────────────────
        receipt = self.generator.generate(inv)
        if receipt.failed:
            report.fail("generate", receipt)
            raise self._generator_error(receipt, report)
        report.advance(PipelineState.INVOKED, receipt)

        # ── Permissions ─────────────────────────────────────────────
        receipt = self.normalizer.normalize(inv.output_dir)
        if receipt.failed:
            report.fail("permissions", receipt)
            raise PermissionChangeFailure(receipt.error or "Permission change failed", report)
        report.advance(PipelineState.NORMALIZED, receipt)

        report.advance(PipelineState.DONE)
        logger.info("Run %s done in %dms", self.run_id, report.duration_ms)
        return report

    def _generator_error(self, receipt: Receipt, report: PipelineReport) -> PipelineError:
        reason = receipt.metadata.get("reason")
        if reason == REASON_TIMEOUT:
            return GeneratorTimeout(self.invocation.timeout, report)
        if reason == REASON_UNAVAILABLE:
            return ExecutionEnvironmentUnavailable(receipt.error or "Execution environment unavailable", report)
        return GeneratorInvocationFailure(
            receipt.error or "Generator failed",
            returncode=receipt.return_code,
            stderr=receipt.error or "",
            report=report,
        )
