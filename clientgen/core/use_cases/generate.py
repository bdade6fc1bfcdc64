"""
Generate use case — regenerate the API client end to end.

Loads configuration, applies per-run overrides, picks the generator,
and runs the pipeline. Pipeline errors are turned into a result with an
error message and an exit code; nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from clientgen.adapters.base import Generator
from clientgen.adapters.mock import MockGenerator
from clientgen.adapters.registry import GeneratorRegistry
from clientgen.core.config.loader import (
    ConfigError,
    apply_overrides,
    config_base_dir,
    find_config_file,
    load_config,
)
from clientgen.core.engine.pipeline import (
    GenerationPipeline,
    PipelineReport,
    build_invocation,
    generate_run_id,
)
from clientgen.core.errors import GeneratorInvocationFailure, PipelineError
from clientgen.core.models.generation import GenerationConfig, GeneratorInvocation
from clientgen.core.services.permissions import PermissionNormalizer

logger = logging.getLogger(__name__)


@dataclass
class PreparedRun:
    """Everything resolved for one run, before anything executes."""

    config: GenerationConfig
    config_path: Path | None
    base_dir: Path
    invocation: GeneratorInvocation
    generator: Generator
    normalizer: PermissionNormalizer
    run_id: str = ""


@dataclass
class GenerateResult:
    """Result of a generate run."""

    report: PipelineReport | None = None
    config_path: Path | None = None
    invocation: GeneratorInvocation | None = None
    error: str | None = None
    error_type: str | None = None
    stderr: str = ""
    exit_code: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "ok": self.ok,
            "exit_code": self.exit_code,
            "config_path": str(self.config_path) if self.config_path else None,
        }
        if self.invocation:
            result["spec"] = str(self.invocation.spec_path)
            result["output"] = str(self.invocation.output_dir)
            result["language"] = self.invocation.target_language
        if self.error:
            result["error"] = self.error
            result["error_type"] = self.error_type
            if self.stderr:
                result["stderr"] = self.stderr
        if self.warnings:
            result["warnings"] = self.warnings
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def prepare_run(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    mock_mode: bool = False,
    generator: Generator | None = None,
    normalizer: PermissionNormalizer | None = None,
) -> PreparedRun:
    """Resolve config, paths, generator and normalizer for a run.

    Raises:
        ConfigError: If the configuration or an override is invalid.
    """
    if config_path is None:
        config_path = find_config_file()

    config = load_config(config_path)
    if overrides:
        config = apply_overrides(config, overrides)

    base_dir = config_base_dir(config_path)
    run_id = generate_run_id()
    invocation = build_invocation(config, base_dir, run_id=run_id)

    if generator is None:
        if mock_mode:
            generator = MockGenerator()
        else:
            registry = GeneratorRegistry.from_settings(config.generator)
            generator = registry.get(config.generator.kind)
            if generator is None:
                raise ConfigError(f"Unknown generator kind: {config.generator.kind}")

    if normalizer is None:
        normalizer = PermissionNormalizer.from_settings(config.permissions)

    return PreparedRun(
        config=config,
        config_path=config_path,
        base_dir=base_dir,
        invocation=invocation,
        generator=generator,
        normalizer=normalizer,
        run_id=run_id,
    )


def run_generate(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    dry_run: bool = False,
    mock_mode: bool = False,
    generator: Generator | None = None,
    normalizer: PermissionNormalizer | None = None,
) -> GenerateResult:
    """Run the generation pipeline once.

    Args:
        config_path: Optional explicit path to clientgen.yml.
        overrides: Per-run config overrides (see ``apply_overrides``).
        dry_run: If True, validate and render the command only.
        mock_mode: If True, use the mock generator (no external process).
        generator: Optional generator to use instead of the configured one.
        normalizer: Optional permission normalizer.

    Returns:
        GenerateResult with the pipeline report or the error.
    """
    result = GenerateResult()

    try:
        prepared = prepare_run(config_path, overrides, mock_mode, generator, normalizer)
    except ConfigError as e:
        result.error = str(e)
        result.error_type = "ConfigError"
        result.exit_code = 1
        return result

    result.config_path = prepared.config_path
    result.invocation = prepared.invocation
    result.warnings = _semantic_warnings(prepared)

    pipeline = GenerationPipeline(
        invocation=prepared.invocation,
        generator=prepared.generator,
        normalizer=prepared.normalizer,
        run_id=prepared.run_id,
    )

    if dry_run:
        report = pipeline.plan()
        result.report = report
        if not report.ok:
            failed = report.receipt(report.failed_step or "")
            result.error = failed.error if failed else "Dry run failed"
            result.error_type = "DryRunError"
            result.exit_code = 1
        return result

    try:
        result.report = pipeline.run()
    except PipelineError as e:
        logger.debug("Pipeline failed at %s: %s", e.step, e)
        result.report = e.report
        result.error = str(e)
        result.error_type = type(e).__name__
        result.exit_code = e.exit_code
        if isinstance(e, GeneratorInvocationFailure):
            result.stderr = e.stderr

    return result


def _semantic_warnings(prepared: PreparedRun) -> list[str]:
    warnings = []
    settings = prepared.config.generator
    strategy = prepared.config.permissions.strategy
    if settings.run_as_invoking_user and strategy != "none":
        warnings.append("Generator runs as the invoking user; permission normalization is redundant.")
    if settings.kind == "local" and strategy != "none":
        warnings.append("Local generator output is already owned by the invoking user.")
    return warnings
