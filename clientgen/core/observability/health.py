"""
Health checker — can a generation run succeed in this environment?

Probes the generator (runtime binary and daemon), the specification
document, the workspace location, and privilege for the permission
step. Used by the CLI ``check`` command.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any

from clientgen.adapters.base import Generator
from clientgen.adapters.containers.docker import ContainerGenerator
from clientgen.core.models.generation import GeneratorInvocation
from clientgen.core.services.permissions import PermissionNormalizer
from clientgen.core.services.workspace import workspace_status

logger = logging.getLogger(__name__)


# Worst status wins when components are combined.
_SEVERITY = {"healthy": 0, "unknown": 1, "degraded": 2, "unhealthy": 3}


@dataclass
class ComponentHealth:
    """One probe's verdict: healthy, degraded, unhealthy or unknown."""

    name: str
    status: str = "unknown"
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SystemHealth:
    """All probes of one ``clientgen check`` run."""

    components: list[ComponentHealth] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def add(self, component: ComponentHealth) -> None:
        self.components.append(component)

    @property
    def status(self) -> str:
        return max(
            (c.status for c in self.components),
            key=lambda s: _SEVERITY.get(s, _SEVERITY["unknown"]),
            default="healthy",
        )

    @property
    def runnable(self) -> bool:
        """Whether a generate run can be attempted (nothing unhealthy)."""
        return self.status != "unhealthy"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "runnable": self.runnable,
            "timestamp": self.timestamp,
            "components": [c.to_dict() for c in self.components],
        }


def check_generator(generator: Generator) -> ComponentHealth:
    """Is the execution environment reachable?"""
    details: dict[str, Any] = {"generator": generator.name}
    if isinstance(generator, ContainerGenerator):
        details["runtime"] = generator.runtime
        details["version"] = generator.version()

    try:
        available = generator.is_available()
    except Exception as e:
        logger.debug("Availability probe for %s raised: %s", generator.name, e)
        available = False

    if available:
        return ComponentHealth(
            name="generator",
            status="healthy",
            message=f"{generator.name} generator ready",
            details=details,
        )
    return ComponentHealth(
        name="generator",
        status="unhealthy",
        message=f"{generator.name} generator unavailable (runtime missing or daemon not running)",
        details=details,
    )


def check_spec(invocation: GeneratorInvocation) -> ComponentHealth:
    """Does the specification document exist (and sit under the mount)?"""
    path = invocation.spec_path
    details = {"path": str(path)}
    if not path.is_file():
        return ComponentHealth(name="spec", status="unhealthy", message=f"Not found: {path}", details=details)
    try:
        details["container_path"] = invocation.container_path(path)
    except ValueError:
        return ComponentHealth(
            name="spec",
            status="unhealthy",
            message=f"Outside mounted directory {invocation.mount_root}",
            details=details,
        )
    return ComponentHealth(name="spec", status="healthy", message=str(path), details=details)


def check_workspace(invocation: GeneratorInvocation) -> ComponentHealth:
    """Is the output location free?"""
    status = workspace_status(invocation.output_dir)
    if status["exists"]:
        return ComponentHealth(
            name="workspace",
            status="unhealthy",
            message=f"Already exists: {invocation.output_dir} (remove it before generating)",
            details=status,
        )
    return ComponentHealth(name="workspace", status="healthy", message="Free", details=status)


def check_privilege(normalizer: PermissionNormalizer) -> ComponentHealth:
    """Can the permission step get the privilege it may need?"""
    details = {
        "strategy": normalizer.strategy,
        "euid": os.geteuid(),
        "sudo": normalizer.sudo_available(),
        "use_sudo": normalizer.use_sudo,
    }
    if normalizer.strategy == "none":
        return ComponentHealth(name="permissions", status="healthy", message="Normalization disabled", details=details)
    if os.geteuid() == 0:
        return ComponentHealth(name="permissions", status="healthy", message="Running as root", details=details)
    if normalizer.use_sudo and normalizer.sudo_available():
        return ComponentHealth(name="permissions", status="healthy", message="sudo available", details=details)
    return ComponentHealth(
        name="permissions",
        status="degraded",
        message="No sudo: files written by another user may stay read-only",
        details=details,
    )


def check_system_health(
    invocation: GeneratorInvocation,
    generator: Generator,
    normalizer: PermissionNormalizer,
) -> SystemHealth:
    """Run all checks and aggregate them."""
    health = SystemHealth()
    health.add(check_generator(generator))
    health.add(check_spec(invocation))
    health.add(check_workspace(invocation))
    health.add(check_privilege(normalizer))
    return health
