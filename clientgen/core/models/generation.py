"""
Generation models — configuration and the one-shot generator invocation.

``GenerationConfig`` is what ``clientgen.yml`` declares.
``GeneratorInvocation`` is the resolved, absolute-path view of one run
that the generators consume.
"""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_IMAGE = "openapitools/openapi-generator-cli"
DEFAULT_LOCAL_COMMAND = "openapi-generator-cli"

# Where the mount root appears inside the generator container.
CONTAINER_MOUNT = "/local"


class GeneratorSettings(BaseModel):
    """How the external generator is launched."""

    kind: Literal["container", "local"] = "container"
    runtime: Literal["docker", "podman"] = "docker"
    image: str = DEFAULT_IMAGE
    command: str = DEFAULT_LOCAL_COMMAND
    timeout: int = Field(default=600, ge=0)   # seconds, 0 = no limit
    run_as_invoking_user: bool = False
    extra_args: list[str] = Field(default_factory=list)


class PermissionSettings(BaseModel):
    """How the generated tree is handed back to the invoking user."""

    strategy: Literal["chmod", "chown", "none"] = "chmod"
    mode: str = "777"
    use_sudo: bool = True

    @field_validator("mode", mode="before")
    @classmethod
    def _validate_mode(cls, value: object) -> str:
        # YAML reads an unquoted 777 as an int; its digits are still the octal spelling.
        text = str(value).strip()
        if text.startswith("0o"):
            text = text[2:]
        if not text or len(text) > 4 or any(c not in "01234567" for c in text):
            raise ValueError(f"mode must be an octal permission string like '777', got {value!r}")
        return text

    @property
    def numeric_mode(self) -> int:
        return int(self.mode, 8)


class GenerationConfig(BaseModel):
    """Root configuration — loaded from clientgen.yml or built from defaults."""

    spec: str = "openai.yaml"
    output: str = "tmp"
    language: str = "rust"

    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)
    permissions: PermissionSettings = Field(default_factory=PermissionSettings)

    @field_validator("spec", "output", "language")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    def spec_path(self, base_dir: Path) -> Path:
        """Absolute path of the specification document."""
        return (base_dir / self.spec).resolve()

    def output_dir(self, base_dir: Path) -> Path:
        """Absolute path of the workspace directory."""
        return (base_dir / self.output).resolve()


class GeneratorInvocation(BaseModel):
    """One external generator call: what to read, what to emit, where.

    All paths are absolute. ``mount_root`` is the host directory made
    visible to the container; the specification document and the output directory must
    both live under it.
    """

    spec_path: Path
    output_dir: Path
    target_language: str
    mount_root: Path

    image: str = DEFAULT_IMAGE
    runtime: str = "docker"
    container_name: str | None = None
    user: str | None = None                 # "uid:gid" passed as --user
    extra_args: list[str] = Field(default_factory=list)
    timeout: int = 600

    def container_path(self, host_path: Path) -> str:
        """Translate a host path under ``mount_root`` to its in-container path.

        Raises:
            ValueError: If the path is outside the mount root.
        """
        relative = host_path.relative_to(self.mount_root)
        return posixpath.join(CONTAINER_MOUNT, *relative.parts) if relative.parts else CONTAINER_MOUNT

    def generator_args(self, spec: str, output: str) -> list[str]:
        """The ``generate`` sub-command as the generator CLI expects it."""
        return [
            "generate",
            "-i", spec,
            "-g", self.target_language,
            "-o", output,
            *self.extra_args,
        ]

    def container_command(self) -> list[str]:
        """Full ``<runtime> run`` command line for the containerized generator."""
        cmd = [self.runtime, "run", "--rm"]
        if self.container_name:
            cmd += ["--name", self.container_name]
        cmd += ["-v", f"{self.mount_root}:{CONTAINER_MOUNT}"]
        if self.user:
            cmd += ["--user", self.user]
        cmd.append(self.image)
        cmd += self.generator_args(
            self.container_path(self.spec_path),
            self.container_path(self.output_dir),
        )
        return cmd
