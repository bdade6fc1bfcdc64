"""
Tests for domain models — config schema, invocation rendering, receipts.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from clientgen.core.models import (
    GenerationConfig,
    GeneratorInvocation,
    PermissionSettings,
    Receipt,
)


def _invocation(root: Path, **kwargs) -> GeneratorInvocation:
    defaults = dict(
        spec_path=root / "agent" / "resources" / "openai.yaml",
        output_dir=root / "tmp",
        target_language="rust",
        mount_root=root,
    )
    defaults.update(kwargs)
    return GeneratorInvocation(**defaults)


class TestGenerationConfig:
    def test_defaults(self):
        cfg = GenerationConfig()
        assert cfg.spec == "openai.yaml"
        assert cfg.output == "tmp"
        assert cfg.language == "rust"
        assert cfg.generator.kind == "container"
        assert cfg.generator.runtime == "docker"
        assert cfg.generator.image == "openapitools/openapi-generator-cli"
        assert cfg.generator.timeout == 600
        assert cfg.permissions.strategy == "chmod"
        assert cfg.permissions.numeric_mode == 0o777

    def test_paths_resolve_against_base(self, tmp_path: Path):
        cfg = GenerationConfig(spec="specs/api.yaml", output="out/client")
        assert cfg.spec_path(tmp_path) == (tmp_path / "specs" / "api.yaml").resolve()
        assert cfg.output_dir(tmp_path) == (tmp_path / "out" / "client").resolve()

    def test_blank_language_rejected(self):
        with pytest.raises(ValidationError):
            GenerationConfig(language="  ")

    def test_negative_timeout_rejected(self):
        with pytest.raises(ValidationError):
            GenerationConfig.model_validate({"generator": {"timeout": -1}})

    def test_unknown_runtime_rejected(self):
        with pytest.raises(ValidationError):
            GenerationConfig.model_validate({"generator": {"runtime": "lxc"}})


class TestPermissionSettings:
    def test_int_mode_from_yaml(self):
        assert PermissionSettings(mode=777).numeric_mode == 0o777

    def test_prefixed_mode(self):
        assert PermissionSettings(mode="0o755").mode == "755"

    def test_four_digit_mode(self):
        assert PermissionSettings(mode="2775").numeric_mode == 0o2775

    @pytest.mark.parametrize("bad", ["999", "rwx", "", "77777"])
    def test_invalid_mode(self, bad):
        with pytest.raises(ValidationError):
            PermissionSettings(mode=bad)


class TestGeneratorInvocation:
    def test_container_path(self, tmp_path: Path):
        inv = _invocation(tmp_path)
        assert inv.container_path(tmp_path / "agent" / "resources" / "openai.yaml") == "/local/agent/resources/openai.yaml"
        assert inv.container_path(tmp_path) == "/local"

    def test_container_path_outside_mount(self, tmp_path: Path):
        inv = _invocation(tmp_path / "project")
        with pytest.raises(ValueError):
            inv.container_path(tmp_path / "elsewhere" / "api.yaml")

    def test_container_command(self, tmp_path: Path):
        inv = _invocation(tmp_path)
        assert inv.container_command() == [
            "docker", "run", "--rm",
            "-v", f"{tmp_path}:/local",
            "openapitools/openapi-generator-cli",
            "generate",
            "-i", "/local/agent/resources/openai.yaml",
            "-g", "rust",
            "-o", "/local/tmp",
        ]

    def test_container_command_with_name_user_and_extras(self, tmp_path: Path):
        inv = _invocation(
            tmp_path,
            runtime="podman",
            container_name="clientgen-abc",
            user="1000:1000",
            extra_args=["--skip-validate-spec"],
        )
        cmd = inv.container_command()
        assert cmd[:3] == ["podman", "run", "--rm"]
        assert cmd[cmd.index("--name") + 1] == "clientgen-abc"
        assert cmd[cmd.index("--user") + 1] == "1000:1000"
        # --user must come before the image, extras after the generator args
        assert cmd.index("--user") < cmd.index("openapitools/openapi-generator-cli")
        assert cmd[-1] == "--skip-validate-spec"

    def test_generator_args(self, tmp_path: Path):
        inv = _invocation(tmp_path, target_language="python")
        assert inv.generator_args("a.yaml", "out") == ["generate", "-i", "a.yaml", "-g", "python", "-o", "out"]


class TestReceipt:
    def test_success(self):
        r = Receipt.success(step="generate", output="done", metadata={"return_code": 0})
        assert r.ok
        assert not r.failed
        assert r.return_code == 0

    def test_failure(self):
        r = Receipt.failure(step="generate", error="boom", metadata={"return_code": 2})
        assert r.failed
        assert r.error == "boom"
        assert r.return_code == 2

    def test_skip(self):
        r = Receipt.skip(step="permissions", reason="disabled")
        assert r.status == "skipped"
        assert r.output == "disabled"
        assert r.return_code is None
