"""
Tests for the generate and config-check use cases.
"""

from pathlib import Path

from clientgen.adapters.containers.docker import ContainerGenerator
from clientgen.adapters.mock import MockGenerator
from clientgen.adapters.shell.command import LocalGenerator
from clientgen.core.services.permissions import PermissionNormalizer
from clientgen.core.use_cases.config_check import check_config
from clientgen.core.use_cases.generate import prepare_run, run_generate


class TestPrepareRun:
    def test_picks_container_generator(self, config_file: Path):
        prepared = prepare_run(config_path=config_file)
        assert isinstance(prepared.generator, ContainerGenerator)
        assert prepared.invocation.image == "openapitools/openapi-generator-cli:v7.5.0"
        assert prepared.invocation.container_name == f"clientgen-{prepared.run_id}"

    def test_local_override(self, config_file: Path):
        prepared = prepare_run(config_path=config_file, overrides={"generator.kind": "local"})
        assert isinstance(prepared.generator, LocalGenerator)

    def test_mock_mode(self, config_file: Path):
        prepared = prepare_run(config_path=config_file, mock_mode=True)
        assert isinstance(prepared.generator, MockGenerator)

    def test_normalizer_from_config(self, config_file: Path):
        prepared = prepare_run(config_path=config_file, overrides={"permissions.strategy": "none"})
        assert prepared.normalizer.strategy == "none"


class TestRunGenerate:
    def test_success(self, config_file: Path, tmp_path: Path):
        result = run_generate(config_path=config_file, mock_mode=True)
        assert result.ok
        assert result.exit_code == 0
        assert result.report.ok
        assert (tmp_path / "generated" / "rust" / "Cargo.toml").is_file()

    def test_generator_failure_result(self, config_file: Path):
        generator = MockGenerator()
        generator.set_failure("[main] ERROR unknown generator 'rustt'", return_code=1)
        result = run_generate(config_path=config_file, generator=generator)
        assert not result.ok
        assert result.exit_code == 5
        assert result.error_type == "GeneratorInvocationFailure"
        assert "unknown generator" in result.stderr
        assert result.to_dict()["report"]["failed_step"] == "generate"

    def test_unavailable_result(self, config_file: Path, tmp_path: Path):
        result = run_generate(config_path=config_file, generator=MockGenerator(available=False))
        assert result.exit_code == 4
        assert not (tmp_path / "generated").exists()

    def test_uncreatable_output(self, config_file: Path):
        result = run_generate(config_path=config_file, overrides={"output": "openai.yaml/out"}, mock_mode=True)
        assert result.exit_code == 3
        assert result.error_type == "WorkspaceCreationError"
        assert result.report.failed_step == "workspace"

    def test_config_error(self, tmp_path: Path):
        result = run_generate(config_path=tmp_path / "missing.yml")
        assert result.exit_code == 1
        assert result.error_type == "ConfigError"
        assert result.report is None

    def test_dry_run(self, config_file: Path, tmp_path: Path):
        result = run_generate(config_path=config_file, dry_run=True)
        assert result.ok
        assert result.report.dry_run
        assert result.report.command[0] == "docker"
        assert not (tmp_path / "generated").exists()

    def test_warns_on_redundant_normalization(self, config_file: Path):
        result = run_generate(
            config_path=config_file,
            overrides={"generator.run_as_invoking_user": True},
            mock_mode=True,
            normalizer=PermissionNormalizer(strategy="chmod"),
        )
        assert any("redundant" in w for w in result.warnings)


class TestCheckConfig:
    def test_valid(self, config_file: Path):
        result = check_config(config_file)
        assert result.valid
        assert result.errors == []

    def test_defaults_without_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            "clientgen.core.use_cases.config_check.find_config_file", lambda: None
        )
        result = check_config()
        assert result.valid
        assert any("built-in defaults" in w for w in result.warnings)

    def test_invalid_file(self, tmp_path: Path):
        path = tmp_path / "clientgen.yml"
        path.write_text("generator: [1, 2]\n")
        result = check_config(path)
        assert not result.valid
        assert result.errors

    def test_mode_without_owner_access_warns(self, tmp_path: Path, spec_file: Path):
        path = tmp_path / "clientgen.yml"
        path.write_text('permissions:\n  mode: "666"\n')
        result = check_config(path)
        assert result.valid
        assert any("owner" in w for w in result.warnings)

    def test_full_mode_has_no_mode_warnings(self, config_file: Path):
        result = check_config(config_file)
        assert not any("Mode" in w for w in result.warnings)
