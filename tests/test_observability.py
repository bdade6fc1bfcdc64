"""
Tests for observability — logging setup and environment health checks.
"""

import logging
from pathlib import Path

import pytest

from clientgen.adapters.mock import MockGenerator
from clientgen.core.engine.pipeline import build_invocation
from clientgen.core.models import GenerationConfig
from clientgen.core.observability import health
from clientgen.core.observability.health import (
    ComponentHealth,
    SystemHealth,
    check_generator,
    check_privilege,
    check_spec,
    check_system_health,
    check_workspace,
)
from clientgen.core.observability.logging_config import parse_level, resolve_level, setup_logging
from clientgen.core.services.permissions import PermissionNormalizer

# ── Logging ──────────────────────────────────────────────────────────


class TestLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_parse_level(self):
        assert parse_level("debug") == logging.DEBUG
        assert parse_level("nonsense") == logging.WARNING
        assert parse_level(None) == logging.WARNING

    def test_resolve_level_flags_win(self):
        assert resolve_level(debug=True, verbose=True) == "DEBUG"
        assert resolve_level(verbose=True, env={"CLIENTGEN_LOG_LEVEL": "ERROR"}) == "INFO"
        assert resolve_level(quiet=True) == "ERROR"

    def test_resolve_level_env(self):
        assert resolve_level(env={"CLIENTGEN_LOG_LEVEL": "INFO"}) == "INFO"
        assert resolve_level(env={}) == "WARNING"

    def test_setup_console_level(self):
        setup_logging(level="INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_setup_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "clientgen.log"
        setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        logging.getLogger("clientgen.test").debug("to file only")
        for handler in root.handlers:
            handler.flush()
        assert "to file only" in log_file.read_text()


# ── Health ───────────────────────────────────────────────────────────


class TestSystemHealth:
    def test_all_healthy(self):
        h = SystemHealth()
        h.add(ComponentHealth(name="a", status="healthy"))
        h.add(ComponentHealth(name="b", status="healthy"))
        assert h.status == "healthy"

    def test_degraded(self):
        h = SystemHealth()
        h.add(ComponentHealth(name="a", status="healthy"))
        h.add(ComponentHealth(name="b", status="degraded"))
        assert h.status == "degraded"

    def test_unhealthy_wins(self):
        h = SystemHealth()
        h.add(ComponentHealth(name="a", status="degraded"))
        h.add(ComponentHealth(name="b", status="unhealthy"))
        assert h.status == "unhealthy"
        assert not h.runnable
        assert h.to_dict()["components"][1]["name"] == "b"

    def test_unknown_below_degraded(self):
        h = SystemHealth()
        h.add(ComponentHealth(name="a", status="healthy"))
        h.add(ComponentHealth(name="b"))
        assert h.status == "unknown"
        assert h.runnable

    def test_empty_is_healthy(self):
        assert SystemHealth().status == "healthy"


class TestChecks:
    def _invocation(self, tmp_path: Path, **config):
        return build_invocation(GenerationConfig(**config), tmp_path)

    def test_generator_available(self):
        assert check_generator(MockGenerator()).status == "healthy"

    def test_generator_unavailable(self):
        assert check_generator(MockGenerator(available=False)).status == "unhealthy"

    def test_spec_present(self, tmp_path: Path, spec_file: Path):
        component = check_spec(self._invocation(tmp_path))
        assert component.status == "healthy"
        assert component.details["container_path"] == "/local/openai.yaml"

    def test_spec_missing(self, tmp_path: Path):
        assert check_spec(self._invocation(tmp_path)).status == "unhealthy"

    def test_workspace(self, tmp_path: Path):
        inv = self._invocation(tmp_path)
        assert check_workspace(inv).status == "healthy"
        (tmp_path / "tmp").mkdir()
        assert check_workspace(inv).status == "unhealthy"

    def test_privilege_none_strategy(self):
        assert check_privilege(PermissionNormalizer(strategy="none")).status == "healthy"

    def test_privilege_without_sudo(self, monkeypatch):
        monkeypatch.setattr(health.os, "geteuid", lambda: 1000)
        normalizer = PermissionNormalizer(use_sudo=False)
        assert check_privilege(normalizer).status == "degraded"

    def test_system_health(self, tmp_path: Path, spec_file: Path):
        inv = self._invocation(tmp_path)
        result = check_system_health(inv, MockGenerator(), PermissionNormalizer(strategy="none"))
        assert result.status == "healthy"
        assert [c.name for c in result.components] == ["generator", "spec", "workspace", "permissions"]
