"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path

import pytest

SPEC_CONTENT = textwrap.dedent("""\
    openapi: 3.0.0
    info:
      title: OpenAI
      version: 1.0.0
    paths:
      /models:
        get:
          operationId: listModels
          responses:
            "200":
              description: OK
""")


class FakeRunner:
    """Stand-in for ``run_command``: records argv, replays canned results.

    Queue results with ``push``; an exception instance is raised instead
    of returned. When the queue is empty, every call succeeds.
    """

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self._queue: list[subprocess.CompletedProcess | BaseException] = []

    def push(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self._queue.append(subprocess.CompletedProcess([], returncode, stdout, stderr))

    def push_error(self, error: BaseException) -> None:
        self._queue.append(error)

    def __call__(self, argv, *, cwd=None, timeout=None):
        self.calls.append({"argv": list(argv), "cwd": cwd, "timeout": timeout})
        if not self._queue:
            return subprocess.CompletedProcess(list(argv), 0, "", "")
        item = self._queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return subprocess.CompletedProcess(list(argv), item.returncode, item.stdout, item.stderr)

    @property
    def commands(self) -> list[list[str]]:
        return [c["argv"] for c in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def spec_file(tmp_path: Path) -> Path:
    """An OpenAPI document describing a single endpoint."""
    path = tmp_path / "openai.yaml"
    path.write_text(SPEC_CONTENT)
    return path


@pytest.fixture
def config_file(tmp_path: Path, spec_file: Path) -> Path:
    """A clientgen.yml next to the OpenAPI document."""
    content = textwrap.dedent("""\
        spec: openai.yaml
        output: generated/rust
        language: rust
        generator:
          image: openapitools/openapi-generator-cli:v7.5.0
          timeout: 120
        permissions:
          strategy: chmod
          mode: "777"
    """)
    path = tmp_path / "clientgen.yml"
    path.write_text(content)
    return path
