"""
Permission normalization — hand the generated tree back to the invoking user.

The containerized generator usually runs as root, so its output is not
writable by whoever launched clientgen. Three strategies:

    chmod   widen the mode bits on every directory and file (default 777),
            falling back to ``sudo chmod -R`` when we lack privilege
    chown   ``sudo chown -R uid:gid`` to the invoking user
    none    leave the tree alone (generator already ran as the invoking user)
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from pathlib import Path

from clientgen.adapters.shell.command import Runner, run_command
from clientgen.core.models.generation import PermissionSettings
from clientgen.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


class PermissionNormalizer:
    """Recursively make an artifact tree accessible to the invoking user."""

    def __init__(
        self,
        strategy: str = "chmod",
        mode: int = 0o777,
        use_sudo: bool = True,
        uid: int | None = None,
        gid: int | None = None,
        runner: Runner = run_command,
        timeout: int = 300,
    ):
        self.strategy = strategy
        self.mode = mode
        self.use_sudo = use_sudo
        self.uid = os.getuid() if uid is None else uid
        self.gid = os.getgid() if gid is None else gid
        self.timeout = timeout
        self._runner = runner

    @classmethod
    def from_settings(cls, settings: PermissionSettings, **kwargs) -> PermissionNormalizer:
        return cls(
            strategy=settings.strategy,
            mode=settings.numeric_mode,
            use_sudo=settings.use_sudo,
            **kwargs,
        )

    def sudo_available(self) -> bool:
        return shutil.which("sudo") is not None

    def normalize(self, root: Path) -> Receipt:
        """Apply the configured strategy to every entry under ``root``."""
        if self.strategy == "none":
            return Receipt.skip(step="permissions", reason="Permission normalization disabled")

        if not root.is_dir():
            return Receipt.failure(
                step="permissions",
                error=f"Output directory does not exist: {root}",
            )

        start = time.monotonic()
        if self.strategy == "chmod":
            receipt = self._chmod(root)
        elif self.strategy == "chown":
            receipt = self._chown(root)
        else:
            return Receipt.failure(
                step="permissions",
                error=f"Unknown permission strategy: {self.strategy}",
            )
        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt

    # ── Strategies ──────────────────────────────────────────────

    def _chmod(self, root: Path) -> Receipt:
        try:
            dirs, files = _chmod_tree(root, self.mode)
        except PermissionError as e:
            logger.info("chmod on %s needs privilege (%s)", root, e)
            return self._sudo(["chmod", "-R", f"{self.mode:o}", str(root)], fallback_error=str(e))
        except OSError as e:
            return Receipt.failure(
                step="permissions",
                error=f"chmod failed: {e}",
                metadata={"strategy": "chmod", "mode": f"{self.mode:o}"},
            )
        return Receipt.success(
            step="permissions",
            output=f"Set mode {self.mode:o} on {dirs} directories and {files} files",
            metadata={"strategy": "chmod", "mode": f"{self.mode:o}", "directories": dirs, "files": files},
        )

    def _chown(self, root: Path) -> Receipt:
        owner = f"{self.uid}:{self.gid}"
        if os.geteuid() == 0:
            try:
                dirs, files = _chown_tree(root, self.uid, self.gid)
            except OSError as e:
                return Receipt.failure(step="permissions", error=f"chown failed: {e}")
            return Receipt.success(
                step="permissions",
                output=f"Changed owner to {owner} on {dirs} directories and {files} files",
                metadata={"strategy": "chown", "owner": owner, "directories": dirs, "files": files},
            )
        return self._sudo(["chown", "-R", owner, str(root)])

    def _sudo(self, argv: list[str], fallback_error: str = "") -> Receipt:
        """Run a privileged command through sudo, if allowed."""
        if not self.use_sudo:
            return Receipt.failure(
                step="permissions",
                error=fallback_error or "Insufficient privilege and sudo is disabled",
                metadata={"strategy": self.strategy},
            )
        if not self.sudo_available():
            return Receipt.failure(
                step="permissions",
                error="Insufficient privilege and sudo is not installed",
                metadata={"strategy": self.strategy},
            )

        command = ["sudo", *argv]
        try:
            result = self._runner(command, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                step="permissions",
                error=f"sudo {argv[0]} timed out after {self.timeout}s",
                metadata={"strategy": self.strategy, "command": command},
            )
        if result.returncode != 0:
            return Receipt.failure(
                step="permissions",
                error=result.stderr.strip() or f"sudo {argv[0]} exited with code {result.returncode}",
                metadata={"strategy": self.strategy, "command": command, "return_code": result.returncode},
            )
        return Receipt.success(
            step="permissions",
            output=result.stdout.strip() or f"sudo {argv[0]} completed",
            metadata={"strategy": self.strategy, "command": command, "return_code": 0, "sudo": True},
        )


def _chmod_tree(root: Path, mode: int) -> tuple[int, int]:
    """chmod ``root`` and everything below it. Symlinks are left alone.

    Directories are changed before os.walk descends into them, so a
    directory we own but cannot traverse yet still gets walked.
    """
    os.chmod(root, mode)
    dirs, files = 1, 0
    for current, dirnames, filenames in os.walk(root, onerror=_raise):
        base = Path(current)
        for name in dirnames:
            path = base / name
            if not path.is_symlink():
                os.chmod(path, mode)
                dirs += 1
        for name in filenames:
            path = base / name
            if not path.is_symlink():
                os.chmod(path, mode)
                files += 1
    return dirs, files


def _chown_tree(root: Path, uid: int, gid: int) -> tuple[int, int]:
    os.lchown(root, uid, gid)
    dirs, files = 1, 0
    for current, dirnames, filenames in os.walk(root, onerror=_raise):
        base = Path(current)
        for name in dirnames:
            os.lchown(base / name, uid, gid)
            dirs += 1
        for name in filenames:
            os.lchown(base / name, uid, gid)
            files += 1
    return dirs, files


def _raise(error: OSError) -> None:
    raise error
