"""Tests for server startup error scenarios.

Covers:
- Wrong-type and out-of-range config values (both stdio and HTTP transports)
- Unknown config keys
- A malformed YAML config file in the working directory
"""

from __future__ import annotations

import subprocess
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


def _run_and_wait(
    env: dict[str, str], cwd: Path | None = None, timeout: int = 10
) -> subprocess.CompletedProcess[str]:
    """Start the server with stdin closed and wait for it to exit.

    Suitable for crash scenarios where the server exits before reading any input.
    """
    return subprocess.run(
        [sys.executable, "-m", "gemcontext.server"],
        stdin=subprocess.DEVNULL,
        capture_output=True,
        text=True,
        timeout=timeout,
        env=env,
        cwd=cwd,
    )


class TestBadConfigType:
    """Wrong-type config values crash the server before any transport starts."""

    def test_stdio_crashes_on_wrong_type(self, subprocess_env: dict[str, str]) -> None:
        env = {**subprocess_env, "GEMCONTEXT__SERVER__PORT": "not-a-number"}
        result = _run_and_wait(env)
        assert result.returncode != 0

    def test_http_crashes_on_wrong_type(self, subprocess_env: dict[str, str]) -> None:
        """Config validation runs before transport starts, so HTTP fails identically."""
        env = {
            **subprocess_env,
            "GEMCONTEXT__SERVER__TRANSPORT": "http",
            "GEMCONTEXT__SERVER__PORT": "not-a-number",
        }
        result = _run_and_wait(env)
        assert result.returncode != 0

    def test_unknown_transport(self, subprocess_env: dict[str, str]) -> None:
        env = {**subprocess_env, "GEMCONTEXT__SERVER__TRANSPORT": "websocket"}
        result = _run_and_wait(env)
        assert result.returncode != 0

    def test_non_positive_response_limit(self, subprocess_env: dict[str, str]) -> None:
        env = {**subprocess_env, "GEMCONTEXT__FETCHER__MAX_RESPONSE_SIZE": "0"}
        result = _run_and_wait(env)
        assert result.returncode != 0


class TestConfigFile:
    def test_unknown_key_in_yaml(self, tmp_path: Path, subprocess_env: dict[str, str]) -> None:
        (tmp_path / "gemcontext.yaml").write_text("cache:\n  db_path: /tmp/cache.db\n")
        result = _run_and_wait(subprocess_env, cwd=tmp_path)
        assert result.returncode != 0

    def test_wrong_type_in_yaml(self, tmp_path: Path, subprocess_env: dict[str, str]) -> None:
        (tmp_path / "gemcontext.yaml").write_text("cache:\n  gem_ttl_seconds: forever\n")
        result = _run_and_wait(subprocess_env, cwd=tmp_path)
        assert result.returncode != 0
