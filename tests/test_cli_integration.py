# ABOUTME: Integration tests for the ccs CLI that run actual subprocess commands
# ABOUTME: Tests real CLI behavior by invoking `python -m ccs` with a temp HOME
import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

SRC = Path(__file__).resolve().parents[1] / "src"


@pytest.fixture
def cli_env(home: Path) -> dict[str, str]:
    env = os.environ.copy()
    env["HOME"] = str(home)
    env["NO_COLOR"] = "1"
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC), env.get("PYTHONPATH")]))
    return env


def run_cli(args: list[str], env: dict[str, str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "ccs", *args],
        capture_output=True,
        text=True,
        timeout=30,
        env=env,
    )


class TestCliIntegration:
    """Integration tests that run the CLI via subprocess."""

    def test_integration_cli_version_output(self, cli_env):
        result = run_cli(["--version"], cli_env)

        assert result.returncode == 0
        assert result.stdout.startswith("ccs v")

    def test_integration_cli_help_output(self, cli_env):
        result = run_cli(["--help"], cli_env)

        assert result.returncode == 0
        assert "usage: ccs" in result.stdout
        assert "sync" in result.stdout

    def test_integration_cli_status_without_config(self, cli_env, home: Path):
        """Test that a fresh HOME works with the default provider."""
        result = run_cli(["status"], cli_env)

        assert result.returncode == 0
        assert "anthropic" in result.stdout
        assert not (home / ".ccs" / "config.json").exists()

    def test_integration_cli_add_and_use(self, cli_env, home: Path):
        """Test adding a provider non-interactively and selecting it."""
        added = run_cli(
            ["add", "glm", "--name", "GLM", "--env", "ANTHROPIC_AUTH_TOKEN=tok"],
            cli_env,
        )
        assert added.returncode == 0

        used = run_cli(["use", "glm"], cli_env)
        assert used.returncode == 0

        data = json.loads((home / ".ccs" / "config.json").read_text())
        assert data["current"] == "glm"
        assert data["providers"]["glm"]["env"] == {"ANTHROPIC_AUTH_TOKEN": "tok"}

    def test_integration_cli_run_missing_binary(self, cli_env, tmp_path: Path):
        """Test that a missing claude binary is reported, not raised."""
        cli_env["PATH"] = str(tmp_path / "empty-bin")

        result = run_cli(["run"], cli_env)

        assert result.returncode == 1
        assert "Failed to launch claude" in result.stderr

    def test_integration_cli_unknown_provider(self, cli_env):
        result = run_cli(["nope"], cli_env)

        assert result.returncode == 1
        assert "Unknown command or provider" in result.stdout
