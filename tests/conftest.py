# ABOUTME: Shared fixtures for ccs tests
# ABOUTME: Every test gets its own HOME so ~/.claude, ~/.ccs and friends live under tmp_path
import json
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temp dir and clear ccs overrides."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv("CCS_CONFIG_PATH", raising=False)
    monkeypatch.delenv("NODE_OPTIONS", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    return home_dir


@pytest.fixture
def claude_home(home: Path) -> Path:
    """A populated canonical ~/.claude tree plus ~/.claude.json."""
    root = home / ".claude"
    (root / "commands").mkdir(parents=True)
    (root / "commands" / "review.md").write_text("Review the diff\n")
    (root / "skills" / "frontend-design").mkdir(parents=True)
    (root / "settings.json").write_text('{"statusLine": {"type": "command"}}\n')

    (home / ".claude.json").write_text(json.dumps({
        "mcpServers": {
            "filesystem": {"command": "npx", "args": ["-y", "@modelcontextprotocol/server-filesystem"]},
            "github": {"type": "http", "url": "https://api.githubcopilot.com/mcp/"},
        },
        "numStartups": 12,
    }))
    return root


@pytest.fixture
def write_lines():
    """Writer for JSONL files with `count` numbered records."""
    def write(path: Path, count: int, width: int = 40) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            for i in range(count):
                f.write(json.dumps({"n": i, "pad": "x" * width}) + "\n")
    return write
