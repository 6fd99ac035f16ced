# ABOUTME: Tests for MCP server merging and OAuth credential stripping
# ABOUTME: Includes the destructive force-merge asymmetry explicitly
import json
from pathlib import Path

import pytest

from ccs.mcp import merge_mcp_servers, merge_servers, read_json_file, strip_oauth_account


def write_doc(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))


@pytest.fixture
def source_file(home: Path) -> Path:
    path = home / ".claude.json"
    write_doc(path, {"mcpServers": {"a": 1, "b": 2}, "userID": "abc"})
    return path


@pytest.fixture
def target_dir(home: Path) -> Path:
    path = home / ".claude-glm"
    path.mkdir()
    return path


class TestMergeServers:
    """Tests for merge_servers function."""

    def test_union_source_wins(self):
        assert merge_servers({"a": 1, "b": 2}, {"b": 3, "c": 4}) == {"a": 1, "b": 2, "c": 4}

    def test_force_drops_target_only(self):
        # Forced merge is a replace, not a union
        assert merge_servers({"a": 1, "b": 2}, {"b": 3, "c": 4}, force=True) == {"a": 1, "b": 2}

    def test_does_not_mutate_inputs(self):
        source = {"a": 1}
        target = {"c": 4}

        merge_servers(source, target)

        assert source == {"a": 1}
        assert target == {"c": 4}


class TestMergeMcpServers:
    """Tests for merge_mcp_servers function."""

    def test_non_forced_merge(self, source_file: Path, target_dir: Path):
        write_doc(target_dir / ".claude.json", {"mcpServers": {"b": 3, "c": 4}})

        result = merge_mcp_servers(target_dir)

        assert result.merged
        assert result.servers == 3
        data = read_json_file(target_dir / ".claude.json")
        assert data["mcpServers"] == {"a": 1, "b": 2, "c": 4}

    def test_forced_merge_is_destructive(self, source_file: Path, target_dir: Path):
        write_doc(target_dir / ".claude.json", {"mcpServers": {"b": 3, "c": 4}})

        result = merge_mcp_servers(target_dir, force=True)

        assert result.merged
        data = read_json_file(target_dir / ".claude.json")
        assert data["mcpServers"] == {"a": 1, "b": 2}

    def test_other_keys_preserved_in_order(self, source_file: Path, target_dir: Path):
        write_doc(target_dir / ".claude.json", {
            "theme": "dark",
            "mcpServers": {"c": 4},
            "projects": {"/work": {"allowedTools": []}},
        })

        merge_mcp_servers(target_dir)

        data = read_json_file(target_dir / ".claude.json")
        assert list(data) == ["theme", "mcpServers", "projects"]
        assert data["projects"] == {"/work": {"allowedTools": []}}
        assert "userID" not in data

    def test_creates_missing_target_document(self, source_file: Path, target_dir: Path):
        result = merge_mcp_servers(target_dir)

        assert result.merged
        assert read_json_file(target_dir / ".claude.json") == {"mcpServers": {"a": 1, "b": 2}}

    def test_unchanged_does_not_write(self, source_file: Path, target_dir: Path):
        target = target_dir / ".claude.json"
        write_doc(target, {"mcpServers": {"b": 2, "a": 1, "c": 4}})
        before = target.read_text()

        result = merge_mcp_servers(target_dir)

        assert result.status == "unchanged"
        assert target.read_text() == before

    def test_unparseable_target_treated_as_empty(self, source_file: Path, target_dir: Path):
        (target_dir / ".claude.json").write_text("{not json")

        result = merge_mcp_servers(target_dir)

        assert result.merged
        assert read_json_file(target_dir / ".claude.json") == {"mcpServers": {"a": 1, "b": 2}}

    def test_rewrite_takes_backup(self, home: Path, source_file: Path, target_dir: Path):
        write_doc(target_dir / ".claude.json", {"mcpServers": {"c": 4}})

        merge_mcp_servers(target_dir)

        backups = list((home / ".ccs" / "backups").iterdir())
        assert len(backups) == 1
        assert backups[0].name.startswith("claude-glm_")
        assert json.loads(backups[0].read_text()) == {"mcpServers": {"c": 4}}

    def test_opaque_values_round_trip(self, home: Path, target_dir: Path):
        server = {"command": "uvx", "args": ["x"], "env": {"K": "v"}, "futureField": [1, {"n": None}]}
        write_doc(home / ".claude.json", {"mcpServers": {"x": server}})

        merge_mcp_servers(target_dir)

        assert read_json_file(target_dir / ".claude.json")["mcpServers"]["x"] == server

    def test_skipped_for_canonical_dir(self, source_file: Path, home: Path):
        (home / ".claude").mkdir()

        result = merge_mcp_servers("~/.claude")

        assert result.status == "skipped"
        assert not (home / ".claude" / ".claude.json").exists()

    def test_skipped_without_source(self, target_dir: Path):
        result = merge_mcp_servers(target_dir)

        assert result.status == "skipped"
        assert not (target_dir / ".claude.json").exists()

    def test_skipped_with_empty_source(self, home: Path, target_dir: Path):
        write_doc(home / ".claude.json", {"mcpServers": {}})

        result = merge_mcp_servers(target_dir)

        assert result.status == "skipped"
        assert result.reason == "no MCP servers in source"

    def test_skipped_with_unreadable_source(self, home: Path, target_dir: Path):
        (home / ".claude.json").write_text("[1, 2")

        assert merge_mcp_servers(target_dir).status == "skipped"

    def test_custom_source_file(self, tmp_path: Path, target_dir: Path):
        source = tmp_path / "servers.json"
        write_doc(source, {"mcpServers": {"z": {"command": "z"}}})

        result = merge_mcp_servers(target_dir, source_file=source)

        assert result.merged
        assert read_json_file(target_dir / ".claude.json")["mcpServers"] == {"z": {"command": "z"}}


class TestStripOauthAccount:
    """Tests for strip_oauth_account function."""

    def test_removes_oauth_account(self, target_dir: Path):
        write_doc(target_dir / ".claude.json", {
            "oauthAccount": {"accountUuid": "u"},
            "mcpServers": {"a": 1},
        })

        assert strip_oauth_account(target_dir) is True
        assert read_json_file(target_dir / ".claude.json") == {"mcpServers": {"a": 1}}

    def test_noop_without_oauth_account(self, target_dir: Path):
        write_doc(target_dir / ".claude.json", {"mcpServers": {"a": 1}})
        assert strip_oauth_account(target_dir) is False

    def test_noop_without_document(self, target_dir: Path):
        assert strip_oauth_account(target_dir) is False
        assert not (target_dir / ".claude.json").exists()

    def test_unreadable_document_is_left_alone(self, target_dir: Path):
        (target_dir / ".claude.json").write_text("oauthAccount")

        assert strip_oauth_account(target_dir) is False
        assert (target_dir / ".claude.json").read_text() == "oauthAccount"
