# Tests for core data models
import pytest

from ccs.models import (
    CleanupReport,
    Config,
    McpMergeResult,
    MemoryResetReport,
    Provider,
    SharedResource,
)


def test_provider_creation():
    """Test creating Provider instances."""
    provider = Provider(
        name="GLM",
        type="api_key",
        config_dir="~/.claude-glm",
        env={"ANTHROPIC_AUTH_TOKEN": "${GLM_KEY}"},
    )
    assert provider.name == "GLM"
    assert provider.config_dir == "~/.claude-glm"
    assert provider.env == {"ANTHROPIC_AUTH_TOKEN": "${GLM_KEY}"}
    assert provider.is_api_key


def test_provider_defaults():
    """Test Provider with default values."""
    provider = Provider(name="Anthropic", type="oauth", config_dir="~/.claude")
    assert provider.description is None
    assert provider.env is None
    assert provider.memory_reset is False
    assert not provider.is_api_key


def test_provider_immutability():
    """Test that Provider is frozen (immutable)."""
    provider = Provider(name="Anthropic", type="oauth", config_dir="~/.claude")
    with pytest.raises(AttributeError):
        provider.name = "new_name"
    with pytest.raises(AttributeError):
        provider.config_dir = "~/elsewhere"


def test_config_mutability():
    """Test that Config is mutable (not frozen)."""
    config = Config(
        current="anthropic",
        providers={"anthropic": Provider(name="Anthropic", type="oauth", config_dir="~/.claude")},
    )

    config.current = "glm"
    config.providers["glm"] = Provider(name="GLM", type="api_key", config_dir="~/.claude-glm")

    assert config.current == "glm"
    assert len(config.providers) == 2


def test_shared_resource_source_override():
    assert SharedResource("commands", "dir").source is None
    assert SharedResource(".claudeignore", "file", source="~/.ccsignore").source == "~/.ccsignore"


def test_mcp_merge_result():
    assert McpMergeResult("merged", servers=2).merged
    skipped = McpMergeResult("skipped", reason="source directory")
    assert not skipped.merged
    assert skipped.reason == "source directory"


def test_cleanup_report_totals():
    """Test bytes_freed sums removals and truncations."""
    report = CleanupReport()
    report.removed["debug"] = 100
    report.truncated["history.jsonl"] = 50
    report.add_error("statsig: permission denied")

    assert report.bytes_freed == 150
    assert report.errors == ["statsig: permission denied"]


def test_reports_do_not_share_state():
    first = MemoryResetReport()
    second = MemoryResetReport()
    first.removed.append("todos")
    assert second.removed == []
