# Tests for the provider store
import json
import logging
from pathlib import Path

import pytest

from ccs.config import (
    ProviderNotFoundError,
    add_provider,
    get_config_path,
    get_current_provider,
    get_provider,
    list_providers,
    parse_config,
    provider_from_dict,
    provider_to_dict,
    read_config,
    remove_provider,
    require_provider,
    set_current_provider,
    write_config,
)
from ccs.models import Provider

GLM = Provider(
    name="GLM",
    type="api_key",
    config_dir="~/.claude-glm",
    env={"ANTHROPIC_AUTH_TOKEN": "tok", "ANTHROPIC_BASE_URL": "https://api.z.ai/api/anthropic"},
)


def write_store(home: Path, data) -> Path:
    path = home / ".ccs" / "config.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    return path


def test_get_config_path(home: Path):
    """Test the default provider store location."""
    assert get_config_path() == home / ".ccs" / "config.json"


def test_get_config_path_override(tmp_path: Path, monkeypatch):
    """Test that $CCS_CONFIG_PATH overrides the default."""
    monkeypatch.setenv("CCS_CONFIG_PATH", str(tmp_path / "alt.json"))
    assert get_config_path() == tmp_path / "alt.json"


def test_missing_file_gives_default():
    """Test that a missing store yields the default OAuth provider."""
    config = read_config()
    assert config.current == "anthropic"
    assert config.providers["anthropic"].type == "oauth"
    assert config.providers["anthropic"].config_dir == "~/.claude"
    assert not get_config_path().exists()


def test_invalid_json_gives_default(home: Path, caplog):
    """Test that unparseable JSON falls back to defaults with an error."""
    path = home / ".ccs" / "config.json"
    path.parent.mkdir()
    path.write_text('{"current": broken}')

    with caplog.at_level(logging.ERROR):
        config = read_config()

    assert list(config.providers) == ["anthropic"]
    assert "invalid JSON" in caplog.text


def test_invalid_schema_gives_default(home: Path, caplog):
    """Test that a current key missing from providers falls back to defaults."""
    write_store(home, {
        "current": "ghost",
        "providers": {"anthropic": {"name": "A", "type": "oauth", "configDir": "~/.claude"}},
    })

    with caplog.at_level(logging.ERROR):
        config = read_config()

    assert config.current == "anthropic"
    assert "ghost" in caplog.text


def test_load_valid_store(home: Path):
    """Test loading a store with OAuth and api_key providers."""
    write_store(home, {
        "current": "glm",
        "providers": {
            "anthropic": {"name": "Anthropic", "type": "oauth", "configDir": "~/.claude"},
            "glm": {
                "name": "GLM",
                "type": "api_key",
                "description": "Zhipu GLM",
                "configDir": "~/.claude-glm",
                "env": {"ANTHROPIC_AUTH_TOKEN": "${GLM_KEY}"},
                "memoryReset": True,
            },
        },
    })

    key, provider = get_current_provider()

    assert key == "glm"
    assert provider.description == "Zhipu GLM"
    assert provider.env == {"ANTHROPIC_AUTH_TOKEN": "${GLM_KEY}"}
    assert provider.memory_reset is True


class TestParsing:
    """Tests for parse_config and provider conversion."""

    def test_requires_current(self):
        with pytest.raises(ValueError, match="current"):
            parse_config({"providers": {"a": {"name": "A", "type": "oauth", "configDir": "~/.a"}}})

    def test_requires_providers(self):
        with pytest.raises(ValueError, match="At least one provider"):
            parse_config({"current": "a", "providers": {}})

    def test_rejects_bad_type(self):
        with pytest.raises(ValueError, match="Invalid type"):
            provider_from_dict("x", {"name": "X", "type": "token", "configDir": "~/.x"})

    def test_rejects_missing_field(self):
        with pytest.raises(ValueError, match="configDir"):
            provider_from_dict("x", {"name": "X", "type": "oauth"})

    def test_rejects_oauth_env(self):
        with pytest.raises(ValueError, match="OAuth"):
            provider_from_dict("x", {
                "name": "X",
                "type": "oauth",
                "configDir": "~/.x",
                "env": {"ANTHROPIC_AUTH_TOKEN": "t"},
            })

    def test_rejects_non_bool_memory_reset(self):
        with pytest.raises(ValueError, match="memoryReset"):
            provider_from_dict("x", {
                "name": "X",
                "type": "api_key",
                "configDir": "~/.x",
                "memoryReset": "false",
            })

    def test_to_dict_uses_stored_names(self):
        data = provider_to_dict(Provider(
            name="GLM",
            type="api_key",
            config_dir="~/.claude-glm",
            env={"ANTHROPIC_AUTH_TOKEN": "t", "ANTHROPIC_MODEL": None},
            memory_reset=True,
        ))
        assert data == {
            "name": "GLM",
            "type": "api_key",
            "configDir": "~/.claude-glm",
            "env": {"ANTHROPIC_AUTH_TOKEN": "t"},
            "memoryReset": True,
        }

    def test_write_then_read(self, tmp_path: Path):
        path = tmp_path / "config.json"
        config = read_config(path)
        config.providers["glm"] = GLM

        write_config(config, path)

        assert read_config(path).providers["glm"] == GLM


class TestStoreOperations:
    """Tests for add/remove/select operations."""

    def test_add_provider(self):
        ok, err = add_provider("glm", GLM)

        assert ok and err is None
        assert get_provider("glm") == GLM
        # The default provider is materialised alongside it
        assert get_provider("anthropic") is not None

    def test_add_duplicate_rejected(self):
        add_provider("glm", GLM)

        ok, err = add_provider("glm", GLM)

        assert not ok
        assert err == "Provider 'glm' already exists. Use 'ccs remove glm' first."

    def test_add_invalid_rejected(self):
        bad = Provider(name="Bad", type="api_key", config_dir="~/.bad", env={"HTTP_PROXY": "x"})

        ok, err = add_provider("bad", bad)

        assert not ok
        assert "HTTP_PROXY" in err
        assert get_provider("bad") is None

    def test_set_current(self):
        add_provider("glm", GLM)

        assert set_current_provider("glm") is True
        assert get_current_provider()[0] == "glm"

    def test_set_current_unknown(self):
        assert set_current_provider("nope") is False
        assert get_current_provider()[0] == "anthropic"

    def test_require_provider(self):
        with pytest.raises(ProviderNotFoundError) as exc_info:
            require_provider("nope")
        assert str(exc_info.value) == "Provider 'nope' not found"
        assert exc_info.value.key == "nope"

    def test_remove_last_provider_refused(self):
        ok, err = remove_provider("anthropic")
        assert not ok
        assert "last provider" in err

    def test_remove_unknown(self):
        ok, err = remove_provider("nope")
        assert not ok
        assert "not found" in err

    def test_remove_current_switches(self):
        add_provider("glm", GLM)
        set_current_provider("glm")

        ok, _ = remove_provider("glm")

        assert ok
        assert get_current_provider()[0] == "anthropic"
        assert get_provider("glm") is None

    def test_list_marks_current(self):
        add_provider("glm", GLM)

        listing = list_providers()

        assert [(key, current) for key, _, current in listing] == [("anthropic", True), ("glm", False)]
