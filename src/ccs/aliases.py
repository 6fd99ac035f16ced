# Shell alias generation for ccs providers
from ccs.models import Config, Provider


def _quote(value: str) -> str:
    # $ stays live so ${VAR} references expand in the shell, as they do at launch
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("`", "\\`")
    return f'"{escaped}"'


def generate_provider_alias(key: str, provider: Provider) -> str:
    """Shell function running claude with one provider's env.

    ABOUTME: claude-<key>() { env VAR=... CLAUDE_CONFIG_DIR=... claude "$@"; }
    ABOUTME: Home-relative config dirs stay unquoted so the shell expands ~
    """
    config_dir = provider.config_dir if provider.config_dir.startswith("~") else _quote(provider.config_dir)

    assignments: list[str] = []
    if provider.is_api_key and provider.env:
        assignments = [
            f"{name}={_quote(value)}"
            for name, value in provider.env.items()
            if value is not None
        ]
    assignments.append(f"CLAUDE_CONFIG_DIR={config_dir}")

    body = " \\\n    ".join(assignments)
    return f'claude-{key}() {{\n  env {body} \\\n    claude "$@"\n}}'


def generate_aliases(config: Config) -> str:
    """Aliases for every provider plus the ccm/ccc shortcuts."""
    lines = [
        "# CCS - Claude Code Switch",
        "# Generated aliases - do not edit manually",
        "",
    ]

    for key, provider in config.providers.items():
        lines.append(generate_provider_alias(key, provider))
        lines.append("")

    lines.append('alias ccm="ccs"')
    lines.append("")
    lines.append('ccc() { ccs run "$@"; }')
    lines.append("")

    return "\n".join(lines)


def get_setup_instructions() -> str:
    return """# Add to ~/.zshrc or ~/.bashrc:

# CCS - Claude Code Switch
eval "$(ccs alias)"

# Then run:
source ~/.zshrc
"""
