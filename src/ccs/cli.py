# CLI interface for ccs
import argparse
import logging
import sys
from datetime import datetime

from ccs import __version__
from ccs.aliases import generate_aliases, get_setup_instructions
from ccs.config import (
    ProviderNotFoundError,
    add_provider,
    get_config_path,
    get_current_provider,
    get_provider,
    list_providers,
    read_config,
    remove_provider,
    set_current_provider,
)
from ccs.models import Provider, SyncResult
from ccs.runner import CLAUDE_BINARY, LaunchError, run_provider
from ccs.state import StateStore
from ccs.sync import SHARED_RESOURCES, sync_provider
from ccs.ui import bold, cyan, gray, green, red, yellow
from ccs.utils import validate_command_exists
from ccs.utils.validation import ALLOWED_ENV_KEYS

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

SKIP_PERMISSIONS_FLAG = "--dangerously-skip-permissions"
NO_SKIP_PERMISSIONS_FLAG = "--no-dangerously-skip-permissions"

COMMANDS = ("status", "list", "ls", "use", "add", "remove", "rm", "run", "alias", "config", "sync")


def configure_logging(verbose: bool = False) -> None:
    """Route ccs log records to stderr as [ccs] lines."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[ccs] %(message)s",
        stream=sys.stderr,
    )


def _model_of(provider: Provider) -> str | None:
    return (provider.env or {}).get("ANTHROPIC_MODEL")


def cmd_status(args: argparse.Namespace) -> int:
    """Show the current provider.

    ABOUTME: Also reports the memory reset gate and whether claude is on PATH
    """
    key, provider = get_current_provider()

    print(bold("Current provider:"), cyan(key))
    print(gray(f"  {provider.name}"))
    if provider.description:
        print(gray(f"  {provider.description}"))
    if _model_of(provider):
        print(gray(f"  Model: {_model_of(provider)}"))
    print(gray(f"  Config: {provider.config_dir}"))

    if provider.memory_reset:
        with StateStore() as store:
            last = store.get_last_memory_reset(key)
        when = datetime.fromtimestamp(last / 1000).strftime("%Y-%m-%d %H:%M") if last else "never"
        print(gray(f"  Memory reset: enabled (last: {when})"))

    missing = validate_command_exists(CLAUDE_BINARY)
    if missing:
        print(yellow(f"  Warning: {missing.message}"))

    return EXIT_SUCCESS


def cmd_list(args: argparse.Namespace) -> int:
    """List all providers, marking the current one."""
    print(bold("\nProviders:\n"))
    for key, provider, current in list_providers():
        marker = green("●") if current else gray("○")
        label = bold(cyan(key)) if current else key
        print(f"  {marker} {label}")
        print(gray(f"    {provider.name}"))
        if _model_of(provider):
            print(gray(f"    Model: {_model_of(provider)}"))
    print()
    return EXIT_SUCCESS


def cmd_use(args: argparse.Namespace) -> int:
    """Switch the current provider."""
    if not set_current_provider(args.provider):
        print(red(f"Provider '{args.provider}' not found"))
        print(gray('Run "ccs list" to see available providers'))
        return EXIT_FAILURE

    print(green(f"✓ Switched to {args.provider}"))
    provider = get_provider(args.provider)
    if provider and _model_of(provider):
        print(gray(f"  Model: {_model_of(provider)}"))
    return EXIT_SUCCESS


def _parse_env_pairs(text: str) -> dict[str, str | None]:
    env: dict[str, str | None] = {}
    for pair in text.split(","):
        if "=" in pair:
            key, value = pair.split("=", 1)
            env[key.strip()] = value.strip()
    return env


def cmd_add(args: argparse.Namespace) -> int:
    """Add a provider.

    ABOUTME: Interactive mode prompts for each field
    ABOUTME: Non-interactive mode (--name given) uses command-line args
    """
    key = args.key
    print(bold(f"\nAdding provider: {cyan(key)}\n"))

    if args.name:
        name = args.name
        provider_type = args.type or "api_key"
        config_dir = args.config_dir or f"~/.claude-{key}"
        description = args.description or None
        env = _parse_env_pairs(args.env) if args.env else None
        memory_reset = args.memory_reset
    else:
        name = input('Display name (e.g., "GLM-4.7"): ').strip()
        if not name:
            print(red("Name is required"))
            return EXIT_FAILURE

        type_input = input("Type [oauth/api_key] (default: api_key): ").strip().lower()
        provider_type = "oauth" if type_input == "oauth" else "api_key"

        config_dir = input(f"Config directory (default: ~/.claude-{key}): ").strip() or f"~/.claude-{key}"
        description = input("Description (optional): ").strip() or None

        env = None
        if provider_type == "api_key":
            print(gray("\nEnvironment variables (press Enter to skip):"))
            env = {}
            for env_key in ("ANTHROPIC_AUTH_TOKEN", "ANTHROPIC_API_KEY", "ANTHROPIC_MODEL", "ANTHROPIC_BASE_URL"):
                value = input(f"  {env_key}: ").strip()
                if value:
                    env[env_key] = value

        memory_reset = input("Reset memory daily? [y/N]: ").strip().lower() == "y"

    provider = Provider(
        name=name,
        type=provider_type,
        config_dir=config_dir,
        description=description,
        env=env or None,
        memory_reset=memory_reset,
    )

    ok, error = add_provider(key, provider)
    if not ok:
        print(red(f"\n✗ {error}"))
        return EXIT_FAILURE

    print(green(f"\n✓ Provider '{key}' added successfully"))
    print(gray(f"  Config: {get_config_path()}"))
    return EXIT_SUCCESS


def cmd_remove(args: argparse.Namespace) -> int:
    """Remove a provider, asking for confirmation unless --force."""
    provider = get_provider(args.key)
    if provider is None:
        print(red(f"Provider '{args.key}' not found"))
        return EXIT_FAILURE

    if not args.force:
        confirm = input(yellow(f"Remove provider '{args.key}' ({provider.name})? [y/N]: "))
        if confirm.strip().lower() != "y":
            print(gray("Cancelled"))
            return EXIT_SUCCESS

    ok, error = remove_provider(args.key)
    if not ok:
        print(red(f"✗ {error}"))
        return EXIT_FAILURE

    print(green(f"✓ Provider '{args.key}' removed"))
    return EXIT_SUCCESS


def parse_run_args(argv: list[str]) -> tuple[str | None, bool, list[str]]:
    """Split run arguments into (provider, skip_permissions, claude args).

    ABOUTME: A leading non-option word names the provider; everything else goes to claude
    ABOUTME: `--` ends ccs parsing so claude can receive a bare word first

    Examples:
        >>> parse_run_args(["glm", "--resume"])
        ('glm', True, ['--resume'])
        >>> parse_run_args(["--no-dangerously-skip-permissions", "-p", "hi"])
        (None, False, ['-p', 'hi'])
    """
    skip_permissions = True
    rest: list[str] = []
    for i, arg in enumerate(argv):
        if arg == "--":
            rest.append(arg)
            rest.extend(argv[i + 1:])
            break
        if arg == NO_SKIP_PERMISSIONS_FLAG:
            skip_permissions = False
        else:
            rest.append(arg)

    provider = None
    if rest and rest[0] == "--":
        rest = rest[1:]
    elif rest and not rest[0].startswith("-"):
        provider = rest.pop(0)

    return provider, skip_permissions, rest


def cmd_run(provider_key: str | None, skip_permissions: bool, extra_args: list[str]) -> int:
    """Launch claude with a provider (default: the current one).

    ABOUTME: Naming a provider also makes it current
    ABOUTME: Exit code is claude's own
    """
    if provider_key:
        if not set_current_provider(provider_key):
            print(red(f"Provider '{provider_key}' not found"))
            return EXIT_FAILURE
        provider = get_provider(provider_key)
    else:
        provider_key, provider = get_current_provider()

    if provider is not None:
        logger.info(f"Using {provider_key} ({provider.name})")

    claude_args = [SKIP_PERMISSIONS_FLAG, *extra_args] if skip_permissions else list(extra_args)

    try:
        with StateStore() as store:
            return run_provider(provider_key, claude_args, store)
    except ProviderNotFoundError as e:
        print(red(str(e)))
        return EXIT_FAILURE
    except LaunchError as e:
        print(red(f"Error: {e}"), file=sys.stderr)
        print(gray("Is Claude Code installed and on your PATH?"), file=sys.stderr)
        return EXIT_FAILURE


def cmd_default(argv: list[str]) -> int:
    """`ccs` runs the current provider; `ccs <provider>` switches to it."""
    provider_key, skip_permissions, rest = parse_run_args(argv)

    if provider_key is None:
        return cmd_run(None, skip_permissions, rest)

    if get_provider(provider_key) is None:
        print(red(f"Unknown command or provider: {provider_key}"))
        print(gray('Run "ccs --help" for usage'))
        return EXIT_FAILURE

    set_current_provider(provider_key)
    print(green(f"✓ Switched to {provider_key}"))
    return EXIT_SUCCESS


def cmd_alias(args: argparse.Namespace) -> int:
    if args.instructions:
        print(get_setup_instructions())
    else:
        print(generate_aliases(read_config()))
    return EXIT_SUCCESS


def cmd_config(args: argparse.Namespace) -> int:
    print(bold("Config file:"), cyan(str(get_config_path())))
    return EXIT_SUCCESS


def _print_sync_results(key: str, results: list[SyncResult] | None) -> None:
    print(bold(f"\n{key}:"))
    if results is None:
        print(gray("  (source directory - skip)"))
        return

    for result in results:
        if result.status == "exists":
            print(f"  {gray('○')} {result.resource} {gray('already synced')}")
        elif result.status == "created":
            print(f"  {green('✓')} {result.resource} {green('created')}")
        elif result.status == "forced":
            print(f"  {yellow('⚡')} {result.resource} {yellow('forced')}")
        else:
            print(f"  {red('✗')} {result.resource} {red('skipped')}")


def cmd_sync(args: argparse.Namespace) -> int:
    """Sync shared resources and MCP servers from ~/.claude.

    ABOUTME: --all syncs every provider, --force replaces real files with links
    """
    if args.all:
        targets = [(key, provider) for key, provider, _current in list_providers()]
    else:
        targets = [get_current_provider()]

    links_total = 0
    for key, provider in targets:
        report = sync_provider(provider.config_dir, force=args.force, strip_oauth=provider.is_api_key)
        if report is None:
            _print_sync_results(key, None)
            continue

        links_total += report.links_created
        _print_sync_results(key, report.links)
        if report.mcp is not None:
            if report.mcp.merged:
                print(f"  {green('✓')} mcpServers {green(f'merged ({report.mcp.servers})')}")
            elif report.mcp.status == "unchanged":
                print(f"  {gray('○')} mcpServers {gray('already synced')}")
            else:
                print(f"  {gray('-')} mcpServers {gray(report.mcp.reason or 'skipped')}")
        if report.oauth_stripped:
            print(f"  {yellow('⚡')} oauthAccount {yellow('removed')}")

    names = ", ".join(resource.name for resource in SHARED_RESOURCES)
    print()
    print(gray(f"Synced from ~/.claude: {names}, mcpServers"))
    print(gray(f"Links created: {links_total}"))
    return EXIT_SUCCESS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ccs",
        description="Claude Code Switch - lightweight provider switcher for Claude Code",
        epilog="With no command, runs claude with the current provider. "
               "'ccs <provider>' switches provider.",
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"ccs v{__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("status", help="Show current provider")
    subparsers.add_parser("list", aliases=["ls"], help="List all providers")

    use_parser = subparsers.add_parser("use", help="Switch to a provider")
    use_parser.add_argument("provider", help="Provider key")

    add_parser = subparsers.add_parser("add", help="Add a new provider (interactive unless --name)")
    add_parser.add_argument("key", help="Provider key, e.g. glm")
    add_parser.add_argument("--name", help="Display name")
    add_parser.add_argument("--type", choices=["oauth", "api_key"], help="Provider type")
    add_parser.add_argument("--config-dir", help="Config directory (default: ~/.claude-<key>)")
    add_parser.add_argument("--description", help="Description")
    add_parser.add_argument(
        "--env",
        help=f"Comma-separated KEY=VALUE pairs ({', '.join(ALLOWED_ENV_KEYS)})"
    )
    add_parser.add_argument("--memory-reset", action="store_true", help="Reset memory daily before launch")

    remove_parser = subparsers.add_parser("remove", aliases=["rm"], help="Remove a provider")
    remove_parser.add_argument("key", help="Provider key")
    remove_parser.add_argument("-f", "--force", action="store_true", help="Skip confirmation")

    run_parser = subparsers.add_parser(
        "run",
        help="Run claude, optionally switching provider first",
        description="Extra arguments are passed through to claude.",
    )
    run_parser.add_argument("provider", nargs="?", help="Provider key")
    run_parser.add_argument(
        NO_SKIP_PERMISSIONS_FLAG,
        action="store_true",
        help=f"Do not pass {SKIP_PERMISSIONS_FLAG} to claude"
    )

    alias_parser = subparsers.add_parser("alias", help="Generate shell aliases")
    alias_parser.add_argument("-i", "--instructions", action="store_true", help="Show setup instructions")

    subparsers.add_parser("config", help="Show config file path")

    sync_parser = subparsers.add_parser(
        "sync",
        help="Sync shared resources (commands, settings, plugins, MCP servers) from ~/.claude"
    )
    sync_parser.add_argument("-a", "--all", action="store_true", help="Sync all providers")
    sync_parser.add_argument("-f", "--force", action="store_true", help="Force replace existing files/directories")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: `run` and the default action bypass argparse so claude flags pass through
    ABOUTME: Returns exit code for sys.exit()
    """
    argv = list(sys.argv[1:] if argv is None else argv)

    verbose = False
    while argv and argv[0] in ("-v", "--verbose"):
        verbose = True
        argv.pop(0)
    configure_logging(verbose)

    if argv and argv[0] == "run" and not {"-h", "--help"} & set(argv[1:2]):
        return cmd_run(*parse_run_args(argv[1:]))

    if not argv or (argv[0] not in COMMANDS and argv[0] not in ("-h", "--help", "-V", "--version")):
        return cmd_default(argv)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "status":
        return cmd_status(args)
    elif args.command in ("list", "ls"):
        return cmd_list(args)
    elif args.command == "use":
        return cmd_use(args)
    elif args.command == "add":
        return cmd_add(args)
    elif args.command in ("remove", "rm"):
        return cmd_remove(args)
    elif args.command == "alias":
        return cmd_alias(args)
    elif args.command == "config":
        return cmd_config(args)
    elif args.command == "sync":
        return cmd_sync(args)
    else:
        parser.print_help()
        return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
