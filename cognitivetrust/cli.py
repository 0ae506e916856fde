"""
Command-line interface for the security scanner.

Acts as the host environment: it opens documents, fires the scan
triggers, lists quick fixes and runs the remediation commands.
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Optional, List

from cognitivetrust import __version__
from cognitivetrust.config import ScanConfig, create_default_config, load_scan_config
from cognitivetrust.core.findings import HandlerKind, Severity
from cognitivetrust.errors import ConfigError
from cognitivetrust.formatters import get_formatter
from cognitivetrust.notify import ConsoleNotifier
from cognitivetrust.service import ScannerService

logger = logging.getLogger(__name__)

CONFIG_FILE = ".cognitivetrust.yaml"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cognitivetrust",
        description="Security finding scanner with standard and AI-assisted quick fixes.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cognitivetrust scan app.py                     # Scan a single file
  cognitivetrust scan requirements.txt -f json   # Output as JSON
  cognitivetrust scan-workspace .                # Scan every source and manifest
  cognitivetrust actions app.py --line 12        # List quick fixes on a line
  cognitivetrust fix app.py --line 12            # Apply the standard fix
  cognitivetrust fix app.py --line 12 --ai       # Refactor with Gemini
  cognitivetrust history                         # Show scan history and metrics
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-r", "--root",
        default=".",
        help="Workspace root (default: current directory)",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="Scan a single file")
    scan_parser.add_argument("target", help="Python source or requirements.txt to scan")
    scan_parser.add_argument(
        "-f", "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    workspace_parser = subparsers.add_parser("scan-workspace", help="Scan the whole workspace")
    workspace_parser.add_argument(
        "path",
        nargs="?",
        help="Workspace root (overrides --root)",
    )
    workspace_parser.add_argument(
        "-f", "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    actions_parser = subparsers.add_parser("actions", help="List quick fixes for a line")
    actions_parser.add_argument("target", help="File to inspect")
    actions_parser.add_argument("--line", type=int, required=True, help="1-based line number")
    actions_parser.add_argument(
        "-f", "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    fix_parser = subparsers.add_parser("fix", help="Apply a quick fix on a line")
    fix_parser.add_argument("target", help="File to fix")
    fix_parser.add_argument("--line", type=int, required=True, help="1-based line number")
    fix_parser.add_argument(
        "--ai",
        action="store_true",
        help="Refactor with Gemini instead of the standard fix",
    )
    fix_parser.add_argument(
        "--no-save",
        action="store_true",
        help="Apply the fix in memory only (no save, no rescan)",
    )

    subparsers.add_parser("history", help="Show scan history and fix metrics")
    subparsers.add_parser("clear-key", help="Delete the stored Gemini API key")

    init_parser = subparsers.add_parser("init", help="Create a configuration file")
    init_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite existing config file",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    # httpx logs request URLs, and the API key travels in the query string.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_service(args: argparse.Namespace) -> ScannerService:
    root = os.path.abspath(args.root)
    config: ScanConfig = load_scan_config(args.config, start_dir=root)
    return ScannerService.create(root, ConsoleNotifier(), config=config)


def _formatter(args: argparse.Namespace, root: str):
    formatter = get_formatter(args.format)
    if hasattr(formatter, "use_color"):
        formatter.use_color = formatter.use_color and not args.no_color
    if hasattr(formatter, "root"):
        formatter.root = root
    return formatter


async def cmd_scan(args: argparse.Namespace) -> int:
    """Execute the scan command."""
    service = build_service(args)
    document = service.workspace.open_document(args.target)
    findings = await service.on_document_opened(document)

    print(_formatter(args, str(service.workspace.root)).format_findings(findings))

    if any(f.severity is Severity.ERROR for f in findings):
        return 1
    return 0


async def cmd_scan_workspace(args: argparse.Namespace) -> int:
    """Execute the scan-workspace command."""
    if args.path:
        args.root = args.path
    service = build_service(args)
    result = await service.scan_workspace()

    findings = [f for _, file_findings in service.diagnostics.items() for f in file_findings]
    print(_formatter(args, str(service.workspace.root)).format_findings(findings))

    if args.format == "text":
        print(f"\nScanned {len(result.files_scanned)} file(s) in {result.scan_time_seconds:.2f}s")
    for error in result.errors:
        print(error, file=sys.stderr)
    return 0


async def cmd_actions(args: argparse.Namespace) -> int:
    """Execute the actions command."""
    service = build_service(args)
    document = service.workspace.open_document(args.target)
    await service.on_document_opened(document)

    try:
        text_range = document.line_range(args.line - 1)
    except IndexError:
        print(f"Line {args.line} is outside {args.target}", file=sys.stderr)
        return 1

    actions = service.code_actions(document, text_range)
    print(_formatter(args, str(service.workspace.root)).format_actions(actions))
    return 0


async def cmd_fix(args: argparse.Namespace) -> int:
    """Execute the fix command."""
    service = build_service(args)
    document = service.workspace.open_document(args.target)
    await service.on_document_opened(document)

    try:
        text_range = document.line_range(args.line - 1)
    except IndexError:
        print(f"Line {args.line} is outside {args.target}", file=sys.stderr)
        return 1

    wanted = HandlerKind.AI_REFACTOR if args.ai else HandlerKind.STANDARD_FIX
    actions = [a for a in service.code_actions(document, text_range) if a.handler is wanted]
    if not actions:
        print(f"No {'AI refactor' if args.ai else 'standard fix'} available on line {args.line}.")
        return 1

    applied = await service.run_action(document, actions[0])
    if not applied:
        return 1

    if not args.no_save:
        await service.save(document)
        remaining = service.diagnostics.get(document.path)
        print(f"Saved {args.target}; {len(remaining)} issue(s) remaining after rescan.")
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    """Execute the history command."""
    service = build_service(args)
    print(service.show_history())
    return 0


async def cmd_clear_key(args: argparse.Namespace) -> int:
    """Execute the clear-key command."""
    service = build_service(args)
    return 0 if await service.clear_credential() else 1


def cmd_init(args: argparse.Namespace) -> int:
    """Execute the init command."""
    config_file = os.path.join(args.root, CONFIG_FILE)

    if os.path.exists(config_file) and not args.force:
        print(f"Configuration file {config_file} already exists.")
        print("Use --force to overwrite.")
        return 1

    content = create_default_config()

    with open(config_file, 'w', encoding="utf-8") as f:
        f.write(content)

    print(f"Created configuration file: {config_file}")
    return 0


ASYNC_COMMANDS = {
    "scan": cmd_scan,
    "scan-workspace": cmd_scan_workspace,
    "actions": cmd_actions,
    "fix": cmd_fix,
    "clear-key": cmd_clear_key,
}

SYNC_COMMANDS = {
    "history": cmd_history,
    "init": cmd_init,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(args.verbose)

    try:
        if args.command in ASYNC_COMMANDS:
            return asyncio.run(ASYNC_COMMANDS[args.command](args))
        return SYNC_COMMANDS[args.command](args)

    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if os.environ.get("DEBUG"):
            raise
        return 1


if __name__ == "__main__":
    sys.exit(main())
