"""
Command-line interface for the flow linter.

Scans Salesforce flow metadata, prints the findings and exits with a
status derived from the ``--failon`` severity threshold.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from flowlinter import __version__
from flowlinter.config import DEFAULT_CONFIG_FILE, create_default_config, load_scanner_options
from flowlinter.core.pipeline import run_scan
from flowlinter.core.sandbox import SandboxPolicy
from flowlinter.core.threshold import DEFAULT_THRESHOLD, THRESHOLDS
from flowlinter.engine import FlowEngine, registry
from flowlinter.errors import FlowLinterError, RemoteRetrievalFailure
from flowlinter.formatters import get_formatter
from flowlinter.retrieve import retrieve_flows

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr so JSON output on stdout stays clean."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _existing_directory(value: str) -> str:
    if not os.path.isdir(value):
        raise argparse.ArgumentTypeError(f"directory does not exist: {value}")
    return value


def _existing_file(value: str) -> str:
    if not os.path.isfile(value):
        raise argparse.ArgumentTypeError(f"file does not exist: {value}")
    return value


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="flowlinter",
        description="Lint Salesforce flows against best-practice rules.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  flowlinter scan                                      # Scan flows under the current directory
  flowlinter scan --failon warning                     # Fail on warnings as well as errors
  flowlinter scan -c path/to/config.yml --json         # Custom rules, JSON output
  flowlinter scan -d path/to/flows/directory           # Scan a directory
  flowlinter scan -p a.flow-meta.xml b.flow-meta.xml   # Scan specific files
  flowlinter scan -u my-org                            # Retrieve flows from an org first
  flowlinter init                                      # Create config file
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Scan command
    scan_parser = subparsers.add_parser("scan", aliases=["lint"], help="Scan flows for issues")
    targets = scan_parser.add_mutually_exclusive_group()
    targets.add_argument(
        "-d", "--directory",
        type=_existing_directory,
        help="Directory to scan for flows (default: current directory)",
    )
    targets.add_argument(
        "-p", "--files",
        nargs="+",
        type=_existing_file,
        help="List of flow files to scan",
    )
    scan_parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
    )
    scan_parser.add_argument(
        "-f", "--failon",
        choices=THRESHOLDS,
        default=DEFAULT_THRESHOLD,
        help="Threshold failure level defining when the exit code is 1 (default: error)",
    )
    scan_parser.add_argument(
        "-r", "--retrieve",
        action="store_true",
        help="Retrieve flows from the org before scanning",
    )
    scan_parser.add_argument(
        "-u", "-o", "--targetusername",
        help="Retrieve the latest flow metadata from this org before the scan",
    )
    scan_parser.add_argument(
        "--retrieve-timeout",
        type=float,
        help="Seconds to wait for the retrieve command (default: no limit)",
    )
    scan_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    scan_parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    scan_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose logging on stderr",
    )

    # Init command
    init_parser = subparsers.add_parser("init", help="Create a configuration file")
    init_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite existing config file",
    )

    # List-rules command
    subparsers.add_parser("list-rules", help="List available rules")

    return parser


def cmd_scan(args: argparse.Namespace) -> int:
    """Execute the scan command."""
    user_config = load_scanner_options(args.config)

    if args.targetusername or args.retrieve:
        retrieve_flows(args.targetusername, timeout=args.retrieve_timeout)

    report = run_scan(
        FlowEngine(),
        directory=args.directory,
        files=args.files,
        user_config=user_config,
        fail_on=args.failon,
        policy=SandboxPolicy(),
    )

    formatter = get_formatter("json" if args.json else "cli")
    if args.no_color and hasattr(formatter, "use_color"):
        formatter.use_color = False

    print(formatter.format_result(report).rstrip("\n"))

    return report.status


def cmd_init(args: argparse.Namespace) -> int:
    """Execute the init command."""
    config_file = DEFAULT_CONFIG_FILE

    if os.path.exists(config_file) and not args.force:
        print(f"Configuration file {config_file} already exists.")
        print("Use --force to overwrite.")
        return 1

    with open(config_file, "w", encoding="utf-8") as f:
        f.write(create_default_config())

    print(f"Created configuration file: {config_file}")
    return 0


def cmd_list_rules(args: argparse.Namespace) -> int:
    """Execute the list-rules command."""
    print("\nAvailable Rules")
    print("=" * 70)

    rules = sorted(registry.all_rules(), key=lambda r: r.name)
    for rule_class in rules:
        status = "*" if rule_class.enabled_by_default else " "
        severity = rule_class.severity or "error"
        print(f"  {status} {rule_class.name:<22} {rule_class.label:<30} [{severity}]")

    print(f"\nTotal: {len(rules)} rules")
    print("* = enabled by default")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    setup_logging(getattr(args, "verbose", False))

    try:
        if args.command in ("scan", "lint"):
            return cmd_scan(args)
        elif args.command == "init":
            return cmd_init(args)
        elif args.command == "list-rules":
            return cmd_list_rules(args)
        else:
            parser.print_help()
            return 0

    except KeyboardInterrupt:
        print("\nScan interrupted.", file=sys.stderr)
        return 130
    except RemoteRetrievalFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.output:
            print(e.output, file=sys.stderr)
        return 1
    except FlowLinterError as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.__cause__ is not None:
            logger.debug("Caused by: %r", e.__cause__)
        if os.environ.get("DEBUG"):
            raise
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if os.environ.get("DEBUG"):
            raise
        return 1


if __name__ == "__main__":
    sys.exit(main())
