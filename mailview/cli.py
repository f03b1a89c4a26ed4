"""CLI entry point for mailview."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .config import Config, load_config
from .inspector import count_resources, inspect_resources
from .styles import CONTAINER_CLASS, STYLESHEET, STYLESHEET_VERSION
from .transform import ContentTransformer
from .websocket_server import run_render_server

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("mailview")

DEFAULT_CONFIG_PATH = Path("config.toml")


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.toml if present)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )


def add_input_args(parser: argparse.ArgumentParser) -> None:
    """Add the email body input argument to a parser."""
    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="File containing the decoded email body, or '-' for stdin (default)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        description="Safe rendering of untrusted email HTML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_common_args(parser)
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # render - Transform a body into safe markup
    render_parser = subparsers.add_parser("render", help="Transform an email body into safe HTML")
    add_common_args(render_parser)
    add_input_args(render_parser)
    remote = render_parser.add_mutually_exclusive_group()
    remote.add_argument(
        "--allow-remote",
        action="store_true",
        default=None,
        dest="allow_remote",
        help="Load remote images and trusted embeds",
    )
    remote.add_argument(
        "--block-remote",
        action="store_false",
        dest="allow_remote",
        help="Replace remote images and embeds with placeholders",
    )
    render_parser.add_argument(
        "--standalone",
        action="store_true",
        help="Wrap the output in a full HTML document with the stylesheet",
    )

    # count - Count embeddable resources
    count_parser = subparsers.add_parser("count", help="Count images and iframes in an email body")
    add_common_args(count_parser)
    add_input_args(count_parser)

    # inspect - List embeddable resources
    inspect_parser = subparsers.add_parser("inspect", help="List images and iframes with their classification")
    add_common_args(inspect_parser)
    add_input_args(inspect_parser)
    inspect_parser.add_argument(
        "--json",
        action="store_true",
        help="Print resources as JSON",
    )

    # styles - Print the stylesheet
    styles_parser = subparsers.add_parser("styles", help="Print the content stylesheet")
    add_common_args(styles_parser)

    # serve - Run the render service
    serve_parser = subparsers.add_parser("serve", help="Run the WebSocket render service")
    add_common_args(serve_parser)
    serve_parser.add_argument("--host", type=str, help="Override listen address")
    serve_parser.add_argument("--port", type=int, help="Override listen port")

    return parser


def resolve_config(path: Path | None) -> Config:
    """Load the configuration file, or defaults when none is present.

    Raises:
        FileNotFoundError: If an explicitly given file doesn't exist
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return Config()
        path = DEFAULT_CONFIG_PATH
    return load_config(path)


def read_input(source: str) -> str:
    """Read an email body from a file or stdin."""
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8", errors="replace")


def standalone_document(fragment: str) -> str:
    """Wrap a transformed fragment in a minimal HTML page."""
    return (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
        f"<style>\n{STYLESHEET}</style></head>\n"
        f'<body><div class="{CONTAINER_CLASS}">{fragment}</div></body></html>\n'
    )


def render_cmd(config: Config, source: str, allow_remote: bool | None, standalone: bool) -> None:
    transformer = ContentTransformer(config.render)
    fragment = transformer.transform(read_input(source), allow_remote)
    print(standalone_document(fragment) if standalone else fragment)


def count_cmd(source: str) -> None:
    print(count_resources(read_input(source)))


def inspect_cmd(config: Config, source: str, as_json: bool = False) -> None:
    resources = inspect_resources(
        read_input(source),
        config.render.trusted_domains,
        config.render.exact_host_match,
    )

    if as_json:
        print(json.dumps([resource.to_dict() for resource in resources], indent=2))
        return

    if not resources:
        print("No images or iframes found.")
        return

    print(f"{'Kind':<8} {'Category':<10} {'Trusted':<8} {'URL'}")
    print("-" * 90)
    for resource in resources:
        trusted = "yes" if resource.trusted else "no"
        print(f"{resource.kind.value:<8} {resource.category.value:<10} {trusted:<8} {resource.url[:60]}")
    print(f"\nTotal: {len(resources)} resources")


def styles_cmd() -> None:
    print(f"/* mailview stylesheet v{STYLESHEET_VERSION} */")
    print(STYLESHEET, end="")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Show help if no command specified
    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.getLogger("mailview").setLevel(logging.DEBUG)

    try:
        config = resolve_config(args.config)
    except FileNotFoundError:
        logger.error(f"Configuration file not found: {args.config}")
        sys.exit(1)

    try:
        if args.command == "render":
            render_cmd(config, args.input, args.allow_remote, args.standalone)
        elif args.command == "count":
            count_cmd(args.input)
        elif args.command == "inspect":
            inspect_cmd(config, args.input, args.json)
        elif args.command == "styles":
            styles_cmd()
        elif args.command == "serve":
            if args.host:
                config.websocket.host = args.host
            if args.port:
                config.websocket.port = args.port
            asyncio.run(run_render_server(config))
    except OSError as e:
        logger.error(f"I/O error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
