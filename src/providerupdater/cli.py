"""Command-line interface for the provider updater.

The `update` subcommand downloads the provider archive, builds the server
catalogue and prints it as JSON on stdout, together with the warnings
raised along the way. Logs go to stderr.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict

from pydantic import ValidationError

from .config import Settings, load_config
from .exceptions import ConfigError, ProviderUpdaterError
from .logging_config import setup_logging
from .updater import Updater
from .warner import CollectingWarner, LoggingWarner


def _add_update_arguments(parser: argparse.ArgumentParser):
    """Add arguments for the 'update' command."""
    group = parser.add_argument_group("update arguments")
    group.add_argument(
        "--min-servers", type=int, help="Fail unless at least this many servers are found"
    )
    group.add_argument("--url", dest="zip_url", help="URL of the profile zip archive")
    group.add_argument(
        "--timeout", type=float, help="Overall timeout of the update in seconds"
    )
    group.add_argument(
        "--request-timeout", type=int, help="Archive download timeout in seconds"
    )
    group.add_argument(
        "--max-concurrency", type=int, help="Maximum number of hosts resolved at once"
    )
    group.add_argument(
        "--progress",
        dest="show_progress",
        action="store_true",
        default=None,
        help="Show a progress bar while resolving",
    )
    group.add_argument(
        "--indent", type=int, default=2, help="JSON indentation (default: %(default)s)"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the main `argparse` parser with all subcommands and arguments."""
    parser = argparse.ArgumentParser(
        prog="provider-updater",
        description="Build a VPN server catalogue from a provider's OpenVPN profiles",
    )
    parser.add_argument(
        "--config", help="Path to a YAML settings file (default: config.yaml in the project root)"
    )
    parser.add_argument("--log-level", help="Log level, e.g. DEBUG or WARNING")
    subparsers = parser.add_subparsers(dest="command", required=True)

    update_p = subparsers.add_parser("update", help="Fetch and resolve the provider servers")
    _add_update_arguments(update_p)

    return parser


def _update_settings_from_args(cfg: Settings, args: argparse.Namespace):
    """Update the `Settings` object with values from parsed CLI arguments."""
    arg_dict = {k: v for k, v in vars(args).items() if v is not None}

    # Direct mapping from arg name to (group, attribute)
    MAPPING = {
        "min_servers": ("updater", "min_servers"),
        "zip_url": ("updater", "zip_url"),
        "timeout": ("updater", "timeout"),
        "request_timeout": ("network", "request_timeout"),
        "max_concurrency": ("resolver", "max_concurrency"),
        "show_progress": ("resolver", "show_progress"),
        "log_level": ("logging", "level"),
    }

    for arg_name, (group, attr) in MAPPING.items():
        if (value := arg_dict.get(arg_name)) is not None:
            section = getattr(cfg, group)
            setattr(cfg, group, section.model_validate({**section.model_dump(), attr: value}))


def load_settings(args: argparse.Namespace) -> Settings:
    """
    Load the settings for a command, applying CLI overrides.

    Raises:
        ConfigError: If the resulting settings are invalid.
    """
    try:
        cfg = load_config(Path(args.config) if args.config else None)
        _update_settings_from_args(cfg, args)
    except ValidationError as exc:
        raise ConfigError(f"invalid settings: {exc}") from exc
    return cfg


async def run_update(cfg: Settings, warner: CollectingWarner) -> Dict[str, Any]:
    """Run one update and return the JSON document to print."""
    async with Updater.from_settings(cfg, warner) as updater:
        servers = await asyncio.wait_for(
            updater.get_servers(cfg.updater.min_servers), timeout=cfg.updater.timeout
        )
    return {
        "servers": [server.to_dict() for server in servers],
        "warnings": warner.messages,
    }


def _handle_update(args: argparse.Namespace, cfg: Settings) -> int:
    """Handler for the 'update' command."""
    warner = CollectingWarner(forward=LoggingWarner())
    try:
        document = asyncio.run(run_update(cfg, warner))
    except asyncio.TimeoutError:
        print(f"update timed out after {cfg.updater.timeout} seconds", file=sys.stderr)
        return 1
    except ProviderUpdaterError as exc:
        print(f"update failed: {exc}", file=sys.stderr)
        return 1
    json.dump(document, sys.stdout, indent=args.indent or None)
    sys.stdout.write("\n")
    return 0


HANDLERS: Dict[str, Callable[[argparse.Namespace, Settings], int]] = {
    "update": _handle_update,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the `provider-updater` command."""
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    try:
        cfg = load_settings(args)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    setup_logging(
        cfg.logging.level,
        log_file=cfg.logging.log_file,
        mask_sensitive=cfg.logging.mask_sensitive,
    )
    logging.debug("Running command %s", args.command)

    command_handler = HANDLERS[args.command]
    return command_handler(args, cfg)


if __name__ == "__main__":
    sys.exit(main())
