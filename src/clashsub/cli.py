"""Command-line interface for clashsub.

Subcommands:

* ``locate``   print the discovered daemon config (or profile list) path
* ``classify`` tell whether a subscription file is a full config or a link list
* ``convert``  turn a local link-list subscription into a full config
* ``update``   refresh Mihomo Party profiles from their subscription URLs
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Optional

from .config import Settings, load_config
from .core.file_utils import atomic_write
from .core.locator import DiscoveryEnv, PathLocator
from .core.subscription import looks_like_full_config
from .core.synthesizer import convert_raw_subscription
from .exceptions import ClashSubError
from .logging_config import setup_logging
from .profiles import load_subscriptions
from .updater import update_all


def build_parser() -> argparse.ArgumentParser:
    """Build the main `argparse` parser with all subcommands and arguments."""
    parser = argparse.ArgumentParser(
        prog="clashsub",
        description="Subscription ingestion and config synthesis for Clash/Mihomo",
    )
    parser.add_argument("--config", help="Path to the clashsub settings YAML file")
    parser.add_argument("--log-level", help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    locate_p = subparsers.add_parser("locate", help="Find the daemon config file")
    locate_p.add_argument("--hint", help="File or directory to search first")
    locate_p.add_argument(
        "--profile-list",
        action="store_true",
        help="Find the Mihomo Party profile list instead of the daemon config",
    )

    classify_p = subparsers.add_parser(
        "classify", help="Report whether a subscription is a full config"
    )
    classify_p.add_argument("input", help="Subscription file to inspect")

    convert_p = subparsers.add_parser(
        "convert", help="Convert a link-list subscription into a full config"
    )
    convert_p.add_argument("input", help="Subscription file (raw links or base64)")
    convert_p.add_argument(
        "--base", help="Base config to merge into (default: the located daemon config)"
    )
    convert_p.add_argument(
        "-o", "--output", help="Write the result here instead of standard output"
    )
    convert_p.add_argument(
        "--prune-stale",
        dest="prune_stale_members",
        action="store_true",
        default=None,
        help="Drop leaf proxies of rewritten groups that are not in the subscription",
    )

    update_p = subparsers.add_parser(
        "update", help="Refresh Mihomo Party profiles from their URLs"
    )
    update_p.add_argument("--id", dest="profile_id", help="Only update this profile id")

    return parser


def _make_locator(cfg: Settings) -> PathLocator:
    return PathLocator(DiscoveryEnv.from_environ(), max_depth=cfg.discovery.max_scan_depth)


def _hint(args: argparse.Namespace, cfg: Settings) -> Optional[Path]:
    raw = getattr(args, "hint", None)
    if raw:
        return Path(raw)
    return cfg.discovery.clash_config_path


def _handle_locate(args: argparse.Namespace, cfg: Settings) -> int:
    """Handler for the 'locate' command."""
    locator = _make_locator(cfg)
    hint = _hint(args, cfg)
    if args.profile_list:
        found = locator.locate_profile_list(hint)
    else:
        found = locator.locate_config(hint)
    if found is None:
        print("not found", file=sys.stderr)
        return 1
    print(found)
    return 0


def _handle_classify(args: argparse.Namespace, cfg: Settings) -> int:
    """Handler for the 'classify' command."""
    payload = Path(args.input).read_bytes()
    print("full-config" if looks_like_full_config(payload) else "raw-links")
    return 0


def _handle_convert(args: argparse.Namespace, cfg: Settings) -> int:
    """Handler for the 'convert' command."""
    payload = Path(args.input).read_bytes()

    if looks_like_full_config(payload):
        logging.info("%s is already a full config, copying verbatim", args.input)
        output = payload
    else:
        base_path = Path(args.base) if args.base else _make_locator(cfg).locate_config(_hint(args, cfg))
        base = None
        if base_path is not None:
            logging.info("Merging into base config %s", base_path)
            base = base_path.read_bytes()
        else:
            logging.warning("No base config found, writing a minimal config")
        text, _ = convert_raw_subscription(
            payload, base, prune_stale=cfg.synthesis.prune_stale_members
        )
        output = text.encode("utf-8")

    if args.output:
        atomic_write(Path(args.output), output)
        print(f"Wrote {args.output}")
    else:
        sys.stdout.flush()
        sys.stdout.buffer.write(output)
        sys.stdout.buffer.flush()
    return 0


def _handle_update(args: argparse.Namespace, cfg: Settings) -> int:
    """Handler for the 'update' command."""
    list_path = _make_locator(cfg).locate_profile_list(cfg.discovery.clash_config_path)
    if list_path is None:
        print("Mihomo Party profile list not found", file=sys.stderr)
        return 1

    items = load_subscriptions(list_path)
    if args.profile_id:
        items = [item for item in items if item.id == args.profile_id]
    if not items:
        print("No subscriptions to update")
        return 0

    results = asyncio.run(update_all(items, cfg))
    failed = 0
    for result in results:
        if result.success:
            print(f"updated  {result.name}")
        else:
            failed += 1
            print(f"failed   {result.name}: {result.error}")
    return 1 if failed else 0


HANDLERS: Dict[str, Callable[[argparse.Namespace, Settings], int]] = {
    "locate": _handle_locate,
    "classify": _handle_classify,
    "convert": _handle_convert,
    "update": _handle_update,
}


def _update_settings_from_args(cfg: Settings, args: argparse.Namespace) -> None:
    """Update the `Settings` object with values from parsed CLI arguments."""
    if args.log_level:
        cfg.logging.level = args.log_level
    if getattr(args, "prune_stale_members", None) is not None:
        cfg.synthesis.prune_stale_members = args.prune_stale_members


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the `clashsub` command."""
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    try:
        cfg = load_config(Path(args.config) if args.config else None)
    except ValueError as exc:
        print(f"Invalid settings ({exc}). Using default settings.", file=sys.stderr)
        cfg = Settings()

    try:
        _update_settings_from_args(cfg, args)
    except ValueError as exc:
        parser.error(str(exc))
    setup_logging(cfg.logging.level, cfg.logging.log_file, cfg.logging.mask_sensitive)

    try:
        return HANDLERS[args.command](args, cfg)
    except (ClashSubError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
