"""CLI entrypoint for browsing and managing listdeck collections."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Dict, List

from listdeck.config import Settings
from listdeck.controller import ListController
from listdeck.export import export_snapshot_to_xlsx
from listdeck.models import ListStatus
from listdeck.screens import SCREENS, build_controller

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def parse_pairs(values: List[str] | None, option: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    for value in values or []:
        key, sep, rest = value.partition("=")
        if not sep or not key.strip():
            raise SystemExit(f"{option} expects NAME=VALUE, got {value!r}")
        pairs[key.strip()] = rest
    return pairs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="listdeck list browser")
    parser.add_argument(
        "--screen",
        default="public-listing",
        choices=sorted(SCREENS),
        help="which list screen configuration to use",
    )
    parser.add_argument("--search", help="free-text search term")
    parser.add_argument(
        "--filter",
        action="append",
        metavar="NAME=VALUE",
        help="filter selection (repeatable)",
    )
    parser.add_argument("--budget", help="budget label, e.g. 'Under ₹10L'")
    parser.add_argument("--page", type=int, default=1, help="page to show")
    parser.add_argument(
        "--param",
        action="append",
        metavar="KEY=VALUE",
        help="deep-link parameter used to seed the filters (repeatable)",
    )
    parser.add_argument("--toggle", action="append", metavar="ID", help="toggle an item's status")
    parser.add_argument("--delete", action="append", metavar="ID", help="delete an item")
    parser.add_argument(
        "--yes",
        action="store_true",
        help="confirm deletions requested with --delete",
    )
    parser.add_argument("--export", type=Path, help="write the resulting page to an .xlsx file")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser


def log_snapshot(controller: ListController) -> None:
    snapshot = controller.snapshot
    logger.info(
        "Page %d/%d (%d total, status: %s)",
        snapshot.page,
        snapshot.total_pages,
        snapshot.total_count,
        snapshot.status.value,
    )
    for item in snapshot.items:
        title = item.data.get("title") or item.data.get("name") or item.data.get("email") or ""
        logger.info(
            "%s | %s | %s",
            item.id,
            "active" if item.is_active else "inactive",
            title or "N/A",
        )


async def run(args: argparse.Namespace, settings: Settings) -> int:
    controller = build_controller(
        args.screen,
        settings=settings,
        external_params=parse_pairs(args.param, "--param"),
    )
    try:
        if args.search is not None:
            controller.compiler.set_search_term(args.search)
        for name, value in parse_pairs(args.filter, "--filter").items():
            try:
                controller.compiler.set_filter(name, value)
            except ValueError as exc:
                logger.error("%s", exc)
                return 2
        if args.budget:
            controller.compiler.set_filter("budget", args.budget)

        controller.refresh()
        await controller.settle()
        if args.page > 1 and controller.snapshot.status is ListStatus.LOADED:
            controller.go_to_page(args.page)
            await controller.settle()

        if controller.snapshot.status is ListStatus.ERROR:
            logger.error("Failed to load list: %s", controller.snapshot.error_message)
            return 1

        exit_code = 0
        for item_id in args.toggle or []:
            result = await controller.toggle(item_id)
            if result.ok:
                logger.info("Toggled %s -> %s", item_id,
                            "active" if result.is_active else "inactive")
            else:
                logger.error("Toggle of %s failed: %s", item_id, result.error)
                exit_code = 1

        for item_id in args.delete or []:
            if not args.yes:
                logger.warning("Skipping deletion of %s; pass --yes to confirm", item_id)
                continue
            result = await controller.delete(item_id, confirmed=True)
            if result.ok:
                logger.info("Deleted %s", item_id)
            else:
                logger.error("Delete of %s failed: %s", item_id, result.error)
                exit_code = 1
        await controller.settle()

        log_snapshot(controller)

        if args.export:
            try:
                export_snapshot_to_xlsx(controller.snapshot, args.export)
            except Exception:  # noqa: BLE001
                logger.exception("Failed to export list snapshot")
                exit_code = 1
        return exit_code
    finally:
        controller.close()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = Settings.from_env()
    except ValueError as exc:
        parser.error(str(exc))

    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
