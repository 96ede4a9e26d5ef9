#!/usr/bin/env python3
"""Command-line front end for the kokudo sticker tracker.

Usage
-----
::

    python scripts/kokudo.py list --collection collected --region 関東
    python scripts/kokudo.py stats
    python scripts/kokudo.py toggle 17
    python scripts/kokudo.py export -o backup.json
    python scripts/kokudo.py import backup.json --policy overwrite --yes
    python scripts/kokudo.py geocode 17 "道の駅 川場田園プラザ"
    python scripts/kokudo.py wiki 17
    python scripts/kokudo.py stations list --visited

Data lives in ``$KOKUDO_DATA_DIR`` (default ``~/.local/share/pykokudo``).

Options::

    --verbose / -v       Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pykokudo import (  # noqa: E402
    CollectionFilter,
    GeocodeStatus,
    ImportPolicy,
    KokudoClient,
    KokudoConfig,
    KokudoError,
    SortOrder,
    StationBook,
    Tracker,
    VisitFilter,
)
from pykokudo._constants import STATION_STORAGE_KEY  # noqa: E402
from pykokudo.query import map_link  # noqa: E402
from pykokudo.state.storage import JsonSlotStorage  # noqa: E402
from pykokudo.transfer import export_stations, parse_station_payload  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _bar(percentage: int, width: int = 20) -> str:
    filled = round(width * percentage / 100)
    return "#" * filled + "." * (width - filled)


def _write_document(filename: str, text: str, output: str | None) -> None:
    target = Path(output) if output else Path(filename)
    target.write_text(text, encoding="utf-8")
    print(f"Written to {target}")


# ── route commands ───────────────────────────────────────────


def cmd_list(tracker: Tracker, args: argparse.Namespace) -> int:
    tracker.refine(
        collection=CollectionFilter(args.collection),
        region=args.region,
        category=args.category,
        query=args.query,
        sort=SortOrder(args.sort),
    )
    for route in tracker.visible():
        record = tracker.record(route.id)
        mark = "[x]" if record.collected else "[ ]"
        date = record.date or ""
        print(f"{mark} {route.label:<10} {route.region:<6} {route.endpoint_from} → {route.endpoint_to}  {date}")
    return 0


def cmd_stats(tracker: Tracker, args: argparse.Namespace) -> int:
    summary = tracker.summary()
    print(_section("PROGRESS"))
    print(f"  {summary.collected}/{summary.total}  {_bar(summary.percentage)} {summary.percentage}%")
    print(_section("REGIONS"))
    for progress in tracker.regions():
        print(f"  {progress.region:<6} {progress.done:>3}/{progress.total:<3} {_bar(progress.percentage)}")
    recent = tracker.recent(args.recent)
    if recent:
        print(_section("RECENT"))
        for entry in recent:
            print(f"  {entry.route.label}  {entry.record.date}")
    return 0


def cmd_toggle(tracker: Tracker, args: argparse.Namespace) -> int:
    record = tracker.quick_toggle(args.route)
    state = "collected" if record.collected else "not collected"
    print(f"国道{args.route}号: {state}")
    return 0


def cmd_show(tracker: Tracker, args: argparse.Namespace) -> int:
    print(tracker.share_text(args.route))
    record = tracker.record(args.route)
    link = map_link(record.lat, record.lng)
    if link:
        print(f"地図: {link}")
    return 0


def cmd_export(tracker: Tracker, args: argparse.Namespace) -> int:
    document = tracker.export()
    _write_document(document.filename, document.text, args.output)
    return 0


def cmd_import(tracker: Tracker, args: argparse.Namespace) -> int:
    text = Path(args.file).read_text(encoding="utf-8")
    stats = tracker.import_payload(text, ImportPolicy(args.policy), confirm=args.yes)
    print(f"Processed {stats.processed}: {stats.added} newly collected, {stats.updated} updated")
    return 0


def cmd_reset(tracker: Tracker, args: argparse.Namespace) -> int:
    tracker.reset(confirm=args.yes)
    print("All records cleared")
    return 0


async def cmd_geocode(tracker: Tracker, args: argparse.Namespace) -> int:
    token = tracker.open_detail(args.route)
    async with KokudoClient(tracker_config(args)) as client:
        outcome = await tracker.geocode_location(client, token, args.query)
    if outcome.status == GeocodeStatus.NOT_FOUND:
        print("No matching place found")
        return 1
    if outcome.status == GeocodeStatus.CHOOSE:
        for number, candidate in enumerate(outcome.candidates, start=1):
            print(f"  {number}. {candidate.label} ({candidate.source}) {candidate.lat}, {candidate.lng}")
        if args.pick is None:
            print("Re-run with --pick N to store one of these")
            return 0
        if not 1 <= args.pick <= len(outcome.candidates):
            print(f"--pick must be between 1 and {len(outcome.candidates)}", file=sys.stderr)
            return 2
        candidate = outcome.candidates[args.pick - 1]
        tracker.apply_candidate(args.route, candidate)
        print(f"Stored {candidate.label}")
        return 0
    candidate = outcome.candidates[0]
    print(f"Stored {candidate.label} ({candidate.lat}, {candidate.lng})")
    return 0


async def cmd_wiki(tracker: Tracker, args: argparse.Namespace) -> int:
    token = tracker.open_detail(args.route)
    async with KokudoClient(tracker_config(args)) as client:
        info = await tracker.refresh_wiki_info(client, token)
    if info is None:
        print("No article found")
        return 1
    print(f"起点: {info.endpoint_from or '-'}")
    print(f"終点: {info.endpoint_to or '-'}")
    print(f"総延長: {info.length or '-'}")
    if info.extract:
        print()
        print(info.extract)
    print(info.page_url)
    return 0


# ── station commands ─────────────────────────────────────────


def cmd_stations(config: KokudoConfig, args: argparse.Namespace) -> int:
    book = StationBook(JsonSlotStorage(config.data_dir, STATION_STORAGE_KEY))
    book.load()

    if args.station_command == "list":
        visit_filter = VisitFilter.ALL
        if args.visited:
            visit_filter = VisitFilter.VISITED
        elif args.unvisited:
            visit_filter = VisitFilter.UNVISITED
        for station in book.visible(visit_filter, args.query):
            marks = ("V" if station.visited else "-") + ("S" if station.stamp else "-")
            print(f"{marks} {station.pref:<6} {station.name}  {station.date}  [{station.id}]")
        summary = book.summary()
        print(f"\nvisited {summary.visited}, stamps {summary.stamped}, photos {summary.photos}")
    elif args.station_command == "add":
        station = book.upsert(
            name=args.name,
            pref=args.pref,
            date=args.date,
            visited=args.visited,
            stamp=args.stamp,
            memo=args.memo,
        )
        print(f"Saved {station.name} [{station.id}]")
    elif args.station_command == "export":
        document = export_stations(book.stations)
        _write_document(document.filename, document.text, args.output)
    elif args.station_command == "import":
        count = book.import_stations(parse_station_payload(Path(args.file).read_text(encoding="utf-8")))
        print(f"Imported {count} stations")
    elif args.station_command == "reset":
        book.reset(confirm=args.yes)
        print("All stations cleared")
    return 0


# ── entry point ──────────────────────────────────────────────


def tracker_config(args: argparse.Namespace) -> KokudoConfig:
    overrides = {}
    if args.data_dir:
        overrides["data_dir"] = Path(args.data_dir)
    return KokudoConfig.from_env(**overrides)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Track national route sticker progress.")
    parser.add_argument("--data-dir", help="Directory holding the saved data (default: $KOKUDO_DATA_DIR)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="List routes")
    p.add_argument("--collection", choices=[c.value for c in CollectionFilter], default=CollectionFilter.ALL.value)
    p.add_argument("--region", default="", help="Region substring")
    p.add_argument("--category", default="", help="Exact category, e.g. 一級")
    p.add_argument("--query", "-q", default="", help="Free-text search")
    p.add_argument("--sort", choices=[s.value for s in SortOrder], default=SortOrder.NUMBER_ASC.value)

    p = sub.add_parser("stats", help="Show overall and per-region progress")
    p.add_argument("--recent", type=int, default=2, help="Number of recent routes to show")

    p = sub.add_parser("toggle", help="Toggle a route's collected status")
    p.add_argument("route", type=int)

    p = sub.add_parser("show", help="Print a route summary")
    p.add_argument("route", type=int)

    p = sub.add_parser("export", help="Export all records as JSON")
    p.add_argument("--output", "-o", help="Write to FILE instead of the dated default name")

    p = sub.add_parser("import", help="Import an exported JSON file")
    p.add_argument("file")
    p.add_argument("--policy", choices=[p.value for p in ImportPolicy], default=ImportPolicy.MERGE.value)
    p.add_argument("--yes", action="store_true", help="Confirm an overwrite import")

    p = sub.add_parser("reset", help="Delete all records")
    p.add_argument("--yes", action="store_true", help="Confirm the reset")

    p = sub.add_parser("geocode", help="Look up coordinates for a route's acquisition place")
    p.add_argument("route", type=int)
    p.add_argument("query")
    p.add_argument("--pick", type=int, help="Store candidate N when several match")

    p = sub.add_parser("wiki", help="Show the route's article summary")
    p.add_argument("route", type=int)

    p = sub.add_parser("stations", help="Roadside station visit log")
    station_sub = p.add_subparsers(dest="station_command", required=True)
    sp = station_sub.add_parser("list")
    sp.add_argument("--visited", action="store_true")
    sp.add_argument("--unvisited", action="store_true")
    sp.add_argument("--query", "-q", default="")
    sp = station_sub.add_parser("add")
    sp.add_argument("name")
    sp.add_argument("--pref", default="")
    sp.add_argument("--date", default="")
    sp.add_argument("--visited", action="store_true")
    sp.add_argument("--stamp", action="store_true")
    sp.add_argument("--memo", default="")
    sp = station_sub.add_parser("export")
    sp.add_argument("--output", "-o")
    sp = station_sub.add_parser("import")
    sp.add_argument("file")
    sp = station_sub.add_parser("reset")
    sp.add_argument("--yes", action="store_true")
    return parser


async def main() -> int:
    args = build_parser().parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = tracker_config(args)
    try:
        if args.command == "stations":
            return cmd_stations(config, args)
        tracker = Tracker.open(config)
        handlers = {
            "list": cmd_list,
            "stats": cmd_stats,
            "toggle": cmd_toggle,
            "show": cmd_show,
            "export": cmd_export,
            "import": cmd_import,
            "reset": cmd_reset,
        }
        if args.command in handlers:
            return handlers[args.command](tracker, args)
        if args.command == "geocode":
            return await cmd_geocode(tracker, args)
        return await cmd_wiki(tracker, args)
    except (KokudoError, KeyError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
