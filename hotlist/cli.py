"""Command-line interface for Hotlist.

Commands:
    stats   - Show hotlist statistics
    tracks  - List reference tracks
    import  - Add a reference track from a JSON fingerprint file
    match   - Replay a JSON-lines fingerprint stream and print detections
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Iterator
from pathlib import Path

from .config import HotlistConfig, load_config
from .constants import ContentClass
from .database import HotlistDB
from .errors import IndexUnavailable, LookupFailure
from .logger import setup_logging


def _load_config(args: argparse.Namespace) -> HotlistConfig:
    """Load config from --config (or default locations), applying --db."""
    if args.config is not None:
        config = load_config(args.config)
    else:
        try:
            config = load_config()
        except FileNotFoundError:
            config = HotlistConfig()

    if args.db is not None:
        config.index.db_path = args.db
    return config


def cmd_stats(args: argparse.Namespace, config: HotlistConfig) -> int:
    """Show hotlist statistics."""
    db = HotlistDB.open(config.index.resolve_path())
    try:
        stats = db.get_stats()
    finally:
        db.close()

    print("Hotlist Statistics")
    print("=" * 40)
    print(f"Reference tracks:           {stats['total_tracks']:,}")
    print(f"Total fingerprints:         {stats['total_fingerprints']:,}")
    print(f"Avg fingerprints/track:     {stats['avg_fingerprints_per_track']:.0f}")
    for label, count in stats["tracks_per_class"].items():
        print(f"  {label:<24} {count:,}")

    return 0


def cmd_tracks(args: argparse.Namespace, config: HotlistConfig) -> int:
    """List reference tracks."""
    db = HotlistDB.open(config.index.resolve_path())
    try:
        tracks = db.list_tracks()
    finally:
        db.close()

    if not tracks:
        print("Hotlist is empty.")
        return 0

    for t in tracks:
        print(
            f"{t.content_class.label:<10} {t.duration_seconds:>8.1f}s "
            f"{t.fingerprint_count:>8} fps  {t.track}"
        )
    return 0


def cmd_import(args: argparse.Namespace, config: HotlistConfig) -> int:
    """Add a reference track to the hotlist."""
    if not args.file.exists():
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1

    with open(args.file) as f:
        data = json.load(f)

    fingerprints = [(int(h), int(dt)) for h, dt in data["fingerprints"]]
    content_class = ContentClass[args.content_class.upper()]

    db = HotlistDB.create(config.index.resolve_path())
    try:
        db.add_track(
            data["file"],
            content_class,
            fingerprints,
            length_ms=int(data.get("length_ms", 0)),
        )
    finally:
        db.close()

    print(f"Imported {data['file']} ({content_class.label}, {len(fingerprints)} fingerprints)")
    return 0


def _read_events(path: Path) -> Iterator[tuple[int, int]]:
    """Yield (hash, time_code) from a JSON-lines file."""
    with open(path) as f:
        for line in f:
            line = line.strip()
            if line:
                event = json.loads(line)
                yield int(event["hash"]), int(event["time_code"])


def cmd_match(args: argparse.Namespace, config: HotlistConfig) -> int:
    """Replay a fingerprint stream, triggering every batch_seconds of stream time."""
    from .buffer import FingerprintEvent
    from .engine import Hotlist

    if not args.events.exists():
        print(f"Error: File not found: {args.events}", file=sys.stderr)
        return 1

    if args.batch_seconds is not None:
        config.matching.batch_seconds = args.batch_seconds
    window = max(1, round(config.matching.batch_seconds / config.matching.time_quantum_s))

    engine = Hotlist.from_config(config)
    engine.start()
    if not engine.is_active:
        print("Warning: hotlist unavailable, matching disabled", file=sys.stderr)

    def flush() -> None:
        result = engine.trigger()
        print(json.dumps(result.to_record()))

    try:
        window_start: int | None = None
        for hash_, time_code in _read_events(args.events):
            if window_start is None:
                window_start = time_code
            elif time_code - window_start >= window:
                flush()
                window_start = time_code
            engine.push(FingerprintEvent(hash_, time_code))

        if window_start is not None:
            flush()
    except LookupFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        engine.close()

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="hotlist",
        description="Identify hotlist tracks in a fingerprint stream",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: search standard locations)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        help="Path to hotlist database (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # stats command
    stats_parser = subparsers.add_parser("stats", help="Show hotlist statistics")
    stats_parser.set_defaults(func=cmd_stats)

    # tracks command
    tracks_parser = subparsers.add_parser("tracks", help="List reference tracks")
    tracks_parser.set_defaults(func=cmd_tracks)

    # import command
    import_parser = subparsers.add_parser("import", help="Add a reference track")
    import_parser.add_argument("file", type=Path, help="JSON fingerprint file")
    import_parser.add_argument(
        "--class", "-c",
        dest="content_class",
        choices=[c.name.lower() for c in ContentClass],
        required=True,
        help="Track classification",
    )
    import_parser.set_defaults(func=cmd_import)

    # match command
    match_parser = subparsers.add_parser("match", help="Match a fingerprint stream")
    match_parser.add_argument("events", type=Path, help="JSON-lines file of fingerprint events")
    match_parser.add_argument(
        "--batch-seconds", "-b",
        type=float,
        help="Stream time between triggers (default: from config)",
    )
    match_parser.set_defaults(func=cmd_match)

    args = parser.parse_args(argv)
    config = _load_config(args)
    setup_logging(config.logging)

    try:
        return args.func(args, config)
    except IndexUnavailable as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
