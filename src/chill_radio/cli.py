"""
Chill Radio CLI - Entry point

Runs the station scheduler and offers read-only views of persisted stations.
"""

import argparse
import asyncio
import signal
import sqlite3
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from loguru import logger

from chill_radio.core.config import Config, load_config
from chill_radio.core.database import init_database
from chill_radio.core.exceptions import ConfigurationError, PersistenceError
from chill_radio.core.logging import setup_logging
from chill_radio.domain.radio import (
    ScheduledTrack,
    SqliteRadioStore,
    Station,
    StationChange,
    StationRegistry,
)


def format_duration(duration: timedelta) -> str:
    """Format a duration as mm:ss."""
    total_seconds = int(duration.total_seconds())
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def announce_change(change: StationChange) -> None:
    """Log the track a station switched to."""
    current = change.current
    if current is None:
        logger.info(f"Station {change.station.name} went silent")
        return
    logger.info(
        f"New track playing on {change.station.name}: "
        f"{current.track.track_name} [{format_duration(current.duration)}]"
    )


def _format_entry(entry: ScheduledTrack) -> str:
    return (
        f"{entry.start_time:%Y-%m-%d %H:%M:%S} - {entry.end_time:%H:%M:%S}  "
        f"#{entry.track.id} {entry.track.track_name} [{format_duration(entry.duration)}]"
    )


async def run_scheduler(config: Config) -> int:
    """Run the registry until SIGINT/SIGTERM."""
    db_path = config.database.resolve_path()
    init_database(db_path)

    registry = StationRegistry(SqliteRadioStore(db_path), config.radio)
    registry.notifier.add_listener(announce_change)

    stop_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_requested.set)
        except NotImplementedError:
            # Signal handlers are unavailable on Windows event loops
            pass

    try:
        await registry.start()
        logger.info(f"Radio running with {len(registry.list_stations())} station(s)")
        await stop_requested.wait()
    finally:
        await registry.stop()
        await registry.notifier.close()
    return 0


async def show_stations(config: Config) -> int:
    """Print every persisted station with its current track."""
    db_path = config.database.resolve_path()
    init_database(db_path)
    store = SqliteRadioStore(db_path)
    now = datetime.now()

    records = await store.load_all_stations()
    if not records:
        print("No stations")
        return 0

    for record in records:
        station = Station.from_record(record, await store.load_scheduled_tracks(record.id))
        playing = station.current_track(now)
        status = playing.track.track_name if playing else "(silent)"
        print(
            f"{station.id:>6}  {station.name}  ->  {status}  "
            f"({len(station.tracks)} scheduled)"
        )
    return 0


async def show_schedule(config: Config, station_id: int) -> int:
    """Print the persisted timeline of a station."""
    db_path = config.database.resolve_path()
    init_database(db_path)
    store = SqliteRadioStore(db_path)

    tracks = await store.load_scheduled_tracks(station_id)
    if not tracks:
        print(f"Station {station_id} has no scheduled tracks")
        return 0

    for entry in tracks:
        print(_format_entry(entry))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chill-radio",
        description="Chill Radio - continuous playlist radio scheduler",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.toml (default: project root, cwd, then ~/.config/chill-radio)",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")
    subparsers.add_parser("run", help="Run the station scheduler")
    subparsers.add_parser("stations", help="List stations and what they are playing")
    schedule_parser = subparsers.add_parser("schedule", help="Show a station's timeline")
    schedule_parser.add_argument("station_id", type=int, help="Station (playlist) ID")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the chill-radio command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.subcommand:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
        if args.subcommand == "run":
            setup_logging(config.logging)
            return asyncio.run(run_scheduler(config))
        if args.subcommand == "stations":
            return asyncio.run(show_stations(config))
        if args.subcommand == "schedule":
            return asyncio.run(show_schedule(config, args.station_id))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except (PersistenceError, sqlite3.Error) as e:
        print(f"Database error: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
