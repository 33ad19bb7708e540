# ABOUTME: Command line maintenance tool for an on-disk HTTP response cache
# ABOUTME: Reports usage, runs LRU eviction, clears the cache and checks whether a URL is cached

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from models import CacheSettings
from urlcache import CacheManager, ConfigurationError, FileBlobStore

DEFAULT_CLI_MEMORY_CAPACITY = 1024 * 1024


def build_settings(args: argparse.Namespace) -> CacheSettings:
    """Combine URLCACHE_* environment variables with command line overrides."""
    overrides: Dict[str, Any] = {
        "cache_dir": args.cache_dir,
        "disk_capacity_bytes": args.disk_capacity,
        "memory_capacity_bytes": args.memory_capacity,
    }
    try:
        settings = CacheSettings.from_env(**overrides)
    except ValueError as e:
        raise ConfigurationError(f"Invalid cache configuration: {e}") from e
    return settings


def format_bytes(size: int) -> str:
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}KB"
    return f"{size / (1024 * 1024):.1f}MB"


def print_stats(stats: Dict[str, Any], as_json: bool) -> None:
    if as_json:
        print(json.dumps(stats, indent=2))
        return

    disk = stats["disk_cache"]
    print("Disk cache")
    print(f"   [INFO] Entries: {disk['entries']}")
    print(
        f"   [INFO] Usage: {format_bytes(disk['current_size_bytes'])} "
        f"of {format_bytes(disk['max_size_bytes'])}"
    )
    print(f"   [INFO] Blob files: {format_bytes(stats['blob_bytes'])}")
    if disk["current_size_bytes"] > disk["max_size_bytes"]:
        print("   [WARN] Usage exceeds capacity; run 'evict' to trim")


async def run_command(args: argparse.Namespace, settings: CacheSettings) -> int:
    manager = CacheManager(settings)
    await manager.initialize()
    try:
        if args.command == "stats":
            stats = await manager.get_statistics()
            store = manager.cache.blob_store
            stats["blob_bytes"] = store.total_size() if isinstance(store, FileBlobStore) else 0
            print_stats(stats, args.json)
            return 0

        if args.command == "evict":
            before = await manager.current_disk_usage()
            evicted: List[str] = await manager.balance()
            after = await manager.current_disk_usage()
            print(f"   [OK] Evicted {len(evicted)} entries")
            print(f"   [INFO] Usage: {format_bytes(before)} -> {format_bytes(after)}")
            return 0

        if args.command == "clear":
            await manager.clear_all()
            print(f"   [OK] Cleared cache at {settings.cache_dir}")
            return 0

        if args.command == "lookup":
            cached = await manager.is_cached(args.url)
            print(f"   [{'OK' if cached else 'MISS'}] {args.url}")
            return 0 if cached else 1

        print(f"ERROR: Unknown command: {args.command}")
        return 1
    finally:
        await manager.close()


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect and maintain an HTTP response cache")
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Cache directory (default: $URLCACHE_DIR)",
    )
    parser.add_argument(
        "--disk-capacity",
        type=int,
        default=None,
        help="Disk capacity in bytes (default: $URLCACHE_DISK_CAPACITY)",
    )
    parser.add_argument(
        "--memory-capacity",
        type=int,
        default=None,
        help="Memory capacity in bytes (default: $URLCACHE_MEMORY_CAPACITY or 1MB)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    stats_parser = subparsers.add_parser("stats", help="Show disk usage and entry counts")
    stats_parser.add_argument("--json", action="store_true", help="Print statistics as JSON")

    subparsers.add_parser("evict", help="Evict least recently used entries down to capacity")
    subparsers.add_parser("clear", help="Remove every cached response")

    lookup_parser = subparsers.add_parser("lookup", help="Check whether a URL is cached")
    lookup_parser.add_argument("url", help="Absolute URL to look up")

    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.memory_capacity is None and not os.getenv("URLCACHE_MEMORY_CAPACITY"):
        args.memory_capacity = DEFAULT_CLI_MEMORY_CAPACITY

    try:
        settings = build_settings(args)
        return await run_command(args, settings)
    except ConfigurationError as e:
        print(f"ERROR: {e}")
        print("Set URLCACHE_DIR and URLCACHE_DISK_CAPACITY or pass --cache-dir/--disk-capacity")
        return 1


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
