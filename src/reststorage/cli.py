"""CLI entrypoint to exercise a remote store by hand."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import httpx

from reststorage.core.errors import KeyNotFoundError, StorageError
from reststorage.core.settings import RestStorageSettings
from reststorage.services.rest_storage import RestStorage
from reststorage.utils.env import get_bool_env
from reststorage.utils.logging import get_logger
from reststorage.utils.timefmt import format_rfc3339


logger = get_logger("RestStorageCLI", rich=get_bool_env("REST_STORAGE_RICH_LOGS", default=True))

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rest-storage", description="Talk to a REST key/value storage endpoint.")
    parser.add_argument("--config", type=Path, default=None, help="Path to storage YAML (defaults to REST_STORAGE_* env)")
    parser.add_argument("--timeout", type=float, default=None, help="Deadline in seconds for the operation")
    sub = parser.add_subparsers(dest="command", required=True)

    store = sub.add_parser("store", help="Store a file (or stdin with '-') under KEY")
    store.add_argument("key")
    store.add_argument("source")

    load = sub.add_parser("load", help="Print or save the value stored under KEY")
    load.add_argument("key")
    load.add_argument("--output", type=Path, default=None)

    for name, text in (("delete", "Delete KEY"), ("exists", "Check whether KEY exists"), ("stat", "Show KEY metadata")):
        cmd = sub.add_parser(name, help=text)
        cmd.add_argument("key")

    listing = sub.add_parser("list", help="List keys under PREFIX")
    listing.add_argument("prefix")
    listing.add_argument("--recursive", action="store_true")

    lock = sub.add_parser("lock", help="Acquire KEY, hold it, then release it")
    lock.add_argument("key")
    lock.add_argument("--hold", type=float, default=0.0, help="Seconds to hold the lock")
    return parser


def _load_settings(path: Optional[Path]) -> RestStorageSettings:
    if path is not None:
        return RestStorageSettings.from_file(path)
    return RestStorageSettings.from_env()


def _read_source(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


async def _dispatch(storage: RestStorage, args: argparse.Namespace) -> int:
    timeout = args.timeout
    if args.command == "store":
        await storage.store(args.key, _read_source(args.source), timeout=timeout)
        logger.info("Stored %s", args.key)
    elif args.command == "load":
        value = await storage.load(args.key, timeout=timeout)
        if args.output is not None:
            args.output.write_bytes(value)
        else:
            sys.stdout.buffer.write(value)
            sys.stdout.flush()
    elif args.command == "delete":
        await storage.delete(args.key, timeout=timeout)
        logger.info("Deleted %s", args.key)
    elif args.command == "exists":
        found = await storage.exists(args.key, timeout=timeout)
        print("true" if found else "false")
        return EXIT_OK if found else EXIT_NOT_FOUND
    elif args.command == "list":
        for key in await storage.list(args.prefix, args.recursive, timeout=timeout):
            print(key)
    elif args.command == "stat":
        info = await storage.stat(args.key, timeout=timeout)
        print(
            json.dumps(
                {
                    "key": info.key,
                    "modified": format_rfc3339(info.modified),
                    "size": info.size,
                    "isTerminal": info.is_terminal,
                }
            )
        )
    elif args.command == "lock":
        async with storage.locked(args.key, timeout=timeout):
            logger.info("Holding %s for %.1fs", args.key, args.hold)
            await asyncio.sleep(args.hold)
    return EXIT_OK


async def main(argv: Optional[Sequence[str]] = None, *, client: Optional[httpx.AsyncClient] = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    try:
        settings = _load_settings(args.config)
        async with RestStorage(settings, client=client) as storage:
            return await _dispatch(storage, args)
    except KeyNotFoundError as exc:
        logger.error("%s", exc)
        return EXIT_NOT_FOUND
    except (StorageError, OSError) as exc:
        logger.error("%s", exc)
        return EXIT_ERROR


def run(argv: Optional[List[str]] = None) -> None:
    sys.exit(asyncio.run(main(argv)))


if __name__ == "__main__":
    run()
