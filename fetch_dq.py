"""
Fetch the latest Daily Quest post from a Discord channel and write it as JSON.

Environment: DISCORD_BOT_TOKEN and DISCORD_CHANNEL_ID are required; see
config.load_config for the optional settings. Exit status is 0 when a
document was written (including the "no quest found" case) and 1 on a
configuration or Discord API failure.
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import aiohttp
import discord

from collector import build_fallback_record, build_record, find_quest_message, write_record
from config import DEFAULT_DATEFMT, DEFAULT_FMT, Config, ConfigError, clamp_limit, load_config
from dispatcher import RemoteError, fetch_messages
from models import QuestRecord

log = logging.getLogger("fetch_dq")


async def run(config: Config, session: Optional[aiohttp.ClientSession] = None) -> QuestRecord:
    log.info("Fetching messages from Discord...")
    messages = await fetch_messages(config, session=session)

    match = find_quest_message(messages, config.triggers)
    if match is None:
        log.warning(
            "No message matching %s found in the last %d messages.",
            " / ".join(repr(t) for t in config.triggers),
            len(messages),
        )
        record = build_fallback_record(messages, config.raw_limit)
        write_record(record, config.output_path)
        return record

    log.info("Parsing Daily Quest text from message %s", match.message.id)
    log.debug("Sample text: %s ...", match.text[:180].replace("\n", " | "))

    record = build_record(match, config.raw_limit)
    log.info("Found %d item(s).", len(record.items))
    for i, item in enumerate(record.items, start=1):
        log.info("  #%d: %d x %s @ %d WL", i, item.qty, item.name, item.price_wl)

    write_record(record, config.output_path)
    return record


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Export the latest Daily Quest post to JSON.")
    p.add_argument("--output", type=Path, help="output file (default: DQ_OUTPUT_PATH or public/dq.json)")
    p.add_argument("--limit", type=int, help="number of recent messages to scan (1-100)")
    p.add_argument("--log-level", help="logging level (default: LOG_LEVEL or INFO)")
    return p


def _level(name: str) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str) -> None:
    discord.utils.setup_logging(
        formatter=logging.Formatter(DEFAULT_FMT, DEFAULT_DATEFMT),
        level=_level(level),
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    try:
        config = load_config()
    except ConfigError as e:
        setup_logging(args.log_level or "INFO")
        log.error("%s", e)
        return 1

    overrides = {}
    if args.output is not None:
        overrides["output_path"] = args.output
    if args.limit is not None:
        overrides["limit"] = clamp_limit(args.limit)
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    if overrides:
        config = dataclasses.replace(config, **overrides)

    setup_logging(config.log_level)

    try:
        asyncio.run(run(config))
    except RemoteError as e:
        log.error("ERROR: %s", e)
        return 1

    log.info("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
