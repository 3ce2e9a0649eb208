import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import discord

from config import DEFAULT_RAW_LIMIT
from models import ChannelMessage, QuestRecord
from parser import contains_trigger, flatten_message, parse_quest_text, truncate

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class QuestMatch:
    text: str
    message: ChannelMessage


def find_quest_message(
    messages: Iterable[ChannelMessage], triggers: Sequence[str]
) -> Optional[QuestMatch]:
    """
    Return the first message (newest, given server order) whose flattened
    text contains one of the trigger phrases, or None.
    """
    for msg in messages:
        text = flatten_message(msg)
        if contains_trigger(text, triggers):
            return QuestMatch(text=text, message=msg)
    return None


def build_record(match: QuestMatch, raw_limit: int = DEFAULT_RAW_LIMIT) -> QuestRecord:
    fields = parse_quest_text(match.text)
    return QuestRecord(
        date=fields["date"],
        role_day=fields["role_day"],
        estimated_final_price=fields["estimated_final_price"],
        items=fields["items"],
        raw=truncate(match.text, raw_limit),
        source_message_id=match.message.id,
    )


def build_fallback_record(
    messages: List[ChannelMessage], raw_limit: int = DEFAULT_RAW_LIMIT
) -> QuestRecord:
    """Empty record; ``raw`` carries a sample of the newest message for diagnosis."""
    sample = flatten_message(messages[0]) if messages else ""
    return QuestRecord(raw=truncate(sample, raw_limit))


def write_record(
    record: QuestRecord, path: Path, fetched_at: Optional[str] = None
) -> Path:
    """
    Stamp ``record`` and overwrite ``path`` with it as pretty-printed JSON.

    The document goes to a temporary sibling first and is then moved into
    place, so readers never see a partial file.
    """
    record.fetched_at = fetched_at or discord.utils.utcnow().isoformat()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(record.to_dict(), f, indent=2, sort_keys=True, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise

    log.info("Wrote %s", path)
    return path
