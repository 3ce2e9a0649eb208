import logging
import re
from typing import Iterable, List, Optional

from models import ChannelMessage, Item, PriceRange

log = logging.getLogger(__name__)


MONTHS = (
    "january|february|march|april|may|june|july|august|september|october|november|december"
    "|jan|feb|mar|apr|jun|jul|aug|sep|sept|oct|nov|dec"
)

LABELED_DATE_RE = re.compile(r"^(?:today'?s\s+)?date\s*:\s*(.+)$", re.IGNORECASE)
FREEFORM_DATE_RE = re.compile(rf"\b(\d{{1,2}}\s+(?:{MONTHS})\.?\s+\d{{4}})\b", re.IGNORECASE)
ROLE_DAY_RE = re.compile(r"Role Day\s*:\s*([A-Za-z]+)", re.IGNORECASE)
PRICE_RE = re.compile(
    r"Estimated Final Price\s*:\s*(\d+)(?:\s*(?:-|to)\s*(\d+))?", re.IGNORECASE
)
ITEM_RE = re.compile(r"^(\d+)\s+(.+?)\s+for\s+(\d+)\s+World Locks?\b", re.IGNORECASE)
ITEM_FALLBACK_RE = re.compile(r"^(\d+)\s+(.+?)\s*-\s*(\d+)\s*WLs?\b", re.IGNORECASE)


# -----------------------------
# Normalization helpers
# -----------------------------
def normalize_line(line: Optional[str]) -> str:
    if line is None:
        return ""
    clean = line.replace("`", "")
    clean = clean.replace("“", '"').replace("”", '"')
    clean = clean.replace("‘", "'").replace("’", "'")
    clean = clean.replace("–", "-").replace("—", "-").replace("‒", "-").replace("−", "-")
    clean = re.sub(r"\*\*|__|~~", "", clean)
    clean = re.sub(r"[\u200B-\u200F\uFEFF]", "", clean)
    clean = re.sub(r"^[\s\-\*\u2022\u2023\u25E6\u2027>\t]+", "", clean)
    clean = re.sub(r"\s+", " ", clean).strip()
    return clean


def split_lines(text: Optional[str]) -> List[str]:
    """Normalized, non-empty lines of ``text``."""
    if not text:
        return []
    lines = (normalize_line(raw) for raw in text.splitlines())
    return [line for line in lines if line]


def truncate(text: Optional[str], limit: int) -> str:
    if not text:
        return ""
    return text[:limit]


# -----------------------------
# Message flattening
# -----------------------------
def flatten_message(message: ChannelMessage) -> str:
    """
    Join the readable text of a message: content, then for every embed its
    title, description, field names and values, and footer text.
    """
    parts = []
    if message.content:
        parts.append(message.content)

    for embed in message.embeds:
        if embed.title:
            parts.append(embed.title)
        if embed.description:
            parts.append(embed.description)
        for f in embed.fields:
            if f.name:
                parts.append(f.name)
            if f.value:
                parts.append(f.value)
        if embed.footer.text:
            parts.append(embed.footer.text)

    return "\n".join(parts).strip()


def contains_trigger(text: Optional[str], triggers: Iterable[str]) -> bool:
    if not text:
        return False
    # markdown and zero-width characters can sit inside the phrase
    lower = " ".join(split_lines(text)).lower()
    phrases = [normalize_line(t).lower() for t in triggers if t]
    return any(p in lower for p in phrases if p)


# -----------------------------
# Field rules
# -----------------------------
def parse_date(lines: List[str]) -> Optional[str]:
    # "Today's Date: 09 August 2025" wins over a bare date elsewhere in the post
    for line in lines:
        m = LABELED_DATE_RE.match(line)
        if m and m.group(1).strip():
            return m.group(1).strip()
    for line in lines:
        m = FREEFORM_DATE_RE.search(line)
        if m:
            return m.group(1)
    return None


def parse_role_day(lines: List[str]) -> Optional[str]:
    for line in lines:
        m = ROLE_DAY_RE.search(line)
        if m:
            return m.group(1)
    return None


def parse_estimated_price(lines: List[str]) -> Optional[PriceRange]:
    for line in lines:
        m = PRICE_RE.search(line)
        if m:
            second = int(m.group(2)) if m.group(2) else None
            return PriceRange.of(int(m.group(1)), second)
    return None


def _match_items(lines: List[str], pattern: re.Pattern) -> List[Item]:
    items = []
    for line in lines:
        m = pattern.match(line)
        if not m:
            continue
        item = Item(name=m.group(2).strip(), qty=int(m.group(1)), price_wl=int(m.group(3)))
        if item.is_valid():
            items.append(item)
        else:
            log.debug("Dropping item line %r", line)
    return items


def parse_items(lines: List[str]) -> List[Item]:
    """
    Item lines such as "200 Shallot Mustache for 13 World Locks".

    The dash form ("23 Steam Collector Seed - 7 WL") is only tried when no
    line matches the primary form; the two are never mixed.
    """
    items = _match_items(lines, ITEM_RE)
    if not items:
        items = _match_items(lines, ITEM_FALLBACK_RE)
        if items:
            log.debug("Items matched with the dash-separated fallback pattern")
    return items


def parse_quest_text(text: Optional[str]) -> dict:
    """
    Run every field rule over ``text``. A rule that finds nothing leaves its
    field as None (or an empty list for items); this never raises.
    """
    lines = split_lines(text)
    result = {
        "date": parse_date(lines),
        "role_day": parse_role_day(lines),
        "estimated_final_price": parse_estimated_price(lines),
        "items": parse_items(lines),
    }
    for key, value in result.items():
        if value is None:
            log.debug("No %s found in quest text", key)
    return result
