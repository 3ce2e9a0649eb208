"""Data models for channel messages and the extracted Daily Quest record."""

from dataclasses import dataclass, field
from typing import Any, List, Optional

import discord


@dataclass(slots=True)
class ChannelMessage:
    """One message from the channel messages endpoint."""

    id: Optional[str]
    content: str = ""
    embeds: List[discord.Embed] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: dict) -> "ChannelMessage":
        embeds = [
            discord.Embed.from_dict(e)
            for e in (data.get("embeds") or [])
            if isinstance(e, dict)
        ]
        msg_id = data.get("id")
        return cls(
            id=str(msg_id) if msg_id is not None else None,
            content=data.get("content") or "",
            embeds=embeds,
        )


@dataclass(frozen=True, slots=True)
class Item:
    name: str
    qty: int
    price_wl: int

    def is_valid(self) -> bool:
        return self.qty > 0 and self.price_wl >= 0 and bool(self.name.strip())

    def to_dict(self) -> dict:
        return {"name": self.name, "qty": self.qty, "price_wl": self.price_wl}


@dataclass(frozen=True, slots=True)
class PriceRange:
    low: int
    high: int

    @classmethod
    def of(cls, first: int, second: Optional[int] = None) -> "PriceRange":
        if second is None:
            second = first
        return cls(low=min(first, second), high=max(first, second))

    def to_dict(self) -> dict:
        return {"low": self.low, "high": self.high}


@dataclass(slots=True)
class QuestRecord:
    """
    The document written to the output file.

    Field names map to camelCase keys in ``to_dict``; that JSON shape is the
    stable output contract.
    """

    date: Optional[str] = None
    role_day: Optional[str] = None
    estimated_final_price: Optional[PriceRange] = None
    items: List[Item] = field(default_factory=list)
    raw: str = ""
    source_message_id: Optional[str] = None
    fetched_at: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "roleDay": self.role_day,
            "estimatedFinalPrice": (
                self.estimated_final_price.to_dict()
                if self.estimated_final_price
                else None
            ),
            "items": [item.to_dict() for item in self.items if item.is_valid()],
            "raw": self.raw,
            "sourceMessageId": self.source_message_id,
            "fetchedAt": self.fetched_at,
        }
