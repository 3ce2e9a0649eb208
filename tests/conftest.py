from __future__ import annotations

from typing import Any, Callable

import pytest

from models import ChannelMessage


DQ_POST = """**Today's Daily Quest**
Today's Date: 09 August 2025
Role Day: Chef
Estimated Final Price: 18–20
200 Shallot Mustache for 13 World Locks
23 Steam Collector Seed for 7 World Locks"""


def _payload(
    msg_id: str = "1",
    content: str | None = "",
    embeds: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return {"id": msg_id, "content": content, "embeds": embeds or []}


@pytest.fixture
def payload() -> Callable[..., dict[str, Any]]:
    return _payload


@pytest.fixture
def message() -> Callable[..., ChannelMessage]:
    def build(*args: Any, **kwargs: Any) -> ChannelMessage:
        return ChannelMessage.from_payload(_payload(*args, **kwargs))

    return build


@pytest.fixture
def dq_post() -> str:
    return DQ_POST
