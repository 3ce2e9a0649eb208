import asyncio
import json
import logging
from typing import List, Optional

import aiohttp

from config import Config
from models import ChannelMessage

log = logging.getLogger(__name__)


class RemoteError(Exception):
    """The Discord API call failed or returned something unusable."""

    def __init__(self, status: Optional[int], body: str):
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"Discord API request failed: {body}")
        else:
            super().__init__(f"Discord API error {status}: {body}")


def messages_url(config: Config) -> str:
    return f"{config.api_base}/channels/{config.channel_id}/messages"


async def _get(session: aiohttp.ClientSession, config: Config):
    url = messages_url(config)
    headers = {"Authorization": f"Bot {config.token}"}
    params = {"limit": str(config.limit)}
    try:
        async with session.get(url, headers=headers, params=params) as resp:
            text = await resp.text()
            if 200 <= resp.status < 300:
                log.info("GET %s status=%s", url, resp.status)
                return resp.status, text
            log.error("GET %s status=%s body=%s", url, resp.status, text[:500])
            raise RemoteError(resp.status, text)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        log.error("GET %s error=%r", url, e)
        raise RemoteError(None, str(e) or type(e).__name__) from e


async def fetch_messages(
    config: Config, session: Optional[aiohttp.ClientSession] = None
) -> List[ChannelMessage]:
    """
    Fetch the latest page of messages (newest first) from the configured channel.

    Raises RemoteError on a non-2xx status, a transport failure, a timeout,
    or a body that is not a JSON array.
    """
    if session is None:
        timeout = aiohttp.ClientTimeout(total=config.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as own:
            status, text = await _get(own, config)
    else:
        status, text = await _get(session, config)

    try:
        payload = json.loads(text)
    except ValueError:
        raise RemoteError(status, f"response is not valid JSON: {text[:200]}") from None
    if not isinstance(payload, list):
        raise RemoteError(status, f"expected a JSON array, got {type(payload).__name__}")

    messages = [ChannelMessage.from_payload(m) for m in payload if isinstance(m, dict)]
    log.info("Fetched %d message(s) from channel %s", len(messages), config.channel_id)
    return messages
