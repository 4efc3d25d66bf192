"""Telegram channel adapter.

Implements the core ChannelPort on top of a connected Telethon client.
"""

from __future__ import annotations

import logging
from typing import Union

from telethon import TelegramClient

from adapters.telegram_mapper import build_group, build_raw_message, is_group_dialog
from core.models import Group, RawMessage

LOGGER = logging.getLogger(__name__)


class TelegramChannel:
    """Thin Telethon wrapper that satisfies the ChannelPort contract."""

    def __init__(self, client: TelegramClient) -> None:
        self._client = client

    async def list_groups(self) -> list[Group]:
        groups = []
        async for dialog in self._client.iter_dialogs():
            if not is_group_dialog(dialog):
                continue
            groups.append(build_group(dialog))
        LOGGER.debug("Fetched %s groups", len(groups))
        return groups

    async def fetch_messages(self, group: Group, limit: int) -> list[RawMessage]:
        # iter_messages yields newest first, which is what the normalizer expects.
        records = []
        async for message in self._client.iter_messages(group.id, limit=limit):
            records.append(build_raw_message(message))
        return records

    async def send_message(self, target: Union[int, str], body: str) -> None:
        await self._client.send_message(target, body, link_preview=False)
