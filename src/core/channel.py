"""Channel gateway.

Every channel-dependent call in the core goes through ChannelGateway. It
checks that the session is ready before touching the adapter, bounds adapter
calls with a timeout, keeps sends to one target in invocation order and turns
adapter exceptions into core errors.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Awaitable, Optional, TypeVar, Union

from core.config import GROUP_MATCH_STRICT, ChannelConfig
from core.errors import ChannelNotReady, SendFailed, ValidationFailure
from core.models import Group, Message, SentReceipt
from core.normalizer import clamp_limit, normalize_batch
from core.ports import ChannelPort
from core.resolver import resolve_group
from core.session import Session

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ChannelGateway:
    """Readiness-gated access to the channel adapter."""

    def __init__(self, session: Session, port: ChannelPort, config: Optional[ChannelConfig] = None) -> None:
        self._session = session
        self._port = port
        self._config = config or ChannelConfig()
        self._send_locks: defaultdict[Union[int, str], asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def session(self) -> Session:
        return self._session

    async def _bounded(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self._config.timeout_seconds)

    async def list_groups(self) -> list[Group]:
        self._session.require_ready()
        try:
            groups = await self._bounded(self._port.list_groups())
        except asyncio.TimeoutError:
            raise ChannelNotReady(self._session.current_state().value, reason="timed out listing groups")
        except Exception as exc:
            LOGGER.exception("Listing groups failed")
            raise ChannelNotReady(self._session.current_state().value, reason=f"error fetching groups: {exc}") from exc
        return list(groups)

    async def resolve_group(self, name: str) -> Group:
        groups = await self.list_groups()
        return resolve_group(name, groups, strict=self._config.group_match == GROUP_MATCH_STRICT)

    async def read_messages(self, group_name: str, limit: Optional[int] = None) -> tuple[Group, list[Message]]:
        """Return the resolved group and its recent messages, oldest first."""

        effective = clamp_limit(limit)
        self._session.require_ready()
        group = await self.resolve_group(group_name)
        try:
            records = await self._bounded(self._port.fetch_messages(group, effective))
        except asyncio.TimeoutError:
            raise ChannelNotReady(self._session.current_state().value, reason="timed out reading messages")
        except Exception as exc:
            LOGGER.exception("Reading messages from %s failed", group.display_name)
            raise ChannelNotReady(self._session.current_state().value, reason=f"error reading messages: {exc}") from exc
        return group, normalize_batch(records, effective)

    async def send_to_group(self, group_name: str, body: str) -> SentReceipt:
        _require_body(body)
        self._session.require_ready()
        group = await self.resolve_group(group_name)
        sent_at = await self._send(group.id, body)
        return SentReceipt(group_name=group.display_name, sent_at=sent_at)

    async def send_to_target(self, target: Union[int, str], body: str) -> datetime:
        """Send to a direct address (user handle, phone, chat id)."""

        _require_body(body)
        self._session.require_ready()
        return await self._send(target, body)

    async def _send(self, target: Union[int, str], body: str) -> datetime:
        async with self._send_locks[target]:
            # The session can drop while a previous send held the lock.
            self._session.require_ready()
            sent_at = datetime.now(timezone.utc)
            try:
                await self._bounded(self._port.send_message(target, body))
            except asyncio.TimeoutError:
                raise SendFailed("timed out waiting for the channel")
            except Exception as exc:
                LOGGER.exception("Sending to %s failed", target)
                raise SendFailed(str(exc) or exc.__class__.__name__) from exc
        LOGGER.info("Message sent to %s", target)
        return sent_at


def _require_body(body: str) -> None:
    if not isinstance(body, str) or not body.strip():
        raise ValidationFailure("message must be a non-empty string")
