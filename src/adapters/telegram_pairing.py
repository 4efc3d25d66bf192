"""QR pairing driver for the Telegram channel.

Drives the core Session through its lifecycle from Telethon events: resume a
stored session or issue a QR challenge, wait for it to be scanned, and report
disconnects. QR codes are printed to stderr because stdout carries the tool
protocol.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import Callable, Optional

import qrcode
from telethon import TelegramClient, errors

from core.models import SessionState
from core.session import Session

LOGGER = logging.getLogger(__name__)

PasswordProvider = Callable[[], Optional[str]]


def print_qr(url: str) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    print("\nScan this QR code: Telegram > Settings > Devices > Link Desktop Device\n", file=sys.stderr)
    qr.print_ascii(out=sys.stderr, invert=True)


def env_password() -> Optional[str]:
    return os.getenv("2FA") or None


class PairingDriver:
    """Connects the client and moves the session to ready, failed or disconnected."""

    def __init__(
        self,
        client: TelegramClient,
        session: Session,
        qr_timeout: float = 120.0,
        max_refreshes: int = 3,
        password_provider: PasswordProvider = env_password,
        show_qr: Callable[[str], None] = print_qr,
    ) -> None:
        self._client = client
        self._session = session
        self._qr_timeout = qr_timeout
        self._max_refreshes = max_refreshes
        self._password_provider = password_provider
        self._show_qr = show_qr

    async def run(self) -> None:
        """Pair (or resume) once. Never raises for pairing or network outcomes."""

        try:
            await self._client.connect()
        except OSError as exc:
            LOGGER.error("Could not reach Telegram: %s", exc)
            self._session.mark_disconnected(f"connect failed: {exc}")
            return

        try:
            await self._authorize()
        except errors.RPCError as exc:
            LOGGER.error("Pairing rejected: %s", exc)
            if self._session.current_state() is SessionState.PAIRING:
                self._session.mark_failed(f"pairing rejected: {exc}")
            else:
                self._session.mark_disconnected(f"authorization check failed: {exc}")
        except (OSError, asyncio.TimeoutError) as exc:
            LOGGER.exception("Telegram connection dropped during pairing")
            self._session.mark_disconnected(f"connection lost during pairing: {exc}")

    async def _authorize(self) -> None:
        if await self._client.is_user_authorized():
            self._session.begin_pairing(None)
            self._session.mark_ready()
            LOGGER.info("Resumed saved Telegram session")
            return
        await self._pair_with_qr()

    async def _pair_with_qr(self) -> None:
        qr = await self._client.qr_login()
        self._session.begin_pairing(qr.url)
        self._show_qr(qr.url)

        refreshes = 0
        while True:
            try:
                await qr.wait(timeout=self._qr_timeout)
                break
            except asyncio.TimeoutError:
                if refreshes >= self._max_refreshes:
                    self._session.mark_failed("pairing timed out")
                    return
                refreshes += 1
                await qr.recreate()
                self._session.refresh_challenge(qr.url)
                self._show_qr(qr.url)
            except errors.SessionPasswordNeededError:
                if not await self._sign_in_with_password():
                    return
                break

        self._session.mark_ready()

    async def _sign_in_with_password(self) -> bool:
        password = self._password_provider()
        if not password:
            self._session.mark_failed("two-step verification password required (set 2FA)")
            return False
        try:
            await self._client.sign_in(password=password)
        except errors.PasswordHashInvalidError:
            self._session.mark_failed("two-step verification password rejected")
            return False
        return True

    async def watch_disconnect(self) -> None:
        """Mark the session disconnected once the client connection closes."""

        try:
            await self._client.disconnected
        except (OSError, asyncio.TimeoutError) as exc:
            reason = f"Telegram connection lost: {exc}"
        else:
            reason = "Telegram connection closed"
        self._session.mark_disconnected(reason)
