"""Application entry point for the sitewire tool server."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import os
import sys
from getpass import getpass
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import text2art
from dotenv import load_dotenv

import settings
from adapters.mcp_server import build_server, serve_stdio
from adapters.sqlite_storage import SQLiteProjectRepository
from adapters.telegram_channel import TelegramChannel
from adapters.telegram_pairing import PairingDriver, env_password
from client import build_client
from core.channel import ChannelGateway
from core.formatting import format_group_list
from core.notifications import NotificationEngine
from core.ports import ProjectRepository
from core.registry import InMemoryProjectRepository, Registry
from core.session import Session, SessionEvent
from core.tools import SiteTools, build_router

NAME = "SITEWIRE"
FONT = "tarty-1"


def _print_banner() -> None:
    # stdout belongs to the MCP protocol.
    print(text2art(NAME, font=FONT, space=1), file=sys.stderr)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/sitewire.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _build_repository() -> ProjectRepository:
    storage = settings.STORAGE
    if storage.backend == "sqlite":
        repository = SQLiteProjectRepository(storage.path)
        repository.init_db()
        return repository
    if storage.backend == "memory":
        return InMemoryProjectRepository()
    raise RuntimeError("storage.backend must be 'memory' or 'sqlite'")


def _log_session_event(event: SessionEvent) -> None:
    logger = logging.getLogger("sitewire.session")
    if event.previous is event.current:
        logger.info("Pairing challenge refreshed")
        return
    logger.info("Channel %s -> %s (%s)", event.previous.value, event.current.value, event.reason)


async def _connect_channel(driver: PairingDriver, session: Session) -> None:
    await driver.run()
    if session.is_ready:
        await driver.watch_disconnect()


async def _serve() -> None:
    logger = logging.getLogger(__name__)

    client = build_client()
    session = Session()
    session.subscribe(_log_session_event)

    registry = Registry(_build_repository())
    gateway = ChannelGateway(session, TelegramChannel(client), settings.CHANNEL)
    notifier = NotificationEngine(registry, gateway)
    router = build_router(SiteTools(registry, gateway, notifier))
    logger.info("%s tools are registered", len(router.names))

    driver = PairingDriver(
        client,
        session,
        qr_timeout=settings.CHANNEL.pairing_timeout_seconds,
        max_refreshes=settings.QR_REFRESHES,
    )
    # Tools answer "not connected" until pairing finishes in the background.
    channel_task = asyncio.create_task(_connect_channel(driver, session))
    try:
        await serve_stdio(build_server(router))
    finally:
        channel_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await channel_task
        await client.disconnect()
        logger.info("Shut down")


def _prompt_password() -> Optional[str]:
    return env_password() or getpass("2FA password: ")


async def _login() -> None:
    client = build_client()
    session = Session()
    session.subscribe(_log_session_event)
    driver = PairingDriver(
        client,
        session,
        qr_timeout=settings.CHANNEL.pairing_timeout_seconds,
        max_refreshes=settings.QR_REFRESHES,
        password_provider=_prompt_password,
    )
    await driver.run()
    if session.is_ready:
        me = await client.get_me()
        print(f"Logged in as: {me.first_name}", file=sys.stderr)
    else:
        print(f"Login failed: {session.last_error}", file=sys.stderr)
    await client.disconnect()


async def _groups() -> None:
    client = build_client()
    await client.connect()
    if not await client.is_user_authorized():
        print("Authorization required. Run: sitewire login", file=sys.stderr)
        await client.disconnect()
        return
    groups = await TelegramChannel(client).list_groups()
    print(format_group_list(groups))
    await client.disconnect()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="sitewire")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("serve", help="Start the MCP tool server on stdio")
    subparsers.add_parser("login", help="Pair the Telegram account by QR code and save the session")
    subparsers.add_parser("groups", help="List the groups visible to the saved session")

    args = parser.parse_args(argv)
    _print_banner()
    _configure_logging()

    if args.command == "login":
        asyncio.run(_login())
        return
    if args.command == "groups":
        asyncio.run(_groups())
        return
    asyncio.run(_serve())


if __name__ == "__main__":
    main()
