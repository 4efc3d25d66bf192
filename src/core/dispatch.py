"""Tool dispatch router.

Maps an operation name to its handler and wraps every outcome, success or
failure, into the same single-text Envelope. Callers never see a stack trace.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Optional

from core.errors import SitewireError, UnknownOperation
from core.models import Envelope

LOGGER = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], Awaitable[str]]

FAILURE_MARKER = "❌"


def render_error(error: SitewireError) -> str:
    text = f"{FAILURE_MARKER} {error.message}"
    if error.hint:
        text = f"{text}\n\n{error.hint}"
    return text


class ToolRouter:
    """Name -> handler registry, populated once at startup then frozen."""

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}
        self._frozen = False

    def register(self, name: str, handler: Handler) -> None:
        if self._frozen:
            raise RuntimeError("Tool router is frozen; register handlers at startup")
        if name in self._handlers:
            raise ValueError(f"Tool already registered: {name}")
        self._handlers[name] = handler

    def freeze(self) -> None:
        self._frozen = True

    @property
    def names(self) -> list[str]:
        return sorted(self._handlers)

    def lookup(self, name: str) -> Handler:
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownOperation(name)
        return handler

    async def dispatch(self, name: str, arguments: Optional[dict[str, Any]] = None) -> Envelope:
        args = arguments or {}
        started = time.perf_counter()
        try:
            handler = self.lookup(name)
            text = await handler(args)
        except SitewireError as exc:
            LOGGER.info("Tool %s failed (%s): %s", name, exc.code, exc.message)
            return Envelope(text=render_error(exc), is_error=True)
        except Exception as exc:
            LOGGER.exception("Tool call failed: %s", name)
            return Envelope(text=f"{FAILURE_MARKER} {name} failed: {exc}", is_error=True)
        LOGGER.info("Tool %s completed in %.0f ms", name, (time.perf_counter() - started) * 1000)
        return Envelope(text=text)
