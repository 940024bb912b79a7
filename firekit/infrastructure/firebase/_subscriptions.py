"""Polling subscriptions for the REST client.

Firestore's push channel (Listen) is gRPC/WebChannel only, so REST
subscriptions re-run the read on an interval and deliver only when the
result changes. The first successful read is always delivered. A failed
read is delivered as (None, error) and polling continues; errors that are
not StoreErrors arrive wrapped in TransportError.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from firekit.domain.exceptions import StoreError, TransportError

logger = logging.getLogger(__name__)

_UNSET = object()


class PollingRegistration:
    """ListenerRegistration backed by an asyncio polling task.

    Must be created while an event loop is running. remove() is idempotent.
    """

    def __init__(
        self,
        poll: Callable[[], Awaitable[Any]],
        deliver: Callable[[Any, Exception | None], None],
        interval: float,
        description: str,
    ) -> None:
        self._poll = poll
        self._deliver = deliver
        self._interval = interval
        self._description = description
        self._removed = False
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug("Started polling subscription %s", description)

    @property
    def removed(self) -> bool:
        return self._removed

    async def _run(self) -> None:
        last: Any = _UNSET
        while not self._removed:
            try:
                result = await self._poll()
            except StoreError as e:
                logger.warning("Polling %s failed: %s", self._description, e)
                last = _UNSET
                self._safe_deliver(None, e)
            except Exception as e:
                logger.exception("Polling %s raised", self._description)
                last = _UNSET
                error = TransportError(f"Polling {self._description} failed: {e}")
                error.__cause__ = e
                self._safe_deliver(None, error)
            else:
                if result != last:
                    last = result
                    self._safe_deliver(result, None)
            await asyncio.sleep(self._interval)

    def _safe_deliver(self, payload: Any, error: Exception | None) -> None:
        if self._removed:
            return
        try:
            self._deliver(payload, error)
        except Exception:
            logger.exception("Subscription callback for %s raised", self._description)

    def remove(self) -> None:
        """Cancel the polling task. Safe to call more than once."""
        if self._removed:
            return
        self._removed = True
        self._task.cancel()
        logger.debug("Stopped polling subscription %s", self._description)
