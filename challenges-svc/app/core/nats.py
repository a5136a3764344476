from __future__ import annotations
import json
import logging
from typing import Sequence
from nats.aio.client import Client as NATS

from .config import Settings

logger = logging.getLogger(__name__)

class EventPublisher:
    """Best-effort NATS publisher; a disabled publisher drops every event."""

    def __init__(self, settings: Settings, client: NATS | None = None):
        self.enabled = settings.nats_events_enabled
        self.subject_reported = settings.nats_subject_reported
        self.subject_validated = settings.nats_subject_validated
        self._servers: Sequence[str] = [u.strip() for u in settings.nats_urls.split(",") if u.strip()]
        self._nats = client or NATS()

    async def connect(self):
        if self.enabled and not self._nats.is_connected:
            await self._nats.connect(servers=self._servers)

    async def close(self):
        if self._nats.is_connected:
            await self._nats.drain()

    async def publish(self, subject: str, evt: dict) -> bool:
        """
        evt = {
          "run_id": int,
          "offer_id": int,
          "user_id": str | None,
          "suspected_fraud": bool,
          "at": iso8601
        }
        Returns False when the event was not delivered; never raises.
        Connection happens once at startup (see main.lifespan); while
        disconnected, events are dropped rather than reconnecting per request.
        """
        if not self.enabled:
            return False
        if not self._nats.is_connected:
            logger.warning("NATS not connected, dropping %s event", subject)
            return False
        try:
            await self._nats.publish(subject, json.dumps(evt).encode("utf-8"))
        except Exception:
            logger.warning("failed to publish %s event", subject, exc_info=True)
            return False
        return True
