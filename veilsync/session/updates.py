"""
Update checker: polls a remote revision marker and raises an "update
available" notification when it changes, unless the user snoozed it.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Optional

import httpx

from veilsync.errors import UpdateCheckError

logger = logging.getLogger(__name__)

USER_AGENT = "PhantomV-VeilSync-App"
REVISION_STORAGE_KEY = "currentCommitSha"

# Tiny silent WAV played by the client when an update is announced
ALERT_SOUND_URI = "data:audio/wav;base64,UklGRiQAAABXQVZFZm10IBAAAAABAAEARKwAAIhYAQACABAAZGF0YQAAAAA="


class UpdateChecker:
    """
    Session-scoped update poller.

    The first successful check records the remote revision in ``storage``;
    any later check that sees a different revision calls
    ``on_update_available``. Failures are logged and the loop carries on.
    """

    def __init__(
        self,
        url: str,
        on_update_available: Callable[[str], None],
        interval_seconds: float = 10 * 60,
        request_timeout_seconds: float = 15,
        storage: Optional[Dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.url = url
        self.on_update_available = on_update_available
        self.interval_seconds = interval_seconds
        self.request_timeout_seconds = request_timeout_seconds
        self.storage = storage if storage is not None else {}
        self.clock = clock
        self.snooze_until: Optional[float] = None

        self._client = client
        self._owns_client = client is None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_snoozed(self) -> bool:
        return self.snooze_until is not None and self.clock() < self.snooze_until

    def snooze(self, minutes: float) -> float:
        """Suppress notifications for ``minutes``. Returns the expiry timestamp."""
        self.snooze_until = self.clock() + minutes * 60
        logger.info("Update notifications snoozed for %s minutes", minutes)
        return self.snooze_until

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.request_timeout_seconds)
        return self._client

    async def _fetch_revision(self) -> str:
        response = await self._get_client().get(self.url, headers={"User-Agent": USER_AGENT})

        if not response.is_success:
            if response.status_code == 404:
                raise UpdateCheckError("Repository or branch not found. Please check UPDATE_CHECK_URL.")
            if response.status_code == 403:
                raise UpdateCheckError("GitHub API rate limit exceeded. Please try again later.")
            raise UpdateCheckError(f"Failed to fetch from GitHub API (Status: {response.status_code})")

        body = response.json()
        revision = body.get("sha") if isinstance(body, dict) else None
        if not isinstance(revision, str) or not revision:
            raise UpdateCheckError("Response did not contain a commit sha")
        return revision

    async def check(self) -> bool:
        """
        Run one check. Returns True when an update notification was raised.
        """
        if self.is_snoozed:
            return False

        try:
            latest = await self._fetch_revision()
        except (httpx.HTTPError, ValueError, UpdateCheckError) as e:
            logger.error("Update check failed: %s", e)
            return False

        current = self.storage.get(REVISION_STORAGE_KEY)
        if not current:
            self.storage[REVISION_STORAGE_KEY] = latest
            logger.debug("Recorded current revision %s", latest)
            return False

        if current != latest:
            logger.info("Update available: %s -> %s", current, latest)
            self.on_update_available(latest)
            return True
        return False

    async def _poll(self) -> None:
        while True:
            await self.check()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        """Check now, then every ``interval_seconds``."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._poll())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def aclose(self) -> None:
        self.stop()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
