"""
Connectivity Indicator
Tracks whether the API is reachable and tells listeners when that changes.

The sync engine reads `online` at the start of every pass; the API client
flips it to offline when a request fails at the transport level; `probe()`
checks GET /health to flip it back.
"""

import inspect
import logging
from typing import Any, Callable, List

import httpx

from bakebook.client.api_client import ApiError


logger = logging.getLogger("sync")

Listener = Callable[[bool], Any]


class Connectivity:
    """
    Online/offline flag with change notifications.

    Listeners are called with the new state only when it actually changes;
    coroutine listeners are awaited in registration order.
    """

    def __init__(self, online: bool = True):
        self._online = online
        self._listeners: List[Listener] = []

    @property
    def online(self) -> bool:
        return self._online

    def add_listener(self, listener: Listener):
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def set_online(self, online: bool):
        if online == self._online:
            return
        self._online = online
        logger.info(f"CONNECTIVITY_CHANGED | online={online}")
        for listener in list(self._listeners):
            result = listener(online)
            if inspect.isawaitable(result):
                await result

    async def probe(self, api) -> bool:
        """
        Ask the server whether it is reachable and update the flag.

        Args:
            api: ApiClient whose health() is called

        Returns:
            The new online state
        """
        try:
            await api.health()
        except (httpx.HTTPError, ApiError) as e:
            logger.info(f"CONNECTIVITY_PROBE_FAILED | error={e}")
            await self.set_online(False)
            return False
        await self.set_online(True)
        return True
