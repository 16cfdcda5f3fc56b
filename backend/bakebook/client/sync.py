"""
Sync Engine
Replays the outbox against the API when the client is online.

Per item, in enqueue order and one at a time:
    1. mark it syncing
    2. re-read the auth token (missing token -> item error)
    3. POST / PUT / DELETE /api/recipes...
    4. after a create, move the cached recipe and any later queued items
       from the temp_ id to the id the server assigned
    5. remove the item

A failed create or update leaves the item in "error" with the message and
is retried on the next pass. A failed delete still counts as synced: the
recipe is usually already gone on the server. When a request fails at the
transport level the connectivity indicator goes offline and the pass stops;
the items not yet attempted keep their status for the next pass.

Passes never overlap: a pass started while another one runs waits for it,
then works on whatever is left.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict

from bakebook.client.api_client import ApiClient
from bakebook.client.outbox import Outbox, OutboxItem
from bakebook.client.store import LocalStore, same_id
from bakebook.core.constants import (
    OP_CREATE,
    OP_DELETE,
    OP_UPDATE,
    RETRYABLE_STATUSES,
    STATUS_ERROR,
    STATUS_SYNCING,
)


logger = logging.getLogger("sync")


class SyncError(Exception):
    """An outbox item could not be replayed."""


@dataclass
class SyncResult:
    """Outcome of one pass: items replayed and items left in error."""
    synced: int = 0
    errors: int = 0


class SyncEngine:
    """
    Drains the outbox.

    Args:
        store: LocalStore with the token and recipe cache
        outbox: Outbox to drain
        api: ApiClient (anything with create_recipe/update_recipe/delete_recipe)
        connectivity: Connectivity indicator read at the start of each pass
    """

    def __init__(self, store: LocalStore, outbox: Outbox, api: ApiClient, connectivity):
        self.store = store
        self.outbox = outbox
        self.api = api
        self.connectivity = connectivity
        self._lock = asyncio.Lock()

    async def process_outbox(self) -> SyncResult:
        """
        Run one sync pass.

        Returns:
            SyncResult(synced, errors); SyncResult(0, 0) without touching
            anything when offline
        """
        if not self.connectivity.online:
            logger.debug("SYNC_SKIPPED | reason=offline")
            return SyncResult()

        async with self._lock:
            # Connectivity may have dropped while waiting for the previous pass
            if not self.connectivity.online:
                logger.debug("SYNC_SKIPPED | reason=offline")
                return SyncResult()

            result = SyncResult()
            queued = await self.outbox.retryable()
            if not queued:
                return result

            logger.info(f"SYNC_STARTED | items={len(queued)}")
            for snapshot in queued:
                if not self.connectivity.online:
                    # Lost the connection mid-pass: the rest waits for the next one
                    logger.info(f"SYNC_INTERRUPTED | reason=offline | synced={result.synced} | errors={result.errors}")
                    break

                # Re-read: an earlier create in this pass may have retargeted it
                item = await self.outbox.get(snapshot.id)
                if item is None or item.status not in RETRYABLE_STATUSES:
                    continue

                if await self._sync_item(item):
                    result.synced += 1
                else:
                    result.errors += 1

            logger.info(f"SYNC_COMPLETE | synced={result.synced} | errors={result.errors}")
            return result

    async def _sync_item(self, item: OutboxItem) -> bool:
        await self.outbox.update_status(item.id, STATUS_SYNCING)
        try:
            token = await self.store.get_token()
            if not token:
                raise SyncError("No authentication token available")

            if item.operation == OP_CREATE:
                await self._replay_create(item)
            elif item.operation == OP_UPDATE:
                await self._replay_update(item)
            elif item.operation == OP_DELETE:
                await self._replay_delete(item)
            else:
                raise SyncError(f"Unknown operation: {item.operation}")

            await self.outbox.remove(item.id)
            logger.info(f"SYNC_ITEM_OK | item={item.id} | operation={item.operation} | recipe_id={item.target_id}")
            return True

        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(f"SYNC_ITEM_FAILED | item={item.id} | operation={item.operation} | error={message}")
            await self.outbox.update_status(item.id, STATUS_ERROR, error=message)
            return False

    async def _replay_create(self, item: OutboxItem):
        temp_id = item.target_id
        created: Dict[str, Any] = await self.api.create_recipe(item.payload)
        server_id = created.get("id")

        if temp_id is not None and server_id is not None and not same_id(server_id, temp_id):
            cached = await self.store.get_recipe(temp_id) or {}
            await self.store.replace_recipe(temp_id, {**cached, **created})
            await self.outbox.retarget(temp_id, server_id)
            logger.info(f"RECIPE_ID_REMAPPED | from={temp_id} | to={server_id}")
        else:
            await self.store.save_recipe(created)

    async def _replay_update(self, item: OutboxItem):
        recipe_id = item.target_id
        updated = await self.api.update_recipe(recipe_id, item.payload)
        if isinstance(updated, dict) and updated.get("id") is not None:
            await self.store.save_recipe(updated)

    async def _replay_delete(self, item: OutboxItem):
        recipe_id = item.target_id
        try:
            await self.api.delete_recipe(recipe_id)
        except Exception as e:
            logger.info(f"SYNC_DELETE_IGNORED | recipe_id={recipe_id} | error={e}")
        await self.store.delete_recipe(recipe_id)
