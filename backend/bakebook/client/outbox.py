"""
Outbox Queue
Ordered log of recipe mutations that still have to reach the server.

Each entry records what to replay (create / update / delete), the recipe
data it carries, when it was queued and how its last replay went:

    pending -> syncing -> (removed)    replayed successfully
    pending -> syncing -> error        retried on the next pass

Payloads are validated into one tagged variant per operation before they
are queued:

    CreateOp  {payload}         recipe snapshot, may carry a temp_ id
    UpdateOp  {id, payload}     partial changes for recipe `id`
    DeleteOp  {id}

Edits to the same recipe are coalesced while the earlier entry is still
pending (see Outbox.enqueue).

The whole queue is one JSON list in the local store's "outbox" slot; two
processes writing it at once get last-write-wins.
"""

import asyncio
import logging
import time
import uuid
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from bakebook.client.store import LocalStore, is_temp_id, same_id
from bakebook.core.constants import (
    OP_CREATE,
    OP_DELETE,
    OP_UPDATE,
    OUTBOX_ID_PREFIX,
    RETRYABLE_STATUSES,
    SLOT_OUTBOX,
    STATUS_PENDING,
    STATUS_SYNCING,
    VALID_STATUSES,
)


logger = logging.getLogger("offline_store")

RecipeId = Union[int, str]


# ============================================================================
# OPERATION VARIANTS
# ============================================================================

class CreateOp(BaseModel):
    operation: Literal["create"] = OP_CREATE
    payload: Dict[str, Any]


class UpdateOp(BaseModel):
    operation: Literal["update"] = OP_UPDATE
    id: RecipeId
    payload: Dict[str, Any] = Field(default_factory=dict)


class DeleteOp(BaseModel):
    operation: Literal["delete"] = OP_DELETE
    id: RecipeId


OutboxOperation = Annotated[
    Union[CreateOp, UpdateOp, DeleteOp],
    Field(discriminator="operation")
]

_operation_adapter = TypeAdapter(OutboxOperation)


def parse_operation(operation: str, payload: Dict[str, Any]) -> Union[CreateOp, UpdateOp, DeleteOp]:
    """
    Validate a raw (operation, payload) pair into its tagged variant.

    Raises:
        pydantic.ValidationError (a ValueError): unknown operation, or an
        update/delete without a recipe id
    """
    payload = dict(payload or {})
    raw: Dict[str, Any] = {"operation": operation, "payload": payload}
    if payload.get("id") is not None:
        raw["id"] = payload["id"]
    return _operation_adapter.validate_python(raw)


# ============================================================================
# OUTBOX ITEM
# ============================================================================

class OutboxItem(BaseModel):
    """
    One queued mutation.

    payload["id"] is the recipe the operation targets (a temp_ id for
    recipes created offline, until the create is replayed).
    """
    id: str
    operation: Literal["create", "update", "delete"]
    payload: Dict[str, Any] = Field(default_factory=dict)
    timestamp: int = Field(..., description="Queued at (epoch milliseconds)")
    status: str = STATUS_PENDING
    error: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in VALID_STATUSES:
            raise ValueError(f"Invalid status: {v}. Must be one of {VALID_STATUSES}")
        return v

    @property
    def target_id(self) -> Optional[RecipeId]:
        return self.payload.get("id")

    @property
    def is_pending(self) -> bool:
        return self.status == STATUS_PENDING


def new_outbox_id() -> str:
    """offline_<epoch ms>_<random>, unique even for items queued in the same millisecond."""
    return f"{OUTBOX_ID_PREFIX}{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


# ============================================================================
# OUTBOX
# ============================================================================

class Outbox:
    """
    Persistent mutation queue stored in a LocalStore.

    Mutating methods hold an asyncio.Lock so read-modify-write cycles on the
    stored list never interleave inside one process.
    """

    def __init__(self, store: LocalStore):
        self.store = store
        self._lock = asyncio.Lock()

    async def _load(self) -> List[OutboxItem]:
        raw = await self.store.get(SLOT_OUTBOX, [])
        items = []
        for entry in raw if isinstance(raw, list) else []:
            try:
                items.append(OutboxItem.model_validate(entry))
            except ValueError as e:
                logger.error(f"OUTBOX_ITEM_DROPPED | entry={entry!r} | error={e}")
        return items

    async def _save(self, items: List[OutboxItem]) -> bool:
        return await self.store.set(SLOT_OUTBOX, [item.model_dump(mode="json") for item in items])

    # -- reads --------------------------------------------------------------

    async def items(self) -> List[OutboxItem]:
        """All queued items in enqueue order."""
        return await self._load()

    async def get(self, item_id: str) -> Optional[OutboxItem]:
        for item in await self._load():
            if item.id == item_id:
                return item
        return None

    async def retryable(self) -> List[OutboxItem]:
        """Items the next sync pass will attempt, in enqueue order."""
        return [item for item in await self._load() if item.status in RETRYABLE_STATUSES]

    # -- writes -------------------------------------------------------------

    async def enqueue(self, operation: str, payload: Dict[str, Any]) -> Optional[str]:
        """
        Queue a mutation and return the id of the item that now carries it.

        Coalescing:
            - update of a recipe with a pending create: merged into the create
            - update of a recipe with a pending update: merged into that update
            - delete of a temp_ recipe: its queued creates and updates (pending
              or failed) are dropped and nothing is queued (returns None);
              only when its create is being replayed right now is the delete
              queued, to be retargeted at the server id
            - delete of a server recipe: its queued updates are dropped, the
              delete is queued

        Items currently syncing are never merged into or dropped.

        Raises:
            ValueError: unknown operation, or update/delete without an id
        """
        op = parse_operation(operation, payload)

        async with self._lock:
            items = await self._load()

            if isinstance(op, UpdateOp):
                for item in items:
                    if item.is_pending and item.operation in (OP_CREATE, OP_UPDATE) \
                            and same_id(item.target_id, op.id):
                        item.payload = {**item.payload, **op.payload, "id": item.target_id}
                        await self._save(items)
                        logger.info(f"OUTBOX_COALESCED | item={item.id} | into={item.operation} | recipe_id={op.id}")
                        return item.id

            if isinstance(op, DeleteOp):
                # Items being replayed right now can no longer be withdrawn
                in_flight_create = any(
                    item.status == STATUS_SYNCING and item.operation == OP_CREATE
                    and same_id(item.target_id, op.id)
                    for item in items
                )
                remaining = [
                    item for item in items
                    if not (item.status != STATUS_SYNCING and item.operation in (OP_CREATE, OP_UPDATE)
                            and same_id(item.target_id, op.id))
                ]
                if is_temp_id(op.id) and not in_flight_create:
                    # The server never saw this recipe: nothing to delete there
                    await self._save(remaining)
                    logger.info(f"OUTBOX_CANCELLED | recipe_id={op.id} | dropped={len(items) - len(remaining)}")
                    return None
                items = remaining

            if isinstance(op, CreateOp):
                data = op.payload
            elif isinstance(op, UpdateOp):
                data = {**op.payload, "id": op.id}
            else:
                data = {"id": op.id}

            item = OutboxItem(
                id=new_outbox_id(),
                operation=op.operation,
                payload=data,
                timestamp=int(time.time() * 1000),
                status=STATUS_PENDING,
            )
            items.append(item)
            await self._save(items)

        logger.info(f"OUTBOX_ENQUEUED | item={item.id} | operation={item.operation} | recipe_id={item.target_id}")
        return item.id

    async def update_status(
        self,
        item_id: str,
        status: Optional[str] = None,
        error: Optional[str] = None
    ) -> Optional[OutboxItem]:
        """
        Merge a status and/or error message into an item.

        Returns:
            The updated item, or None if no item has that id
        """
        async with self._lock:
            items = await self._load()
            for index, item in enumerate(items):
                if item.id != item_id:
                    continue
                changes: Dict[str, Any] = {}
                if status is not None:
                    changes["status"] = status
                if error is not None:
                    changes["error"] = error
                updated = OutboxItem.model_validate({**item.model_dump(), **changes})
                items[index] = updated
                await self._save(items)
                return updated
        return None

    async def remove(self, item_id: str) -> bool:
        """Delete an item (after it was replayed). Returns False if absent."""
        async with self._lock:
            items = await self._load()
            remaining = [item for item in items if item.id != item_id]
            if len(remaining) == len(items):
                return False
            await self._save(remaining)
            return True

    async def retarget(self, old_id: RecipeId, new_id: RecipeId) -> int:
        """
        Point queued items at a recipe's new id.

        Called once a create is confirmed so later updates/deletes of a
        temp_ recipe go to the id the server assigned. Returns the number
        of items rewritten.
        """
        async with self._lock:
            items = await self._load()
            count = 0
            for item in items:
                if same_id(item.target_id, old_id):
                    item.payload = {**item.payload, "id": new_id}
                    count += 1
            if count:
                await self._save(items)
                logger.info(f"OUTBOX_RETARGETED | from={old_id} | to={new_id} | items={count}")
            return count

    async def clear(self) -> bool:
        async with self._lock:
            return await self.store.delete(SLOT_OUTBOX)
