"""
Local Store
Durable key-value area for the offline client.

Four named slots hold whole-value JSON snapshots:
    - user: cached profile of the logged-in user
    - token: bearer token for the API
    - recipes: list of cached recipe dicts (server and temporary ids)
    - outbox: list of queued mutations (see bakebook.client.outbox)

Backed by a single `kv_slots` table in a local SQLite file through
SQLAlchemy. Every operation may fail (corrupt or read-only file, locked
database); failures are logged and callers see an empty store instead of
an exception.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import Column, JSON, String
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from bakebook.core.config import settings
from bakebook.core.constants import (
    SLOT_OUTBOX,
    SLOT_RECIPES,
    SLOT_TOKEN,
    SLOT_USER,
    TEMP_ID_PREFIX,
    VALID_SLOTS,
)
from bakebook.db.session import build_engine


logger = logging.getLogger("offline_store")

RecipeId = Union[int, str]

# Client tables are kept apart from the server's metadata
ClientBase = declarative_base()


class KeyValueSlot(ClientBase):
    """One named slot and its JSON value."""

    __tablename__ = "kv_slots"

    key = Column(String(50), primary_key=True)
    value = Column(JSON, nullable=True)


class StorageError(Exception):
    """Raised internally when the local database cannot be read or written."""


def is_temp_id(recipe_id: Any) -> bool:
    """True for identifiers assigned by the client to recipes the server hasn't seen."""
    return isinstance(recipe_id, str) and recipe_id.startswith(TEMP_ID_PREFIX)


def same_id(left: Any, right: Any) -> bool:
    """Compare recipe ids that may arrive as int or str ("7" == 7)."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


class LocalStore:
    """
    Async key-value store over a local SQLite database.

    The coroutines run their SQLAlchemy calls directly on the event loop;
    each is one short query against a local file, so they complete without
    yielding to other tasks.

    Args:
        url: SQLAlchemy URL (default: settings.CLIENT_STORE_URL);
             "sqlite://" gives a throwaway in-memory store

    Example:
        store = LocalStore()
        await store.save_token("eyJ...")
        token = await store.get_token()
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.CLIENT_STORE_URL
        self.engine = build_engine(self.url)
        self._session_factory = sessionmaker(bind=self.engine, autoflush=False)
        self._ready = False

    @classmethod
    def in_memory(cls) -> "LocalStore":
        return cls("sqlite://")

    def _ensure_schema(self):
        if not self._ready:
            ClientBase.metadata.create_all(bind=self.engine)
            self._ready = True

    # ========================================================================
    # RAW SLOT ACCESS
    # ========================================================================

    def _read(self, key: str) -> Any:
        try:
            self._ensure_schema()
            with self._session_factory() as db:
                row = db.get(KeyValueSlot, key)
                return row.value if row is not None else None
        except (SQLAlchemyError, ValueError) as e:
            # ValueError: a value that is no longer valid JSON
            raise StorageError(f"read {key}: {e}") from e

    def _write(self, key: str, value: Any):
        try:
            self._ensure_schema()
            with self._session_factory() as db:
                # Overwrite without loading the old value, which may be corrupt
                updated = (
                    db.query(KeyValueSlot)
                    .filter(KeyValueSlot.key == key)
                    .update({KeyValueSlot.value: value}, synchronize_session=False)
                )
                if not updated:
                    db.add(KeyValueSlot(key=key, value=value))
                db.commit()
        except (SQLAlchemyError, TypeError, ValueError) as e:
            raise StorageError(f"write {key}: {e}") from e

    def _remove(self, key: str):
        try:
            self._ensure_schema()
            with self._session_factory() as db:
                db.query(KeyValueSlot).filter(KeyValueSlot.key == key).delete(synchronize_session=False)
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"delete {key}: {e}") from e

    @staticmethod
    def _check_slot(key: str):
        if key not in VALID_SLOTS:
            raise ValueError(f"Unknown slot: {key}. Must be one of {VALID_SLOTS}")

    async def get(self, key: str, default: Any = None) -> Any:
        """Read a slot. Returns default when the slot is empty or unreadable."""
        self._check_slot(key)
        try:
            value = self._read(key)
        except StorageError as e:
            logger.error(f"STORE_READ_FAILED | slot={key} | error={e}")
            return default
        return default if value is None else value

    async def set(self, key: str, value: Any) -> bool:
        """Replace a slot's value. Returns False if the write failed."""
        self._check_slot(key)
        try:
            self._write(key, value)
        except StorageError as e:
            logger.error(f"STORE_WRITE_FAILED | slot={key} | error={e}")
            return False
        return True

    async def delete(self, key: str) -> bool:
        """Empty a slot. Returns False if the delete failed."""
        self._check_slot(key)
        try:
            self._remove(key)
        except StorageError as e:
            logger.error(f"STORE_DELETE_FAILED | slot={key} | error={e}")
            return False
        return True

    # ========================================================================
    # SESSION HELPERS
    # ========================================================================

    async def save_user(self, user: Dict[str, Any]) -> bool:
        return await self.set(SLOT_USER, user)

    async def get_user(self) -> Optional[Dict[str, Any]]:
        return await self.get(SLOT_USER)

    async def clear_user(self) -> bool:
        return await self.delete(SLOT_USER)

    async def save_token(self, token: str) -> bool:
        return await self.set(SLOT_TOKEN, token)

    async def get_token(self) -> Optional[str]:
        return await self.get(SLOT_TOKEN)

    async def clear_token(self) -> bool:
        return await self.delete(SLOT_TOKEN)

    # ========================================================================
    # RECIPE CACHE HELPERS
    # ========================================================================

    async def get_recipes(self) -> List[Dict[str, Any]]:
        recipes = await self.get(SLOT_RECIPES, [])
        return recipes if isinstance(recipes, list) else []

    async def save_recipes(self, recipes: List[Dict[str, Any]]) -> bool:
        return await self.set(SLOT_RECIPES, list(recipes))

    async def get_recipe(self, recipe_id: RecipeId) -> Optional[Dict[str, Any]]:
        for recipe in await self.get_recipes():
            if same_id(recipe.get("id"), recipe_id):
                return recipe
        return None

    async def save_recipe(self, recipe: Dict[str, Any]) -> Dict[str, Any]:
        """Insert or replace (by id) a recipe in the cache."""
        await self.replace_recipe(recipe.get("id"), recipe)
        return recipe

    async def replace_recipe(self, old_id: RecipeId, recipe: Dict[str, Any]) -> bool:
        """
        Put recipe where the entry with old_id was, keeping its position.

        Used for identifier remapping: a recipe created offline as
        temp_... is rewritten in place with the id the server assigned.
        Appends when old_id isn't cached.
        """
        recipes = await self.get_recipes()
        for index, cached in enumerate(recipes):
            if same_id(cached.get("id"), old_id):
                recipes[index] = recipe
                break
        else:
            recipes.append(recipe)

        # Drop a stale copy already stored under the new id
        new_id = recipe.get("id")
        if not same_id(old_id, new_id):
            recipes = [
                cached for cached in recipes
                if cached is recipe or not same_id(cached.get("id"), new_id)
            ]
        return await self.save_recipes(recipes)

    async def delete_recipe(self, recipe_id: RecipeId) -> RecipeId:
        recipes = await self.get_recipes()
        await self.save_recipes([r for r in recipes if not same_id(r.get("id"), recipe_id)])
        return recipe_id

    # ========================================================================
    # LOGOUT
    # ========================================================================

    async def clear_offline_data(self):
        """
        Forget the session and its pending edits.

        Clears user, token and outbox. Cached recipes stay for the next
        login, except temporary-id recipes: their queued creates are gone,
        so nothing would ever reconcile them.
        """
        await self.clear_user()
        await self.clear_token()
        await self.delete(SLOT_OUTBOX)

        recipes = await self.get_recipes()
        kept = [r for r in recipes if not is_temp_id(r.get("id"))]
        if len(kept) != len(recipes):
            await self.save_recipes(kept)
            logger.info(f"TEMP_RECIPES_PURGED | count={len(recipes) - len(kept)}")

        logger.info("OFFLINE_DATA_CLEARED")
