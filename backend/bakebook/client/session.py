"""
Offline Session
The object a front end talks to: wires the local store, outbox, API
client, sync engine and connectivity indicator together.

Every recipe edit is tried online first. When the client is offline, the
server is unreachable or answers 5xx, the edit is applied to the local
cache and queued in the outbox instead; it is replayed when connectivity
comes back.

Usage:
    session = BakeBookSession.create()
    await session.login("nonna", "applepie")
    recipe = await session.create_recipe({
        "title": "Pie", "ingredients": ["apples"], "directions": "Bake"
    })
    await session.sync()
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from bakebook.client.api_client import ApiClient, ApiError
from bakebook.client.connectivity import Connectivity
from bakebook.client.outbox import Outbox
from bakebook.client.store import LocalStore, is_temp_id, same_id
from bakebook.client.sync import SyncEngine, SyncResult
from bakebook.core.constants import OP_CREATE, OP_DELETE, OP_UPDATE, TEMP_ID_PREFIX


logger = logging.getLogger("sync")
auth_logger = logging.getLogger("auth")


class OfflineLoginError(Exception):
    """Login was attempted offline and no matching session is cached."""


def new_temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _should_queue(error: Exception) -> bool:
    """Network failures and server errors are queued; 4xx rejections are not."""
    if isinstance(error, ApiError):
        return error.status_code >= 500
    return isinstance(error, httpx.HTTPError)


class BakeBookSession:
    """
    Offline-capable recipe session.

    Registers itself as a connectivity listener: going back online runs a
    sync pass.
    """

    def __init__(
        self,
        api: ApiClient,
        store: LocalStore,
        outbox: Outbox,
        engine: SyncEngine,
        connectivity: Connectivity
    ):
        self.api = api
        self.store = store
        self.outbox = outbox
        self.engine = engine
        self.connectivity = connectivity
        self.last_sync: Optional[SyncResult] = None
        connectivity.add_listener(self._on_connectivity_change)

    @classmethod
    def create(
        cls,
        base_url: Optional[str] = None,
        store_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        online: bool = True
    ) -> "BakeBookSession":
        """Build a session with all of its parts (settings provide the defaults)."""
        store = LocalStore(store_url)
        connectivity = Connectivity(online=online)
        api = ApiClient(store, connectivity, base_url=base_url, transport=transport)
        outbox = Outbox(store)
        engine = SyncEngine(store, outbox, api, connectivity)
        return cls(api, store, outbox, engine, connectivity)

    async def close(self):
        self.connectivity.remove_listener(self._on_connectivity_change)
        await self.api.aclose()

    # ========================================================================
    # AUTHENTICATION
    # ========================================================================

    async def _remember(self, data: Dict[str, Any]) -> Dict[str, Any]:
        await self.store.save_user(data["user"])
        await self.store.save_token(data["token"])
        return data["user"]

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        """
        Log in, online when possible.

        Offline (or with the server unreachable) the cached session is
        reused if it belongs to the same username.

        Raises:
            ApiError: the server rejected the credentials (401)
            OfflineLoginError: offline and no matching cached session
        """
        if self.connectivity.online:
            try:
                data = await self.api.login(username, password)
            except httpx.TransportError:
                auth_logger.info(f"LOGIN_ONLINE_FAILED | username={username} | trying cached session")
            else:
                auth_logger.info(f"LOGIN_SUCCESS | username={username} | mode=online")
                return await self._remember(data)

        user = await self.store.get_user()
        token = await self.store.get_token()
        if user and token and str(user.get("username", "")).lower() == username.strip().lower():
            auth_logger.info(f"LOGIN_SUCCESS | username={username} | mode=offline")
            return user

        auth_logger.warning(f"LOGIN_FAILED | username={username} | reason=no_cached_session")
        raise OfflineLoginError("No cached credentials available for offline login.")

    async def register(self, username: str, password: str) -> Dict[str, Any]:
        """Create an account (online only) and cache the new session."""
        data = await self.api.register(username, password)
        auth_logger.info(f"REGISTER_SUCCESS | username={username}")
        return await self._remember(data)

    async def restore(self) -> Optional[Dict[str, Any]]:
        """
        Resume the cached session, if any.

        Online, the token is checked with GET /api/auth/me; a rejected token
        ends the session. Offline, the cached user is trusted.
        """
        token = await self.store.get_token()
        if not token:
            return None

        if self.connectivity.online:
            try:
                user = await self.api.me()
            except ApiError as e:
                if e.status_code == 401:
                    await self.logout()
                    return None
                raise
            except httpx.TransportError:
                return await self.store.get_user()
            await self.store.save_user(user)
            return user

        return await self.store.get_user()

    async def logout(self):
        """Forget user, token and queued edits."""
        await self.store.clear_offline_data()
        auth_logger.info("LOGOUT")

    async def current_user(self) -> Optional[Dict[str, Any]]:
        return await self.store.get_user()

    # ========================================================================
    # RECIPES
    # ========================================================================

    async def recipes(self) -> List[Dict[str, Any]]:
        """All recipes: from the server when reachable, else from the cache."""
        return await self.api.list_recipes()

    async def get_recipe(self, recipe_id) -> Optional[Dict[str, Any]]:
        return await self.api.get_recipe(recipe_id)

    async def create_recipe(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a recipe.

        Returns the server's recipe, or the local copy (temp_ id) when the
        create was queued.
        """
        user = await self.store.get_user() or {}
        now = _now()
        recipe = {
            "tags": [],
            **data,
            "id": new_temp_id(),
            "user_id": user.get("id"),
            "created_at": now,
            "updated_at": now,
        }

        if self.connectivity.online:
            try:
                created = await self.api.create_recipe(recipe)
            except (ApiError, httpx.HTTPError) as e:
                if not _should_queue(e):
                    raise
                logger.warning(f"OFFLINE_FALLBACK | operation=create | error={e}")
            else:
                await self.store.save_recipe(created)
                return created

        await self.store.save_recipe(recipe)
        await self.outbox.enqueue(OP_CREATE, recipe)
        return recipe

    async def update_recipe(self, recipe_id, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update a recipe with partial changes.

        Recipes created offline (temp_ ids) are always updated locally; the
        change rides along with their queued create. While older edits of
        the recipe are still queued, this one is queued behind them and a
        sync pass replays them in order.
        """
        queued = await self._has_queued_edits(recipe_id)
        if self.connectivity.online and not is_temp_id(recipe_id) and not queued:
            try:
                updated = await self.api.update_recipe(recipe_id, changes)
            except (ApiError, httpx.HTTPError) as e:
                if not _should_queue(e):
                    raise
                logger.warning(f"OFFLINE_FALLBACK | operation=update | recipe_id={recipe_id} | error={e}")
            else:
                await self.store.save_recipe(updated)
                return updated

        cached = await self.store.get_recipe(recipe_id) or {"id": recipe_id}
        recipe = {**cached, **changes, "id": cached.get("id", recipe_id), "updated_at": _now()}
        await self.store.save_recipe(recipe)
        await self.outbox.enqueue(OP_UPDATE, {**changes, "id": recipe["id"]})

        if queued and self.connectivity.online:
            await self.sync()
            return await self.store.get_recipe(recipe["id"]) or recipe
        return recipe

    async def delete_recipe(self, recipe_id):
        """
        Delete a recipe; a 404 from the server counts as already deleted.

        Like update_recipe, a recipe with queued edits is deleted through the
        outbox so the delete reaches the server after them.
        """
        queued = await self._has_queued_edits(recipe_id)
        if self.connectivity.online and not is_temp_id(recipe_id) and not queued:
            try:
                await self.api.delete_recipe(recipe_id)
            except (ApiError, httpx.HTTPError) as e:
                if isinstance(e, ApiError) and e.status_code == 404:
                    await self.store.delete_recipe(recipe_id)
                    return
                if not _should_queue(e):
                    raise
                logger.warning(f"OFFLINE_FALLBACK | operation=delete | recipe_id={recipe_id} | error={e}")
            else:
                await self.store.delete_recipe(recipe_id)
                return

        await self.store.delete_recipe(recipe_id)
        if await self.outbox.enqueue(OP_DELETE, {"id": recipe_id}) and queued and self.connectivity.online:
            await self.sync()

    # ========================================================================
    # SYNC
    # ========================================================================

    async def _has_queued_edits(self, recipe_id) -> bool:
        return any(same_id(item.target_id, recipe_id) for item in await self.outbox.items())

    async def pending_changes(self) -> int:
        """Number of queued edits not yet confirmed by the server."""
        return len(await self.outbox.items())

    async def sync(self) -> SyncResult:
        """Run a sync pass and log the outcome."""
        result = await self.engine.process_outbox()
        self.last_sync = result
        if result.synced or result.errors:
            logger.info(
                f"OFFLINE_CHANGES_SYNCED | synced={result.synced} | errors={result.errors}"
            )
        return result

    async def _on_connectivity_change(self, online: bool):
        if online:
            await self.sync()
