"""
API Client
Async HTTP client for the BakeBook REST API, used by the offline client.

Features:
    - Attaches "Authorization: Bearer <token>" from the local store
    - Non-2xx responses raise ApiError("<status>: <body>")
    - Transport failures flip the connectivity indicator to offline
    - Reads fall back to the cached recipes when offline or unreachable;
      successful list reads refresh the cache

No retries or backoff: a failed write is the caller's to queue.

Usage:
    async with ApiClient(store, connectivity) as api:
        recipes = await api.list_recipes()
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from bakebook.client.store import LocalStore, is_temp_id
from bakebook.core.config import settings
from bakebook.core.constants import CLIENT_ONLY_FIELDS, DEFAULT_COOKBOOK_TITLE
from bakebook.services.cookbook_service import build_cookbook_pdf


logger = logging.getLogger("api_client")


class ApiError(Exception):
    """
    The server answered with a non-2xx status.

    Attributes:
        status_code: HTTP status
        body: Response text
    """

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"{status_code}: {body}")


def server_payload(recipe: Dict[str, Any]) -> Dict[str, Any]:
    """Recipe data minus the fields only the client copy carries (id, owner, timestamps)."""
    return {key: value for key, value in recipe.items() if key not in CLIENT_ONLY_FIELDS}


# ============================================================================
# LOCAL MATCHING (offline search/filter over the cache)
# ============================================================================

def matches_query(recipe: Dict[str, Any], query: str) -> bool:
    terms = query.lower().split()
    if not terms:
        return False
    haystack = " ".join(
        [recipe.get("title") or "", recipe.get("memory") or ""]
        + [ing for ing in (recipe.get("ingredients") or []) if isinstance(ing, str)]
    ).lower()
    return all(term in haystack for term in terms)


def matches_tags(recipe: Dict[str, Any], tags: List[str]) -> bool:
    wanted = {tag.strip().lower() for tag in tags if isinstance(tag, str) and tag.strip()}
    recipe_tags = {tag.strip().lower() for tag in (recipe.get("tags") or []) if isinstance(tag, str)}
    return bool(wanted & recipe_tags)


class ApiClient:
    """
    Authenticated client for /api/auth/*, /api/recipes* and /api/cookbook.

    Args:
        store: LocalStore holding the token and the recipe cache
        connectivity: Connectivity indicator (flipped offline on transport errors)
        base_url: Server URL (default: settings.API_URL)
        transport: Optional httpx transport (httpx.MockTransport in tests)
    """

    def __init__(
        self,
        store: LocalStore,
        connectivity,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.store = store
        self.connectivity = connectivity
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport)

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    # ========================================================================
    # TRANSPORT
    # ========================================================================

    async def _request(self, method: str, path: str, auth: bool = True, **kwargs) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if auth:
            token = await self.store.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"REQUEST_FAILED | {method} {path} | error={type(e).__name__}: {e}")
            await self.connectivity.set_online(False)
            raise

        if response.is_error:
            logger.info(f"REQUEST_REJECTED | {method} {path} | status={response.status_code}")
            raise ApiError(response.status_code, response.text or response.reason_phrase)

        logger.debug(f"REQUEST_OK | {method} {path} | status={response.status_code}")
        return response

    async def _json(self, method: str, path: str, **kwargs) -> Any:
        response = await self._request(method, path, **kwargs)
        return response.json()

    # ========================================================================
    # AUTH
    # ========================================================================

    async def register(self, username: str, password: str) -> Dict[str, Any]:
        """POST /api/auth/register. Returns {"user": {...}, "token": "..."}."""
        return await self._json(
            "POST", "/api/auth/register", auth=False,
            json={"username": username, "password": password}
        )

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        """POST /api/auth/login. Returns {"user": {...}, "token": "..."}."""
        return await self._json(
            "POST", "/api/auth/login", auth=False,
            json={"username": username, "password": password}
        )

    async def me(self) -> Dict[str, Any]:
        data = await self._json("GET", "/api/auth/me")
        return data["user"]

    async def health(self) -> Dict[str, Any]:
        return await self._json("GET", "/health", auth=False)

    # ========================================================================
    # RECIPE READS (cache fallback)
    # ========================================================================

    async def list_recipes(self) -> List[Dict[str, Any]]:
        """
        GET /api/recipes.

        The server list replaces the cache; recipes created offline
        (temp_ ids) are kept after it until their create is replayed.
        """
        if not self.connectivity.online:
            logger.info("CACHE_FALLBACK | list_recipes | reason=offline")
            return await self.store.get_recipes()

        try:
            recipes = await self._json("GET", "/api/recipes")
        except httpx.TransportError:
            logger.info("CACHE_FALLBACK | list_recipes | reason=unreachable")
            return await self.store.get_recipes()

        unsynced = [r for r in await self.store.get_recipes() if is_temp_id(r.get("id"))]
        await self.store.save_recipes(recipes + unsynced)
        return recipes + unsynced

    async def get_recipe(self, recipe_id) -> Optional[Dict[str, Any]]:
        """GET /api/recipes/{id}; the cached copy (or None) when offline or unreachable."""
        if not self.connectivity.online or is_temp_id(recipe_id):
            return await self.store.get_recipe(recipe_id)

        try:
            recipe = await self._json("GET", f"/api/recipes/{recipe_id}")
        except httpx.TransportError:
            logger.info(f"CACHE_FALLBACK | get_recipe | id={recipe_id}")
            return await self.store.get_recipe(recipe_id)

        await self.store.save_recipe(recipe)
        return recipe

    async def search_recipes(self, query: str) -> List[Dict[str, Any]]:
        """GET /api/recipes/search/{query}; searched in the cache when offline."""
        if self.connectivity.online:
            try:
                return await self._json("GET", f"/api/recipes/search/{query}")
            except httpx.TransportError:
                pass
        logger.info(f"CACHE_FALLBACK | search_recipes | query={query}")
        return [r for r in await self.store.get_recipes() if matches_query(r, query)]

    async def filter_recipes(self, tags: List[str]) -> List[Dict[str, Any]]:
        """POST /api/recipes/filter; filtered in the cache when offline."""
        if self.connectivity.online:
            try:
                return await self._json("POST", "/api/recipes/filter", json={"tags": list(tags)})
            except httpx.TransportError:
                pass
        logger.info(f"CACHE_FALLBACK | filter_recipes | tags={tags}")
        return [r for r in await self.store.get_recipes() if matches_tags(r, tags)]

    # ========================================================================
    # RECIPE WRITES
    # ========================================================================

    async def create_recipe(self, recipe: Dict[str, Any]) -> Dict[str, Any]:
        """POST /api/recipes with the client-only fields stripped."""
        return await self._json("POST", "/api/recipes", json=server_payload(recipe))

    async def update_recipe(self, recipe_id, changes: Dict[str, Any]) -> Dict[str, Any]:
        """PUT /api/recipes/{id} with the client-only fields stripped."""
        return await self._json("PUT", f"/api/recipes/{recipe_id}", json=server_payload(changes))

    async def delete_recipe(self, recipe_id) -> None:
        await self._request("DELETE", f"/api/recipes/{recipe_id}")

    async def upload_photo(
        self,
        recipe_id,
        filename: str,
        content: bytes,
        content_type: str = "image/jpeg"
    ) -> Dict[str, Any]:
        """POST /api/recipes/{id}/photo (multipart). Returns the updated recipe."""
        recipe = await self._json(
            "POST", f"/api/recipes/{recipe_id}/photo",
            files={"file": (filename, content, content_type)}
        )
        await self.store.save_recipe(recipe)
        return recipe

    # ========================================================================
    # COOKBOOK
    # ========================================================================

    async def export_cookbook(self, title: str = DEFAULT_COOKBOOK_TITLE, ids: Optional[List] = None) -> bytes:
        """
        GET /api/cookbook as PDF bytes.

        Offline, the cookbook is rendered locally from the cached recipes
        (temp_ recipes included).
        """
        if self.connectivity.online:
            params: Dict[str, Any] = {"title": title}
            if ids:
                params["ids"] = [i for i in ids if not is_temp_id(i)]
            try:
                response = await self._request("GET", "/api/cookbook", params=params)
                return response.content
            except httpx.TransportError:
                pass

        recipes = await self.store.get_recipes()
        if ids:
            wanted = {str(i) for i in ids}
            recipes = [r for r in recipes if str(r.get("id")) in wanted]
        logger.info(f"COOKBOOK_RENDERED_LOCALLY | recipes={len(recipes)}")
        return build_cookbook_pdf(recipes, title)
