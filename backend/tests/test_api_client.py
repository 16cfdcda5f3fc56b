import asyncio

import httpx
import pytest

from bakebook.client.api_client import ApiClient, ApiError, server_payload
from bakebook.client.connectivity import Connectivity

from fake_server import FakeServer


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def connectivity():
    return Connectivity(online=True)


@pytest.fixture
def api(store, connectivity, server):
    return ApiClient(store, connectivity, base_url="http://test", transport=server.transport())


def test_server_payload_strips_client_fields():
    recipe = {"id": "temp_1", "user_id": 1, "created_at": "x", "updated_at": "y", "title": "Pie"}
    assert server_payload(recipe) == {"title": "Pie"}


def test_token_is_attached(api, store, server):
    async def scenario():
        await store.save_token("token-1")
        return await api.me()

    assert asyncio.run(scenario()) == {"id": 1, "username": "nonna"}
    assert server.requests[0].headers["authorization"] == "Bearer token-1"


def test_non_2xx_raises_api_error(api):
    with pytest.raises(ApiError) as exc_info:
        asyncio.run(api.login("nonna", "wrong"))
    assert exc_info.value.status_code == 401
    assert str(exc_info.value).startswith("401: ")
    assert "Invalid username or password" in str(exc_info.value)


def test_list_refreshes_cache_and_keeps_unsynced(api, store, server):
    server.recipes[1] = {"id": 1, "title": "Soup"}

    async def scenario():
        await store.save_recipes([{"id": 99, "title": "Gone"}, {"id": "temp_x", "title": "Draft"}])
        listed = await api.list_recipes()
        return listed, await store.get_recipes()

    listed, cached = asyncio.run(scenario())
    assert [r["id"] for r in listed] == [1, "temp_x"]
    assert cached == listed


def test_reads_fall_back_to_cache_when_offline(store, server):
    connectivity = Connectivity(online=False)
    api = ApiClient(store, connectivity, base_url="http://test", transport=server.transport())

    async def scenario():
        await store.save_recipes([
            {"id": 1, "title": "Apple Pie", "ingredients": ["apples"], "tags": ["Dessert"]},
            {"id": 2, "title": "Bread", "ingredients": ["flour"], "tags": ["bread"]},
        ])
        return (
            await api.list_recipes(),
            await api.get_recipe(2),
            await api.search_recipes("apple pie"),
            await api.filter_recipes(["DESSERT"]),
        )

    listed, one, found, filtered = asyncio.run(scenario())
    assert len(listed) == 2
    assert one["title"] == "Bread"
    assert [r["id"] for r in found] == [1]
    assert [r["id"] for r in filtered] == [1]
    assert server.requests == []


def test_transport_error_flips_offline_and_uses_cache(api, store, server, connectivity):
    server.down = True

    async def scenario():
        await store.save_recipes([{"id": 1, "title": "Soup"}])
        return await api.list_recipes()

    assert asyncio.run(scenario()) == [{"id": 1, "title": "Soup"}]
    assert connectivity.online is False


def test_writes_raise_transport_errors(api, server):
    server.down = True
    with pytest.raises(httpx.ConnectError):
        asyncio.run(api.create_recipe({"title": "Pie"}))


def test_upload_photo_updates_cache(api, store, server):
    server.recipes[1] = {"id": 1, "title": "Pie"}

    async def scenario():
        recipe = await api.upload_photo(1, "pie.png", b"png-bytes", "image/png")
        return recipe, await store.get_recipe(1)

    recipe, cached = asyncio.run(scenario())
    assert recipe["photo"] == "/uploads/photo.png"
    assert cached["photo"] == "/uploads/photo.png"
    assert b"png-bytes" in server.requests[0].content


def test_export_cookbook_online_and_offline(store, server):
    connectivity = Connectivity(online=True)
    api = ApiClient(store, connectivity, base_url="http://test", transport=server.transport())

    async def scenario():
        online_pdf = await api.export_cookbook("Nonna's Kitchen")
        await connectivity.set_online(False)
        await store.save_recipes([{"id": "temp_x", "title": "Draft", "ingredients": ["a"], "directions": "b"}])
        offline_pdf = await api.export_cookbook("Nonna's Kitchen")
        return online_pdf, offline_pdf

    online_pdf, offline_pdf = asyncio.run(scenario())
    assert online_pdf == b"%PDF-server"
    assert server.requests[0].url.params["title"] == "Nonna's Kitchen"
    assert offline_pdf.startswith(b"%PDF")
    assert len(server.requests) == 1


def test_connectivity_probe(api, server, connectivity):
    async def scenario():
        await connectivity.set_online(False)
        back = await connectivity.probe(api)
        server.down = True
        gone = await connectivity.probe(api)
        return back, gone

    assert asyncio.run(scenario()) == (True, False)
    assert connectivity.online is False


def test_connectivity_notifies_only_on_change():
    connectivity = Connectivity(online=True)
    seen = []

    async def async_listener(online):
        seen.append(("async", online))

    connectivity.add_listener(lambda online: seen.append(("sync", online)))
    connectivity.add_listener(async_listener)

    async def scenario():
        await connectivity.set_online(True)
        await connectivity.set_online(False)
        await connectivity.set_online(False)
        await connectivity.set_online(True)

    asyncio.run(scenario())
    assert seen == [("sync", False), ("async", False), ("sync", True), ("async", True)]
