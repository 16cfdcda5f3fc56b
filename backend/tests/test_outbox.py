import asyncio
import re

import pytest

from bakebook.client.outbox import Outbox


@pytest.fixture
def outbox(store):
    return Outbox(store)


def test_enqueue_assigns_id_and_pending_status(outbox):
    async def scenario():
        item_id = await outbox.enqueue("create", {"id": "temp_abc", "title": "Pie"})
        items = await outbox.items()
        return item_id, items

    item_id, items = asyncio.run(scenario())
    assert re.match(r"^offline_\d+_[0-9a-f]{8}$", item_id)
    assert len(items) == 1
    assert items[0].id == item_id
    assert items[0].operation == "create"
    assert items[0].status == "pending"
    assert items[0].payload == {"id": "temp_abc", "title": "Pie"}
    assert items[0].timestamp > 0


def test_ids_are_unique_within_a_millisecond(outbox):
    async def scenario():
        return [await outbox.enqueue("delete", {"id": n}) for n in range(20)]

    ids = asyncio.run(scenario())
    assert len(set(ids)) == 20


def test_enqueue_validates_payload(outbox):
    with pytest.raises(ValueError):
        asyncio.run(outbox.enqueue("rename", {"id": 1}))
    with pytest.raises(ValueError):
        asyncio.run(outbox.enqueue("update", {"title": "no id"}))
    with pytest.raises(ValueError):
        asyncio.run(outbox.enqueue("delete", {}))


def test_update_status_and_remove(outbox):
    async def scenario():
        item_id = await outbox.enqueue("update", {"id": 7, "title": "Pie"})

        updated = await outbox.update_status(item_id, "error", error="500: boom")
        assert updated.status == "error"
        assert updated.error == "500: boom"

        # Partial merge keeps the previous error
        updated = await outbox.update_status(item_id, "syncing")
        assert updated.status == "syncing"
        assert updated.error == "500: boom"

        assert await outbox.update_status("offline_missing", "error") is None

        assert await outbox.remove(item_id) is True
        assert await outbox.remove(item_id) is False
        assert await outbox.items() == []

    asyncio.run(scenario())


def test_invalid_status_is_rejected(outbox):
    async def scenario():
        item_id = await outbox.enqueue("delete", {"id": 7})
        await outbox.update_status(item_id, "done")

    with pytest.raises(ValueError):
        asyncio.run(scenario())


def test_retryable_includes_error_and_stale_syncing(outbox):
    async def scenario():
        a = await outbox.enqueue("delete", {"id": 1})
        b = await outbox.enqueue("delete", {"id": 2})
        c = await outbox.enqueue("delete", {"id": 3})
        d = await outbox.enqueue("delete", {"id": 4})
        await outbox.update_status(b, "error", error="x")
        await outbox.update_status(c, "syncing")
        await outbox.update_status(d, "synced")
        return [a, b, c], [item.id for item in await outbox.retryable()]

    expected, retryable = asyncio.run(scenario())
    assert retryable == expected


def test_update_merges_into_pending_create(outbox):
    async def scenario():
        create_id = await outbox.enqueue("create", {"id": "temp_abc", "title": "Pie", "tags": []})
        merged_id = await outbox.enqueue("update", {"id": "temp_abc", "title": "Apple Pie"})
        return create_id, merged_id, await outbox.items()

    create_id, merged_id, items = asyncio.run(scenario())
    assert merged_id == create_id
    assert len(items) == 1
    assert items[0].operation == "create"
    assert items[0].payload == {"id": "temp_abc", "title": "Apple Pie", "tags": []}


def test_update_merges_into_pending_update(outbox):
    async def scenario():
        first = await outbox.enqueue("update", {"id": 7, "title": "Pie"})
        second = await outbox.enqueue("update", {"id": 7, "cook_time": "1 hour"})
        other = await outbox.enqueue("update", {"id": 8, "title": "Bread"})
        return first, second, other, await outbox.items()

    first, second, other, items = asyncio.run(scenario())
    assert second == first
    assert other != first
    assert items[0].payload == {"id": 7, "title": "Pie", "cook_time": "1 hour"}
    assert len(items) == 2


def test_update_does_not_merge_into_failed_item(outbox):
    async def scenario():
        first = await outbox.enqueue("update", {"id": 7, "title": "Pie"})
        await outbox.update_status(first, "error", error="500: boom")
        second = await outbox.enqueue("update", {"id": 7, "title": "Apple Pie"})
        return first, second, await outbox.items()

    first, second, items = asyncio.run(scenario())
    assert second != first
    assert len(items) == 2


def test_delete_of_unsynced_recipe_cancels_its_create(outbox):
    async def scenario():
        await outbox.enqueue("create", {"id": "temp_abc", "title": "Pie"})
        await outbox.enqueue("update", {"id": 9, "title": "Other"})
        result = await outbox.enqueue("delete", {"id": "temp_abc"})
        return result, await outbox.items()

    result, items = asyncio.run(scenario())
    assert result is None
    assert [item.payload["id"] for item in items] == [9]


def test_delete_of_server_recipe_drops_its_pending_updates(outbox):
    async def scenario():
        await outbox.enqueue("update", {"id": 7, "title": "Pie"})
        delete_id = await outbox.enqueue("delete", {"id": 7})
        return delete_id, await outbox.items()

    delete_id, items = asyncio.run(scenario())
    assert len(items) == 1
    assert items[0].id == delete_id
    assert items[0].operation == "delete"
    assert items[0].payload == {"id": 7}


def test_retarget(outbox):
    async def scenario():
        await outbox.enqueue("create", {"id": "temp_abc", "title": "Pie"})
        first = await outbox.items()
        await outbox.update_status(first[0].id, "syncing")
        await outbox.enqueue("update", {"id": "temp_abc", "title": "Apple Pie"})
        count = await outbox.retarget("temp_abc", 42)
        return count, await outbox.items()

    count, items = asyncio.run(scenario())
    assert count == 2
    assert all(item.payload["id"] == 42 for item in items)


def test_clear(outbox):
    async def scenario():
        await outbox.enqueue("delete", {"id": 1})
        await outbox.clear()
        return await outbox.items()

    assert asyncio.run(scenario()) == []


def test_delete_of_unsynced_recipe_cancels_its_failed_create(outbox):
    async def scenario():
        create_id = await outbox.enqueue("create", {"id": "temp_abc", "title": "Pie"})
        await outbox.update_status(create_id, "error", error="500: boom")
        await outbox.enqueue("update", {"id": "temp_abc", "title": "Apple Pie"})
        result = await outbox.enqueue("delete", {"id": "temp_abc"})
        return result, await outbox.items()

    result, items = asyncio.run(scenario())
    assert result is None
    assert items == []


def test_delete_waits_for_a_create_being_replayed(outbox):
    async def scenario():
        create_id = await outbox.enqueue("create", {"id": "temp_abc", "title": "Pie"})
        await outbox.update_status(create_id, "syncing")
        delete_id = await outbox.enqueue("delete", {"id": "temp_abc"})
        return create_id, delete_id, await outbox.items()

    create_id, delete_id, items = asyncio.run(scenario())
    assert delete_id is not None
    assert [(item.id, item.operation) for item in items] == [(create_id, "create"), (delete_id, "delete")]
    assert items[0].status == "syncing"
