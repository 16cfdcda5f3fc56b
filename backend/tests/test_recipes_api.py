PIE = {
    "title": "Grandma's Apple Pie",
    "ingredients": ["3 apples", "1 pie crust", "1/2 cup sugar"],
    "directions": "Slice apples\nFill crust\nBake 45 minutes",
    "memory": "Every Thanksgiving at the farm",
    "tags": ["Dessert", "holiday"],
    "cook_time": "1 hour",
}

BREAD = {
    "title": "Sourdough Bread",
    "ingredients": ["flour", "water", "starter", "salt"],
    "directions": "Mix, rise overnight, bake",
    "tags": ["bread"],
}


def _create(client, headers, recipe):
    res = client.post("/api/recipes", json=recipe, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def test_recipes_require_auth(client):
    assert client.get("/api/recipes").status_code == 401
    assert client.post("/api/recipes", json=PIE).status_code == 401


def test_create_and_list(client, auth_headers):
    created = _create(client, auth_headers, PIE)
    assert created["title"] == PIE["title"]
    assert created["ingredients"] == PIE["ingredients"]
    assert created["tags"] == ["Dessert", "holiday"]

    listed = client.get("/api/recipes", headers=auth_headers).json()
    assert [r["id"] for r in listed] == [created["id"]]


def test_create_ignores_client_fields(client, auth_headers):
    created = _create(client, auth_headers, {**BREAD, "id": "temp_abc", "user_id": 999})
    assert isinstance(created["id"], int)
    assert created["user_id"] != 999


def test_create_validation(client, auth_headers):
    assert client.post("/api/recipes", json={**PIE, "title": "  "}, headers=auth_headers).status_code == 422
    assert client.post("/api/recipes", json={**PIE, "ingredients": []}, headers=auth_headers).status_code == 422
    assert client.post("/api/recipes", json={**PIE, "ingredients": ["flour", " "]}, headers=auth_headers).status_code == 422
    assert client.post("/api/recipes", json={**PIE, "directions": ""}, headers=auth_headers).status_code == 422

    minimal = {"title": "Toast", "ingredients": ["bread"], "directions": "Toast it"}
    created = _create(client, auth_headers, minimal)
    assert created["tags"] == []
    assert created["memory"] is None


def test_recipes_are_owner_scoped(client, register):
    _, alice = register("alice")
    _, bob = register("bob")
    recipe = _create(client, alice, PIE)

    assert client.get("/api/recipes", headers=bob).json() == []
    assert client.get(f"/api/recipes/{recipe['id']}", headers=bob).status_code == 404
    assert client.put(f"/api/recipes/{recipe['id']}", json={"title": "Mine"}, headers=bob).status_code == 404
    assert client.delete(f"/api/recipes/{recipe['id']}", headers=bob).status_code == 404
    assert client.get(f"/api/recipes/{recipe['id']}", headers=alice).status_code == 200


def test_partial_update_keeps_created_at(client, auth_headers):
    recipe = _create(client, auth_headers, PIE)

    res = client.put(f"/api/recipes/{recipe['id']}", json={"cook_time": "90 minutes"}, headers=auth_headers)
    assert res.status_code == 200
    updated = res.json()
    assert updated["cook_time"] == "90 minutes"
    assert updated["title"] == PIE["title"]
    assert updated["ingredients"] == PIE["ingredients"]
    assert updated["created_at"] == recipe["created_at"]


def test_update_and_delete_missing_recipe(client, auth_headers):
    assert client.put("/api/recipes/9999", json={"title": "X"}, headers=auth_headers).status_code == 404
    assert client.delete("/api/recipes/9999", headers=auth_headers).status_code == 404


def test_delete(client, auth_headers):
    recipe = _create(client, auth_headers, PIE)
    res = client.delete(f"/api/recipes/{recipe['id']}", headers=auth_headers)
    assert res.status_code == 204
    assert client.get(f"/api/recipes/{recipe['id']}", headers=auth_headers).status_code == 404


def test_search_requires_every_term(client, auth_headers):
    pie = _create(client, auth_headers, PIE)
    _create(client, auth_headers, BREAD)

    def search(query):
        res = client.get(f"/api/recipes/search/{query}", headers=auth_headers)
        assert res.status_code == 200
        return [r["id"] for r in res.json()]

    assert search("apple") == [pie["id"]]
    assert search("APPLE thanksgiving") == [pie["id"]]  # memory is searched
    assert search("apple salt") == []
    assert len(search("a")) == 2


def test_filter_matches_any_tag_case_insensitive(client, auth_headers):
    pie = _create(client, auth_headers, PIE)
    bread = _create(client, auth_headers, BREAD)

    res = client.post("/api/recipes/filter", json={"tags": ["dessert"]}, headers=auth_headers)
    assert [r["id"] for r in res.json()] == [pie["id"]]

    res = client.post("/api/recipes/filter", json={"tags": ["HOLIDAY", "bread"]}, headers=auth_headers)
    assert sorted(r["id"] for r in res.json()) == sorted([pie["id"], bread["id"]])

    res = client.post("/api/recipes/filter", json={"tags": "dessert"}, headers=auth_headers)
    assert res.status_code == 422


def test_photo_upload(client, auth_headers):
    recipe = _create(client, auth_headers, PIE)

    res = client.post(
        f"/api/recipes/{recipe['id']}/photo",
        files={"file": ("pie.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
        headers=auth_headers,
    )
    assert res.status_code == 200, res.text
    photo = res.json()["photo"]
    assert photo.startswith("/uploads/") and photo.endswith(".png")

    served = client.get(photo)
    assert served.status_code == 200
    assert served.content == b"\x89PNG\r\n\x1a\nfake"


def test_photo_upload_rejects_non_images(client, auth_headers):
    recipe = _create(client, auth_headers, PIE)
    res = client.post(
        f"/api/recipes/{recipe['id']}/photo",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers,
    )
    assert res.status_code == 400
