from bakebook.services.cookbook_service import build_cookbook_pdf, cookbook_filename


RECIPES = [
    {
        "id": 1,
        "title": "Grandma's Apple Pie",
        "ingredients": ["3 apples", "1 pie crust"],
        "directions": "Slice apples\nFill crust\nBake",
        "memory": "Every Thanksgiving at the farm",
        "tags": ["dessert"],
        "cook_time": "1 hour",
    },
    {
        "id": 2,
        "title": "Sourdough " * 20,
        "ingredients": ["flour"] * 80,
        "directions": "Mix everything together and wait. " * 40,
        "tags": [],
    },
]


def test_cookbook_filename():
    assert cookbook_filename("Nonna's Kitchen") == "nonna_s_kitchen.pdf"
    assert cookbook_filename("My Recipe Collection") == "my_recipe_collection.pdf"


def test_build_cookbook_pdf_from_dicts():
    pdf = build_cookbook_pdf(RECIPES, "Family Favourites")
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_build_empty_cookbook():
    assert build_cookbook_pdf([]).startswith(b"%PDF")


def test_cookbook_endpoint(client, auth_headers):
    for recipe in RECIPES:
        body = {k: v for k, v in recipe.items() if k != "id"}
        assert client.post("/api/recipes", json=body, headers=auth_headers).status_code == 201

    res = client.get("/api/cookbook", params={"title": "Nonna's Kitchen"}, headers=auth_headers)
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert 'filename="nonna_s_kitchen.pdf"' in res.headers["content-disposition"]
    assert res.content.startswith(b"%PDF")


def test_cookbook_endpoint_requires_auth(client):
    assert client.get("/api/cookbook").status_code == 401
