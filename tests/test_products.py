import json

from conftest import auth, reload
from marketplace.models import Product

NEW_PRODUCT = {
    "name": "  Indigo scarf ",
    "description": "Block-printed cotton",
    "price": 18.5,
    "category": "textiles",
    "imageUrl": "https://img.example.com/scarf.jpg",
    "materials": "cotton",
    "stock": 10,
}


async def test_inactive_products_are_never_public(client, make_user, make_product):
    artisan = await make_user()
    live = await make_product(artisan)
    hidden = await make_product(artisan, is_active=False)

    r = await client.get("/products")
    assert [p["id"] for p in r.json()] == [live.id]
    assert (await client.get(f"/products/{live.id}")).status_code == 200

    r = await client.get(f"/products/{hidden.id}")
    assert r.status_code == 404
    assert r.json() == {"message": "Product not found"}


async def test_category_and_search_compose_with_and(client, make_user, make_product):
    artisan = await make_user()
    both_by_name = await make_product(artisan, category="textiles", name="blue shawl", description="wool")
    both_by_desc = await make_product(artisan, category="textiles", name="shawl", description="sky blue weave")
    await make_product(artisan, category="textiles", name="red shawl", description="wool")
    await make_product(artisan, category="pottery", name="blue bowl", description="glazed")
    await make_product(artisan, category="textiles", name="blue rug", description="wool", is_active=False)

    r = await client.get("/products", params={"category": "textiles", "search": "blue"})
    assert r.status_code == 200
    assert {p["id"] for p in r.json()} == {both_by_name.id, both_by_desc.id}


async def test_artisan_filter_and_empty_params(client, make_user, make_product):
    a1 = await make_user()
    a2 = await make_user()
    mine = await make_product(a1)
    theirs = await make_product(a2)

    r = await client.get("/products", params={"artisanId": str(a1.id)})
    assert [p["id"] for p in r.json()] == [mine.id]

    r = await client.get("/products", params={"artisanId": "", "category": "", "search": ""})
    assert {p["id"] for p in r.json()} == {mine.id, theirs.id}

    r = await client.get("/products", params={"artisanId": "abc"})
    assert r.status_code == 400


async def test_create_stamps_requester_as_owner(client, make_user):
    artisan = await make_user()
    other = await make_user()

    r = await client.post("/products", json={**NEW_PRODUCT, "artisanId": other.id}, headers=auth(artisan))
    assert r.status_code == 201
    body = r.json()
    assert body["artisanId"] == artisan.id
    assert body["name"] == "Indigo scarf"
    assert body["isActive"] is True
    assert body["culturalSignificance"] is None


async def test_create_validation(client, make_user):
    artisan = await make_user()
    bad = [
        {**NEW_PRODUCT, "price": -1},
        {**NEW_PRODUCT, "stock": -3},
        {**NEW_PRODUCT, "stock": 1.5},
        {**NEW_PRODUCT, "imageUrl": "not a url"},
        {**NEW_PRODUCT, "name": "   "},
        {k: v for k, v in NEW_PRODUCT.items() if k != "category"},
    ]
    for body in bad:
        r = await client.post("/products", json=body, headers=auth(artisan))
        assert r.status_code == 400, body
        assert "message" in r.json()


async def test_create_requires_token(client):
    r = await client.post("/products", json=NEW_PRODUCT)
    assert r.status_code == 401


async def test_partial_update_changes_only_supplied_fields(client, db, make_user, make_product):
    artisan = await make_user()
    product = await make_product(artisan, name="Vase", price=40, stock=1, materials="clay")

    r = await client.put(f"/products/{product.id}", json={"stock": 5}, headers=auth(artisan))
    assert r.status_code == 200

    stored = await reload(db, Product, product.id)
    assert stored.stock == 5
    assert stored.name == "Vase"
    assert float(stored.price) == 40
    assert stored.materials == "clay"
    assert stored.category == product.category
    assert stored.is_active is True


async def test_nullable_fields_can_be_cleared_but_required_ones_cannot(client, db, make_user, make_product):
    artisan = await make_user()
    product = await make_product(artisan, materials="clay")

    r = await client.put(f"/products/{product.id}", json={"materials": None}, headers=auth(artisan))
    assert r.status_code == 200
    assert r.json()["materials"] is None

    r = await client.put(f"/products/{product.id}", json={"name": None}, headers=auth(artisan))
    assert r.status_code == 400
    assert (await reload(db, Product, product.id)).name == product.name


async def test_owner_can_update_inactive_product(client, make_user, make_product):
    artisan = await make_user()
    product = await make_product(artisan, is_active=False)

    r = await client.put(f"/products/{product.id}", json={"isActive": True}, headers=auth(artisan))
    assert r.status_code == 200
    assert (await client.get(f"/products/{product.id}")).status_code == 200


async def test_update_by_non_owner_is_forbidden_and_untouched(client, db, make_user, make_product):
    owner = await make_user()
    intruder = await make_user()
    product = await make_product(owner, stock=2)

    r = await client.put(f"/products/{product.id}", json={"stock": 99}, headers=auth(intruder))
    assert r.status_code == 403
    assert r.json() == {"message": "Not authorized to update this product"}
    assert (await reload(db, Product, product.id)).stock == 2

    r = await client.put(f"/products/{product.id}", json={}, headers=auth(intruder))
    assert r.status_code == 403


async def test_update_missing_product_is_404(client, make_user):
    artisan = await make_user()
    r = await client.put("/products/4242", json={"stock": 1}, headers=auth(artisan))
    assert r.status_code == 404


async def test_delete(client, db, make_user, make_product):
    owner = await make_user()
    intruder = await make_user()
    product = await make_product(owner)

    r = await client.delete(f"/products/{product.id}", headers=auth(intruder))
    assert r.status_code == 403
    assert await reload(db, Product, product.id) is not None

    r = await client.delete(f"/products/{product.id}", headers=auth(owner))
    assert r.status_code == 200
    assert r.json() == {"message": "Product deleted successfully"}
    assert await reload(db, Product, product.id) is None

    r = await client.delete(f"/products/{product.id}", headers=auth(owner))
    assert r.status_code == 404


async def test_non_finite_price_is_rejected_and_listing_still_works(client, make_user):
    artisan = await make_user()
    for raw in ("Infinity", "-Infinity", "NaN"):
        body = json.dumps({**NEW_PRODUCT, "price": 0}).replace('"price": 0', f'"price": {raw}')
        r = await client.post(
            "/products", content=body,
            headers={**auth(artisan), "Content-Type": "application/json"},
        )
        assert r.status_code == 400, raw

    r = await client.get("/products")
    assert r.status_code == 200
    assert r.json() == []


async def test_numbers_beyond_column_range_are_rejected(client, db, make_user, make_product):
    artisan = await make_user()
    for body in (
        {**NEW_PRODUCT, "stock": 2**70},
        {**NEW_PRODUCT, "stock": 2**31},
        {**NEW_PRODUCT, "price": 10**9},
    ):
        r = await client.post("/products", json=body, headers=auth(artisan))
        assert r.status_code == 400, body

    product = await make_product(artisan, stock=3)
    r = await client.put(f"/products/{product.id}", json={"stock": 2**70}, headers=auth(artisan))
    assert r.status_code == 400
    assert (await reload(db, Product, product.id)).stock == 3

    r = await client.put(f"/products/{product.id}", json={"price": 1e300}, headers=auth(artisan))
    assert r.status_code == 400


async def test_huge_ids_are_a_validation_error(client, make_user):
    artisan = await make_user()
    huge = 2**40
    assert (await client.get(f"/products/{huge}")).status_code == 400
    assert (await client.put(f"/products/{huge}", json={"stock": 1}, headers=auth(artisan))).status_code == 400
    assert (await client.delete(f"/products/{huge}", headers=auth(artisan))).status_code == 400
    assert (await client.get(f"/products?artisanId={huge}")).status_code == 400
