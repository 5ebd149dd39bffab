"""Tests for card product endpoints."""

import pytest
from httpx import AsyncClient

from app.models.offer import OfferStatus

pytestmark = pytest.mark.asyncio


async def test_list_products(client: AsyncClient, product_factory, offer_factory):
    gold = await product_factory(name="Amex Gold", currency_code="MR")
    await product_factory(name="Sapphire Preferred")
    await offer_factory(product=gold)
    await offer_factory(product=gold, status=OfferStatus.EXPIRED)

    response = await client.get("/api/products")

    assert response.status_code == 200
    data = response.json()["data"]
    assert [(p["name"], p["offerCount"]) for p in data] == [
        ("Amex Gold", 2),
        ("Sapphire Preferred", 0),
    ]
    assert data[0]["issuer"]["name"] == "Chase"


async def test_get_product_lists_active_offers(client: AsyncClient, product_factory, offer_factory):
    product = await product_factory(slug="amex-gold")
    active = await offer_factory(product=product, bonus_points=90000)
    await offer_factory(product=product, status=OfferStatus.INACTIVE)

    response = await client.get("/api/products/amex-gold")

    data = response.json()["data"]
    assert data["offerCount"] == 1
    assert [o["id"] for o in data["offers"]] == [str(active.id)]
    assert data["offers"][0]["bonusPoints"] == 90000


async def test_create_product(client: AsyncClient, issuer_factory):
    await issuer_factory(name="Citi", slug="citi")
    payload = {
        "issuerSlug": "citi",
        "name": "Citi Strata Premier",
        "slug": "citi-strata-premier",
        "network": "MASTERCARD",
        "currency": "ThankYou Points",
        "currencyCode": "TYP",
    }

    response = await client.post("/api/products", json=payload)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["issuer"]["slug"] == "citi"
    assert data["productType"] == "PERSONAL"

    response = await client.post("/api/products", json=payload)

    assert response.status_code == 409


async def test_create_product_unknown_issuer(client: AsyncClient):
    response = await client.post(
        "/api/products",
        json={
            "issuerSlug": "nobody",
            "name": "Card",
            "slug": "card",
            "network": "VISA",
            "currency": "Points",
            "currencyCode": "PTS",
        },
    )

    assert response.status_code == 409
    assert "nobody" in response.json()["error"]


async def test_update_product(client: AsyncClient, product_factory):
    await product_factory(slug="sapphire-preferred")

    response = await client.patch(
        "/api/products/sapphire-preferred", json={"description": "Travel card"}
    )

    assert response.status_code == 200
    assert response.json()["data"]["description"] == "Travel card"


async def test_delete_product_with_offers_rejected(
    client: AsyncClient, product_factory, offer_factory
):
    product = await product_factory(slug="sapphire-preferred")
    await offer_factory(product=product)

    response = await client.delete("/api/products/sapphire-preferred")

    assert response.status_code == 409


async def test_get_unknown_product(client: AsyncClient):
    response = await client.get("/api/products/missing")

    assert response.status_code == 404


async def test_update_product_ignores_nulls_on_required_fields(
    client: AsyncClient, product_factory
):
    await product_factory(slug="sapphire-preferred", currency_code="UR", network="VISA")
    await client.patch("/api/products/sapphire-preferred", json={"description": "Travel card"})

    response = await client.patch(
        "/api/products/sapphire-preferred",
        json={"name": None, "network": None, "currencyCode": None, "productType": None},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Sapphire Preferred"
    assert data["network"] == "VISA"
    assert data["currencyCode"] == "UR"
    assert data["description"] == "Travel card"


async def test_update_product_clears_description(client: AsyncClient, product_factory):
    await product_factory(slug="sapphire-preferred")
    await client.patch("/api/products/sapphire-preferred", json={"description": "Travel card"})

    response = await client.patch("/api/products/sapphire-preferred", json={"description": None})

    assert response.status_code == 200
    assert response.json()["data"]["description"] is None
