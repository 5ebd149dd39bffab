"""Tests for currency valuation endpoints."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_bulk_valuations_ordered_by_code(client: AsyncClient, valuation_factory):
    await valuation_factory("UR", "1.6")
    await valuation_factory("AA", "1.4")
    await valuation_factory("MR", "1.7")

    response = await client.get("/api/valuations/bulk")

    assert response.status_code == 200
    data = response.json()["data"]
    assert list(data) == ["AA", "MR", "UR"]
    assert data == {"AA": 1.4, "MR": 1.7, "UR": 1.6}


async def test_bulk_valuations_empty(client: AsyncClient):
    response = await client.get("/api/valuations/bulk")

    assert response.json() == {"success": True, "data": {}}


async def test_list_and_get(client: AsyncClient, valuation_factory):
    await valuation_factory("UR", "1.6", notes="Transfer partners")

    response = await client.get("/api/valuations")

    assert response.json()["count"] == 1

    response = await client.get("/api/valuations/UR")

    assert response.json()["data"]["centsPerPoint"] == 1.6
    assert response.json()["data"]["notes"] == "Transfer partners"

    assert (await client.get("/api/valuations/XX")).status_code == 404


async def test_create_valuation(client: AsyncClient):
    response = await client.post(
        "/api/valuations", json={"currencyCode": "TYP", "centsPerPoint": 1.7}
    )

    assert response.status_code == 201
    assert response.json()["data"]["currencyCode"] == "TYP"

    response = await client.post(
        "/api/valuations", json={"currencyCode": "TYP", "centsPerPoint": 1.8}
    )

    assert response.status_code == 409


async def test_create_valuation_requires_positive_rate(client: AsyncClient):
    response = await client.post("/api/valuations", json={"currencyCode": "X", "centsPerPoint": 0})

    assert response.status_code == 422


async def test_update_valuation_changes_offer_value(
    client: AsyncClient, valuation_factory, product_factory, offer_factory
):
    await valuation_factory("UR", "1.6")
    product = await product_factory(currency_code="UR")
    await offer_factory(product=product, bonus_points=60000, annual_fee=95)

    response = await client.patch("/api/valuations/UR", json={"centsPerPoint": 2.0})

    assert response.status_code == 200
    offers = (await client.get("/api/offers")).json()["data"]
    assert offers[0]["calculatedValue"]["netValue"] == 1105
