"""Tests for snapshot history and the change feed."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.core.datetime_utils import utc_now

pytestmark = pytest.mark.asyncio


def _terms(**overrides) -> dict:
    body = {
        "bonusPoints": 65000,
        "minSpendAmount": 4000,
        "minSpendWindowDays": 90,
        "annualFee": 99,
        "statementCredits": 0,
        "landingUrl": "https://www.citi.com/aadvantage",
    }
    body.update(overrides)
    return body


def _iso(value) -> str:
    return value.isoformat() + "Z"


class TestRecordSnapshot:
    """Tests for POST /api/offers/{id}/snapshots."""

    async def test_first_snapshot_has_no_diff(self, client: AsyncClient, offer_factory):
        offer = await offer_factory()

        response = await client.post(
            f"/api/offers/{offer.id}/snapshots",
            json=_terms(capturedAt="2024-10-01T00:00:00Z"),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["offerId"] == str(offer.id)
        assert data["diffSummary"] is None
        assert data["changes"] is None

    async def test_second_snapshot_is_diffed(self, client: AsyncClient, offer_factory):
        offer = await offer_factory()
        await client.post(
            f"/api/offers/{offer.id}/snapshots",
            json=_terms(capturedAt="2024-10-01T00:00:00Z"),
        )

        response = await client.post(
            f"/api/offers/{offer.id}/snapshots",
            json=_terms(bonusPoints=75000, minSpendAmount=5000, capturedAt="2024-10-27T00:00:00Z"),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["diffSummary"] == (
            "Bonus increased 65,000 → 75,000; Min spend increased $4,000 → $5,000"
        )
        assert data["changes"] == [
            {"field": "bonus_points", "old": 65000, "new": 75000},
            {"field": "min_spend_amount", "old": "4000", "new": "5000"},
        ]

    async def test_out_of_order_snapshot_rejected(self, client: AsyncClient, offer_factory):
        offer = await offer_factory()
        await client.post(
            f"/api/offers/{offer.id}/snapshots",
            json=_terms(capturedAt="2024-10-27T00:00:00Z"),
        )

        response = await client.post(
            f"/api/offers/{offer.id}/snapshots",
            json=_terms(capturedAt="2024-10-01T00:00:00Z"),
        )

        assert response.status_code == 409
        assert response.json()["success"] is False

    async def test_unknown_offer_rejected(self, client: AsyncClient):
        response = await client.post(
            "/api/offers/00000000-0000-0000-0000-000000000000/snapshots",
            json=_terms(),
        )

        assert response.status_code == 409
        assert "does not exist" in response.json()["error"]


class TestSnapshotHistory:
    """Tests for GET /api/offers/{id}/snapshots."""

    async def test_most_recent_first(self, client: AsyncClient, offer_factory):
        offer = await offer_factory()
        for day, bonus in (("01", 65000), ("15", 70000), ("27", 75000)):
            await client.post(
                f"/api/offers/{offer.id}/snapshots",
                json=_terms(bonusPoints=bonus, capturedAt=f"2024-10-{day}T00:00:00Z"),
            )

        response = await client.get(f"/api/offers/{offer.id}/snapshots")

        assert response.status_code == 200
        assert [s["bonusPoints"] for s in response.json()["data"]] == [75000, 70000, 65000]

        response = await client.get(f"/api/offers/{offer.id}/snapshots", params={"limit": 1})

        assert response.json()["count"] == 1

    async def test_unknown_offer(self, client: AsyncClient):
        response = await client.get("/api/offers/00000000-0000-0000-0000-000000000000/snapshots")

        assert response.status_code == 404


class TestChangeFeed:
    """Tests for GET /api/changes."""

    async def test_only_recent_diffs(self, client: AsyncClient, offer_factory, product_factory):
        product = await product_factory(name="Citi AAdvantage Platinum Select", currency_code="AA")
        offer = await offer_factory(product=product)
        now = utc_now()

        await client.post(
            f"/api/offers/{offer.id}/snapshots",
            json=_terms(capturedAt=_iso(now - timedelta(days=20))),
        )
        await client.post(
            f"/api/offers/{offer.id}/snapshots",
            json=_terms(bonusPoints=75000, capturedAt=_iso(now - timedelta(days=10))),
        )
        await client.post(
            f"/api/offers/{offer.id}/snapshots",
            json=_terms(bonusPoints=80000, capturedAt=_iso(now - timedelta(days=2))),
        )
        await client.post(
            f"/api/offers/{offer.id}/snapshots",
            json=_terms(bonusPoints=80000, capturedAt=_iso(now - timedelta(days=1))),
        )

        response = await client.get("/api/changes")

        body = response.json()
        assert body["count"] == 1
        change = body["data"][0]
        assert change["diffSummary"] == "Bonus increased 75,000 → 80,000"
        assert change["offer"]["id"] == str(offer.id)
        assert change["offer"]["product"]["name"] == "Citi AAdvantage Platinum Select"

        response = await client.get("/api/changes", params={"days": 14})

        assert response.json()["count"] == 2
