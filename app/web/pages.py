"""Server-rendered pages.

Every page degrades to a "Database Not Connected" notice (HTTP 503) when
the store cannot be reached, instead of an error trace.
"""

from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.config import get_config
from app.core.errors import STORE_CONNECTION_ERRORS
from app.core.logging import get_logger
from app.core.money import format_money, format_points
from app.dependencies import DBSession
from app.repositories.issuer import IssuerRepository
from app.repositories.offer_snapshot import OfferSnapshotRepository
from app.services.offer_listing import list_valued_offers
from app.valuation.filters import OfferFilters

logger = get_logger(__name__)

template_dir = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=template_dir)
templates.env.filters["money"] = format_money
templates.env.filters["points"] = format_points

router = APIRouter(include_in_schema=False)


async def _render(
    request: Request,
    db: DBSession,
    template: str,
    load: Callable[[], Awaitable[dict[str, Any]]],
) -> HTMLResponse:
    try:
        context = await load()
    except STORE_CONNECTION_ERRORS as e:
        logger.bind(path=request.url.path, error=str(e)).warning("page_database_unavailable")
        await db.rollback()
        return templates.TemplateResponse(
            request,
            "not_connected.html",
            {"page": template.removesuffix(".html")},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return templates.TemplateResponse(request, template, context)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, db: DBSession) -> HTMLResponse:
    async def load() -> dict[str, Any]:
        valued = await list_valued_offers(db)
        changes = await OfferSnapshotRepository(db).get_weekly_changes(
            days_back=get_config().snapshots.weekly_window_days
        )
        return {
            "page": "index",
            "top_offers": valued[:3],
            "offer_count": len(valued),
            "recent_changes": changes[:5],
        }

    return await _render(request, db, "index.html", load)


@router.get("/offers", response_class=HTMLResponse)
async def offers(
    request: Request,
    db: DBSession,
    issuer: str | None = Query(default=None),
    currency: str | None = Query(default=None),
) -> HTMLResponse:
    async def load() -> dict[str, Any]:
        filters = OfferFilters(issuer_slug=issuer or None, currency_code=currency or None)
        return {
            "page": "offers",
            "offers": await list_valued_offers(db, filters),
            "issuer": issuer,
            "currency": currency,
        }

    return await _render(request, db, "offers.html", load)


@router.get("/issuers", response_class=HTMLResponse)
async def issuers(request: Request, db: DBSession) -> HTMLResponse:
    async def load() -> dict[str, Any]:
        return {"page": "issuers", "issuers": await IssuerRepository(db).find_all()}

    return await _render(request, db, "issuers.html", load)


@router.get("/changes", response_class=HTMLResponse)
async def changes(
    request: Request,
    db: DBSession,
    days: int = Query(default=7, ge=1, le=365),
) -> HTMLResponse:
    async def load() -> dict[str, Any]:
        snapshots = await OfferSnapshotRepository(db).get_weekly_changes(days_back=days)
        return {"page": "changes", "changes": snapshots, "days": days}

    return await _render(request, db, "changes.html", load)
