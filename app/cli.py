"""
Card Bonus CLI - Command line interface for data and maintenance tasks.

Usage:
    cardbonus --help                 Show all commands
    cardbonus init-db                Create tables from the models
    cardbonus seed                   Load sample issuers, cards and offers
    cardbonus offers                 List active offers by net value
    cardbonus valuations             Show cents-per-point rates
    cardbonus changes --days 7       Show recent offer changes
    cardbonus snapshot OFFER_ID      Record an observation of an offer
    cardbonus digest                 Preview weekly digests
"""

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from typing import TypeVar

import typer
from sqlalchemy.ext.asyncio import AsyncSession

app = typer.Typer(
    name="cardbonus",
    help="Card Bonus CLI - credit card sign-up offer tracker",
    no_args_is_help=True,
)

T = TypeVar("T")


# --- Step printer helpers ---


def _print_success(message: str) -> None:
    """Print a success message."""
    typer.echo(f"  ✅ {message}")


def _print_skipped(message: str) -> None:
    """Print a skipped step message."""
    typer.echo(f"  ⏭️ {message}")


def _print_error(message: str) -> None:
    """Print an error message to stderr."""
    typer.echo(f"❌ {message}", err=True)


def _run(work: Callable[[AsyncSession], Awaitable[T]]) -> T:
    """Run a unit of work in one transaction against the configured database."""
    from app.config import get_settings
    from app.core.database import Database
    from app.core.errors import STORE_CONNECTION_ERRORS
    from app.core.logging import setup_logging

    setup_logging()

    async def run() -> T:
        database = Database.from_settings(get_settings())
        await database.open()
        try:
            async with database.session() as db:
                return await work(db)
        finally:
            await database.close()

    try:
        return asyncio.run(run())
    except STORE_CONNECTION_ERRORS as e:
        _print_error(f"Database not connected: {e}")
        raise typer.Exit(1) from e


@app.command()
def init_db():
    """Create all tables (development; use `migrate` for real databases)."""
    from app.config import get_settings
    from app.core.database import Database
    from app.core.logging import setup_logging

    setup_logging()

    async def run() -> None:
        database = Database.from_settings(get_settings())
        await database.open()
        try:
            await database.create_all()
        finally:
            await database.close()

    asyncio.run(run())
    _print_success("Tables created")


@app.command()
def seed():
    """Load sample valuations, issuers, card products, offers and snapshots."""
    from app.jobs.seed import seed as run_seed

    stats = _run(run_seed)
    typer.echo("\n🌱 Seed complete")
    for name, count in vars(stats).items():
        if count:
            _print_success(f"{count} {name} created")
        else:
            _print_skipped(f"{name} already present")


@app.command()
def offers(
    issuer: str | None = typer.Option(None, "--issuer", "-i", help="Issuer slug"),
    currency: str | None = typer.Option(None, "--currency", "-c", help="Currency code"),
):
    """List active offers, highest net value first."""
    from app.core.money import format_money, format_points
    from app.services.offer_listing import list_valued_offers
    from app.valuation.filters import OfferFilters

    filters = OfferFilters(issuer_slug=issuer, currency_code=currency)
    valued = _run(lambda db: list_valued_offers(db, filters))

    if not valued:
        typer.echo("No offers found.")
        return

    for item in valued:
        offer = item.offer
        net = format_money(item.net_value) if item.net_value is not None else "-"
        typer.echo(
            f"{net:>8}  {offer.product.name} ({offer.product.issuer.name}): "
            f"{format_points(offer.bonus_points)} {offer.product.currency_code}"
        )


@app.command()
def valuations():
    """Show cents-per-point rates by currency code."""
    from app.valuation.rates import get_bulk_valuations

    rates = _run(get_bulk_valuations)
    if not rates:
        typer.echo("No valuations found. Run `cardbonus seed` first.")
        return

    for code, cents in rates.items():
        typer.echo(f"{code:<6} {cents:.2f}¢")


@app.command()
def changes(
    days: int = typer.Option(7, "--days", "-d", min=1, help="Trailing window in days"),
):
    """Show offer changes captured in the trailing window."""
    from app.repositories.offer_snapshot import OfferSnapshotRepository

    async def load(db: AsyncSession) -> list[str]:
        rows = await OfferSnapshotRepository(db).get_weekly_changes(days_back=days)
        return [
            f"{s.captured_at:%Y-%m-%d}  {s.offer.product.name}: {s.diff_summary}" for s in rows
        ]

    lines = _run(load)
    if not lines:
        typer.echo(f"No changes in the last {days} days.")
        return
    for line in lines:
        typer.echo(line)


@app.command()
def snapshot(
    offer_id: uuid.UUID = typer.Argument(..., help="Offer id"),
    bonus: int | None = typer.Option(None, "--bonus", help="Bonus points"),
    min_spend: float | None = typer.Option(None, "--min-spend", help="Minimum spend"),
    window: int | None = typer.Option(None, "--window", help="Spend window in days"),
    annual_fee: float | None = typer.Option(None, "--annual-fee", help="Annual fee"),
    credits: float | None = typer.Option(None, "--credits", help="Statement credits"),
    url: str | None = typer.Option(None, "--url", help="Landing URL"),
    expires: datetime | None = typer.Option(
        None, "--expires", formats=["%Y-%m-%d"], help="Offer expiry date"
    ),
):
    """Record an observation of an offer.

    Unspecified terms are taken from the offer, and the expiry from its
    latest snapshot.
    """
    from dataclasses import replace

    from app.core.money import to_decimal
    from app.repositories.offer import OfferRepository
    from app.repositories.offer_snapshot import OfferSnapshotRepository
    from app.valuation.snapshots import ObservedTerms, record_snapshot

    async def record(db: AsyncSession) -> str | None:
        offer = await OfferRepository(db).find_by_id(offer_id)
        if offer is None:
            return None

        if expires is not None:
            expires_on: date | None = expires.date()
        else:
            # Offers carry no expiry, so keep the last observed one
            latest = await OfferSnapshotRepository(db).get_latest(offer_id)
            expires_on = latest.expires_on if latest else None
        observed = ObservedTerms.from_offer(offer, expires_on=expires_on)
        overrides = {
            "bonus_points": bonus,
            "min_spend_amount": to_decimal(min_spend) if min_spend is not None else None,
            "min_spend_window_days": window,
            "annual_fee": to_decimal(annual_fee) if annual_fee is not None else None,
            "statement_credits": to_decimal(credits) if credits is not None else None,
            "landing_url": url,
        }
        observed = replace(observed, **{k: v for k, v in overrides.items() if v is not None})
        recorded = await record_snapshot(db, offer_id, observed)
        return recorded.diff_summary or ""

    try:
        summary = _run(record)
    except ValueError as e:
        _print_error(str(e))
        raise typer.Exit(1) from e

    if summary is None:
        _print_error(f"Offer {offer_id} not found")
        raise typer.Exit(1)
    _print_success(summary or "Snapshot recorded, no changes")


@app.command()
def digest(
    days: int = typer.Option(7, "--days", "-d", min=1, help="Trailing window in days"),
):
    """Preview the weekly digest for each eligible subscriber (nothing is sent)."""
    from app.services.digest import build_digests

    async def build(db: AsyncSession) -> list[tuple[str, list[str], int]]:
        digests = await build_digests(db, days_back=days)
        return [
            (
                d.subscriber.email,
                [f"{c.offer.product.name}: {c.diff_summary}" for c in d.changes],
                d.truncated,
            )
            for d in digests
        ]

    previews = _run(build)
    if not previews:
        typer.echo("No eligible subscribers.")
        return

    for email, lines, truncated in previews:
        typer.echo(f"\n📧 {email} ({len(lines)} changes)")
        for line in lines:
            typer.echo(f"  - {line}")
        if truncated:
            typer.echo(f"  ... and {truncated} more")


@app.command()
def migrate():
    """Run database migrations (alembic upgrade head)."""
    import subprocess

    result = subprocess.run(["alembic", "upgrade", "head"], check=False)
    raise typer.Exit(result.returncode)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable hot reload"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
):
    """Start the API server."""
    import subprocess

    cmd = ["uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", str(port)]
    if reload:
        cmd.append("--reload")

    subprocess.run(cmd, check=False)


if __name__ == "__main__":
    app()
