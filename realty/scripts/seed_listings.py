#!/usr/bin/env python
"""Load property listings from a JSONL file into the configured database.

Each line holds one listing in the site catalogue shape (``mls``,
``priceNumeric`` in whole dollars, ``beds``, ``baths``, ``images`` ...).
Rows are upserted by MLS number so the load can be re-run safely.  Cached
listing pages are dropped afterwards so the API serves the new data.

Usage:
    python -m realty.scripts.seed_listings [path_to_jsonl]
    python -m realty.scripts.seed_listings ./data/fixtures/listings.jsonl --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from realty.cache import CacheLayer
from realty.db.connection import (
    create_engine,
    create_schema,
    create_session_factory,
    session_context,
)
from realty.db.models import Property, PropertyImage
from realty.kv import connect_key_value_store
from realty.main import _validate_environment
from realty.settings import AppSettings, get_settings
from realty.utils.pricing import dollars_to_cents, parse_price_to_cents

console = Console()

DEFAULT_FIXTURE = Path("./data/fixtures/listings.jsonl")

PROPERTY_TYPE_ALIASES = {
    "single family home": "single_family",
    "single family": "single_family",
    "condominium": "condo",
}


@dataclass
class SeedResult:
    created: int = 0
    updated: int = 0
    skipped: int = 0


def normalize_token(value: str | None, default: str) -> str:
    """``"For Sale"`` -> ``"for_sale"``; blank values fall back to ``default``."""

    if not value or not value.strip():
        return default
    lowered = value.strip().lower()
    lowered = PROPERTY_TYPE_ALIASES.get(lowered, lowered)
    return re.sub(r"[^a-z0-9]+", "_", lowered).strip("_")


def listing_price_cents(data: dict[str, Any]) -> int | None:
    if data.get("priceNumeric") is not None:
        return dollars_to_cents(data["priceNumeric"])
    if data.get("price"):
        return parse_price_to_cents(str(data["price"]))
    return None


def listing_fields(data: dict[str, Any], price_cents: int) -> dict[str, Any]:
    """Map a catalogue record onto ``Property`` column values."""

    return {
        "mls_number": data["mls"],
        "title": data.get("title") or data["address"],
        "description": data.get("description"),
        "address": data["address"],
        "city": data.get("city", ""),
        "state": data.get("state", "CA"),
        "zip_code": str(data.get("zipCode", "")),
        "price": price_cents,
        "bedrooms": int(data.get("beds", 0)),
        "bathrooms": float(data.get("baths", 0)),
        "square_feet": int(data.get("sqft", 0)),
        "lot_size": data.get("lotSize"),
        "year_built": data.get("yearBuilt"),
        "property_type": normalize_token(data.get("propertyType"), "single_family"),
        "status": normalize_token(data.get("status"), "for_sale"),
        "is_featured": bool(data.get("featured", False)),
        "days_on_market": int(data.get("daysOnMarket", 0)),
        "neighborhood": data.get("neighborhood"),
        "school_district": data.get("schoolDistrict"),
        "features": list(data.get("features") or []),
        "keywords": list(data.get("keywords") or []),
        "main_image_url": data.get("image"),
    }


async def upsert_listing(session: AsyncSession, data: dict[str, Any], price_cents: int) -> bool:
    """Insert or update one listing; return ``True`` when it was created."""

    fields = listing_fields(data, price_cents)
    result = await session.execute(
        select(Property).where(Property.mls_number == fields["mls_number"])
    )
    existing = result.scalars().unique().one_or_none()
    image_urls = list(data.get("images") or ([data["image"]] if data.get("image") else []))

    if existing is None:
        prop = Property(**fields)
        session.add(prop)
        await session.flush()
        created = True
    else:
        prop = existing
        for name, value in fields.items():
            setattr(prop, name, value)
        await session.execute(
            PropertyImage.__table__.delete().where(PropertyImage.property_id == prop.id)
        )
        created = False

    session.add_all(
        PropertyImage(
            property_id=prop.id,
            image_url=url,
            alt_text=f"{fields['title']} photo {index + 1}",
            display_order=index,
            is_primary=index == 0,
        )
        for index, url in enumerate(image_urls)
    )
    await session.flush()
    return created


async def seed_listings(
    settings: AppSettings,
    jsonl_path: Path,
    *,
    limit: int | None = None,
    dry_run: bool = False,
) -> SeedResult:
    """Load listings from ``jsonl_path``; malformed lines are skipped."""

    result = SeedResult()
    if not jsonl_path.exists():
        console.print(f"[red]File not found: {jsonl_path}[/red]")
        return result

    engine = create_engine(settings)
    try:
        if settings.database_type == "sqlite":
            await create_schema(engine)
        session_factory = create_session_factory(engine)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Loading listings...", total=None)

            async with session_context(session_factory) as session:
                with open(jsonl_path, encoding="utf-8") as f:
                    for line_num, line in enumerate(f, 1):
                        if limit and result.created + result.updated >= limit:
                            break
                        if not line.strip():
                            continue

                        try:
                            data = json.loads(line)
                        except json.JSONDecodeError as e:
                            console.print(f"[red]Line {line_num}: Invalid JSON: {e}[/red]")
                            result.skipped += 1
                            continue

                        if not data.get("mls") or not data.get("address"):
                            console.print(
                                f"[yellow]Line {line_num}: Missing mls or address, skipping[/yellow]"
                            )
                            result.skipped += 1
                            continue

                        try:
                            price_cents = listing_price_cents(data)
                        except ValueError as e:
                            console.print(f"[yellow]Line {line_num}: {e}, skipping[/yellow]")
                            result.skipped += 1
                            continue
                        if price_cents is None:
                            console.print(
                                f"[yellow]Line {line_num}: Missing price, skipping[/yellow]"
                            )
                            result.skipped += 1
                            continue

                        if dry_run:
                            console.print(f"[cyan]Would load: {data['mls']} {data['address']}[/cyan]")
                            result.created += 1
                            continue

                        if await upsert_listing(session, data, price_cents):
                            result.created += 1
                        else:
                            result.updated += 1
                        progress.update(
                            task,
                            description=f"Loaded {result.created + result.updated} listings",
                        )

                if dry_run:
                    await session.rollback()
    finally:
        await engine.dispose()

    if not dry_run and result.created + result.updated:
        store = await connect_key_value_store(settings)
        try:
            removed = await CacheLayer(store).bulk_delete("properties:")
            console.print(f"[green]Cleared {removed} cached listing pages[/green]")
        finally:
            await store.close()

    return result


async def main() -> int:
    """CLI entry point."""
    load_dotenv()
    settings = get_settings()
    _validate_environment(settings)

    parser = argparse.ArgumentParser(description="Load property listings into the database")
    parser.add_argument(
        "jsonl_path",
        nargs="?",
        type=Path,
        default=DEFAULT_FIXTURE,
        help=f"Path to JSONL file (default: {DEFAULT_FIXTURE})",
    )
    parser.add_argument("--limit", type=int, help="Maximum number of listings to load")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the file without writing to the database",
    )
    args = parser.parse_args()

    result = await seed_listings(settings, args.jsonl_path, limit=args.limit, dry_run=args.dry_run)

    console.print()
    console.print("=" * 60)
    console.print(f"[green]Created: {result.created}[/green]")
    console.print(f"[green]Updated: {result.updated}[/green]")
    console.print(f"[yellow]Skipped: {result.skipped}[/yellow]")
    console.print("=" * 60)
    return 0 if result.created + result.updated or args.dry_run else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
