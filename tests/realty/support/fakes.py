"""Deterministic clock and seed data shared by the realty tests."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from realty.db.models import Agent, Property, PropertyImage, User


class FakeClock:
    """Callable clock returning epoch seconds that tests advance by hand."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class SeededListings:
    agent_user: User
    agent: Agent
    cheap: Property
    mid: Property
    luxury: Property


def _listing(agent: Agent, mls: str, title: str, price_cents: int, **overrides) -> Property:
    fields = {
        "mls_number": mls,
        "agent_id": agent.id,
        "title": title,
        "description": f"{title} with an open floor plan",
        "address": f"{mls[-3:]} Harbor Blvd",
        "city": "Fullerton",
        "state": "CA",
        "zip_code": "92832",
        "price": price_cents,
        "bedrooms": 3,
        "bathrooms": 2.0,
        "square_feet": 1800,
        "property_type": "single_family",
        "status": "for_sale",
        "features": ["Pool"],
        "keywords": ["family"],
    }
    fields.update(overrides)
    return Property(**fields)


async def seed_listings(session: AsyncSession) -> SeededListings:
    """Insert one agent and three listings at $450k, $899k and $1.599M."""

    agent_user = User(
        email="dana.agent@2020realtors.com",
        password_hash="not-a-real-hash",
        first_name="Dana",
        last_name="Reyes",
        phone="(714) 555-0100",
        role="agent",
    )
    session.add(agent_user)
    await session.flush()

    agent = Agent(
        user_id=agent_user.id,
        license_number="DRE-01234567",
        initials="DR",
        title="Senior Listing Agent",
        homes_sold=42,
    )
    session.add(agent)
    await session.flush()

    cheap = _listing(agent, "MLS-100", "Cozy Condo", 45_000_000, property_type="condo", bedrooms=2)
    mid = _listing(agent, "MLS-200", "Family Home", 89_900_000, bedrooms=4)
    luxury = _listing(
        agent,
        "MLS-300",
        "Hillside Estate",
        159_900_000,
        bedrooms=5,
        is_featured=True,
        city="Yorba Linda",
    )
    session.add_all([cheap, mid, luxury])
    await session.flush()

    session.add(
        PropertyImage(property_id=luxury.id, image_url="https://img.test/1.jpg", display_order=0)
    )
    await session.flush()
    return SeededListings(agent_user=agent_user, agent=agent, cheap=cheap, mid=mid, luxury=luxury)
