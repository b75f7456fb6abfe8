"""Tests for outbound email persistence, delivery and webhook reconciliation."""

from __future__ import annotations

import json

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from realty.cache import CacheLayer, user_prefs_key
from realty.db.models import EmailNotification
from realty.db.repositories import EmailRepository
from realty.schemas.email import EmailPreferences, SendGridEvent
from realty.services.email import EmailService, SendGridTransport
from realty.services.email.service import NotificationRequest, provider_message_id
from realty.services.email.templates import render
from tests.realty.support.fakes import FakeClock, seed_listings


def _transport(handler, api_key: str | None = "SG.key") -> SendGridTransport:
    return SendGridTransport(
        api_key=api_key,
        api_url="https://api.sendgrid.test/v3/mail/send",
        from_email="info@2020realtors.com",
        from_name="20/20 Realtors",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def _service(
    session: AsyncSession,
    transport: SendGridTransport,
    cache: CacheLayer | None = None,
) -> EmailService:
    return EmailService(
        EmailRepository(session),
        transport,
        site_url="https://2020realtors.test/",
        cache=cache,
        clock=FakeClock(),
    )


async def _notifications(session: AsyncSession) -> list[EmailNotification]:
    result = await session.execute(select(EmailNotification).order_by(EmailNotification.id))
    return list(result.scalars().all())


def test_provider_message_id_strips_filter_suffix() -> None:
    assert provider_message_id("abc123.filter0001.16648.5515E0B88.0") == "abc123"
    assert provider_message_id("abc123") == "abc123"


def test_templates_escape_user_supplied_text() -> None:
    html = render(
        "property_inquiry",
        {"agentName": "Dana", "inquirerName": "<script>x</script>", "message": "Hi & bye"},
    )

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "Hi &amp; bye" in html


@pytest.mark.asyncio
async def test_send_records_sent_notification(session: AsyncSession) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(202, headers={"X-Message-Id": "abc123"})

    service = _service(session, _transport(handler))

    assert await service.send_welcome(
        user_id=None, email="jamie@example.com", first_name="Jamie", last_name="Lee"
    )

    [row] = await _notifications(session)
    assert row.status == "sent"
    assert row.provider_message_id == "abc123"
    assert row.sent_at is not None
    assert row.template_data["dashboardUrl"] == "https://2020realtors.test/dashboard"
    body = json.loads(captured[0].content)
    assert body["from"] == {"email": "info@2020realtors.com", "name": "20/20 Realtors"}
    assert body["personalizations"][0]["to"][0]["email"] == "jamie@example.com"
    assert captured[0].headers["Authorization"] == "Bearer SG.key"


@pytest.mark.asyncio
async def test_send_without_api_key_records_failure(session: AsyncSession) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(202)

    service = _service(session, _transport(handler, api_key=None))

    sent = await service.send(
        NotificationRequest(
            type="welcome",
            recipient_email="jamie@example.com",
            recipient_name="Jamie Lee",
            subject="Welcome",
        )
    )

    assert sent is False
    assert calls == []
    [row] = await _notifications(session)
    assert row.status == "failed"
    assert "not configured" in row.error_message


def _rejecting(request: httpx.Request) -> httpx.Response:
    return httpx.Response(400, text="invalid from address")


def _timing_out(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


@pytest.mark.asyncio
@pytest.mark.parametrize("handler", [_rejecting, _timing_out], ids=["rejected", "timeout"])
async def test_provider_failures_are_recorded_not_raised(session: AsyncSession, handler) -> None:
    service = _service(session, _transport(handler))

    sent = await service.send(
        NotificationRequest(
            type="welcome",
            recipient_email="jamie@example.com",
            recipient_name="Jamie Lee",
            subject="Welcome",
        )
    )

    assert sent is False
    [row] = await _notifications(session)
    assert row.status == "failed"
    assert row.error_message


@pytest.mark.asyncio
async def test_inquiry_email_goes_to_listing_agent(session: AsyncSession) -> None:
    listings = await seed_listings(session)
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(202, headers={"X-Message-Id": "m-1"})

    service = _service(session, _transport(handler))

    await service.send_property_inquiry(
        prop=listings.luxury,
        agent=listings.agent,
        inquirer_name="Jamie Lee",
        inquirer_email="jamie@example.com",
        inquirer_phone=None,
        message="Is the pool heated?",
    )

    [row] = await _notifications(session)
    assert row.type == "property_inquiry"
    assert row.recipient_email == "dana.agent@2020realtors.com"
    assert row.agent_id == listings.agent.id
    assert row.subject == "New Property Inquiry - Hillside Estate"
    assert row.template_data["inquirerPhone"] == "Not provided"


@pytest.mark.asyncio
async def test_webhook_events_update_matching_notifications(session: AsyncSession) -> None:
    ids = iter(["first", "second"])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(202, headers={"X-Message-Id": next(ids)})

    service = _service(session, _transport(handler))
    for name in ("Ana", "Ben"):
        await service.send(
            NotificationRequest(
                type="welcome",
                recipient_email=f"{name.lower()}@example.com",
                recipient_name=name,
                subject="Welcome",
            )
        )

    processed = await service.apply_webhook_events(
        [
            SendGridEvent(event="delivered", sg_message_id="first.filter001.1"),
            SendGridEvent(event="processed", sg_message_id="first.filter001.2"),
            SendGridEvent(event="bounce", sg_message_id="second.filter002", reason="mailbox full"),
            SendGridEvent(event="open", sg_message_id="second.filter002"),
            SendGridEvent(event="delivered", sg_message_id="unknown.filter"),
            SendGridEvent(event="delivered"),
        ]
    )

    assert processed == 2
    first, second = await _notifications(session)
    assert first.status == "sent"
    assert second.status == "bounced"
    assert second.error_message == "mailbox full"


@pytest.mark.asyncio
async def test_history_and_stats(session: AsyncSession) -> None:
    statuses = iter([202, 500, 202])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(next(statuses))

    service = _service(session, _transport(handler))
    for notification_type in ("welcome", "welcome", "price_alert"):
        await service.send(
            NotificationRequest(
                type=notification_type,
                recipient_email="jamie@example.com",
                recipient_name="Jamie",
                subject="Hello",
            )
        )

    stats = await service.get_email_stats()
    history = await service.get_email_history(limit=2)

    assert (stats.total, stats.sent, stats.failed, stats.pending) == (3, 2, 1, 0)
    assert stats.by_type == {"welcome": 2, "price_alert": 1}
    assert [item.type for item in history] == ["price_alert", "welcome"]


@pytest.mark.asyncio
async def test_preferences_are_cached_and_invalidated(
    session: AsyncSession, cache: CacheLayer
) -> None:
    listings = await seed_listings(session)
    user_id = listings.agent_user.id
    service = _service(session, _transport(lambda request: httpx.Response(202)), cache)

    defaults = await service.get_preferences(user_id)
    assert defaults == EmailPreferences()
    assert await cache.cache_get(user_prefs_key(user_id)) is not None

    updated = await service.update_preferences(
        user_id, EmailPreferences(market_reports=True, frequency="weekly")
    )

    assert updated.market_reports is True
    assert await cache.cache_get(user_prefs_key(user_id)) is None
    assert (await service.get_preferences(user_id)).frequency == "weekly"


@pytest.mark.asyncio
async def test_price_drop_alert_reports_change(session: AsyncSession) -> None:
    listings = await seed_listings(session)
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(202, headers={"X-Message-Id": "alert-1"})

    service = _service(session, _transport(handler))

    assert await service.send_price_alert(
        user_id=listings.agent_user.id,
        user_email="jamie@example.com",
        user_name="Jamie Lee",
        prop=listings.luxury,
        old_price=169_900_000,
        new_price=159_900_000,
    )

    [row] = await _notifications(session)
    assert row.type == "price_alert"
    assert row.subject == "Price Drop Alert - Hillside Estate"
    assert row.template_data["oldPrice"] == "$1,699,000"
    assert row.template_data["newPrice"] == "$1,599,000"
    assert row.template_data["priceChange"] == "$100,000"
    assert row.template_data["changeType"] == "decrease"
    assert row.template_data["changePercentage"] == 6
    body = json.loads(captured[0].content)
    assert body["personalizations"][0]["subject"] == "Price Drop Alert - Hillside Estate"
    html = body["content"][0]["value"]
    assert "Price Drop Alert" in html
    assert "$1,599,000" in html
    assert "-$100,000 (6%)" in html


@pytest.mark.asyncio
async def test_price_increase_from_zero_has_no_percentage(session: AsyncSession) -> None:
    listings = await seed_listings(session)
    service = _service(session, _transport(lambda request: httpx.Response(202)))

    await service.send_price_alert(
        user_id=listings.agent_user.id,
        user_email="jamie@example.com",
        user_name="Jamie Lee",
        prop=listings.mid,
        old_price=0,
        new_price=89_900_000,
    )

    [row] = await _notifications(session)
    assert row.subject == "Price Increase Alert - Family Home"
    assert row.template_data["changeType"] == "increase"
    assert row.template_data["changePercentage"] == 0


@pytest.mark.asyncio
async def test_new_listing_email_formats_listing_facts(session: AsyncSession) -> None:
    listings = await seed_listings(session)
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(202)

    service = _service(session, _transport(handler))

    assert await service.send_new_listing(
        user_email="jamie@example.com",
        user_name="Jamie Lee",
        prop=listings.mid,
        search_criteria="4+ bedrooms in Yorba Linda",
    )

    [row] = await _notifications(session)
    assert row.type == "new_listing"
    assert row.subject == "New Property Match - Family Home"
    assert row.template_data["price"] == "$899,000"
    assert row.template_data["sqft"] == "1,800"
    assert row.template_data["bedrooms"] == 4
    assert row.template_data["unsubscribeUrl"] == "https://2020realtors.test/unsubscribe"
    html = json.loads(captured[0].content)["content"][0]["value"]
    assert "4+ bedrooms in Yorba Linda" in html
    assert "1,800 sqft" in html
