"""Translate ORM rows into the public response models."""

from __future__ import annotations

from realty.db.models import Agent, EmailNotification, PriceAlert, Property, PropertyInquiry
from realty.schemas.agent import AgentOut
from realty.schemas.email import EmailNotificationOut
from realty.schemas.inquiry import InquiryOut
from realty.schemas.price_alert import PriceAlertOut
from realty.schemas.property import PropertyDetail, PropertyImageOut, PropertyOut
from realty.utils.pricing import format_price


def _property_fields(prop: Property) -> dict:
    agent = prop.agent
    agent_user = agent.user if agent is not None else None
    return {
        "id": prop.id,
        "mls_number": prop.mls_number,
        "agent_id": prop.agent_id,
        "title": prop.title,
        "description": prop.description,
        "address": prop.address,
        "city": prop.city,
        "state": prop.state,
        "zip_code": prop.zip_code,
        "price": prop.price,
        "price_display": format_price(prop.price),
        "bedrooms": prop.bedrooms,
        "bathrooms": prop.bathrooms,
        "square_feet": prop.square_feet,
        "lot_size": prop.lot_size,
        "year_built": prop.year_built,
        "property_type": prop.property_type,
        "status": prop.status,
        "is_featured": prop.is_featured,
        "days_on_market": prop.days_on_market,
        "neighborhood": prop.neighborhood,
        "school_district": prop.school_district,
        "features": list(prop.features or []),
        "keywords": list(prop.keywords or []),
        "main_image_url": prop.main_image_url,
        "agent_initials": agent.initials if agent is not None else None,
        "agent_first_name": agent_user.first_name if agent_user is not None else None,
        "agent_last_name": agent_user.last_name if agent_user is not None else None,
    }


def property_summary(prop: Property) -> PropertyOut:
    return PropertyOut(**_property_fields(prop))


def property_detail(prop: Property) -> PropertyDetail:
    """Detail view; ``prop.images`` must already be loaded."""

    agent_user = prop.agent.user if prop.agent is not None else None
    return PropertyDetail(
        **_property_fields(prop),
        agent_email=agent_user.email if agent_user is not None else None,
        agent_phone=agent_user.phone if agent_user is not None else None,
        images=[PropertyImageOut.model_validate(image) for image in prop.images],
    )


def agent_summary(agent: Agent) -> AgentOut:
    user = agent.user
    return AgentOut(
        id=agent.id,
        user_id=agent.user_id,
        license_number=agent.license_number,
        initials=agent.initials,
        title=agent.title,
        bio=agent.bio,
        experience_years=agent.experience_years,
        active_listings=agent.active_listings,
        homes_sold=agent.homes_sold,
        avg_days_on_market=agent.avg_days_on_market,
        client_satisfaction=agent.client_satisfaction,
        profile_image_url=agent.profile_image_url,
        specialties=list(agent.specialties or []),
        languages=list(agent.languages or []),
        certifications=list(agent.certifications or []),
        is_active=agent.is_active,
        first_name=user.first_name if user is not None else None,
        last_name=user.last_name if user is not None else None,
        email=user.email if user is not None else None,
        phone=user.phone if user is not None else None,
    )


def inquiry_summary(inquiry: PropertyInquiry) -> InquiryOut:
    prop = inquiry.property
    return InquiryOut.model_validate(inquiry).model_copy(
        update={
            "property_title": prop.title if prop is not None else None,
            "property_address": prop.address if prop is not None else None,
            "property_city": prop.city if prop is not None else None,
        }
    )


def price_alert_summary(alert: PriceAlert) -> PriceAlertOut:
    prop = alert.property
    return PriceAlertOut.model_validate(alert).model_copy(
        update={
            "property_title": prop.title if prop is not None else None,
            "property_address": prop.address if prop is not None else None,
            "current_price": prop.price if prop is not None else None,
        }
    )


def notification_summary(notification: EmailNotification) -> EmailNotificationOut:
    return EmailNotificationOut.model_validate(notification)
