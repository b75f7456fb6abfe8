"""HTML bodies for outbound notifications.

Every interpolated value is escaped; ``template_data`` may carry text typed
by anonymous visitors (inquiry messages, names).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from html import escape
from typing import Any

_WRAPPER = (
    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
    "{body}"
    "<p>Best regards,<br>20/20 Realtors Team</p>"
    "</div>"
)
_CARD = (
    '<div style="background: #f8fafc; padding: 20px; border-radius: 8px; margin: 20px 0;">'
    '<h3 style="color: #3b82f6; margin: 0 0 10px 0;">{title}</h3>'
    '<p style="margin: 5px 0; color: #64748b;">{subtitle}</p>'
    "</div>"
)


def _e(data: Mapping[str, Any], key: str, default: str = "") -> str:
    value = data.get(key)
    return escape(str(value if value is not None else default))


def _card(data: Mapping[str, Any]) -> str:
    return _CARD.format(title=_e(data, "propertyTitle"), subtitle=_e(data, "propertyAddress"))


def render_property_inquiry(data: Mapping[str, Any]) -> str:
    body = (
        '<h2 style="color: #1e293b;">New Property Inquiry</h2>'
        f"<p>Hello {_e(data, 'agentName')},</p>"
        "<p>You have received a new inquiry for the property:</p>"
        f"{_card(data)}"
        "<h3>Contact Information:</h3><ul>"
        f"<li><strong>Name:</strong> {_e(data, 'inquirerName')}</li>"
        f"<li><strong>Email:</strong> {_e(data, 'inquirerEmail')}</li>"
        f"<li><strong>Phone:</strong> {_e(data, 'inquirerPhone', 'Not provided')}</li>"
        "</ul><h3>Message:</h3>"
        f'<p style="background: #f8fafc; padding: 15px; border-radius: 8px;">{_e(data, "message")}</p>'
        "<p>Please respond to this inquiry promptly.</p>"
    )
    return _WRAPPER.format(body=body)


def render_tour_request(data: Mapping[str, Any]) -> str:
    body = (
        '<h2 style="color: #1e293b;">Tour Request Confirmation</h2>'
        f"<p>Hello {_e(data, 'clientName')},</p>"
        "<p>Thank you for your interest in scheduling a tour for:</p>"
        f"{_card(data)}"
        f"<p><strong>Requested Date:</strong> {_e(data, 'requestedDate', 'To be scheduled')}</p>"
        f"<p>Your assigned agent <strong>{_e(data, 'agentName')}</strong> will contact you"
        f" from <strong>{_e(data, 'agentPhone')}</strong> within 24 hours to confirm the tour.</p>"
        f'<p><a href="{_e(data, "propertyUrl")}">View the listing</a></p>'
    )
    return _WRAPPER.format(body=body)


def render_welcome(data: Mapping[str, Any]) -> str:
    body = (
        '<h2 style="color: #1e293b;">Welcome to 20/20 Realtors!</h2>'
        f"<p>Hello {_e(data, 'firstName')},</p>"
        "<p>We're excited to help you on your real estate journey.</p>"
        '<div style="background: #f8fafc; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        '<h3 style="color: #3b82f6;">What\'s Next?</h3><ul>'
        f'<li><a href="{_e(data, "propertiesUrl")}">Browse our property listings</a></li>'
        "<li>Save your favorite properties</li>"
        "<li>Set up price alerts</li>"
        "<li>Schedule property tours</li>"
        "</ul></div>"
        "<p>If you have any questions, contact us:</p><ul>"
        f"<li><strong>Phone:</strong> {_e(data, 'supportPhone')}</li>"
        f"<li><strong>Email:</strong> {_e(data, 'supportEmail')}</li>"
        "</ul><p>Your vision, our mission!</p>"
    )
    return _WRAPPER.format(body=body)


def render_price_alert(data: Mapping[str, Any]) -> str:
    decrease = data.get("changeType") == "decrease"
    color = "#10b981" if decrease else "#ef4444"
    label = "Drop" if decrease else "Increase"
    sign = "-" if decrease else "+"
    body = (
        f'<h2 style="color: {color};">Price {label} Alert</h2>'
        f"<p>Hello {_e(data, 'userName')},</p>"
        "<p>The price for a property you're watching has changed:</p>"
        '<div style="background: #f8fafc; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        f'<h3 style="color: #3b82f6; margin: 0 0 10px 0;">{_e(data, "propertyTitle")}</h3>'
        f"<p>Previous Price: <s>{_e(data, 'oldPrice')}</s></p>"
        f'<p><strong>New Price:</strong> <span style="color: {color};">{_e(data, "newPrice")}</span></p>'
        f"<p>Change: {sign}{_e(data, 'priceChange')} ({_e(data, 'changePercentage')}%)</p>"
        "</div>"
        f'<p><a href="{_e(data, "propertyUrl")}">View the listing</a></p>'
    )
    return _WRAPPER.format(body=body)


def render_new_listing(data: Mapping[str, Any]) -> str:
    body = (
        '<h2 style="color: #1e293b;">New Property Match</h2>'
        f"<p>Hello {_e(data, 'userName')},</p>"
        f"<p>A new listing matches your search for <em>{_e(data, 'searchCriteria')}</em>:</p>"
        f"{_card(data)}"
        f"<p><strong>{_e(data, 'price')}</strong> &middot; {_e(data, 'bedrooms')} bd"
        f" &middot; {_e(data, 'bathrooms')} ba &middot; {_e(data, 'sqft')} sqft</p>"
        f'<p><a href="{_e(data, "propertyUrl")}">View the listing</a></p>'
        f'<p style="font-size: 12px;"><a href="{_e(data, "unsubscribeUrl")}">Unsubscribe</a></p>'
    )
    return _WRAPPER.format(body=body)


_RENDERERS: dict[str, Callable[[Mapping[str, Any]], str]] = {
    "property_inquiry": render_property_inquiry,
    "tour_request": render_tour_request,
    "welcome": render_welcome,
    "price_alert": render_price_alert,
    "new_listing": render_new_listing,
}


def render(notification_type: str, data: Mapping[str, Any] | None) -> str:
    renderer = _RENDERERS.get(notification_type)
    if renderer is None:
        return "<p>Thank you for your interest in 20/20 Realtors.</p>"
    return renderer(data or {})
