"""Thin SendGrid v3 mail client on top of ``httpx``.

Sends are never retried: a timeout after the provider accepted the message
would otherwise deliver it twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from realty.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboundEmail:
    to_email: str
    to_name: str
    subject: str
    html: str
    template_id: str | None = None
    template_data: dict[str, Any] | None = None


class SendGridTransport:
    def __init__(
        self,
        *,
        api_key: str | None,
        api_url: str,
        from_email: str,
        from_name: str,
        client: httpx.AsyncClient,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._from_email = from_email
        self._from_name = from_name
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _payload(self, message: OutboundEmail) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "personalizations": [
                {
                    "to": [{"email": message.to_email, "name": message.to_name}],
                    "subject": message.subject,
                    "dynamic_template_data": message.template_data or {},
                }
            ],
            "from": {"email": self._from_email, "name": self._from_name},
        }
        if message.template_id:
            payload["template_id"] = message.template_id
        else:
            payload["content"] = [{"type": "text/html", "value": message.html}]
        return payload

    async def send(self, message: OutboundEmail) -> str | None:
        """Submit ``message`` and return the provider message id, if any."""

        if not self._api_key:
            raise EmailDeliveryError("SendGrid API key is not configured")

        try:
            response = await self._client.post(
                self._api_url,
                json=self._payload(message),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as exc:
            raise EmailDeliveryError(f"SendGrid request failed: {exc}") from exc

        if not response.is_success:
            raise EmailDeliveryError(
                f"SendGrid returned {response.status_code}: {response.text}"
            )
        return response.headers.get("X-Message-Id")

    async def aclose(self) -> None:
        await self._client.aclose()
