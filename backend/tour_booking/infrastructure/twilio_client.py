"""
Thin async client for the Twilio Messages REST API (WhatsApp channel).
"""

from typing import Optional

import httpx


class TwilioClient:
    """Sends WhatsApp messages through Twilio using a shared httpx client."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: str,
        base_url: str = "https://api.twilio.com",
    ):
        self.http = http
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.base_url = base_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token)

    async def send_whatsapp(self, to: str, body: str) -> str:
        """
        Send one message and return its Twilio SID.
        Raises httpx.HTTPError on transport or API failure.
        """
        if not to.startswith("whatsapp:"):
            to = f"whatsapp:{to}"

        response = await self.http.post(
            f"{self.base_url}/2010-04-01/Accounts/{self.account_sid}/Messages.json",
            data={"From": self.from_number, "To": to, "Body": body},
            auth=(self.account_sid, self.auth_token),
        )
        response.raise_for_status()
        return response.json().get("sid", "")
