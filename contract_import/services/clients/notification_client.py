"""Outbound email for newly provisioned customer accounts."""

from html import escape
from typing import Optional

import httpx

from contract_import.core.config import NotificationSettings, settings
from contract_import.core.exceptions import NotificationError
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)


def render_login_email(customer_name: str, email: str, password: str, contract_number: str) -> str:
    """Body of the login-credentials email."""
    return (
        f"<p>Kính gửi {escape(customer_name)},</p>"
        f"<p>Tài khoản truy cập hệ thống cho hợp đồng <strong>{escape(contract_number)}</strong> đã được tạo.</p>"
        f"<p>Email đăng nhập: <strong>{escape(email)}</strong><br>"
        f"Mật khẩu: <strong>{escape(password)}</strong></p>"
        "<p>Vui lòng đổi mật khẩu sau lần đăng nhập đầu tiên.</p>"
    )


class NotificationClient:
    """Sends emails through the notification service.

    Args:
        client: Optional shared httpx client; one is opened per call otherwise.
        config: Notification settings; the application settings by default.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        config: Optional[NotificationSettings] = None,
    ):
        self.client = client
        self.config = config or settings.notification

    async def _post(self, client: httpx.AsyncClient, payload: dict) -> None:
        response = await client.post(
            self.config.send_email_url, json=payload, timeout=self.config.timeout_seconds
        )
        if response.status_code >= 400:
            LOGGER.error(
                f"Notification service rejected email: {response.text}",
                extra={"status_code": response.status_code, "to": payload["email"]},
            )
            raise NotificationError(f"Email send failed with {response.status_code}: {response.text}")

    async def send_email(self, to: str, subject: str, body: str) -> None:
        """Send one email.

        Raises:
            NotificationError: If the service cannot be reached or rejects the email
        """
        payload = {"email": to, "subject": subject, "emailBody": body}
        try:
            if self.client is not None:
                await self._post(self.client, payload)
            else:
                async with httpx.AsyncClient() as client:
                    await self._post(client, payload)
        except httpx.HTTPError as e:
            LOGGER.error(f"Error sending email: {str(e)}", exc_info=True)
            raise NotificationError(f"Email send error: {str(e)}", original_error=e)
        LOGGER.info("Email sent", extra={"to": to, "subject": subject})

    async def send_login_credentials(
        self, customer_name: str, email: str, password: str, contract_number: str
    ) -> None:
        """Email a new customer their login details."""
        await self.send_email(
            to=email,
            subject=self.config.login_email_subject,
            body=render_login_email(customer_name, email, password, contract_number),
        )
