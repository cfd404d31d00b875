"""Unit tests for outbound email."""

import json

import httpx
import pytest

from contract_import.core.config import NotificationSettings
from contract_import.core.exceptions import NotificationError
from contract_import.services.clients.notification_client import (
    NotificationClient,
    render_login_email,
)


def _client(handler):
    return NotificationClient(
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        config=NotificationSettings(NOTIFICATION_SEND_EMAIL_URL="https://mail.test/send"),
    )


def test_login_email_escapes_html():
    body = render_login_email("A & B <Co>", "x@y.vn", "p<w>", "HD-01")
    assert "A &amp; B &lt;Co&gt;" in body
    assert "p&lt;w&gt;" in body
    assert "HD-01" in body


class TestNotificationClient:
    """Tests for NotificationClient."""

    @pytest.mark.asyncio
    async def test_send_login_credentials_payload(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"sent": True})

        await _client(handler).send_login_credentials(
            customer_name="CÔNG TY ABC",
            email="ketoan@abc.com.vn",
            password="Ab23456789",
            contract_number="001/2025/HĐDV-BV/HCM/ABC",
        )

        assert seen["url"] == "https://mail.test/send"
        assert seen["body"]["email"] == "ketoan@abc.com.vn"
        assert seen["body"]["subject"] == "Thông tin đăng nhập hệ thống BASMS"
        assert "Ab23456789" in seen["body"]["emailBody"]

    @pytest.mark.asyncio
    async def test_rejected_email_raises(self):
        client = _client(lambda request: httpx.Response(422, text="bad address"))

        with pytest.raises(NotificationError) as exc_info:
            await client.send_email("bad", "subject", "body")

        assert "422" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(NotificationError) as exc_info:
            await _client(handler).send_email("a@b.vn", "subject", "body")

        assert isinstance(exc_info.value.original_error, httpx.ConnectError)
