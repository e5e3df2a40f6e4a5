"""Email Dispatcher - config gating, rendering, fault capture and classification."""

import pytest

from verimail.core.domain_types import DispatchStatus
from verimail.core.errors import (
    ConfigNotFoundError, MailTransportError, MissingConfigKeyError, TemplateRenderError,
)


async def test_send_renders_and_reports_sent(dispatcher, fake_transport):
    result = await dispatcher.send(
        "bob@example.com", "welcome", {"firstname": "Ann", "token": "abc123"},
    )
    assert result.status == DispatchStatus.SENT
    assert "Hello Ann, code abc123" in result.rendered_body

    descriptor, message = fake_transport.deliveries[0]
    assert descriptor.host == "smtp.example.com"
    assert descriptor.password == "s3cret-pass"
    assert message.to == "bob@example.com"
    assert message.subject == "Welcome"
    assert message.from_name == "Example"
    assert message.html == result.rendered_body


async def test_rejected_recipient_is_not_sent(dispatcher, fake_transport):
    fake_transport.accept = False
    result = await dispatcher.send("bob@example.com", "welcome")
    assert result.status == DispatchStatus.NOT_SENT
    assert result.transport_echo.rejected == ["bob@example.com"]
    assert result.to_envelope().code == 400


async def test_transport_fault_captured_as_data(dispatcher, fake_transport):
    fake_transport.fault = MailTransportError("Connection refused", "SMTPConnectError")
    result = await dispatcher.send("bob@example.com", "welcome")
    assert result.status == DispatchStatus.NOT_SENT
    assert "Connection refused" in result.transport_echo.error
    assert result.to_envelope().to_dict()["i18n"] == "EMAIL_NOT_SENT"


async def test_missing_generic_config_never_touches_transport(
    dispatcher, config_store, fake_transport,
):
    del config_store.entries["EMAIL_CONFIG"]
    with pytest.raises(ConfigNotFoundError) as exc:
        await dispatcher.send("bob@example.com", "welcome")
    assert exc.value.to_response() == {
        "code": 400, "i18n": "CONFIG_NOT_FOUND", "data": {"key": "EMAIL_CONFIG"},
    }
    assert fake_transport.deliveries == []


async def test_missing_template_config_named(dispatcher, fake_transport):
    with pytest.raises(ConfigNotFoundError) as exc:
        await dispatcher.send("bob@example.com", "unknown")
    assert exc.value.key == "EMAIL_CONFIG_TEMPLATE_unknown"
    assert fake_transport.deliveries == []


async def test_missing_required_key_stops_before_send(
    dispatcher, config_store, fake_transport,
):
    del config_store.entries["EMAIL_CONFIG"]["smtp_pass"]
    with pytest.raises(MissingConfigKeyError) as exc:
        await dispatcher.send("bob@example.com", "welcome")
    assert exc.value.data["key"] == "smtp_pass"
    assert fake_transport.deliveries == []


async def test_template_subject_overrides_generic(dispatcher, config_store, fake_transport):
    config_store.entries["EMAIL_CONFIG_TEMPLATE_welcome"].pop("subject")
    await dispatcher.send("bob@example.com", "welcome")
    assert fake_transport.last_message.subject == "Default subject"


async def test_broken_template_raises_before_send(dispatcher, config_store, fake_transport):
    config_store.entries["EMAIL_CONFIG_TEMPLATE_welcome"]["template"] = "{% if %}"
    with pytest.raises(TemplateRenderError):
        await dispatcher.send("bob@example.com", "welcome")
    assert fake_transport.deliveries == []


async def test_config_keys_use_template_prefix(dispatcher):
    assert dispatcher.config_keys("reset") == ["EMAIL_CONFIG", "EMAIL_CONFIG_TEMPLATE_reset"]
