import pytest
from unittest.mock import patch, MagicMock

from config import config
from errors import DispatchError
from utils.email import email_configured, render_notification_email, send_email


@pytest.fixture
def smtp_credentials(monkeypatch):
    monkeypatch.setattr(config, "EMAIL_PROVIDER", "smtp")
    monkeypatch.setattr(config, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(config, "SMTP_USER", "mailer@example.com")
    monkeypatch.setattr(config, "SMTP_PASS", "app-password")


def test_render_escapes_content():
    subject, html = render_notification_email("Dinner <Time>", "Try fish & chips")

    assert subject == "Dinner <Time>"
    assert "Dinner &lt;Time&gt;" in html
    assert "Try fish &amp; chips" in html
    assert "NutriMind" in html


def test_unconfigured_falls_back_to_mock_send():
    assert email_configured() is False

    result = send_email("maya@example.com", "Hi", "<p>Hi</p>")

    assert result == {"id": None, "test": True}


def test_unconfigured_in_production_raises(monkeypatch):
    monkeypatch.setattr(config, "ENV", "production")

    with pytest.raises(DispatchError):
        send_email("maya@example.com", "Hi", "<p>Hi</p>")


def test_placeholder_credentials_count_as_unconfigured(smtp_credentials, monkeypatch):
    monkeypatch.setattr(config, "SMTP_PASS", "your-app-password")

    assert email_configured() is False


def test_smtp_send(smtp_credentials):
    with patch("utils.email.smtplib.SMTP") as smtp:
        server = smtp.return_value.__enter__.return_value
        result = send_email("maya@example.com", "Lunch Time!", "<p>Eat</p>", "Eat")

    assert result["test"] is False
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer@example.com", "app-password")
    message = server.send_message.call_args.args[0]
    assert message["To"] == "maya@example.com"
    assert message["Subject"] == "Lunch Time!"


def test_smtp_failure_raises_dispatch_error(smtp_credentials):
    with patch("utils.email.smtplib.SMTP") as smtp:
        smtp.return_value.__enter__.return_value.login.side_effect = OSError("auth rejected")

        with pytest.raises(DispatchError, match="auth rejected"):
            send_email("maya@example.com", "Hi", "<p>Hi</p>")


def test_resend_provider(monkeypatch):
    monkeypatch.setattr(config, "EMAIL_PROVIDER", "resend")
    monkeypatch.setattr(config, "RESEND_API_KEY", "re_test_key")

    with patch("utils.email.resend.Emails.send", return_value={"id": "email_123"}) as send:
        result = send_email("maya@example.com", "Hi", "<p>Hi</p>")

    assert result == {"id": "email_123", "test": False}
    assert send.call_args.args[0]["to"] == ["maya@example.com"]
