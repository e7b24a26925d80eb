import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

import resend

from config import config
from errors import DispatchError
from logging_config import get_logger

logger = get_logger("email")

PLACEHOLDER_VALUES = {"", "your-email@gmail.com", "your-app-password", "your_resend_api_key_here"}

# Set the API key for the resend SDK
if config.RESEND_API_KEY:
    resend.api_key = config.RESEND_API_KEY


def _is_set(value) -> bool:
    return bool(value) and value not in PLACEHOLDER_VALUES


def email_configured() -> bool:
    if config.EMAIL_PROVIDER == "resend":
        return _is_set(config.RESEND_API_KEY)
    return _is_set(config.SMTP_HOST) and _is_set(config.SMTP_USER) and _is_set(config.SMTP_PASS)


def send_email(to_email: str, subject: str, html_content: str, text_content: str = None) -> dict:
    """
    Send one email through the configured provider. Blocking; run it in a worker thread.

    Outside production, missing credentials fall back to a logged mock send and the
    result is flagged as a test delivery. Raises DispatchError on any real failure.
    """
    if not email_configured():
        if config.ENV == "production":
            raise DispatchError("email", f"{config.EMAIL_PROVIDER} credentials are not configured")
        logger.warning(f"Email credentials not configured. Mock sending email to {to_email} with subject '{subject}'")
        return {"id": None, "test": True}

    try:
        if config.EMAIL_PROVIDER == "resend":
            email_id = _send_via_resend(to_email, subject, html_content, text_content)
        else:
            email_id = _send_via_smtp(to_email, subject, html_content, text_content)
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}", exc_info=True)
        raise DispatchError("email", str(e) or e.__class__.__name__) from e

    logger.info(f"Email sent successfully to {to_email}", extra={"data": {"email_id": email_id, "provider": config.EMAIL_PROVIDER}})
    return {"id": email_id, "test": False}


def _send_via_smtp(to_email: str, subject: str, html_content: str, text_content: str = None):
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = config.MAIL_FROM
    msg["To"] = to_email
    if text_content:
        msg.attach(MIMEText(text_content, "plain"))
    msg.attach(MIMEText(html_content, "html"))

    with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=config.EMAIL_TIMEOUT_SECONDS) as server:
        if config.SMTP_USE_TLS:
            server.starttls()
        server.login(config.SMTP_USER, config.SMTP_PASS)
        server.send_message(msg)
    return None


def _send_via_resend(to_email: str, subject: str, html_content: str, text_content: str = None):
    params = {
        "from": config.MAIL_FROM,
        "to": [to_email],
        "subject": subject,
        "html": html_content,
    }
    if text_content:
        params["text"] = text_content
    response = resend.Emails.send(params)
    return response.get("id") if isinstance(response, dict) else getattr(response, "id", None)


def base_email_template(title: str, preheader: str, content: str, footer_text: str = "") -> str:
    """
    Generates the responsive HTML skeleton shared by all NutriMind emails.
    """
    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>{title}</title>
    </head>
    <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif; background-color: #f3f4f6; margin: 0; padding: 0; line-height: 1.6;">
        <!-- Preheader text (hidden in the email body, visible in inbox preview) -->
        <div style="display: none; max-height: 0px; overflow: hidden;">
            {preheader}
        </div>

        <table width="100%" cellpadding="0" cellspacing="0" border="0" style="background-color: #f3f4f6; margin: 0; padding: 40px 20px;">
            <tr>
                <td align="center">
                    <table width="100%" cellpadding="0" cellspacing="0" border="0" style="max-width: 600px; background-color: #ffffff; border-radius: 12px; overflow: hidden;">
                        <tr>
                            <td style="background-color: #3b82f6; padding: 24px; text-align: center;">
                                <h1 style="color: #ffffff; font-size: 24px; margin: 0; font-weight: 700;">NutriMind</h1>
                            </td>
                        </tr>
                        <tr>
                            <td style="padding: 40px 32px; color: #374151;">
                                {content}
                            </td>
                        </tr>
                        <tr>
                            <td style="background-color: #f3f4f6; padding: 16px 32px; text-align: center;">
                                <p style="color: #6b7280; font-size: 12px; margin: 0;">
                                    {footer_text}
                                </p>
                            </td>
                        </tr>
                    </table>
                </td>
            </tr>
        </table>
    </body>
    </html>
    """


def render_notification_email(title: str, message: str) -> tuple:
    """Returns (subject, html) for a reminder. The same fixed template serves every reminder type."""
    safe_title = escape(title)
    content = f"""
        <h2 style="color: #3b82f6; font-size: 20px; font-weight: 600; margin-top: 0; margin-bottom: 16px;">{safe_title}</h2>
        <p style="color: #374151; margin: 0 0 16px 0;">{escape(message)}</p>
    """
    html = base_email_template(
        title=safe_title,
        preheader=escape(message[:90]),
        content=content,
        footer_text="This is an automated notification from NutriMind. You can manage your notification settings in your profile.",
    )
    return title, html
