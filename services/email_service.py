import logging
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from core.config import Settings

logger = logging.getLogger(__name__)


class EmailService:
    """
    Transactional email for the identity service (activation codes, password resets).
    Sent through SendGrid; without credentials the message is logged instead.
    Methods are synchronous so they can run under FastAPI BackgroundTasks.
    """

    def __init__(self, api_key: Optional[str], sender_email: Optional[str], frontend_url: str):
        self.sendgrid_api_key = api_key
        self.sender_email = sender_email
        self.frontend_url = frontend_url.rstrip("/")

        self.enabled = bool(self.sendgrid_api_key and self.sender_email)
        if not self.enabled:
            logger.warning("📧 Email service not configured. Missing SENDGRID_API_KEY or MAIL_FROM.")
        else:
            logger.info(f"📧 Email service configured and ready. Sender: {self.sender_email}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailService":
        return cls(settings.SENDGRID_API_KEY, settings.MAIL_FROM, settings.FRONTEND_URL)

    def _send(self, to_email: str, subject: str, html_content: str) -> bool:
        try:
            message = Mail(
                from_email=self.sender_email,
                to_emails=to_email,
                subject=subject,
                html_content=html_content,
            )
            sg = SendGridAPIClient(self.sendgrid_api_key)
            response = sg.send(message)
            logger.info(f"✅ Email '{subject}' sent to {to_email}. Status: {response.status_code}")
            return True
        except Exception as e:
            # Background task: nothing upstream to report to
            logger.exception("❌ Failed to send email to %s: %s", to_email, e)
            return False

    # ============================================================
    # ✅ Account activation code
    # ============================================================
    def send_activation_email(
        self, to_email: str, full_name: str, activation_code: str, expires_minutes: int = 15
    ) -> bool:
        activation_url = f"{self.frontend_url}/activate-account"

        if not self.enabled:
            logger.info(f"📨 [Mock Email] To: {to_email}")
            logger.info(f"Activation code: {activation_code} | Page: {activation_url}")
            return True

        html_content = f"""
        <div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h2>👋 Hello {full_name},</h2>
            <p>Thanks for signing up to <b>TaskPilot</b>. Use the code below to activate your account:</p>
            <p style="text-align: center; font-size: 28px; letter-spacing: 6px; margin: 20px 0;">
                <strong>{activation_code}</strong>
            </p>
            <p>Enter it at <a href="{activation_url}">{activation_url}</a>.</p>
            <p><small>This code expires in {expires_minutes} minutes.</small></p>
            <hr style="border:none; border-top:1px solid #eee; margin: 24px 0;">
            <p>Best regards,<br><strong>The TaskPilot Team</strong></p>
        </div>
        """
        return self._send(to_email, "Activate your TaskPilot account", html_content)

    # ============================================================
    # ✅ Password reset link
    # ============================================================
    def send_password_reset_email(
        self, to_email: str, full_name: str, reset_token: str, expires_minutes: int = 60
    ) -> bool:
        reset_link = f"{self.frontend_url}/reset-password?token={reset_token}"

        if not self.enabled:
            logger.info(f"📨 [Mock Email] To: {to_email}")
            logger.info(f"Reset link: {reset_link}")
            return True

        html_content = f"""
        <div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h2>Hello {full_name},</h2>
            <p>We received a request to reset your TaskPilot password.</p>
            <p style="text-align: center; margin: 20px 0;">
                <a href="{reset_link}" style="
                    background-color: #4F46E5;
                    color: white;
                    padding: 12px 28px;
                    text-decoration: none;
                    border-radius: 6px;
                    font-weight: bold;
                    display: inline-block;
                ">Reset Password</a>
            </p>
            <p>If you did not ask for this, you can ignore this email.</p>
            <p><small>The link expires in {expires_minutes} minutes.</small></p>
        </div>
        """
        return self._send(to_email, "Reset your TaskPilot password", html_content)
