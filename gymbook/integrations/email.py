"""
Transactional email through Resend.

Delivery is fire-and-forget: a failed send is logged and never fails the
request that triggered it.
"""
import logging
from typing import Callable, Dict, List, Optional

import resend

from gymbook.core.config import settings

logger = logging.getLogger(__name__)

resend.api_key = settings.RESEND_API_KEY


def _welcome(params: dict) -> dict:
    name = params.get("userName", "there")
    platform = settings.PLATFORM_NAME
    return {
        "subject": f"Welcome to {platform}!",
        "html": (
            f"<h1>Hello, {name}!</h1>"
            f"<p>Welcome to {platform}! We're thrilled to have you join our community.</p>"
            "<p>If you have any questions or need assistance, feel free to reach out.</p>"
            f"<p>Best regards,<br>The {platform} Team</p>"
        ),
    }


def _approval(params: dict) -> dict:
    name = params.get("userName", "there")
    platform = settings.PLATFORM_NAME
    return {
        "subject": "Congratulations! Your Gym is Now Live on Our Platform",
        "html": (
            "<h1>Congratulations! Your Gym is Now Live on Our Platform</h1>"
            f"<p>Dear {name},</p>"
            "<p>Your gym has been approved and is now visible to customers, who can "
            "discover it and book sessions right away.</p>"
            f"<p>Best regards,<br>The {platform} Team</p>"
        ),
    }


def _resubmission(params: dict) -> dict:
    name = params.get("userName", "there")
    platform = settings.PLATFORM_NAME
    reasons: List[str] = params.get("reason") or []
    items = "".join(f"<li>{reason}</li>" for reason in reasons) or "<li>No reasons provided.</li>"
    return {
        "subject": "Resubmission Required: Onboarding Form Declined",
        "html": (
            "<h1>Resubmission Required: Onboarding Form Declined</h1>"
            f"<p>Hi {name},</p>"
            f"<p>Thank you for your interest in joining {platform}. Unfortunately, we were "
            "unable to approve your onboarding form for the following reasons:</p>"
            f"<ul>{items}</ul>"
            "<p>Please review the points above and resubmit the form with the necessary corrections.</p>"
            f"<p>Best regards,<br>Team {platform}</p>"
        ),
    }


TEMPLATES: Dict[str, Callable[[dict], dict]] = {
    "welcome": _welcome,
    "approval": _approval,
    "resubmission": _resubmission,
}


def render_template(template_name: str, params: dict) -> dict:
    template = TEMPLATES.get(template_name)
    if template is None:
        raise ValueError(f"Unknown email template: {template_name}")
    return template(params)


class EmailSender:
    def __init__(self, from_address: Optional[str] = None):
        self.from_address = from_address or settings.EMAIL_FROM_ADDRESS

    def send_templated(self, recipient: str, template_name: str, params: dict) -> Optional[dict]:
        """Render and send. Returns the Resend response, or None if delivery failed."""
        message = render_template(template_name, params)

        if not settings.RESEND_API_KEY:
            logger.warning("RESEND_API_KEY missing; skipping %r email to %s", template_name, recipient)
            return None

        try:
            response = resend.Emails.send(
                {
                    "from": self.from_address,
                    "to": [recipient],
                    "subject": message["subject"],
                    "html": message["html"],
                }
            )
            logger.info("Sent %r email to %s", template_name, recipient)
            return response
        except Exception as e:
            logger.error("Email send error to %s: %s", recipient, e)
            return None
