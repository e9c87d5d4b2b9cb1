"""Transactional member emails (Resend + Jinja2 templates)"""
from pathlib import Path
from typing import Optional

import resend
from jinja2 import Environment, FileSystemLoader, select_autoescape

from gymdesk.core.api_keys import get_resend_api_key, get_from_email, get_site_name, get_site_url
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)

template_dir = Path(__file__).parent.parent / "templates" / "email"
jinja_env = Environment(
    loader=FileSystemLoader(str(template_dir)),
    autoescape=select_autoescape(["html"]),
)


class EmailResult:
    """Outcome of a single send"""

    def __init__(self, ok: bool, message_id: Optional[str] = None, error: Optional[str] = None):
        self.ok = ok
        self.message_id = message_id
        self.error = error

    def __bool__(self) -> bool:
        return self.ok


def render(template_name: str, **context) -> str:
    site_name = get_site_name()
    template = jinja_env.get_template(template_name)
    return template.render(site_name=site_name, site_url=get_site_url(), **context)


def send_email(to_email: str, subject: str, html: str) -> EmailResult:
    """Send one HTML email through Resend. Failures are logged and returned, not raised."""
    try:
        resend.api_key = get_resend_api_key()
        result = resend.Emails.send({
            "from": get_from_email(),
            "to": [to_email],
            "subject": subject,
            "html": html,
        })
        message_id = result.get("id") if isinstance(result, dict) else None
        logger.info(f"Email sent: to={to_email}, subject={subject[:40]}")
        return EmailResult(True, message_id=message_id)
    except Exception as e:
        logger.error(f"Email send failed: to={to_email} - {e}")
        return EmailResult(False, error=str(e))


def send_expiring_soon_email(
    to_email: str,
    name: str,
    business_name: str,
    plan_name: str,
    expiration_date: str,
    days_until_expiry: int,
) -> EmailResult:
    """Membership expiring soon reminder"""
    html = render(
        "expiring_soon.html",
        name=name,
        business_name=business_name,
        plan_name=plan_name,
        expiration_date=expiration_date,
        days_until_expiry=days_until_expiry,
    )
    day_word = "day" if days_until_expiry == 1 else "days"
    return send_email(
        to_email,
        f"[{business_name}] Your membership expires in {days_until_expiry} {day_word}",
        html,
    )


def send_membership_expired_email(
    to_email: str,
    name: str,
    business_name: str,
    plan_name: str,
    expiration_date: str,
) -> EmailResult:
    """Membership has expired"""
    html = render(
        "membership_expired.html",
        name=name,
        business_name=business_name,
        plan_name=plan_name,
        expiration_date=expiration_date,
    )
    return send_email(to_email, f"[{business_name}] Your membership has expired", html)


def send_renewal_confirmation_email(
    to_email: str,
    name: str,
    business_name: str,
    plan_name: str,
    price: int,
    currency: str,
    start_date: str,
    end_date: str,
) -> EmailResult:
    """Renewal receipt"""
    html = render(
        "renewal_confirmation.html",
        name=name,
        business_name=business_name,
        plan_name=plan_name,
        price=price,
        currency=currency,
        start_date=start_date,
        end_date=end_date,
    )
    return send_email(to_email, f"[{business_name}] Membership renewed", html)


def send_member_welcome_email(to_email: str, name: str, business_name: str) -> EmailResult:
    html = render("member_welcome.html", name=name, business_name=business_name)
    return send_email(to_email, f"Welcome to {business_name}", html)
