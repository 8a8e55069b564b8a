import asyncio
import logging
from datetime import datetime
from email.message import EmailMessage
from email.utils import make_msgid
from html import escape
from typing import Any, Dict, List, Optional

import aiosmtplib

from license_portal.core.config import settings

logger = logging.getLogger(__name__)


def _format_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, str) and value:
        return value[:10]
    return "-"


def build_status_email(action: str, application_data: Dict[str, Any]) -> Dict[str, str]:
    """
    Subject, plain-text and HTML bodies for a review decision email.
    """
    approved = action == "APPROVED"
    status_word = "approved" if approved else "rejected"
    title = "Approved" if approved else "Rejected"
    license_type = application_data.get("licenseType") or "-"
    review_notes = application_data.get("reviewNotes")
    submitted = _format_date(application_data.get("submittedAt"))
    processed = datetime.utcnow().strftime("%Y-%m-%d")

    if approved:
        closing = "Congratulations! Your license application has been approved."
        link = f"{settings.APP_URL}/application/{application_data.get('id')}"
    else:
        closing = (
            "Unfortunately, your license application has been rejected. "
            "Please review the notes and consider resubmitting."
        )
        link = f"{settings.APP_URL}/apply"

    lines = [
        f"License Application {status_word.upper()}",
        "",
        "Dear Applicant,",
        "",
        f"Your license application has been {status_word}.",
        "",
        "Application Details:",
        f"- Application ID: {application_data.get('id')}",
        f"- License Type: {license_type}",
        f"- Status: {application_data.get('status')}",
        f"- Submitted: {submitted}",
        f"- Processed: {processed}",
        "",
    ]
    if review_notes:
        lines += [f"Review Notes: {review_notes}", ""]
    lines += [closing, "", link, "", "Best regards,", settings.MAIL_FROM_NAME]

    notes_html = ""
    if review_notes:
        notes_html = f"<h3>Review Notes</h3><p><em>{escape(review_notes)}</em></p>"
    html = (
        f"<html><body>"
        f"<h1>License Application {title}</h1>"
        f"<h2>Application Details</h2>"
        f"<p><strong>Application ID:</strong> {escape(str(application_data.get('id')))}</p>"
        f"<p><strong>License Type:</strong> {escape(str(license_type))}</p>"
        f"<p><strong>Status:</strong> {escape(str(application_data.get('status')))}</p>"
        f"<p><strong>Submitted:</strong> {submitted}</p>"
        f"<p><strong>Processed:</strong> {processed}</p>"
        f"{notes_html}"
        f"<p>{escape(closing)}</p>"
        f'<p><a href="{escape(link)}">{"View in Dashboard" if approved else "Submit New Application"}</a></p>'
        f"</body></html>"
    )

    return {
        "subject": f"License Application {title} - {license_type}",
        "text": "\n".join(lines),
        "html": html,
    }


async def send_application_status_email(
    email: Optional[str], action: str, application_data: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Send the review decision to the applicant.

    Never raises: the outcome is reported as ``{"success": bool, ...}`` so a
    mail failure cannot undo a review that is already committed.
    """
    if not email:
        return {"success": False, "error": "No email address"}
    if not settings.MAIL_ENABLED:
        logger.warning(f"Mail is disabled, not sending {action} email for {application_data.get('id')}")
        return {"success": False, "error": "Mail is disabled"}

    template = build_status_email(action, application_data)
    message = EmailMessage()
    message["From"] = f"{settings.MAIL_FROM_NAME} <{settings.MAIL_FROM_ADDRESS}>"
    message["To"] = email
    message["Subject"] = template["subject"]
    message["Message-ID"] = make_msgid()
    message.set_content(template["text"])
    message.add_alternative(template["html"], subtype="html")

    try:
        await aiosmtplib.send(
            message,
            hostname=settings.MAIL_HOST,
            port=settings.MAIL_PORT,
            username=settings.MAIL_USERNAME or None,
            password=settings.MAIL_PASSWORD or None,
            use_tls=(settings.MAIL_ENCRYPTION == "ssl"),
            start_tls=(settings.MAIL_ENCRYPTION == "tls"),
        )
    except Exception as e:
        logger.error(f"Failed to send {action} email to {email}: {str(e)}")
        return {"success": False, "error": str(e)}

    logger.info(f"{action} email sent to {email} for application {application_data.get('id')}")
    return {"success": True, "messageId": message["Message-ID"]}


async def send_batch_application_status_emails(
    applications: List[Dict[str, Any]], action: str
) -> List[Dict[str, Any]]:
    """
    Send review emails one after another, pausing EMAIL_BATCH_DELAY_SECONDS
    between sends. Each item needs ``email`` and ``application_data``.
    """
    results = []
    for index, item in enumerate(applications):
        application_data = item["application_data"]
        result = await send_application_status_email(item.get("email"), action, application_data)
        results.append({"applicationId": application_data.get("id"), **result})
        if index < len(applications) - 1 and settings.EMAIL_BATCH_DELAY_SECONDS > 0:
            await asyncio.sleep(settings.EMAIL_BATCH_DELAY_SECONDS)
    return results
