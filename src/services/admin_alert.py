"""
Admin alerts for queue workflow failures.

Alerts are logged at ERROR level (CloudWatch) and mailed to the site
administrator. Sending an alert never raises: a failed delivery is logged
and reported on the returned AdminAlert.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from domain.models import AdminAlert
from services import mail
from services import variables

logger = logging.getLogger(__name__)

ENVIRONMENT = os.environ.get('ENVIRONMENT', 'dev')
SITE_MAIL = os.environ.get('SITE_MAIL', '')
DEFAULT_ADMIN_EMAIL = 'admin@localhost'
NOTIFY_EMAIL_VARIABLE = 'signatures_queue_notify_email'


def get_admin_email() -> str:
    """
    Get the alert recipient.

    Priority: notify e-mail variable -> SITE_MAIL -> DEFAULT_ADMIN_EMAIL
    """
    try:
        configured = variables.get(NOTIFY_EMAIL_VARIABLE)
    except (ClientError, BotoCoreError) as e:
        logger.warning(f"Could not read {NOTIFY_EMAIL_VARIABLE}, using fallback: {e}")
        configured = None

    if configured:
        return str(configured)
    if SITE_MAIL:
        return SITE_MAIL
    logger.warning(f"No admin e-mail configured, using {DEFAULT_ADMIN_EMAIL}")
    return DEFAULT_ADMIN_EMAIL


def _format_text(template: str, values: Dict[str, Any]) -> str:
    # str.format() inserts values verbatim, braces in values are not expanded
    try:
        return template.format(**values)
    except (KeyError, IndexError, AttributeError) as e:
        missing_var = str(e).strip("'")
        logger.error(f"Missing variable in alert template: {missing_var}")
        raise ValueError(f"Missing required variable in alert: {missing_var}")


def format_admin_alert(
    subject: str,
    message: str,
    variables_map: Optional[Dict[str, Any]] = None,
    workflow: Optional[str] = None,
    job_id: Optional[str] = None,
    recipient: Optional[str] = None
) -> AdminAlert:
    """
    Format an alert for the site administrator.

    Args:
        subject: Subject template with {name} placeholders
        message: Message template with {name} placeholders
        variables_map: Placeholder values
        workflow: Workflow the alert comes from
        job_id: Job the alert comes from
        recipient: Override recipient (defaults to get_admin_email())

    Returns:
        AdminAlert (not delivered yet)

    Raises:
        ValueError: If a placeholder has no value

    Example:
        >>> alert = format_admin_alert(
        ...     "Validation mail failed for petition {petition_id}",
        ...     "Could not send to {email}: {error}",
        ...     {"petition_id": "42", "email": "a@example.com", "error": "rejected"},
        ...     workflow="initiate_signature_validation",
        ... )
        >>> alert.subject
        '[signatures_queue:dev] Validation mail failed for petition 42'
    """
    values = variables_map or {}

    formatted_subject = _format_text(subject, values)
    formatted_message = _format_text(message, values)

    lines = [formatted_message, '']
    if workflow:
        lines.append(f"Workflow: {workflow}")
    if job_id:
        lines.append(f"Job ID: {job_id}")
    lines.append(f"Environment: {ENVIRONMENT}")
    lines.append(f"Time: {datetime.now(timezone.utc).isoformat()}")

    return AdminAlert(
        recipient=recipient or get_admin_email(),
        subject=f"[signatures_queue:{ENVIRONMENT}] {formatted_subject}",
        body='\n'.join(lines)
    )


def notify_admin(
    subject: str,
    message: str,
    variables_map: Optional[Dict[str, Any]] = None,
    workflow: Optional[str] = None,
    job_id: Optional[str] = None,
    recipient: Optional[str] = None
) -> AdminAlert:
    """
    Format, log and mail an alert to the site administrator.

    Takes the same arguments as format_admin_alert().

    Returns:
        AdminAlert with delivered=True if the mail went out
    """
    alert = format_admin_alert(subject, message, variables_map, workflow, job_id, recipient)

    logger.error(f"ADMIN ALERT: {alert.subject} | {alert.body}")

    try:
        mail.send_text(alert.recipient, alert.subject, alert.body)
        alert.delivered = True
    except Exception as e:
        logger.error(f"Failed to deliver admin alert to {alert.recipient}: {e}", exc_info=True)

    return alert
