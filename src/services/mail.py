"""
Outgoing mail through Amazon SES.

This module sends plain-text mail, either from ready-made subject and body
or from a mail text key whose subject and body templates are looked up and
filled with tokens.
"""

import logging
import os
from typing import Any, Mapping, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from services import mail_text

logger = logging.getLogger(__name__)


class MailRejectedError(Exception):
    """Raised when SES rejects a message (e.g., unverified sender)."""
    pass


ses_config = Config(
    retries={
        'max_attempts': 2,
        'mode': 'standard'
    },
    connect_timeout=10,
    read_timeout=30
)

region = os.environ.get('AWS_REGION', os.environ.get('AWS_DEFAULT_REGION', 'us-west-2'))

# Initialize SES client at module level (thread-safe, reused across invocations)
ses_client = boto3.client('ses', region_name=region, config=ses_config)

MAIL_FROM_ADDRESS = os.environ.get('MAIL_FROM_ADDRESS', 'no-reply@localhost')
CHARSET = 'UTF-8'


def send_text(to: str, subject: str, body: str) -> str:
    """
    Send a plain-text mail.

    Args:
        to: Recipient address
        subject: Subject line (surrounding whitespace is stripped)
        body: Body text

    Returns:
        str: SES message ID

    Raises:
        ValueError: If recipient is empty
        MailRejectedError: If SES rejects the message
        ClientError: For other SES errors
    """
    if not to:
        raise ValueError("Mail recipient cannot be empty")

    subject = (subject or '').strip()

    try:
        response = ses_client.send_email(
            Source=MAIL_FROM_ADDRESS,
            Destination={'ToAddresses': [to]},
            Message={
                'Subject': {'Data': subject, 'Charset': CHARSET},
                'Body': {'Text': {'Data': body or '', 'Charset': CHARSET}}
            }
        )
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        error_message = e.response.get('Error', {}).get('Message', str(e))

        if error_code == 'MessageRejected':
            logger.error(f"SES rejected mail to {to}: {error_message}")
            raise MailRejectedError(f"Mail to {to} rejected: {error_message}")

        logger.error(
            f"Failed to send mail: to={to}, "
            f"error_code={error_code}, error_message={error_message}"
        )
        raise

    message_id = response['MessageId']
    logger.info(f"Sent mail: to={to}, subject={subject!r}, message_id={message_id}")
    return message_id


def send_mail(
    to: str,
    key: str,
    language: str = mail_text.DEFAULT_LANGUAGE,
    params: Optional[Mapping[str, Mapping[str, Any]]] = None
) -> str:
    """
    Send a templated mail.

    Looks up "<key>_subject" and "<key>_body" and fills in tokens from params.

    Args:
        to: Recipient address
        key: Mail key (e.g., "initiate_signature_validation")
        language: Language code for the mail text
        params: Token values, {type: {name: value}}

    Returns:
        str: SES message ID

    Example:
        >>> send_mail("signer@example.com", "initiate_signature_validation",
        ...           "en", signature.token_map(link))
    """
    if not to:
        raise ValueError("Mail recipient cannot be empty")

    subject = mail_text.get_mail_text(f"{key}_subject", language, params)
    body = mail_text.get_mail_text(f"{key}_body", language, params)

    logger.info(f"Sending {key} mail in {language} to {to}")
    return send_text(to, subject, body)
