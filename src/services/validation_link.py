"""
Validation link construction.

Signers receive a link by mail and click it to prove they own the address
they signed with. The link carries everything needed to match the click
with the pending signature later on.
"""

import hashlib
import logging
import os
from typing import Optional
from urllib.parse import urlencode

from domain.models import Signature

logger = logging.getLogger(__name__)

WEBSITE_URL = os.environ.get('WEBSITE_URL', '')
VALIDATION_PATH = '/thank-you'


def build_validation_link(signature: Signature, website_url: Optional[str] = None) -> str:
    """
    Build the validation link for a signature.

    Query parameters:
        k: secret validation key
        m: MD5 of the normalized signer e-mail
        p: petition ID
        d: timestamp the signature was submitted

    Args:
        signature: Signature with a secret validation key
        website_url: Site base URL (defaults to WEBSITE_URL)

    Returns:
        str: Absolute validation URL

    Raises:
        ValueError: If no website URL is configured or the key is missing

    Example:
        >>> build_validation_link(signature, "https://petitions.example.com/")
        "https://petitions.example.com/thank-you?k=...&m=...&p=42&d=1700000000"
    """
    base_url = (website_url or WEBSITE_URL or '').rstrip('/')
    if not base_url:
        raise ValueError("Website URL is not configured (set WEBSITE_URL)")

    if not signature.secret_validation_key:
        raise ValueError(
            f"Signature for petition {signature.petition_id} has no secret validation key"
        )

    email_hash = hashlib.md5(signature.email.strip().lower().encode('utf-8')).hexdigest()

    query = urlencode([
        ('k', signature.secret_validation_key),
        ('m', email_hash),
        ('p', signature.petition_id),
        ('d', signature.timestamp_submitted),
    ])

    return f"{base_url}{VALIDATION_PATH}?{query}"
