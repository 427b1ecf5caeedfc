"""
Data models for the signatures queue domain.

These type-safe data structures define clear contracts between components.
Queue payloads arrive as loosely-typed dicts and are turned into these
models at the edge.
"""

import re
import time
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any

REQUIRED_SIGNATURE_FIELDS = ('petition_id', 'email')

DEFAULT_LANGUAGE = 'en'
LANGUAGE_PATTERN = re.compile(r'^[a-z]{2}(-[A-Z]{2})?$')


@dataclass
class Signature:
    """
    A single submitted signature, pending or completed validation.

    Attributes:
        petition_id: Petition the signature is attached to
        email: Signer's e-mail address
        first_name: Signer's first name
        last_name: Signer's last name
        zip: Signer's postal code
        petition_title: Petition title (for mail text)
        petition_url: Public petition URL (for mail text)
        signature_source_api_key: API key of the client that submitted it
        timestamp_submitted: Epoch seconds when the signature was submitted
        secret_validation_key: Key the signer proves ownership with
        timestamp_validation_email_sent: Epoch seconds the validation mail went out
        language: Language code for mail text
    """
    petition_id: str
    email: str
    first_name: str = ''
    last_name: str = ''
    zip: str = ''
    petition_title: str = ''
    petition_url: str = ''
    signature_source_api_key: Optional[str] = None
    timestamp_submitted: int = field(default_factory=lambda: int(time.time()))
    secret_validation_key: Optional[str] = None
    timestamp_validation_email_sent: Optional[int] = None
    language: str = 'en'

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Signature':
        """
        Build a Signature from a queue payload.

        Unknown keys are ignored. A malformed language falls back to
        DEFAULT_LANGUAGE.

        Args:
            data: Signature record (e.g., decoded SQS message body)

        Returns:
            Signature

        Raises:
            ValueError: If a required field is missing or blank
        """
        if not isinstance(data, dict):
            raise ValueError(f"Signature record must be a dict, got {type(data).__name__}")

        for name in REQUIRED_SIGNATURE_FIELDS:
            value = data.get(name)
            if value is None or not str(value).strip():
                raise ValueError(f"Signature record missing required field: {name}")

        known = cls.__dataclass_fields__.keys()
        values = {k: v for k, v in data.items() if k in known and v is not None}
        values['petition_id'] = str(values['petition_id'])
        values['email'] = str(values['email']).strip()
        if not LANGUAGE_PATTERN.fullmatch(str(values.get('language', DEFAULT_LANGUAGE))):
            values['language'] = DEFAULT_LANGUAGE
        if 'timestamp_submitted' in values:
            values['timestamp_submitted'] = int(values['timestamp_submitted'])

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict for re-enqueueing."""
        return asdict(self)

    def token_map(self, validation_link: str = '') -> Dict[str, Dict[str, Any]]:
        """
        Get the mail tokens for this signature.

        Args:
            validation_link: Link the signer clicks to validate

        Returns:
            Dict mapping token type to {token name: value}
        """
        return {
            'signature': {
                'first-name': self.first_name,
                'last-name': self.last_name,
                'email': self.email,
                'zip': self.zip,
                'validation-url': validation_link,
            },
            'petition': {
                'id': self.petition_id,
                'title': self.petition_title,
                'url': self.petition_url,
            },
        }


@dataclass
class AdminAlert:
    """
    Alert for the site administrator.

    Attributes:
        recipient: Admin e-mail address
        subject: Alert subject line
        body: Alert body text
        delivered: Whether the alert mail was sent
    """
    recipient: str
    subject: str
    body: str
    delivered: bool = False


@dataclass
class QueueStatus:
    """
    Result of empty-queue bookkeeping for one queue.

    Attributes:
        name: Queue name
        number_of_items: Items in the queue when checked
        empty_since: Epoch seconds the queue was first seen empty (0 if not empty)
    """
    name: str
    number_of_items: int
    empty_since: int = 0

    @property
    def is_empty(self) -> bool:
        return self.number_of_items == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ProcessingResult:
    """
    Result of processing one queued signature.

    This explicit result type makes success/failure handling clear
    and prevents exceptions from being used for control flow.

    Attributes:
        success: Whether processing succeeded
        message_id: SQS message identifier
        job_id: Job the record was processed in
        signature: Parsed signature (if parsing succeeded)
        validation_link: Link mailed to the signer (if built)
        error_message: Error description (if processing failed)
    """
    success: bool
    message_id: str
    job_id: Optional[str] = None
    signature: Optional[Signature] = None
    validation_link: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def should_delete_message(self) -> bool:
        """Always True - failures are alerted, not retried."""
        return True

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.success:
            return f"ProcessingResult(success=True, message_id={self.message_id})"
        else:
            return f"ProcessingResult(success=False, message_id={self.message_id}, error={self.error_message})"
