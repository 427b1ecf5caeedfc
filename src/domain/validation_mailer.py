"""
Initiate signature validation - core business logic.

This module handles one queued signature end to end:
1. Parse the signature from the SQS record
2. Make sure it has a secret validation key
3. Build the validation link
4. Mail the link to the signer
5. Move the signature to the pending-validation queue

All errors are caught, alerted to the admin, and returned as
ProcessingResult with success=False.
No exceptions propagate out of the public methods.
"""

import json
import logging
import time
from typing import Dict, Any, Optional

from .models import Signature, ProcessingResult
from services import identifiers
from services import mail as mail_service
from services import validation_link as link_service
from services import admin_alert
from integrations.signatures_queue import SignaturesQueue

logger = logging.getLogger(__name__)

WORKFLOW = 'initiate_signature_validation'
MAIL_KEY = 'initiate_signature_validation'
PENDING_VALIDATION_QUEUE = 'signatures_pending_validation_queue'


class ValidationMailer:
    """
    Sends validation mail for signatures taken off the submitted queue.

    Returns ProcessingResult for explicit success/failure handling.
    """

    def __init__(self, pending_queue: Optional[SignaturesQueue] = None):
        self.pending_queue = pending_queue or SignaturesQueue(PENDING_VALIDATION_QUEUE)

    def process_record(self, record: Dict[str, Any], job_id: str) -> ProcessingResult:
        """
        Process a single SQS record containing a submitted signature.

        Args:
            record: SQS record dict
            job_id: Job this record is processed in

        Returns:
            ProcessingResult with success=True or success=False (errors alerted)
        """
        message_id = record.get('messageId', 'UNKNOWN')
        logger.info(f"[{job_id}] Processing SQS message: {message_id}")

        signature = None
        try:
            signature = self._parse_signature(record)
            logger.info(
                f"[{job_id}] Parsed: petition={signature.petition_id}, "
                f"language={signature.language}"
            )

            self._ensure_secret_validation_key(signature)

            link = link_service.build_validation_link(signature)

            self._send_validation_mail(signature, link, job_id)

            signature.timestamp_validation_email_sent = int(time.time())
            self.pending_queue.create_item(signature.to_dict())

            return ProcessingResult(
                success=True,
                message_id=message_id,
                job_id=job_id,
                signature=signature,
                validation_link=link
            )

        except Exception as e:
            logger.error(f"[{job_id}] Failed to process {message_id}: {e}", exc_info=True)
            try:
                self._alert_failure(message_id, signature, e, job_id)
            except Exception as alert_error:
                logger.error(
                    f"[{job_id}] Failed to alert admin about {message_id}: {alert_error}",
                    exc_info=True
                )

            return ProcessingResult(
                success=False,
                message_id=message_id,
                job_id=job_id,
                signature=signature,
                error_message=str(e)
            )

    def _parse_signature(self, record: Dict[str, Any]) -> Signature:
        """
        Parse SQS record body into a Signature.

        Raises:
            ValueError: If the body is missing or not a valid signature
            json.JSONDecodeError: If JSON parsing fails
        """
        body = record.get('body')
        if not body:
            raise ValueError("SQS record has no body")

        return Signature.from_dict(json.loads(body))

    def _ensure_secret_validation_key(self, signature: Signature) -> None:
        if signature.secret_validation_key:
            return
        signature.secret_validation_key = identifiers.generate_secret_validation_key(
            signature.email,
            signature.timestamp_submitted
        )

    def _send_validation_mail(self, signature: Signature, link: str, job_id: str) -> None:
        """Mail the validation link to the signer."""
        send_start_time = time.time()

        ses_message_id = mail_service.send_mail(
            to=signature.email,
            key=MAIL_KEY,
            language=signature.language,
            params=signature.token_map(link)
        )

        send_time = time.time() - send_start_time
        logger.info(
            f"[{job_id}] Validation mail sent for petition {signature.petition_id}: "
            f"ses_message_id={ses_message_id}, {send_time:.3f}s"
        )

    def _alert_failure(
        self,
        message_id: str,
        signature: Optional[Signature],
        error: Exception,
        job_id: str
    ) -> None:
        petition_id = signature.petition_id if signature else 'unknown'
        admin_alert.notify_admin(
            subject="Validation mail failed for petition {petition_id}",
            message=(
                "Could not initiate validation for queue message {message_id}.\n"
                "Error ({error_type}): {error}"
            ),
            variables_map={
                'petition_id': petition_id,
                'message_id': message_id,
                'error_type': error.__class__.__name__,
                'error': str(error),
            },
            workflow=WORKFLOW,
            job_id=job_id
        )
