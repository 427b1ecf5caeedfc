"""
Identifier generation for queue jobs and signature validation.
"""

import hashlib
import logging
import os
import time
import uuid

from domain.queues import is_valid_workflow_name

logger = logging.getLogger(__name__)

SECRET_VALIDATION_SALT = os.environ.get('SECRET_VALIDATION_SALT', '')


def generate_job_id(workflow: str) -> str:
    """
    Generate a unique ID for one run of a workflow.

    Every log line and admin alert of a run carries this ID so the run
    can be traced end to end.

    Args:
        workflow: Workflow name (e.g., "initiate_signature_validation")

    Returns:
        str: 32-character lowercase hexadecimal job ID

    Raises:
        ValueError: If workflow is empty

    Example:
        >>> job_id = generate_job_id("initiate_signature_validation")
        >>> len(job_id)
        32
    """
    if not workflow or not isinstance(workflow, str):
        raise ValueError("Workflow name must be a non-empty string")

    if not is_valid_workflow_name(workflow):
        logger.warning(f"Generating job ID for unknown workflow: {workflow}")

    seed = f"{workflow}:{uuid.uuid4()}:{time.time()}"
    job_id = hashlib.md5(seed.encode('utf-8')).hexdigest()

    logger.info(f"Generated job ID {job_id} for workflow {workflow}")
    return job_id


def generate_secret_validation_key(email: str, timestamp: int) -> str:
    """
    Generate the secret key a signer uses to validate their signature.

    The same e-mail and timestamp always give the same key.

    Args:
        email: Signer's e-mail address (case and surrounding space ignored)
        timestamp: Epoch seconds the signature was submitted

    Returns:
        str: 32-character lowercase hexadecimal key
    """
    if not email:
        raise ValueError("E-mail cannot be empty")

    seed = f"{email.strip().lower()}{int(timestamp)}{SECRET_VALIDATION_SALT}"
    return hashlib.md5(seed.encode('utf-8')).hexdigest()
