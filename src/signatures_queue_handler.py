"""
AWS Lambda handler for the signatures queue.

Thin orchestration layer for two triggers:
- SQS batch from the submitted-signatures queue -> ValidationMailer
- Scheduled EventBridge event -> empty-queue bookkeeping

Policy: Always delete SQS messages (no retries). Failures are alerted to the
site admin and logged to CloudWatch.
"""

import logging
import os
from typing import Dict, Any

from domain.validation_mailer import ValidationMailer, WORKFLOW
from domain import queue_monitor
from services.identifiers import generate_job_id

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO'))

# Add console handler for local testing (AWS Lambda provides handlers automatically)
if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)
    formatter = logging.Formatter('%(levelname)s - %(name)s - %(message)s')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

BOOKKEEPING_JOB = 'check_empty_queues'

# Initialize mailer once at module level (reused across invocations)
validation_mailer = ValidationMailer()


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Route a Lambda event to the matching workflow.

    Args:
        event: SQS batch event or scheduled EventBridge event
        context: Lambda context

    Returns:
        Dict with batchItemFailures for SQS events, a status body otherwise
    """
    if 'Records' in event:
        return _process_signatures(event)

    if event.get('source') == 'aws.events':
        return _check_empty_queues(event)

    logger.warning(f"Unsupported event: keys={sorted(event.keys())}")
    return {'statusCode': 400, 'error': 'Unsupported event type'}


def _process_signatures(event: Dict[str, Any]) -> Dict[str, Any]:
    job_id = generate_job_id(WORKFLOW)
    records = event.get('Records', [])
    logger.info(f"[{job_id}] {WORKFLOW}: received {len(records)} message(s)")

    success_count = 0
    for record in records:
        result = validation_mailer.process_record(record, job_id)
        if result.success:
            success_count += 1
        else:
            logger.warning(f"[{job_id}] {result!r}")

    logger.info(
        f"[{job_id}] {WORKFLOW} done: processed={len(records)}, "
        f"mailed={success_count}, failed={len(records) - success_count}"
    )
    return {"batchItemFailures": []}


def _check_empty_queues(event: Dict[str, Any]) -> Dict[str, Any]:
    job_id = generate_job_id(BOOKKEEPING_JOB)
    queue_names = (event.get('detail') or {}).get('queues')

    logger.info(f"Empty-queue bookkeeping started (job {job_id}), queues={queue_names or 'all'}")

    statuses = queue_monitor.update_empty_queue_status(queue_names)

    return {
        'statusCode': 200,
        'jobId': job_id,
        'queues': {name: status.to_dict() for name, status in statuses.items()}
    }
