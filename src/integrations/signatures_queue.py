"""
Amazon SQS adapter for the signatures queues.

Usage:
    from integrations.signatures_queue import SignaturesQueue

    queue = SignaturesQueue('signatures_pending_validation_queue')
    queue.create_queue()
    queue.create_item({'petition_id': '42', 'email': 'signer@example.com'})
    print(queue.number_of_items())
"""

import json
import logging
import os
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


# ============================================================================
# Custom Exception Classes
# ============================================================================

class QueueNotFoundError(Exception):
    """Raised when the SQS queue behind a signatures queue doesn't exist."""
    pass


# ============================================================================
# Module-Level Configuration and Initialization
# ============================================================================

SIGNATURES_QUEUE_PREFIX = os.environ.get('SIGNATURES_QUEUE_PREFIX', '')

# Messages counted by number_of_items(): waiting, claimed and delayed
ITEM_COUNT_ATTRIBUTES = [
    'ApproximateNumberOfMessages',
    'ApproximateNumberOfMessagesNotVisible',
    'ApproximateNumberOfMessagesDelayed',
]

NON_EXISTENT_QUEUE_CODES = (
    'AWS.SimpleQueueService.NonExistentQueue',
    'QueueDoesNotExist',
)


def _initialize_sqs_client():
    """
    Initialize boto3 SQS client with timeout configuration.

    Returns:
        boto3.client: Configured SQS client
    """
    client_config = Config(
        retries={
            'max_attempts': 2,
            'mode': 'standard'
        },
        connect_timeout=5,
        read_timeout=20
    )

    region = os.environ.get('AWS_REGION', os.environ.get('AWS_DEFAULT_REGION', 'us-west-2'))

    client = boto3.client('sqs', region_name=region, config=client_config)

    logger.info(f"SQS client initialized: region={region}, queue_prefix={SIGNATURES_QUEUE_PREFIX!r}")
    return client


# Initialize at module import time (thread-safe, reused across invocations)
sqs_client = _initialize_sqs_client()


def _is_missing_queue(error: ClientError) -> bool:
    return error.response.get('Error', {}).get('Code', '') in NON_EXISTENT_QUEUE_CODES


# ============================================================================
# Queue
# ============================================================================

class SignaturesQueue:
    """
    A named signatures queue backed by one SQS queue.

    The SQS queue name is SIGNATURES_QUEUE_PREFIX + name, so several
    environments can share one account.
    """

    def __init__(self, name: str):
        if not name:
            raise ValueError("Queue name cannot be empty")
        self.name = name
        self.physical_name = f"{SIGNATURES_QUEUE_PREFIX}{name}"
        self._url: Optional[str] = None

    def __repr__(self) -> str:
        return f"SignaturesQueue(name={self.name!r})"

    @property
    def url(self) -> str:
        """
        Queue URL, looked up once per instance.

        Raises:
            QueueNotFoundError: If the queue doesn't exist
        """
        if self._url is None:
            try:
                response = sqs_client.get_queue_url(QueueName=self.physical_name)
            except ClientError as e:
                if _is_missing_queue(e):
                    raise QueueNotFoundError(f"Queue not found: {self.physical_name}")
                raise
            self._url = response['QueueUrl']
        return self._url

    def create_queue(self) -> str:
        """
        Create the queue if it doesn't exist yet.

        Returns:
            str: Queue URL
        """
        response = sqs_client.create_queue(QueueName=self.physical_name)
        self._url = response['QueueUrl']
        logger.debug(f"Queue ready: {self.physical_name} -> {self._url}")
        return self._url

    def number_of_items(self) -> int:
        """
        Count items in the queue, including claimed and delayed ones.

        SQS counts are approximate.

        Raises:
            QueueNotFoundError: If the queue doesn't exist
        """
        try:
            response = sqs_client.get_queue_attributes(
                QueueUrl=self.url,
                AttributeNames=ITEM_COUNT_ATTRIBUTES
            )
        except ClientError as e:
            if _is_missing_queue(e):
                self._url = None
                raise QueueNotFoundError(f"Queue not found: {self.physical_name}")
            raise

        attributes = response.get('Attributes', {})
        count = sum(int(attributes.get(name, 0)) for name in ITEM_COUNT_ATTRIBUTES)

        logger.debug(f"Queue {self.name} has {count} item(s)")
        return count

    def create_item(self, data: Dict[str, Any]) -> str:
        """
        Add an item to the queue.

        Args:
            data: JSON-serializable item

        Returns:
            str: SQS message ID
        """
        try:
            response = sqs_client.send_message(
                QueueUrl=self.url,
                MessageBody=json.dumps(data)
            )
        except ClientError as e:
            if _is_missing_queue(e):
                self._url = None
                raise QueueNotFoundError(f"Queue not found: {self.physical_name}")
            raise

        message_id = response['MessageId']
        logger.info(f"Queued item in {self.name}: message_id={message_id}")
        return message_id
