"""
Named variable store backed by SSM Parameter Store.

Variables hold small pieces of runtime state and configuration that must
survive across invocations (admin address, mail text overrides, queue
bookkeeping). Values are stored JSON-encoded so numbers and booleans keep
their type.
"""

import json
import logging
import os
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# Configure SSM client with timeouts to prevent infinite hangs
ssm_config = Config(
    retries={
        'max_attempts': 2,
        'mode': 'standard'
    },
    connect_timeout=5,
    read_timeout=10
)

region = os.environ.get('AWS_REGION', os.environ.get('AWS_DEFAULT_REGION', 'us-west-2'))

# Initialize SSM client at module level (thread-safe, reused across invocations)
ssm_client = boto3.client('ssm', region_name=region, config=ssm_config)

VARIABLES_PATH_PREFIX = os.environ.get('VARIABLES_PATH_PREFIX', '/signatures-queue/')


def _parameter_name(name: str) -> str:
    if not name:
        raise ValueError("Variable name cannot be empty")
    return f"{VARIABLES_PATH_PREFIX}{name}"


def get(name: str, default: Any = None) -> Any:
    """
    Read a variable.

    Args:
        name: Variable name (e.g., "signatures_queue_notify_email")
        default: Value returned when the variable is not set

    Returns:
        The decoded value, the raw string if it isn't JSON, or default

    Example:
        >>> get("signatures_queue_validations_queue_empty_since", 0)
        1700000000
    """
    parameter = _parameter_name(name)

    try:
        response = ssm_client.get_parameter(Name=parameter)
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', '')
        if error_code == 'ParameterNotFound':
            logger.debug(f"Variable not set: {name}")
            return default
        logger.error(f"Failed to read variable {name} ({parameter}): {e}")
        raise

    raw_value = response['Parameter']['Value']
    try:
        return json.loads(raw_value)
    except json.JSONDecodeError:
        return raw_value


def set(name: str, value: Any) -> None:
    """
    Write a variable, overwriting any previous value.

    Args:
        name: Variable name
        value: JSON-serializable value
    """
    parameter = _parameter_name(name)

    try:
        ssm_client.put_parameter(
            Name=parameter,
            Value=json.dumps(value),
            Type='String',
            Overwrite=True
        )
        logger.info(f"Variable set: {name}={value!r}")
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        logger.error(f"Failed to write variable {name} ({parameter}): error_code={error_code}")
        raise


def delete(name: str) -> None:
    """Delete a variable. Deleting a variable that isn't set is a no-op."""
    parameter = _parameter_name(name)

    try:
        ssm_client.delete_parameter(Name=parameter)
        logger.info(f"Variable deleted: {name}")
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', '')
        if error_code == 'ParameterNotFound':
            return
        logger.error(f"Failed to delete variable {name} ({parameter}): {e}")
        raise
