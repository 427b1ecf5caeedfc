"""
Queue and workflow registry for the signatures queue system.

Signatures move through a fixed set of named queues, each one fed and
drained by a workflow. Anything that takes a queue or workflow name from
outside (events, configuration) should check it against this registry.
"""

from typing import Dict

QUEUE_NAMES: Dict[str, str] = {
    'signatures_submitted_queue': (
        'Signatures received from the API, waiting for a validation e-mail'
    ),
    'signatures_pending_validation_queue': (
        'Signatures whose validation e-mail has been sent'
    ),
    'validations_queue': 'Validation link clicks received from signers',
    'pending_validations_queue': (
        'Validations waiting to be matched with their signature'
    ),
}

WORKFLOW_NAMES: Dict[str, str] = {
    'receive_new_signatures': 'Accept new signatures from the API',
    'initiate_signature_validation': 'Send validation e-mails to signers',
    'receive_signature_validation': 'Record validation link clicks',
    'preprocess_signatures': 'Match validations with pending signatures',
    'process_signatures': 'Count validated signatures against petitions',
    'archive_signatures': 'Archive signatures that were never validated',
}

EMPTY_SINCE_VARIABLE_TEMPLATE = 'signatures_queue_{queue_name}_empty_since'


def is_valid_queue_name(name: str) -> bool:
    """Check if name is one of the known signature queues."""
    return isinstance(name, str) and name in QUEUE_NAMES


def is_valid_workflow_name(name: str) -> bool:
    """Check if name is one of the known workflows."""
    return isinstance(name, str) and name in WORKFLOW_NAMES


def empty_since_variable_name(queue_name: str) -> str:
    """
    Get the variable that records when a queue was first seen empty.

    Args:
        queue_name: Queue name (e.g., "validations_queue")

    Returns:
        str: Variable name, e.g. "signatures_queue_validations_queue_empty_since"
    """
    return EMPTY_SINCE_VARIABLE_TEMPLATE.format(queue_name=queue_name)
