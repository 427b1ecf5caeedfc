"""
Empty-queue bookkeeping.

Run periodically (scheduled event). For each queue, records the time it
was first seen empty in the variable
"signatures_queue_<queue>_empty_since", and resets the variable to 0
once items show up again. Downstream workflows use this to tell a queue
that is drained for good from one that is momentarily empty.
"""

import logging
import time
from typing import Dict, Iterable, Optional

from .models import QueueStatus
from .queues import QUEUE_NAMES, empty_since_variable_name, is_valid_queue_name
from services import variables
from integrations.signatures_queue import SignaturesQueue

logger = logging.getLogger(__name__)


def get_empty_since(queue_name: str) -> int:
    """Get the epoch seconds a queue was first seen empty (0 if not empty)."""
    return int(variables.get(empty_since_variable_name(queue_name), 0) or 0)


def queue_empty_for(queue_name: str, seconds: int, now: Optional[int] = None) -> bool:
    """
    Check if a queue has been recorded empty for at least `seconds`.

    Args:
        queue_name: Queue name
        seconds: Minimum time empty
        now: Current epoch seconds (defaults to time.time())
    """
    empty_since = get_empty_since(queue_name)
    if not empty_since:
        return False
    now = int(time.time()) if now is None else int(now)
    return now - empty_since >= seconds


def _update_queue(name: str, now: int) -> QueueStatus:
    queue = SignaturesQueue(name)
    queue.create_queue()
    count = queue.number_of_items()

    variable = empty_since_variable_name(name)
    empty_since = int(variables.get(variable, 0) or 0)

    if count == 0:
        if not empty_since:
            empty_since = now
            variables.set(variable, empty_since)
            logger.info(f"Queue {name} is empty, recorded empty_since={empty_since}")
    elif empty_since:
        empty_since = 0
        variables.set(variable, 0)
        logger.info(f"Queue {name} has {count} item(s) again, reset empty_since")

    return QueueStatus(name=name, number_of_items=count, empty_since=empty_since)


def update_empty_queue_status(
    queue_names: Optional[Iterable[str]] = None,
    now: Optional[int] = None
) -> Dict[str, QueueStatus]:
    """
    Update empty-since bookkeeping for queues.

    Invalid queue names are skipped and left out of the result. An error
    on one queue is logged and doesn't stop the others.

    Args:
        queue_names: Queues to check, or a single queue name (defaults to all known queues)
        now: Current epoch seconds (defaults to time.time())

    Returns:
        Dict of queue name -> QueueStatus
    """
    if queue_names is None:
        names = list(QUEUE_NAMES)
    elif isinstance(queue_names, str):
        names = [queue_names]
    else:
        names = list(queue_names)
    now = int(time.time()) if now is None else int(now)

    statuses: Dict[str, QueueStatus] = {}
    for name in names:
        if not is_valid_queue_name(name):
            logger.debug(f"Skipping invalid queue name: {name!r}")
            continue

        try:
            statuses[name] = _update_queue(name, now)
        except Exception as e:
            logger.error(f"Failed to update empty status for queue {name}: {e}", exc_info=True)

    logger.info(
        f"Empty-queue bookkeeping complete: checked={len(statuses)}, "
        f"empty={sum(1 for s in statuses.values() if s.is_empty)}"
    )
    return statuses
