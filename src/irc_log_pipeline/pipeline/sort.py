"""
In-memory sorting of a decoded log.

The whole log is held in memory; use merge_streams for inputs that are
already sorted individually.
"""

import logging
from typing import Iterable

from ..ingestion.base import DecodeResult
from ..ingestion.events import Event, chronological_key
from ..ingestion.exceptions import ParseError

logger = logging.getLogger(__name__)


def sort_events(results: Iterable[DecodeResult]) -> list[Event]:
    """
    Sort decoded items chronologically, discarding parse errors.

    Times are ordered by their absolute timestamp (see ``as_timestamp``):
    unknown times sort first and times of day are placed on the current
    date. The sort is stable, so events with equal times keep their input
    order and sorting twice gives the same result.

    Args:
        results: Decoded items (Events or ParseErrors)

    Returns:
        Sorted list of events
    """
    events = []
    errors = 0
    for item in results:
        if isinstance(item, ParseError):
            errors += 1
            logger.debug(f"Discarding undecodable item: {item}")
            continue
        events.append(item)

    if errors:
        logger.info(f"Discarded {errors} undecodable items before sorting")

    events.sort(key=lambda e: chronological_key(e.time))
    return events
