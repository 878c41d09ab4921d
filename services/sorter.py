from __future__ import annotations

import logging

from services.aggregator import Aggregator

logger = logging.getLogger(__name__)


class Sorter:
    """Orders every group chronologically once aggregation has finished."""

    def sort_all(self, aggregator: Aggregator) -> int:
        """Sort each group in place and return the number of groups sorted.

        Ties on timestamp are broken by source path, then line number, so the
        order never depends on which worker inserted first.
        """
        if not aggregator.frozen:
            raise RuntimeError("Sorting requires a frozen aggregator.")

        count = 0
        for _, group in aggregator.groups():
            group.sort(key=lambda item: item.sort_key)
            count += 1
        logger.debug("Sorted groups", extra={"group_count": count})
        return count
