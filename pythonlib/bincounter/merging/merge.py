from __future__ import annotations
from typing import Iterable, List
import logging

from ..counter import BinCounter

logger = logging.getLogger(__name__)


def merge_two_counters(acc: BinCounter, other: BinCounter) -> BinCounter:
    # in-place on acc, same as acc += other
    return acc.merge_(other)


def merge_counter_list(counters: Iterable[BinCounter]) -> BinCounter:
    """Return a new counter holding the sum of ``counters``; inputs are untouched."""
    counters: List[BinCounter] = list(counters)
    if not counters:
        raise ValueError("merge_counter_list: empty counter list")

    acc = counters[0].copy()
    for c in counters[1:]:
        acc = merge_two_counters(acc, c)
    logger.debug("merged %d counters into %r", len(counters), acc)
    return acc
