"""Text formatting for BinCounter histograms."""

from __future__ import annotations

from typing import List, Tuple

BAR_WIDTH = 100
BAR_CHAR = "*"


def format_range_label(idx: int, num_bins: int, low: float, high: float) -> str:
    # first/last bins also hold out-of-range values, mark them open-ended
    if idx == 0 and num_bins == 1:
        return f"<--{low:9.2f}--<={high:<12.2f}-->"
    if idx == 0:
        return f"<--{low:9.2f}--<={high:<12.2f}"
    if idx == num_bins - 1:
        return f"{low:12.2f}--<={high:<12.2f}-->"
    return f"{low:12.2f}--<={high:<12.2f}"


def format_bar(count: int, max_val: int) -> str:
    """Bar of stars scaled so that ``max_val`` gets exactly ``BAR_WIDTH``."""
    if max_val <= 0:
        return ""
    return BAR_CHAR * (BAR_WIDTH * count // max_val)


def format_bin_line(
    idx: int, num_bins: int, low: float, high: float, count: int, max_val: int
) -> str:
    label = format_range_label(idx, num_bins, low, high)
    return f"{label}\t:\t{count:<10} {format_bar(count, max_val)}"


def format_stats(
    *,
    total: int,
    below: int,
    above: int,
    median_bin: int,
    median_range: Tuple[float, float],
    min_obs: float,
    max_obs: float,
    mean: float,
) -> List[str]:
    low, high = median_range
    return [
        f"TotalEntries: {total}",
        f"CountBelowRangeMin: {below}",
        f"CountAboveRangeMax: {above}",
        f"MedianBinIdx: {median_bin}",
        f"MedianBinRange: {low:4.3f}<->{high:4.3f}",
        f"MinObservation: {min_obs:4.3f}",
        f"MaxObservation: {max_obs:4.3f}",
        f"Mean: {mean:4.3f}",
    ]
