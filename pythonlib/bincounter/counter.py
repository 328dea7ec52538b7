import logging
import operator

import numpy as np

from . import render

logger = logging.getLogger(__name__)

MAXINT64 = int(np.iinfo(np.int64).max)


def _clip_counts(c):
    """Integer counts as int64, values past MAXINT64 clamped like ``log`` does."""
    if c.dtype == object:
        # python ints too large for any numpy integer type
        clipped = [min(max(operator.index(v), 0), MAXINT64) for v in np.ravel(c)]
        return np.array(clipped, dtype=np.int64).reshape(c.shape)
    if not np.issubdtype(c.dtype, np.integer):
        raise TypeError("counts must be integers.")
    if np.issubdtype(c.dtype, np.unsignedinteger):
        return np.minimum(c, MAXINT64).astype(np.int64)
    return c


class BinCounter:
    """
    Fixed-range 1-D histogram with saturating integer counts.

    The range ``[range_min, range_max]`` is split into ``num_bins`` bins of
    equal width. Bin ``i`` covers ``[range_min + i*bin_size,
    range_min + (i+1)*bin_size)``; the first bin also takes everything below
    ``range_min`` and the last bin everything above ``range_max``.

    Parameters
    ----------
    num_bins : int
        Number of bins, must be positive.
    range_min, range_max : float
        Outer edges. Stored in single precision, ``range_min < range_max``.
    """

    def __init__(self, num_bins, range_min, range_max):
        num_bins = operator.index(num_bins)
        range_min = np.float32(range_min)
        range_max = np.float32(range_max)
        assert num_bins > 0, "num_bins must be positive"
        assert range_min < range_max, "range_min must be below range_max"

        self._num_bins = num_bins
        self._range_min = range_min
        self._range_max = range_max
        self._bin_size = np.float32((range_max - range_min) / np.float32(num_bins))
        assert self._bin_size > 0, "range too narrow for num_bins in single precision"

        self._bins = np.zeros(num_bins, dtype=np.int64)
        # callers only ever see this view; its buffer cannot be made writable
        self._bins_view = np.frombuffer(
            memoryview(self._bins).toreadonly(), dtype=np.int64
        )

        self._clear()

    def _clear(self):
        self._bins[:] = 0
        self._count_below = 0
        self._count_above = 0
        self._min_obs = None
        self._max_obs = None
        self._running_sum = np.longdouble(0)
        self._total = 0

    # ---------- configuration ----------
    @property
    def num_bins(self):
        return self._num_bins

    @property
    def range_min(self):
        return float(self._range_min)

    @property
    def range_max(self):
        return float(self._range_max)

    @property
    def bin_size(self):
        return float(self._bin_size)

    @property
    def edges(self):
        """Bin edges as rendered, ``num_bins + 1`` single precision values."""
        steps = np.arange(self._num_bins + 1, dtype=np.float32)
        return self._range_min + steps * self._bin_size

    def bin_range(self, idx):
        """Return the ``(low, high)`` edges of bin ``idx``."""
        idx = operator.index(idx)
        if not 0 <= idx < self._num_bins:
            raise IndexError(f"bin index {idx} out of range for {self._num_bins} bins")
        low = self._range_min + np.float32(idx) * self._bin_size
        high = low + self._bin_size
        return float(low), float(high)

    # ---------- state ----------
    @property
    def bins(self):
        """Read-only view of the bin counts."""
        return self._bins_view

    @property
    def total_observations(self):
        return self._total

    @property
    def count_below_range_min(self):
        return self._count_below

    @property
    def count_above_range_max(self):
        return self._count_above

    @property
    def min_observation(self):
        """Smallest observation logged so far, ``None`` before the first one."""
        return None if self._min_obs is None else float(self._min_obs)

    @property
    def max_observation(self):
        """Largest observation logged so far, ``None`` before the first one."""
        return None if self._max_obs is None else float(self._max_obs)

    @property
    def is_full(self):
        return self._total == MAXINT64

    @property
    def mean(self):
        """Mean of all observations, NaN when nothing has been logged."""
        with np.errstate(invalid="ignore", divide="ignore"):
            return float(np.float32(self._running_sum / np.longdouble(self._total)))

    @property
    def median_bin(self):
        """Index of the bin holding the middle observation, ``None`` if empty."""
        if self._total == 0:
            return None
        return self._scan()[1]

    # ---------- filling ----------
    def log(self, observation, count=1):
        """
        Record ``observation`` ``count`` times.

        NaN observations and observations arriving after the counter is full
        are dropped. ``count`` is clamped so the total never exceeds
        ``MAXINT64``.
        """
        count = operator.index(count)
        if count <= 0:
            raise ValueError("count must be positive.")

        with np.errstate(over="ignore"):
            obs = np.float32(observation)
        if np.isnan(obs) or self.is_full:
            return

        room = MAXINT64 - self._total
        if count > room:
            logger.debug("clamping count %d to %d, counter is now full", count, room)
            count = room

        self._update_extremes(obs, obs)
        self._running_sum += np.longdouble(count) * np.longdouble(obs)

        if obs < self._range_min:
            idx = 0
            self._count_below += count
        elif obs > self._range_max:
            idx = self._num_bins - 1
            self._count_above += count
        else:
            idx = int((obs - self._range_min) / self._bin_size)
            # rounding can land exactly on num_bins at range_max
            idx = min(idx, self._num_bins - 1)

        self._bins[idx] += count
        self._total += count

    def fill(self, values, counts=None):
        """
        Log an array of observations, optionally with per-value counts.

        Equivalent to calling :meth:`log` for every element in order. All
        counts are validated before anything is recorded.
        """
        with np.errstate(over="ignore"):
            x = np.ravel(np.asarray(values, dtype=np.float32))

        if counts is None:
            c = np.ones(x.shape, dtype=np.int64)
        else:
            c = _clip_counts(np.asarray(counts))
            if c.ndim == 0:
                c = np.full(x.shape, c, dtype=np.int64)
            c = np.ravel(c).astype(np.int64, copy=False)
            if c.shape != x.shape:
                raise ValueError(
                    f"counts shape {c.shape} does not match values shape {x.shape}"
                )
            if np.any(c <= 0):
                raise ValueError("count must be positive.")

        keep = ~np.isnan(x)
        x, c = x[keep], c[keep]
        if x.size == 0 or self.is_full:
            return

        # slow path whenever this batch could saturate the counter
        if int(c.max()) * x.size > MAXINT64 - self._total:
            for v, n in zip(x.tolist(), c.tolist()):
                self.log(v, n)
            return

        below = x < self._range_min
        above = x > self._range_max
        inside = ~(below | above)

        idx = np.zeros(x.shape, dtype=np.int64)
        idx[inside] = ((x[inside] - self._range_min) / self._bin_size).astype(np.int64)
        np.minimum(idx, self._num_bins - 1, out=idx)
        idx[above] = self._num_bins - 1

        np.add.at(self._bins, idx, c)
        self._count_below += int(c[below].sum())
        self._count_above += int(c[above].sum())
        self._update_extremes(x.min(), x.max())
        self._running_sum += np.sum(
            c.astype(np.longdouble) * x.astype(np.longdouble), dtype=np.longdouble
        )
        self._total += int(c.sum())

    def _update_extremes(self, lo, hi):
        if self._min_obs is None or lo < self._min_obs:
            self._min_obs = np.float32(lo)
        if hi is None:
            return
        if self._max_obs is None or hi > self._max_obs:
            self._max_obs = np.float32(hi)

    def reset(self):
        """Zero every counter and aggregate. Binning is kept."""
        self._clear()
        logger.debug("reset %r", self)

    # ---------- arithmetic ----------
    def merge_(self, other):
        """
        Add the contents of ``other`` in place.

        If the combined total would exceed ``MAXINT64``, bins of ``other``
        are taken in index order until the counter is full; the out-of-range
        counts and the running sum are scaled to what was taken, and the
        maximum of ``other`` is only kept if its highest filled bin was taken.
        """
        self._check_compat(other)
        if other._total == 0 or self.is_full:
            return self

        room = MAXINT64 - self._total
        if other._total <= room:
            self._bins += other._bins
            self._count_below += other._count_below
            self._count_above += other._count_above
            self._running_sum += other._running_sum
            self._total += other._total
        else:
            logger.debug("merge saturates counter, taking %d of %d", room, other._total)
            add = np.zeros_like(self._bins)
            left = room
            for i, n in enumerate(other._bins.tolist()):
                take = min(n, left)
                add[i] = take
                left -= take
                if left == 0:
                    break
            below = min(other._count_below, int(add[0]))
            last_free = int(add[-1]) - (below if self._num_bins == 1 else 0)
            above = min(other._count_above, last_free)

            self._bins += add
            self._count_below += below
            self._count_above += above
            self._running_sum += (
                other._running_sum * np.longdouble(room) / np.longdouble(other._total)
            )
            self._total += room

            # the lowest filled bin is always taken, the highest maybe not
            top = int(np.flatnonzero(other._bins)[-1])
            self._update_extremes(
                other._min_obs, other._max_obs if add[top] > 0 else None
            )
            return self

        self._update_extremes(other._min_obs, other._max_obs)
        return self

    def __iadd__(self, other):
        if not isinstance(other, BinCounter):
            return NotImplemented
        return self.merge_(other)

    def __add__(self, other):
        if not isinstance(other, BinCounter):
            return NotImplemented
        return self.copy().merge_(other)

    def __radd__(self, other):
        # supports plain sum(list_of_counters)
        if other == 0:
            return self.copy()
        return NotImplemented

    def _check_compat(self, other):
        """Ensure both counters share the same binning."""
        if not isinstance(other, BinCounter):
            raise TypeError("Can only combine BinCounter with BinCounter.")
        if self._num_bins != other._num_bins:
            raise ValueError("Counter bin counts differ.")
        if self._range_min != other._range_min or self._range_max != other._range_max:
            raise ValueError("Counter ranges differ.")

    # ---------- utilities ----------
    def copy(self):
        """Independent counter with identical binning and contents."""
        out = BinCounter(self._num_bins, self._range_min, self._range_max)
        out._bins[:] = self._bins
        out._count_below = self._count_below
        out._count_above = self._count_above
        out._min_obs = self._min_obs
        out._max_obs = self._max_obs
        out._running_sum = np.longdouble(self._running_sum)
        out._total = self._total
        return out

    def to_numpy(self):
        """Return (counts copy, edges copy) similar to numpy.histogram outputs."""
        return self._bins.copy(), self.edges

    def _scan(self):
        # single pass: tallest bin and cumulative-midpoint bin
        half = self._total // 2
        max_val = 0
        median = 0
        running = 0
        for i, n in enumerate(self._bins.tolist()):
            if n > max_val:
                max_val = n
            if running < half <= running + n:
                median = i
            running += n
        return max_val, median

    def get_histogram(self, include_stats=True):
        """
        Render the counter as text, one line per bin.

        Returns an empty string when nothing has been logged.
        """
        if self._total == 0:
            return ""

        max_val, median = self._scan()
        lines = []
        if include_stats:
            lines.extend(
                render.format_stats(
                    total=self._total,
                    below=self._count_below,
                    above=self._count_above,
                    median_bin=median,
                    median_range=self.bin_range(median),
                    min_obs=self.min_observation,
                    max_obs=self.max_observation,
                    mean=self.mean,
                )
            )
        for i, n in enumerate(self._bins.tolist()):
            low, high = self.bin_range(i)
            lines.append(render.format_bin_line(i, self._num_bins, low, high, n, max_val))
        return "".join(line + "\n" for line in lines)

    def __repr__(self):
        return (
            f"BinCounter(num_bins={self._num_bins}, range_min={self.range_min}, "
            f"range_max={self.range_max}, total_observations={self._total})"
        )
