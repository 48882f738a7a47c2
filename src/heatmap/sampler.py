"""
sampler.py: choose random offsets in data, preferring "interesting" bytes.

Generic heatmaps model a probability distribution based on sparse data,
prioritising selection of regions which are not a single repeated byte. The
data is viewed as a series of chunks of length GRANULARITY; chunks which are a
single repeated byte are ignored, and offsets are chosen uniformly amongst the
remaining "interesting" segments.

    hm = make_generic_heatmap(data)
    offset = hm.choose_location(rng)   # rng: random.Random / np.random.Generator
"""

from typing import Sequence

import numpy as np

from heatmap.heatmap_types import GRANULARITY, Heatmap, Segment
from heatmap.segment_scan import as_uint8_array, calculate_length_and_segments

# Above this many segments, translation switches to prefix sums + binary search.
PREFIX_LOOKUP_THRESHOLD = 32


def _info(msg: str):
    print(msg, flush=True)


def rand_intn(r, n: int) -> int:
    """
    Draw a uniform integer in [0, n) from `r`.
    Accepts random.Random, numpy.random.Generator, or anything with intn(n).
    """
    if n <= 0:
        raise ValueError(f"rand_intn: bound must be positive, got {n}")
    if hasattr(r, "intn"):
        return int(r.intn(n))
    if hasattr(r, "integers"):
        return int(r.integers(n))
    return int(r.randrange(n))


def translate_idx(idx: int, segments: Sequence[Segment]) -> int:
    """
    Convert from an index into "interesting" segments to an index into raw data.
    I.e. view `idx` as an index into the concatenated segments, and translate
    this to an index into the original underlying data. E.g.:

        segs = [Segment(offset=10, length=20), Segment(offset=50, length=10)]
        translate_idx(25, segs) == 55

    25 - 20 = 5 lands on element 5 of the second segment, i.e. 50 + 5 of the raw data.
    Raises IndexError for negative or out-of-range indices.
    """
    if idx < 0:
        raise IndexError(f"translate_idx: negative index {idx}")
    saved_idx = idx
    for seg in segments:
        if idx < seg.length:
            return seg.offset + idx
        idx -= seg.length
    raise IndexError(f"translate_idx: index out of range {saved_idx}")


def translate_idx_prefix(idx: int, segments: Sequence[Segment], cumulative: np.ndarray) -> int:
    """
    Same mapping as translate_idx, using `cumulative` (np.cumsum of the
    segment lengths) and a binary search instead of a linear walk.
    """
    if idx < 0:
        raise IndexError(f"translate_idx: negative index {idx}")
    pos = int(np.searchsorted(cumulative, idx, side="right"))
    if pos >= len(segments):
        raise IndexError(f"translate_idx: index out of range {idx}")
    seg_first_idx = int(cumulative[pos - 1]) if pos > 0 else 0
    return segments[pos].offset + (idx - seg_first_idx)


class GenericHeatmap(Heatmap):
    """
    Uniform distribution over the interesting segments of one buffer.

    State is built once per buffer and not modified afterwards, so a single
    instance can serve concurrent draws as long as each caller brings its own
    random source. Use repopulate() (or a new instance) for a different buffer.
    """

    def __init__(self, data, debug: bool = False):
        self._debug = debug
        self.repopulate(data)

    def repopulate(self, data):
        """Rebuild all state from `data`."""
        arr = as_uint8_array(data)
        length, segments = calculate_length_and_segments(arr, GRANULARITY, debug=self._debug)
        segments = tuple(segments)
        cumulative = None
        if len(segments) > PREFIX_LOOKUP_THRESHOLD:
            cumulative = np.cumsum([seg.length for seg in segments], dtype=np.int64)
        # Single assignment so readers never observe half-built state.
        self._state = (segments, length, arr.size, cumulative)
        if self._debug:
            _info(f"[heatmap] built {self!r} "
                  f"lookup={'prefix' if cumulative is not None else 'linear'}")

    @property
    def segments(self) -> tuple:
        return self._state[0]

    @property
    def length(self) -> int:
        """Sum of all segment lengths."""
        return self._state[1]

    @property
    def raw_length(self) -> int:
        """Length of the original data."""
        return self._state[2]

    def choose_location(self, r) -> int:
        segments, length, raw_length, cumulative = self._state
        if raw_length == 0:
            raise ValueError("choose_location: cannot choose a location in empty data")
        if length == 0:
            # No segments, i.e. the data is all one byte value.
            # Degenerate-input policy: fall back to uniform selection over the whole data.
            return rand_intn(r, raw_length)
        heatmap_idx = rand_intn(r, length)
        if cumulative is not None:
            return translate_idx_prefix(heatmap_idx, segments, cumulative)
        return translate_idx(heatmap_idx, segments)

    def __repr__(self):
        return (f"<GenericHeatmap raw_length={self.raw_length} length={self.length} "
                f"segments={len(self.segments)}>")


def make_generic_heatmap(data, debug: bool = False) -> GenericHeatmap:
    return GenericHeatmap(data, debug=debug)
