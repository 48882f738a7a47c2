# heatmap/heatmap_types.py
from __future__ import annotations
from dataclasses import dataclass

GRANULARITY = 64  # chunk size in bytes used when scanning data


@dataclass(frozen=True)
class Segment:
    """
    An "interesting" run of the raw data: bytes [offset, offset + length)
    which are not a single repeated byte at chunk granularity.
    """
    offset: int   # absolute start position in the raw data
    length: int   # number of bytes, always > 0

    @property
    def end(self) -> int:
        return self.offset + self.length  # exclusive

    def __repr__(self):
        return f"<Segment offset={self.offset} length={self.length}>"


class Heatmap:
    """
    A probability distribution over the byte positions of some data.

    Usage:
      1. Build a concrete heatmap from the data, e.g. make_generic_heatmap(data).
      2. Call choose_location(r) for every offset you need.

    Only the generic distribution ships (see sampler.GenericHeatmap); other
    distributions subclass this and implement choose_location.
    """

    def choose_location(self, r) -> int:
        raise NotImplementedError
