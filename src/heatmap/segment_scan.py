"""
segment_scan.py: split raw data into "interesting" segments.

The data is viewed as consecutive chunks of `granularity` bytes (the final chunk
may be shorter). A chunk whose bytes are all equal to its first byte is
"constant"; runs of non-constant chunks are merged into Segments.
"""

from typing import List, Tuple

import numpy as np

from heatmap.heatmap_types import Segment


def _info(msg: str):
    print(msg, flush=True)


def as_uint8_array(data) -> np.ndarray:
    """
    Flat 1-D uint8 view of the raw bytes behind `data`.

    Buffers (bytes, bytearray, memoryview) and ndarrays of any shape or dtype
    are read as their underlying bytes in C order, so a (4, 2) uint16 array
    scans as 16 bytes. Sequences of ints are taken as byte values and must
    fit in 0..255.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return np.frombuffer(data, dtype=np.uint8)
    if isinstance(data, np.ndarray):
        return np.ascontiguousarray(data).reshape(-1).view(np.uint8)
    return np.asarray(data, dtype=np.uint8).reshape(-1)


def constant_chunk_flags(data, granularity: int) -> np.ndarray:
    """
    Return one bool per chunk of `data` (trailing partial chunk included):
    True where every byte of the chunk equals the chunk's first byte.
    """
    if granularity <= 0:
        raise ValueError(f"granularity must be positive, got {granularity}")
    arr = as_uint8_array(data)
    n_full = arr.size // granularity
    tail = arr.size - n_full * granularity

    flags = np.empty(n_full + (1 if tail else 0), dtype=bool)
    if n_full:
        # One row per full chunk; compare every byte against column 0.
        chunks = arr[:n_full * granularity].reshape(n_full, granularity)
        flags[:n_full] = (chunks == chunks[:, :1]).all(axis=1)
    if tail:
        last = arr[n_full * granularity:]
        flags[n_full] = bool((last == last[0]).all())
    return flags


def calculate_length_and_segments(data, granularity: int, debug: bool = False) -> Tuple[int, List[Segment]]:
    """
    Determine the "interesting" segments of `data`, also returning their
    combined length.

    Returns:
        (total_length, segments)
        - segments are sorted by offset and never overlap.
        - total_length == sum(seg.length for seg in segments).
        - all-constant data gives (0, []).
    """
    arr = as_uint8_array(data)
    flags = constant_chunk_flags(arr, granularity)
    raw_length = arr.size

    segments: List[Segment] = []
    total_length = 0
    # Start and length of the currently open segment (length 0 => none open).
    seg_start, seg_length = 0, 0

    for chunk_idx, is_constant in enumerate(flags):
        chunk_start = chunk_idx * granularity
        chunk_len = min(granularity, raw_length - chunk_start)

        if not is_constant:
            if seg_length == 0:
                seg_start = chunk_start
            seg_length += chunk_len
        elif seg_length != 0:
            segments.append(Segment(offset=seg_start, length=seg_length))
            total_length += seg_length
            seg_length = 0

    # Data ended inside an interesting run.
    if seg_length != 0:
        segments.append(Segment(offset=seg_start, length=seg_length))
        total_length += seg_length

    if debug:
        _info(f"[segment_scan] raw_length={raw_length} granularity={granularity} "
              f"chunks={flags.size} constant={int(flags.sum())} "
              f"segments={len(segments)} interesting_bytes={total_length}")
    return total_length, segments
