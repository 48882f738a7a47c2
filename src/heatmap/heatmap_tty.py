"""
heatmap_tty.py: text dump of a heatmap for terminals and failing tests.

Prints (in order, each part optional):
  - the raw data as hex, one chunk per line, prefixed with the chunk offset;
  - the expected "interesting" regions, sorted by start;
  - the heatmap summary and one line per segment.
"""

from typing import List, Optional, Sequence, Tuple

from heatmap.heatmap_types import GRANULARITY


def format_heatmap(hm, data: Optional[bytes] = None,
                   regions: Optional[Sequence[Tuple[int, int]]] = None,
                   granularity: int = GRANULARITY) -> str:
    """
    `regions` are (start, end) pairs, end exclusive.
    """
    lines: List[str] = []

    if data is not None:
        lines.append(f"data: len = {len(data)}")
        for j in range(0, len(data), granularity):
            lines.append(f"{j:8d}: {bytes(data[j:j + granularity]).hex()}")
        lines.append("")

    if regions:
        for j, (start, end) in enumerate(sorted(regions)):
            lines.append(f"region  {j:4d}: {start:8d} - {end:8d}")
        lines.append("")

    lines.append(f"Heatmap (total segment length {hm.length}, total length {hm.raw_length})")
    for j, seg in enumerate(hm.segments):
        lines.append(f"segment {j:4d}: {seg.offset:8d} - {seg.end:8d}")
    return "\n".join(lines)
