from .heatmap_types import GRANULARITY, Heatmap, Segment
from .segment_scan import calculate_length_and_segments
from .sampler import GenericHeatmap, make_generic_heatmap, translate_idx

__all__ = [
    "GRANULARITY",
    "Heatmap",
    "Segment",
    "calculate_length_and_segments",
    "GenericHeatmap",
    "make_generic_heatmap",
    "translate_idx",
]
