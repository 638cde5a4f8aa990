"""
Services for filter trees.

Contains logic built on top of the node model and the compiler: local
evaluation against records and segment/preview payload builders.
"""

from segment_filters.services.evaluation import evaluate, filter_records, simulate_segment
from segment_filters.services.segments import (
    build_preview_request,
    build_segment_create,
    build_segment_update,
    preview_query_params,
    segment_name_placeholder,
    tree_from_segment,
)

__all__ = [
    "evaluate",
    "filter_records",
    "simulate_segment",
    "build_segment_create",
    "build_segment_update",
    "tree_from_segment",
    "build_preview_request",
    "preview_query_params",
    "segment_name_placeholder",
]
