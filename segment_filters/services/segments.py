"""
Segment payload builders.

Glue between filter trees and the segment / preview HTTP collaborators: trees
are validated and serialized on the way out and rebuilt from wire payloads on
the way in. No I/O happens here.
"""

import datetime as dt
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from segment_filters.api.schemas.preview import PreviewRequest
from segment_filters.api.schemas.segment import (
    SegmentCreate,
    SegmentData,
    SegmentResponse,
    SegmentUpdate,
)
from segment_filters.compiler.canonicalizer import to_canonical_json_string
from segment_filters.compiler.deserializer import deserialize
from segment_filters.compiler.serializer import serialize
from segment_filters.compiler.validator import ensure_valid
from segment_filters.core.ids import IdGenerator
from segment_filters.domain.catalog import AttributeCatalog
from segment_filters.domain.enums import SegmentType
from segment_filters.domain.nodes import Tree, TreeLimits
from segment_filters.tree.summary import describe

logger = logging.getLogger(__name__)

MAX_SEGMENT_NAME_LENGTH = 255


def segment_data_for(tree: Tree) -> SegmentData:
    return SegmentData(filters=serialize(tree), labels=dict(tree.labels))


def build_segment_create(
    tree: Tree,
    name: str,
    segment_type: SegmentType | str = SegmentType.PERSONAL,
    *,
    limits: TreeLimits | None = None,
    catalog: AttributeCatalog | None = None,
) -> SegmentCreate:
    """
    Build the create payload for a segment.

    Args:
        tree: Filter tree to save
        name: Segment name
        segment_type: personal or site
        limits: Tree limits for validation
        catalog: When given, attributes/operators are validated against it

    Returns:
        SegmentCreate ready to be sent

    Raises:
        TreeValidationError: If the tree may not be saved
    """
    ensure_valid(tree, limits=limits, catalog=catalog)
    return SegmentCreate(name=name, type=segment_type, segment_data=segment_data_for(tree))


def build_segment_update(
    *,
    tree: Tree | None = None,
    name: str | None = None,
    segment_type: SegmentType | str | None = None,
    limits: TreeLimits | None = None,
    catalog: AttributeCatalog | None = None,
) -> SegmentUpdate:
    """
    Build a partial update payload; only the given parts are included.

    Raises:
        TreeValidationError: If ``tree`` is given and may not be saved
    """
    segment_data = None
    if tree is not None:
        ensure_valid(tree, limits=limits, catalog=catalog)
        segment_data = segment_data_for(tree)
    return SegmentUpdate(name=name, type=segment_type, segment_data=segment_data)


def tree_from_segment(
    segment: SegmentResponse | SegmentData | Mapping[str, Any],
    *,
    ids: IdGenerator | None = None,
) -> Tree:
    """
    Rebuild the editable tree of a saved segment.

    Accepts a response model, its ``segment_data`` or the raw JSON dict of
    either. A malformed payload opens as an empty tree.
    """
    if isinstance(segment, Mapping):
        raw = segment.get("segment_data", segment)
        try:
            segment = SegmentData.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                "Malformed segment payload, opening an empty tree",
                extra={"errors": e.errors(include_url=False, include_context=False)},
            )
            return deserialize(None, ids=ids)

    data = segment.segment_data if isinstance(segment, SegmentResponse) else segment
    return deserialize(data.filters, data.labels, ids=ids)


def build_preview_request(tree: Tree, date_from: dt.date, date_to: dt.date) -> PreviewRequest:
    return PreviewRequest(filters=serialize(tree), date_from=date_from, date_to=date_to)


def preview_query_params(
    tree: Tree,
    date_from: dt.date | None = None,
    date_to: dt.date | None = None,
) -> dict[str, str]:
    """
    Query string parameters for the preview endpoint.

    ``filters`` is canonical JSON text, so equal trees produce equal
    parameters and can share a cached response.
    """
    params = {"filters": to_canonical_json_string(serialize(tree))}
    if date_from is not None:
        params["date_from"] = date_from.isoformat()
    if date_to is not None:
        params["date_to"] = date_to.isoformat()
    return params


def segment_name_placeholder(tree: Tree, *, catalog: AttributeCatalog | None = None) -> str:
    """Suggested segment name derived from the filters, truncated to the name limit."""
    text = describe(tree, catalog=catalog)
    if len(text) <= MAX_SEGMENT_NAME_LENGTH:
        return text
    return text[: MAX_SEGMENT_NAME_LENGTH - 3].rstrip() + "..."
