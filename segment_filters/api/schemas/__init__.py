"""
Pydantic schemas for the segment and preview payloads.

The HTTP layer itself lives outside this package; these models describe what
it sends and receives.
"""

# Re-export schemas for convenient imports.
from .preview import PreviewDay as PreviewDay
from .preview import PreviewRequest as PreviewRequest
from .preview import PreviewResult as PreviewResult
from .preview import PreviewTotals as PreviewTotals
from .segment import SegmentCreate as SegmentCreate
from .segment import SegmentData as SegmentData
from .segment import SegmentResponse as SegmentResponse
from .segment import SegmentUpdate as SegmentUpdate
