"""Structured ticket payload extraction from assistant replies."""

from .models import ExtractionResult, QuarantinedDraft, TicketDraft
from .payload import (
    MalformedPayloadError,
    extract_ticket_drafts,
    locate_structured_block,
    parse_ticket_batch,
    strip_structured_blocks,
)

__all__ = [
    "ExtractionResult",
    "QuarantinedDraft",
    "TicketDraft",
    "MalformedPayloadError",
    "extract_ticket_drafts",
    "locate_structured_block",
    "parse_ticket_batch",
    "strip_structured_blocks",
]
