"""Two-stage parsing of the fenced ticket block in assistant replies.

Stage one locates the first ```` ```json ```` fence and returns its body.
Stage two parses that body strictly into a :class:`ExtractionResult`.
"""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from .models import ExtractionResult, QuarantinedDraft, TicketDraft

logger = logging.getLogger(__name__)

_FENCED_BLOCK_RE = re.compile(r"```json\s*(?P<body>.*?)\s*```", re.DOTALL)


class MalformedPayloadError(ValueError):
    """Raised when a structured block is present but unusable."""


def _reject_constant(name: str) -> float:
    raise MalformedPayloadError(f"Non-standard JSON constant: {name}")


def locate_structured_block(text: str) -> str | None:
    """Return the body of the first fenced JSON block, if any."""

    if not text:
        return None
    match = _FENCED_BLOCK_RE.search(text)
    if match is None:
        return None
    return match.group("body")


def parse_ticket_batch(block: str) -> ExtractionResult:
    """Parse a ``{"tickets": [...]}`` document.

    Drafts missing required fields are quarantined rather than dropped
    silently; the remaining drafts keep their declared order.
    """

    try:
        document = json.loads(block, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise MalformedPayloadError(f"Invalid JSON payload: {exc.msg}") from exc

    if not isinstance(document, dict):
        raise MalformedPayloadError("Ticket payload must be a JSON object")
    raw_tickets = document.get("tickets")
    if not isinstance(raw_tickets, list):
        raise MalformedPayloadError("Ticket payload has no 'tickets' list")

    result = ExtractionResult(block_found=True)
    for index, raw in enumerate(raw_tickets):
        try:
            result.drafts.append(TicketDraft.model_validate(raw))
        except ValidationError as exc:
            fields = sorted({".".join(str(part) for part in error["loc"]) or "<root>" for error in exc.errors()})
            result.quarantined.append(
                QuarantinedDraft(index=index, raw=raw, reason=f"invalid fields: {', '.join(fields)}")
            )
    return result


def extract_ticket_drafts(text: str) -> ExtractionResult:
    """Scan assistant text for a ticket batch.

    Absent or malformed payloads yield an empty result; most replies carry
    no tickets at all.
    """

    block = locate_structured_block(text)
    if block is None:
        return ExtractionResult()

    try:
        result = parse_ticket_batch(block)
    except MalformedPayloadError as exc:
        logger.warning("Ignoring malformed ticket payload: %s", exc)
        return ExtractionResult(block_found=True)

    for item in result.quarantined:
        logger.warning("Quarantined ticket draft #%d: %s", item.index, item.reason)
    return result


def strip_structured_blocks(text: str) -> str:
    """Remove every fenced JSON block from text shown to the end user."""

    return _FENCED_BLOCK_RE.sub("", text or "").strip()
