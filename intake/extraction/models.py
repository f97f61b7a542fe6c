from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TicketDraft(BaseModel):
    """Ticket as declared by the completion service, prior to registration.

    Only the structure is enforced. ``priority`` is carried through as the
    declared text and dependency identifiers are never resolved.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    title: str = Field(..., min_length=1)
    description: str
    acceptance_criteria: list[str] = Field(..., min_length=1)
    technical_notes: str | None = None
    estimated_hours: float = Field(..., ge=0, allow_inf_nan=False)
    priority: str
    dependencies: list[str] = Field(default_factory=list)

    @field_validator("dependencies", mode="before")
    @classmethod
    def _null_dependencies(cls, value: Any) -> Any:
        return [] if value is None else value


@dataclass(slots=True)
class QuarantinedDraft:
    """A declared ticket that failed structural validation."""

    index: int
    raw: Any
    reason: str


@dataclass(slots=True)
class ExtractionResult:
    """Outcome of scanning one assistant reply for a ticket batch."""

    drafts: list[TicketDraft] = field(default_factory=list)
    quarantined: list[QuarantinedDraft] = field(default_factory=list)
    block_found: bool = False

    def __bool__(self) -> bool:
        return bool(self.drafts)
