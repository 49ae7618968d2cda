"""Normalizer protocol: raw statement text to canonical transaction fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from finledger.models.ledger import CanonicalFields


@dataclass(frozen=True)
class RejectedRow:
    """A statement row that could not be normalized.

    Attributes:
        line_number: 1-based physical line in the uploaded text.
        content: The row as read, keyed by header name.
        reason: Why the row was dropped.
    """

    line_number: int
    content: dict[str, str]
    reason: str


@dataclass
class NormalizationResult:
    fields: list[CanonicalFields] = field(default_factory=list)
    rejected: list[RejectedRow] = field(default_factory=list)


@runtime_checkable
class Normalizer(Protocol):
    """Converts one institution's statement export into canonical fields.

    Implementations must be deterministic for the same input, must never
    assign transaction ids, and must report malformed rows in
    ``NormalizationResult.rejected`` instead of merging them into others.
    A header lacking required columns raises ``ValidationError``.
    """

    @property
    def institution_id(self) -> str:
        """Registry key (e.g. 'dkb')."""
        ...

    def normalize(self, raw_text: str, account_id: str) -> NormalizationResult:
        ...
