"""Content-addressed transaction identity."""

from __future__ import annotations

from decimal import Decimal
import hashlib
import json
import math
import unicodedata

from finledger.models.ledger import CanonicalFields, Transaction, TransactionSource

__all__ = ["assign_identity", "canonical_amount", "compute_transaction_id"]


def _normalize_text(value: str | None) -> str:
    if value is None:
        return ""
    return unicodedata.normalize("NFC", value.strip())


def canonical_amount(amount: float) -> str:
    """Render an amount with exactly two decimals (``-20.00``, ``0.00``)."""
    if not math.isfinite(amount):
        raise ValueError(f"amount must be finite, got {amount!r}")
    quantized = Decimal(str(amount)).quantize(Decimal("0.01"))
    if quantized == 0:
        return "0.00"
    return format(quantized, "f")


def compute_transaction_id(fields: CanonicalFields) -> str:
    """
    Deterministic SHA256 hex digest identifying a real-world transaction event.

    The digest covers, in order: account id, ISO date, amount, description,
    counterparty and external reference. Raw payloads, currency and
    import-time data are excluded so re-imports of the same statement
    collapse onto the same id.
    """
    account_id = _normalize_text(fields.account_id)
    if not account_id:
        raise ValueError("account_id must be a non-empty string")

    payload = [
        account_id,
        fields.date.isoformat(),
        canonical_amount(fields.amount),
        _normalize_text(fields.description),
        _normalize_text(fields.counterparty),
        _normalize_text(fields.external_reference),
    ]
    data = json.dumps(payload, separators=(",", ":"), ensure_ascii=True)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def assign_identity(
    fields: CanonicalFields, source: TransactionSource
) -> Transaction:
    """Build the stored Transaction for a canonical field-set."""
    return Transaction(
        **fields.model_dump(),
        transaction_id=compute_transaction_id(fields),
        source=source,
    )
