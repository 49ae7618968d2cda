"""Normalizer for the institution-neutral CSV layout."""

from __future__ import annotations

from datetime import date

from finledger.adapters.normalizers.protocol import NormalizationResult, RejectedRow
from finledger.adapters.normalizers.tabular import parse_decimal_amount, read_table
from finledger.models.ledger import CanonicalFields

REQUIRED_COLUMNS = ("date", "amount", "description")


class UnifiedCsvNormalizer:
    """
    Comma-separated ``date,amount,description[,counterparty][,reference][,currency]``.

    Dates are ISO (``2024-01-05``), amounts use a decimal point and are signed
    (negative = expense).
    """

    institution_id = "unified"

    def normalize(self, raw_text: str, account_id: str) -> NormalizationResult:
        rows, rejected = read_table(
            raw_text, delimiter=",", required_columns=REQUIRED_COLUMNS
        )
        result = NormalizationResult(rejected=list(rejected))

        for row in rows:
            values = row.values
            try:
                booked_on = date.fromisoformat(values["date"])
                amount = parse_decimal_amount(values["amount"], decimal_comma=False)
            except ValueError as exc:
                result.rejected.append(
                    RejectedRow(
                        line_number=row.line_number, content=values, reason=str(exc)
                    )
                )
                continue

            result.fields.append(
                CanonicalFields(
                    account_id=account_id,
                    date=booked_on,
                    amount=amount,
                    description=values["description"],
                    counterparty=values.get("counterparty", ""),
                    currency=values.get("currency") or "EUR",
                    external_reference=values.get("reference") or None,
                    raw_source=dict(values),
                )
            )

        return result
