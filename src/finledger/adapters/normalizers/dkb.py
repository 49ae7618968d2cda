"""DKB (Deutsche Kreditbank) CSV export normalizer."""

from __future__ import annotations

from datetime import date, datetime

from finledger.adapters.normalizers.protocol import NormalizationResult, RejectedRow
from finledger.adapters.normalizers.tabular import (
    TableRow,
    parse_decimal_amount,
    read_table,
)
from finledger.models.ledger import CanonicalFields

BOOKING_DATE = "Buchungsdatum"
VALUE_DATE = "Wertstellung"
STATUS = "Status"
PAYER = "Zahlungspflichtige*r"
PAYEE = "Zahlungsempfänger*in"
PURPOSE = "Verwendungszweck"
AMOUNT = "Betrag (€)"

REQUIRED_COLUMNS = (BOOKING_DATE, STATUS, PAYER, PAYEE, AMOUNT)

BOOKED = "Gebucht"
PENDING = "Vorgemerkt"


def parse_dkb_date(value: str) -> date:
    """Parse ``17.05.24`` or ``17.05.2024``."""
    text = value.strip()
    for fmt in ("%d.%m.%y", "%d.%m.%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid date {value!r}")


class DkbCsvNormalizer:
    """
    Normalizes the semicolon-separated DKB Girokonto export.

    The export starts with a few preamble lines (account, balance) before the
    header. The value date is preferred over the booking date since the bank
    API reports transactions by value date. The counterparty is the payee for
    expenses and the payer for income.
    """

    institution_id = "dkb"

    def normalize(self, raw_text: str, account_id: str) -> NormalizationResult:
        rows, rejected = read_table(
            raw_text, delimiter=";", required_columns=REQUIRED_COLUMNS
        )
        result = NormalizationResult(rejected=list(rejected))

        for row in rows:
            status = row.values.get(STATUS, "")
            if status == PENDING:
                result.rejected.append(
                    RejectedRow(
                        line_number=row.line_number,
                        content=row.values,
                        reason="pending booking, re-import once booked",
                    )
                )
                continue
            if status != BOOKED:
                result.rejected.append(
                    RejectedRow(
                        line_number=row.line_number,
                        content=row.values,
                        reason=f"unknown status {status!r}",
                    )
                )
                continue
            try:
                result.fields.append(self._to_fields(row, account_id))
            except ValueError as exc:
                result.rejected.append(
                    RejectedRow(
                        line_number=row.line_number,
                        content=row.values,
                        reason=str(exc),
                    )
                )

        return result

    def _to_fields(self, row: TableRow, account_id: str) -> CanonicalFields:
        values = row.values
        value_date = values.get(VALUE_DATE, "")
        booked_on = parse_dkb_date(value_date or values[BOOKING_DATE])
        amount = parse_decimal_amount(values[AMOUNT], decimal_comma=True)
        counterparty = values[PAYEE] if amount < 0 else values[PAYER]

        return CanonicalFields(
            account_id=account_id,
            date=booked_on,
            amount=amount,
            description=values.get(PURPOSE, ""),
            counterparty=counterparty,
            currency="EUR",
            raw_source=dict(values),
        )
