"""Delimited-text helpers shared by statement normalizers."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import io

from finledger.adapters.normalizers.protocol import RejectedRow
from finledger.errors import ValidationError


@dataclass(frozen=True)
class TableRow:
    line_number: int
    values: dict[str, str]


def read_table(
    raw_text: str,
    *,
    delimiter: str,
    required_columns: tuple[str, ...],
) -> tuple[list[TableRow], list[RejectedRow]]:
    """Split delimited text into header-keyed rows.

    The header is the first row holding every required column, which lets
    exports with a preamble (account name, balance lines) through. Rows whose
    cell count differs from the header are rejected whole.

    Raises:
        ValidationError: If no row holds all required columns.
    """
    reader = csv.reader(io.StringIO(raw_text), delimiter=delimiter)

    header: list[str] | None = None
    first_seen: list[str] | None = None
    rows: list[TableRow] = []
    rejected: list[RejectedRow] = []

    for cells in reader:
        line_number = reader.line_num
        cleaned = [c.strip() for c in cells]
        if not any(cleaned):
            continue

        if header is None:
            if first_seen is None:
                first_seen = cleaned
            if all(col in cleaned for col in required_columns):
                header = cleaned
            continue

        if len(cleaned) != len(header):
            content = {
                (header[i] if i < len(header) else f"column_{i + 1}"): value
                for i, value in enumerate(cleaned)
            }
            rejected.append(
                RejectedRow(
                    line_number=line_number,
                    content=content,
                    reason=(
                        f"expected {len(header)} columns, found {len(cleaned)}"
                    ),
                )
            )
            continue

        rows.append(
            TableRow(line_number=line_number, values=dict(zip(header, cleaned)))
        )

    if header is None:
        seen = first_seen or []
        missing = [col for col in required_columns if col not in seen]
        raise ValidationError(
            "Statement header is missing required columns: " + ", ".join(missing)
        )

    return rows, rejected


def parse_decimal_amount(value: str, *, decimal_comma: bool) -> float:
    """Parse ``-1.234,56`` (decimal comma) or ``-1,234.56`` into a float.

    Raises:
        ValueError: If the value is empty or not a number.
    """
    text = value.replace("€", "").replace("\u00a0", "").replace(" ", "").strip()
    if not text:
        raise ValueError("empty amount")
    if decimal_comma:
        text = text.replace(".", "").replace(",", ".")
    else:
        text = text.replace(",", "")
    try:
        amount = Decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"invalid amount {value!r}")
    return float(amount)
