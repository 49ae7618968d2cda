"""CSV upload entry point."""

from __future__ import annotations

from dataclasses import dataclass, field

from finledger.adapters.normalizers import NormalizerRegistry, RejectedRow
from finledger.adapters.store import LedgerStore
from finledger.errors import ValidationError
from finledger.services.ingest.pipeline import IngestionPipeline, IngestLogger


@dataclass(frozen=True)
class UploadResult:
    new_transactions_count: int
    duplicate_count: int
    rejected_rows: list[RejectedRow] = field(default_factory=list)


class UploadImporter:
    """
    Imports an uploaded bank statement into one account.

    Example:
        importer = UploadImporter(store, default_normalizers())
        result = importer.import_upload(data, "acc_1", institution_id="dkb")
    """

    def __init__(
        self,
        store: LedgerStore,
        normalizers: NormalizerRegistry,
        *,
        ingest_logger: IngestLogger | None = None,
    ) -> None:
        self._normalizers = normalizers
        self._pipeline = IngestionPipeline(store, ingest_logger=ingest_logger)

    def import_upload(
        self,
        raw_bytes: bytes,
        account_id: str,
        institution_id: str = "unified",
    ) -> UploadResult:
        """
        Decode, normalize and ingest one statement file.

        Raises:
            ValidationError: If the bytes are not UTF-8 text, the institution
                has no normalizer, or the header is unusable
        """
        normalizer = self._normalizers.get(institution_id)
        if normalizer is None:
            raise ValidationError(f"No normalizer registered for {institution_id!r}")

        try:
            raw_text = raw_bytes.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ValidationError(f"Upload is not valid UTF-8 text: {exc}") from exc

        normalized = normalizer.normalize(raw_text, account_id)
        ingested = self._pipeline.ingest(account_id, normalized.fields, source="csv")
        return UploadResult(
            new_transactions_count=ingested.accepted_count,
            duplicate_count=ingested.duplicate_count,
            rejected_rows=list(normalized.rejected),
        )
