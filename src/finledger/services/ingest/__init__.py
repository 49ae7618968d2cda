"""Transaction ingestion."""

from finledger.services.ingest.pipeline import (
    IngestionPipeline,
    IngestLogger,
    IngestResult,
)
from finledger.services.ingest.upload import UploadImporter, UploadResult

__all__ = [
    "IngestLogger",
    "IngestResult",
    "IngestionPipeline",
    "UploadImporter",
    "UploadResult",
]
