"""Statement normalizers."""

from finledger.adapters.normalizers.dkb import DkbCsvNormalizer
from finledger.adapters.normalizers.protocol import (
    NormalizationResult,
    Normalizer,
    RejectedRow,
)
from finledger.adapters.normalizers.registry import (
    NormalizerRegistry,
    default_normalizers,
)
from finledger.adapters.normalizers.unified import UnifiedCsvNormalizer

__all__ = [
    "DkbCsvNormalizer",
    "NormalizationResult",
    "Normalizer",
    "NormalizerRegistry",
    "RejectedRow",
    "UnifiedCsvNormalizer",
    "default_normalizers",
]
