"""Registry of statement normalizers keyed by institution id."""

from __future__ import annotations

from finledger.adapters.normalizers.dkb import DkbCsvNormalizer
from finledger.adapters.normalizers.protocol import Normalizer
from finledger.adapters.normalizers.unified import UnifiedCsvNormalizer


class NormalizerRegistry:
    """
    Registry for statement normalizers.

    Example:
        registry = NormalizerRegistry()
        registry.register(DkbCsvNormalizer())
        normalizer = registry.get("dkb")
    """

    def __init__(self) -> None:
        self._normalizers: dict[str, Normalizer] = {}

    def register(self, normalizer: Normalizer) -> None:
        """
        Register a normalizer instance.

        Raises:
            ValueError: If the institution id is already registered
        """
        key = normalizer.institution_id
        if key in self._normalizers:
            raise ValueError(f"Normalizer for '{key}' already registered")
        self._normalizers[key] = normalizer

    def get(self, institution_id: str) -> Normalizer | None:
        return self._normalizers.get(institution_id)

    def all(self) -> list[Normalizer]:
        return list(self._normalizers.values())

    def __len__(self) -> int:
        return len(self._normalizers)

    def __contains__(self, institution_id: str) -> bool:
        return institution_id in self._normalizers


def default_normalizers() -> NormalizerRegistry:
    registry = NormalizerRegistry()
    registry.register(DkbCsvNormalizer())
    registry.register(UnifiedCsvNormalizer())
    return registry
