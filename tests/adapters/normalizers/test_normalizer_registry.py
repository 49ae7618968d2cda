from __future__ import annotations

import pytest

from finledger.adapters.normalizers import (
    NormalizerRegistry,
    UnifiedCsvNormalizer,
    default_normalizers,
)


def test_default_normalizers_registers_builtin_formats() -> None:
    registry = default_normalizers()

    assert len(registry) == 2
    assert "dkb" in registry
    assert "unified" in registry
    assert registry.get("missing") is None


def test_register_duplicate_raises() -> None:
    # input
    registry = NormalizerRegistry()
    registry.register(UnifiedCsvNormalizer())

    # act / assert
    with pytest.raises(ValueError, match="already registered"):
        registry.register(UnifiedCsvNormalizer())
    assert [n.institution_id for n in registry.all()] == ["unified"]
