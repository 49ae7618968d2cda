from __future__ import annotations

import pytest

from finledger.adapters.banking import (
    AdapterRegistry,
    BankAdapter,
    DkbAdapter,
    default_adapters,
)


def test_default_adapters_registers_dkb() -> None:
    registry = default_adapters()

    assert "dkb" in registry
    assert len(registry) == 1
    assert isinstance(registry.get("dkb"), BankAdapter)


def test_register_duplicate_raises() -> None:
    # input
    registry = AdapterRegistry()
    registry.register(DkbAdapter())

    # act / assert
    with pytest.raises(ValueError, match="already registered"):
        registry.register(DkbAdapter())
    assert registry.get("unknown") is None
    assert len(registry.all()) == 1
