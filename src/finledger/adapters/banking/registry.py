"""Central registry for bank adapters."""

from __future__ import annotations

from finledger.adapters.banking.dkb import DkbAdapter
from finledger.adapters.banking.protocol import BankAdapter


class AdapterRegistry:
    """
    Registry of bank adapters keyed by institution id.

    Adding an institution means registering another adapter; the sync
    service only ever talks to the registry.

    Example:
        registry = AdapterRegistry()
        registry.register(DkbAdapter())
        adapter = registry.get("dkb")
    """

    def __init__(self) -> None:
        self._adapters: dict[str, BankAdapter] = {}

    def register(self, adapter: BankAdapter) -> None:
        """
        Register an adapter instance.

        Raises:
            ValueError: If an adapter for the same institution is registered
        """
        if adapter.institution_id in self._adapters:
            raise ValueError(
                f"Adapter for '{adapter.institution_id}' already registered"
            )
        self._adapters[adapter.institution_id] = adapter

    def get(self, institution_id: str) -> BankAdapter | None:
        return self._adapters.get(institution_id)

    def all(self) -> list[BankAdapter]:
        return list(self._adapters.values())

    def __len__(self) -> int:
        return len(self._adapters)

    def __contains__(self, institution_id: str) -> bool:
        return institution_id in self._adapters


def default_adapters() -> AdapterRegistry:
    registry = AdapterRegistry()
    registry.register(DkbAdapter())
    return registry
