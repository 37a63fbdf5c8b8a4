"""
Registry for provider adapters.

Maps each ProviderKind to the adapter instance that serves it.
"""

from genmedia.core.providers.base import MediaProvider, ProviderKind


class ProviderRegistry:
    """Registry mapping ProviderKind to a MediaProvider implementation."""

    def __init__(self) -> None:
        self._impls: dict[ProviderKind, MediaProvider] = {}

    def register(self, kind: ProviderKind, impl: MediaProvider) -> None:
        """Register an adapter. Re-registering a kind replaces the previous adapter."""
        self._impls[kind] = impl

    def get(self, kind: ProviderKind) -> MediaProvider | None:
        """Return the adapter registered for kind, or None."""
        return self._impls.get(kind)

    def kinds(self) -> list[ProviderKind]:
        """Return the registered provider kinds."""
        return list(self._impls.keys())


_registry: ProviderRegistry | None = None


def get_registry() -> ProviderRegistry:
    """Return the global provider registry. Creates it on first call."""
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry
