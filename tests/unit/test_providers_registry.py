"""Unit tests for the provider registry and built-in registration."""

import pytest

from genmedia.core.providers import ProviderKind, get_registry
from genmedia.core.providers.registry import ProviderRegistry


@pytest.mark.unit
class TestProviderRegistry:
    @pytest.mark.parametrize("kind", list(ProviderKind))
    def test_every_kind_has_an_implementation(self, kind):
        impl = get_registry().get(kind)
        assert impl is not None
        assert impl.kind == kind
        assert impl.supports_reference_image is True

    def test_get_unknown_returns_none(self):
        assert ProviderRegistry().get(ProviderKind.ZHIPU) is None

    def test_kinds_contains_builtins(self):
        kinds = get_registry().kinds()
        assert set(kinds) == set(ProviderKind)

    def test_register_replaces(self):
        reg = ProviderRegistry()
        first, second = object(), object()
        reg.register(ProviderKind.MODELSCOPE, first)
        reg.register(ProviderKind.MODELSCOPE, second)
        assert reg.get(ProviderKind.MODELSCOPE) is second
