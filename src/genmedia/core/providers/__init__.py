"""
Provider adapters: protocol, registry, routing and built-in implementations.

Built-in adapters are registered lazily on first get_registry() call.
"""

from genmedia.core.providers.base import MediaProvider as MediaProvider
from genmedia.core.providers.base import ProviderKind as ProviderKind
from genmedia.core.providers.registry import ProviderRegistry
from genmedia.core.providers.registry import get_registry as _get_registry_impl

_builtins_registered = False


def _register_builtins(reg: ProviderRegistry) -> None:
    """Register built-in adapters. Called once when the registry is first used."""
    global _builtins_registered
    if _builtins_registered:
        return
    from genmedia.core.providers.modelscope import ModelScopeProvider
    from genmedia.core.providers.openai_compatible import OpenAICompatibleProvider
    from genmedia.core.providers.zhipu import ZhipuProvider

    reg.register(ProviderKind.ZHIPU, ZhipuProvider())
    reg.register(ProviderKind.MODELSCOPE, ModelScopeProvider())
    reg.register(ProviderKind.OPENAI_COMPATIBLE, OpenAICompatibleProvider())
    _builtins_registered = True


def get_registry() -> ProviderRegistry:
    """Return the global provider registry and ensure built-ins are registered."""
    reg = _get_registry_impl()
    _register_builtins(reg)
    return reg
