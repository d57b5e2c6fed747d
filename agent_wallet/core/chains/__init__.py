"""Chain metadata registry."""

from .constants import DEFAULT_CHAIN_CONFIGS, DEFAULT_CHAIN_KEY, NATIVE_PLACEHOLDER
from .models import ChainDescriptor, NativeCurrency
from .registry import ChainRegistry

__all__ = [
    "ChainDescriptor",
    "ChainRegistry",
    "NativeCurrency",
    "DEFAULT_CHAIN_CONFIGS",
    "DEFAULT_CHAIN_KEY",
    "NATIVE_PLACEHOLDER",
]
