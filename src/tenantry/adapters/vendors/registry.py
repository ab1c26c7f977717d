"""Vendor adapter registry.

Provides a singleton registry mapping vendor names to adapter classes. The
closed set of vendors is whatever has been registered with register_vendor.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from tenantry.adapters.vendors.base import DEFAULT_TIMEOUT_SECONDS, BaseVendorAdapter

T = TypeVar("T", bound=BaseVendorAdapter)


class VendorRegistry:
    """Singleton registry for vendor adapters.

    Adapter instances are created lazily and shared, since adapters keep no
    per-tenant state.
    """

    _instance: VendorRegistry | None = None
    _adapters: dict[str, type[BaseVendorAdapter]]
    _instances: dict[str, BaseVendorAdapter]
    timeout_seconds: float

    def __new__(cls) -> VendorRegistry:
        """Create or return the singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._adapters = {}
            cls._instance._instances = {}
            cls._instance.timeout_seconds = DEFAULT_TIMEOUT_SECONDS
        return cls._instance

    @classmethod
    def get_instance(cls) -> VendorRegistry:
        """Get the singleton instance."""
        return cls()

    def register(self, name: str, adapter_class: type[BaseVendorAdapter]) -> None:
        """Register an adapter class under a vendor name."""
        self._adapters[name] = adapter_class
        self._instances.pop(name, None)

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)
        self._instances.pop(name, None)

    def configure(self, timeout_seconds: float) -> None:
        """Set the per-call HTTP timeout for adapters created from now on."""
        self.timeout_seconds = timeout_seconds
        self._instances.clear()

    def get(self, vendor: str) -> BaseVendorAdapter | None:
        """Adapter for a vendor name, or None if unsupported."""
        adapter = self._instances.get(vendor)
        if adapter is None:
            adapter_class = self._adapters.get(vendor)
            if adapter_class is None:
                return None
            adapter = adapter_class(timeout_seconds=self.timeout_seconds)
            self._instances[vendor] = adapter
        return adapter

    def is_registered(self, vendor: str) -> bool:
        return vendor in self._adapters

    def supported_vendors(self) -> list[str]:
        """Names of all registered vendors."""
        return list(self._adapters.keys())


def register_vendor(name: str) -> Callable[[type[T]], type[T]]:
    """Decorator to register a vendor adapter class.

    Usage:
        @register_vendor("openai")
        class OpenAIAdapter(BaseVendorAdapter):
            ...

    Args:
        name: Vendor name used as the registry key.

    Returns:
        Decorator function.
    """

    def decorator(cls: type[T]) -> type[T]:
        cls.name = name
        VendorRegistry.get_instance().register(name, cls)
        return cls

    return decorator


# Global registry instance
_registry = VendorRegistry.get_instance()


def get_registry() -> VendorRegistry:
    """Get the global vendor registry instance."""
    return _registry
