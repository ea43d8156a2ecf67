"""ERP platform adapter factory.

Provides get_platform() / set_platform() to swap implementations. FakePlatform
is the only built-in adapter; production deployments install their own
ErpPlatform through set_platform().
"""

import os

from deposits.platform.port import ErpPlatform

_current_platform: ErpPlatform | None = None


def get_platform() -> ErpPlatform:
    """Return the configured platform adapter (singleton).

    Uses FakePlatform by default. Configure via the ERP_PLATFORM_ADAPTER
    environment variable.
    """
    global _current_platform
    if _current_platform is None:
        adapter = os.environ.get("ERP_PLATFORM_ADAPTER", "fake")
        if adapter == "fake":
            from deposits.platform.fake_adapter import FakePlatform

            _current_platform = FakePlatform()
        else:
            raise ValueError(f"Unknown ERP platform adapter: {adapter}")
    return _current_platform


def set_platform(platform: ErpPlatform) -> None:
    """Override the active platform adapter."""
    global _current_platform
    _current_platform = platform


def reset_platform() -> None:
    """Reset the platform singleton (useful for testing)."""
    global _current_platform
    _current_platform = None
