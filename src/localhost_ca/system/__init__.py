"""
System trust store installers.

Selects the installer for the running platform:
- darwin: login keychain via ``security add-trusted-cert``
- linux: ca-certificates / ca-trust anchor directories

Usage:
    from localhost_ca import Issuer, system

    installer = system.current()
    installer.install(Issuer.fetch().certificate_path)
"""

import sys

from localhost_ca.config import Settings, get_settings
from localhost_ca.errors import UnsupportedPlatformError
from localhost_ca.system.base import TrustInstaller
from localhost_ca.system.darwin import DarwinTrustInstaller
from localhost_ca.system.linux import LinuxTrustInstaller


def current(
    platform: str = sys.platform, settings: Settings | None = None
) -> TrustInstaller:
    """
    Get the trust store installer for a platform.

    Args:
        platform: Platform identifier as reported by ``sys.platform``
        settings: Settings controlling privilege escalation

    Returns:
        Installer for the platform

    Raises:
        UnsupportedPlatformError: If there is no installer for the platform
    """
    settings = settings or get_settings()

    if platform == "darwin":
        return DarwinTrustInstaller(use_sudo=settings.use_sudo)
    if platform.startswith("linux"):
        return LinuxTrustInstaller(use_sudo=settings.use_sudo)

    raise UnsupportedPlatformError(f"Unsupported platform: {platform}")


__all__ = [
    "DarwinTrustInstaller",
    "LinuxTrustInstaller",
    "TrustInstaller",
    "current",
]
