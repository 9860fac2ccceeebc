"""
Locally-trusted TLS certificates for development.

A local root Issuer signs per-hostname Authorities. Key material is kept
in the state directory (``$XDG_STATE_HOME/localhost.py``) and can be
installed into the system trust store with ``localhost_ca.system``.
"""

from localhost_ca.authority import Authority
from localhost_ca.errors import (
    InstallError,
    LocalhostError,
    TrustStoreUnavailableError,
    UnsupportedPlatformError,
)
from localhost_ca.issuer import Issuer
from localhost_ca.state import State
from localhost_ca.store import TrustStore

__version__ = "1.0.0"

__all__ = [
    "Authority",
    "InstallError",
    "Issuer",
    "LocalhostError",
    "State",
    "TrustStore",
    "TrustStoreUnavailableError",
    "UnsupportedPlatformError",
    "__version__",
]
