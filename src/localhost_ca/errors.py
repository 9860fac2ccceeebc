"""
Exceptions raised by localhost_ca.

Missing or stale key material is not an error: ``load`` reports it by
returning ``False``. Exceptions are reserved for the trust store installers
and for conditions the caller has to act on.
"""


class LocalhostError(Exception):
    """Base class for all localhost_ca errors."""


class UnsupportedPlatformError(LocalhostError):
    """No trust store installer exists for the running platform."""


class TrustStoreUnavailableError(LocalhostError):
    """None of the known system trust store directories exist."""


class InstallError(LocalhostError):
    """
    A trust store command exited with a non-zero status.

    Attributes:
        command: The argument vector that was executed
        returncode: Exit status of the command
    """

    def __init__(self, command: list[str], returncode: int):
        self.command = command
        self.returncode = returncode
        super().__init__(
            f"Command {' '.join(command)!r} failed with exit status {returncode}"
        )
