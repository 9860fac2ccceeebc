"""Darwin trust store: the user's login keychain."""

from pathlib import Path

from localhost_ca.system.base import CommandRunner

LOGIN_KEYCHAIN = "~/Library/Keychains/login.keychain-db"


class DarwinTrustInstaller(CommandRunner):
    """Adds certificates to the login keychain as trusted roots."""

    def __init__(self, use_sudo: bool = True, keychain: str | Path = LOGIN_KEYCHAIN):
        super().__init__(use_sudo)
        self.keychain = Path(keychain).expanduser()

    def install(self, certificate_path: str | Path) -> None:
        self.run(
            "security",
            "add-trusted-cert",
            "-d",
            "-r",
            "trustRoot",
            "-k",
            str(self.keychain),
            str(certificate_path),
        )
