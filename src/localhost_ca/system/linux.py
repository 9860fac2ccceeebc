"""
Linux trust stores.

Two layouts are supported, tried in order:
- Debian family: /usr/local/share/ca-certificates + update-ca-certificates
- Red Hat family: /etc/pki/ca-trust/source/anchors + update-ca-trust
"""

from pathlib import Path
from typing import NamedTuple

from loguru import logger

from localhost_ca.errors import TrustStoreUnavailableError
from localhost_ca.system.base import CommandRunner


class AnchorStore(NamedTuple):
    directory: Path
    refresh: tuple[str, ...]


ANCHOR_STORES = (
    AnchorStore(Path("/usr/local/share/ca-certificates"), ("update-ca-certificates",)),
    AnchorStore(Path("/etc/pki/ca-trust/source/anchors"), ("update-ca-trust",)),
)


class LinuxTrustInstaller(CommandRunner):
    """Copies certificates into the system anchor directory and refreshes it."""

    def __init__(
        self,
        use_sudo: bool = True,
        stores: tuple[AnchorStore, ...] = ANCHOR_STORES,
    ):
        super().__init__(use_sudo)
        self.stores = stores

    def anchor_store(self) -> AnchorStore:
        """
        Find the first anchor directory present on this system.

        Raises:
            TrustStoreUnavailableError: If none of them exist
        """
        for store in self.stores:
            if store.directory.is_dir():
                return store

        raise TrustStoreUnavailableError(
            "No known trust store, tried: "
            + ", ".join(str(store.directory) for store in self.stores)
        )

    def install(self, certificate_path: str | Path) -> None:
        store = self.anchor_store()
        source = Path(certificate_path)
        destination = store.directory / f"localhost-{source.name}"

        self.run("cp", str(source), str(destination))
        self.run(*store.refresh)

        logger.info(f"Installed {source} into {store.directory}")
