"""
Shared key/certificate lifecycle for issuers and authorities.

An identity is an RSA key and an X.509 certificate stored side by side:
    {path}/
        {stem}.crt    PEM certificate
        {stem}.key    PEM private key (PKCS#8)
        {stem}.lock   lockfile, only used to serialise writers

Key and certificate are generated lazily on first access and reach the
disk only through ``save``.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Self

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from loguru import logger

from localhost_ca.locking import FileLock
from localhost_ca.state import State

# Organization placed in every subject this package generates
ORGANIZATION = "localhost.py"

PUBLIC_EXPONENT = 65537


class Identity(ABC):
    """
    Base class for a named RSA key and certificate pair.

    Subclasses define the file stem, the key size and how the certificate
    is built.
    """

    BITS: int

    def __init__(self, path: str | Path | None = None):
        """
        Initialize the identity.

        Args:
            path: Directory for loading and saving, defaults to the state directory
        """
        self.path = Path(path) if path is not None else State.path(os.environ)

        self._subject: x509.Name | None = None
        self._key: rsa.RSAPrivateKey | None = None
        self._certificate: x509.Certificate | None = None

    @classmethod
    def fetch(cls, *args, **kwargs) -> Self:
        """
        Load the identity from disk, or create and save it.

        Accepts the same arguments as the constructor.
        """
        identity = cls(*args, **kwargs)

        if not identity.load():
            identity.save()

        return identity

    @property
    @abstractmethod
    def stem(self) -> str:
        """File name stem shared by the key, certificate and lockfile."""

    @property
    def key_path(self) -> Path:
        return self.path / f"{self.stem}.key"

    @property
    def certificate_path(self) -> Path:
        return self.path / f"{self.stem}.crt"

    @property
    def lockfile_path(self) -> Path:
        return self.path / f"{self.stem}.lock"

    @property
    def subject(self) -> x509.Name:
        """Distinguished name: O=localhost.py, CN={stem}."""
        if self._subject is None:
            self._subject = x509.Name(
                [
                    x509.NameAttribute(NameOID.ORGANIZATION_NAME, ORGANIZATION),
                    x509.NameAttribute(NameOID.COMMON_NAME, self.stem),
                ]
            )
        return self._subject

    @subject.setter
    def subject(self, subject: x509.Name) -> None:
        self._subject = subject

    @property
    def key(self) -> rsa.RSAPrivateKey:
        if self._key is None:
            logger.info(f"Generating {self.BITS}-bit RSA key for {self.stem}")
            self._key = rsa.generate_private_key(
                public_exponent=PUBLIC_EXPONENT, key_size=self.BITS
            )
        return self._key

    @property
    def certificate(self) -> x509.Certificate:
        if self._certificate is None:
            self._certificate = self._build_certificate()
            logger.info(
                f"Generated certificate for {self.stem}, "
                f"serial={self._certificate.serial_number}, "
                f"expires={self._certificate.not_valid_after_utc.isoformat()}"
            )
        return self._certificate

    @abstractmethod
    def _build_certificate(self) -> x509.Certificate:
        """Build and sign the certificate for this identity."""

    def _accepts(self, certificate: x509.Certificate) -> bool:
        """Whether a certificate read from disk may be used as is."""
        return True

    def load(self, path: str | Path | None = None) -> bool:
        """
        Load the certificate and key from disk.

        Args:
            path: Directory to load from, defaults to ``self.path``

        Returns:
            True if both files were present and usable, False otherwise
        """
        directory = Path(path) if path is not None else self.path
        certificate_path = directory / self.certificate_path.name
        key_path = directory / self.key_path.name

        if not (certificate_path.is_file() and key_path.is_file()):
            logger.debug(f"No stored key material for {self.stem} in {directory}")
            return False

        try:
            certificate = x509.load_pem_x509_certificate(certificate_path.read_bytes())
            key = serialization.load_pem_private_key(key_path.read_bytes(), password=None)
        except (
            ValueError,
            TypeError,
            OSError,
            x509.InvalidVersion,
            UnsupportedAlgorithm,
        ) as e:
            logger.warning(f"Could not load key material for {self.stem}: {e}")
            return False

        if not isinstance(key, rsa.RSAPrivateKey):
            logger.warning(f"Stored key for {self.stem} is not an RSA key")
            return False

        if not self._accepts(certificate):
            return False

        self._certificate = certificate
        self._key = key

        logger.debug(f"Loaded {self.stem} from {directory}")
        return True

    def save(self, path: str | Path | None = None) -> bool:
        """
        Save the certificate and key to disk under an exclusive lock.

        The certificate is generated (if needed) before anything is
        written, so a generation failure leaves no files behind.

        Args:
            path: Directory to save to, defaults to ``self.path``

        Returns:
            True once both files have been written
        """
        directory = Path(path) if path is not None else self.path

        if not directory.is_dir():
            directory.mkdir(mode=0o700, parents=True, exist_ok=True)

        with FileLock(directory / self.lockfile_path.name):
            certificate_pem = self.certificate.public_bytes(serialization.Encoding.PEM)
            key_pem = self.key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )

            (directory / self.certificate_path.name).write_bytes(certificate_pem)

            key_path = directory / self.key_path.name
            # Restrict the key file before any key bytes reach it
            key_path.touch(mode=0o600)
            try:
                key_path.chmod(0o600)
            except OSError as e:
                logger.warning(f"Could not set file permissions: {e}")

            key_path.write_bytes(key_pem)

        logger.info(f"Saved {self.stem} to {directory}")
        return True
