"""
Per-hostname TLS identities.

An Authority is a short-lived leaf key and certificate for one hostname.
It is either chained (signed by an Issuer, whose certificate is the trust
anchor) or standalone (self-signed, its own trust anchor).

Usage:
    from localhost_ca import Authority, Issuer

    issuer = Issuer.fetch()
    authority = Authority.fetch("localhost", issuer=issuer)

    server = authority.server_context()
    client = authority.client_context()
"""

import ipaddress
import os
import ssl
import tempfile
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from loguru import logger

from localhost_ca.identity import Identity
from localhost_ca.issuer import Issuer
from localhost_ca.state import State
from localhost_ca.store import TrustStore

DEFAULT_HOSTNAME = "localhost"

# Forward-secret AEAD suites only; TLS 1.3 suites are configured separately
# by OpenSSL and are all AEAD.
CIPHERS = "ECDHE+AESGCM:ECDHE+CHACHA20:DHE+AESGCM:DHE+CHACHA20:!aNULL"


class Authority(Identity):
    """
    A key and certificate for a single hostname.

    Attributes:
        hostname: Hostname the certificate is valid for, also the file stem
        path: Directory holding ``{hostname}.crt``/``{hostname}.key``
        issuer: Issuer signing the certificate, None for a self-signed one
    """

    # Private key size
    BITS = 2048

    # Certificate validity period. Clients reject leaf certificates valid
    # for more than 398 days.
    VALIDITY = timedelta(days=365)

    def __init__(
        self,
        hostname: str = DEFAULT_HOSTNAME,
        path: str | Path | None = None,
        issuer: Issuer | None = None,
    ):
        """
        Initialize the authority.

        Args:
            hostname: Hostname to issue the certificate for
            path: Directory for loading and saving the certificate and key
            issuer: Issuer to sign with, or None for a self-signed certificate
        """
        self.hostname = hostname
        self.issuer = issuer
        super().__init__(path)

        self._store: TrustStore | None = None

    def __repr__(self) -> str:
        return (
            f"Authority(hostname={self.hostname!r}, path={str(self.path)!r}, "
            f"issuer={self.issuer!r})"
        )

    @classmethod
    def list(cls, path: str | Path | None = None) -> Iterator["Authority"]:
        """
        Enumerate the authorities stored in a directory.

        Every ``*.crt`` file directly under ``path`` is tried; entries which
        fail to load are skipped.

        Args:
            path: Directory to scan, defaults to the state directory

        Yields:
            Loaded Authority instances, ordered by hostname
        """
        directory = Path(path) if path is not None else State.path(os.environ)

        for certificate_path in sorted(directory.glob("*.crt")):
            authority = cls(certificate_path.stem, path=directory)

            if authority.load():
                yield authority
            else:
                logger.debug(f"Skipping {certificate_path}, could not be loaded")

    @property
    def stem(self) -> str:
        return self.hostname

    @property
    def chained(self) -> bool:
        return self.issuer is not None

    def _accepts(self, certificate: x509.Certificate) -> bool:
        # Certificates with an old version need to be regenerated.
        if certificate.version != x509.Version.v3:
            logger.info(
                f"Stored certificate for {self.hostname} is {certificate.version.name}, "
                "regenerating"
            )
            return False
        return True

    def _build_certificate(self) -> x509.Certificate:
        """Build the leaf certificate, signed by the issuer when chained."""
        if self.issuer is not None:
            # The issuer certificate must exist before the leaf is signed.
            issuer_certificate = self.issuer.certificate
            issuer_name = issuer_certificate.subject
            signing_key = self.issuer.key
        else:
            issuer_name = self.subject
            signing_key = self.key

        now = datetime.now(UTC)
        public_key = self.key.public_key()

        builder = (
            x509.CertificateBuilder()
            .subject_name(self.subject)
            .issuer_name(issuer_name)
            .public_key(public_key)
            .serial_number(int(now.timestamp()))
            .not_valid_before(now)
            .not_valid_after(now + self.VALIDITY)
        )

        builder = builder.add_extension(
            x509.BasicConstraints(ca=False, path_length=None), critical=True
        )

        builder = builder.add_extension(
            x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False
        )

        builder = builder.add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(
                signing_key.public_key()
            ),
            critical=False,
        )

        builder = builder.add_extension(
            x509.SubjectAlternativeName([_subject_alt_name(self.hostname)]),
            critical=False,
        )

        return builder.sign(private_key=signing_key, algorithm=hashes.SHA256())

    @property
    def store(self) -> TrustStore:
        """The trust store used for validating this authority's certificate."""
        if self._store is None:
            if self.issuer is not None:
                self._store = TrustStore([self.issuer.certificate])
            else:
                self._store = TrustStore([self.certificate])
        return self._store

    @property
    def chain_pem(self) -> bytes:
        """Leaf certificate followed by the issuer certificate, if chained."""
        chain = [self.certificate]
        if self.issuer is not None:
            chain.append(self.issuer.certificate)

        return b"".join(
            certificate.public_bytes(serialization.Encoding.PEM)
            for certificate in chain
        )

    def server_context(
        self, protocol: int = ssl.PROTOCOL_TLS_SERVER
    ) -> ssl.SSLContext:
        """
        Build a server-side TLS context presenting this authority.

        Clients are not asked for certificates.

        Args:
            protocol: SSL protocol constant for the context

        Returns:
            Configured ssl.SSLContext
        """
        context = ssl.SSLContext(protocol)
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        context.set_ciphers(CIPHERS)
        context.verify_mode = ssl.CERT_NONE

        key_pem = self.key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

        # ssl.SSLContext.load_cert_chain requires file paths.
        with tempfile.TemporaryDirectory(prefix="localhost-ca-") as directory:
            chain_path = Path(directory, f"{self.hostname}.crt")
            key_path = Path(directory, f"{self.hostname}.key")

            chain_path.write_bytes(self.chain_pem)
            key_path.touch(mode=0o600)
            key_path.write_bytes(key_pem)

            context.load_cert_chain(str(chain_path), str(key_path))

        return context

    def client_context(
        self, protocol: int = ssl.PROTOCOL_TLS_CLIENT
    ) -> ssl.SSLContext:
        """
        Build a client-side TLS context trusting only this authority's anchor.

        Args:
            protocol: SSL protocol constant for the context

        Returns:
            Configured ssl.SSLContext with mandatory peer verification
        """
        context = ssl.SSLContext(protocol)
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        context.verify_mode = ssl.CERT_REQUIRED
        context.check_hostname = True
        context.load_verify_locations(cadata=self.store.pem.decode("ascii"))

        return context


def _subject_alt_name(hostname: str) -> x509.GeneralName:
    try:
        return x509.IPAddress(ipaddress.ip_address(hostname))
    except ValueError:
        return x509.DNSName(hostname)
