"""
Trust store used to validate Authority certificates.

Holds a set of trust anchors and checks that a certificate either is one
of them or is directly issued by one of them. Chains deeper than one
level are not supported.
"""

from collections.abc import Iterable, Iterator
from datetime import UTC, datetime

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from loguru import logger


class TrustStore:
    """A set of certificates treated as authoritative for chain validation."""

    def __init__(self, certificates: Iterable[x509.Certificate] = ()):
        self._certificates: list[x509.Certificate] = []

        for certificate in certificates:
            self.add(certificate)

    def add(self, certificate: x509.Certificate) -> None:
        """Add a trust anchor. Duplicates are ignored."""
        if certificate not in self._certificates:
            self._certificates.append(certificate)

    def __contains__(self, certificate: object) -> bool:
        return certificate in self._certificates

    def __iter__(self) -> Iterator[x509.Certificate]:
        return iter(self._certificates)

    def __len__(self) -> int:
        return len(self._certificates)

    @property
    def pem(self) -> bytes:
        """All anchors as concatenated PEM, suitable for ``cadata``."""
        return b"".join(
            certificate.public_bytes(serialization.Encoding.PEM)
            for certificate in self._certificates
        )

    def verify(self, certificate: x509.Certificate, at: datetime | None = None) -> bool:
        """
        Verify a certificate against the trust anchors.

        Args:
            certificate: Certificate to verify
            at: Verification time, defaults to now; naive values are taken as UTC

        Returns:
            True if the certificate is an anchor or is signed by a CA anchor,
            and every certificate involved is valid at the given time
        """
        at = at or datetime.now(UTC)
        if at.tzinfo is None:
            at = at.replace(tzinfo=UTC)

        if certificate in self._certificates:
            return _is_current(certificate, at)

        for anchor in self._certificates:
            if anchor.subject != certificate.issuer or not _is_ca(anchor):
                continue

            try:
                certificate.verify_directly_issued_by(anchor)
            except (ValueError, TypeError, InvalidSignature) as e:
                logger.debug(f"Signature check against {anchor.subject.rfc4514_string()} failed: {e}")
                continue

            return _is_current(anchor, at) and _is_current(certificate, at)

        logger.debug(
            f"No trust anchor for {certificate.subject.rfc4514_string()} "
            f"(issuer {certificate.issuer.rfc4514_string()})"
        )
        return False


def _is_ca(certificate: x509.Certificate) -> bool:
    try:
        constraints = certificate.extensions.get_extension_for_class(
            x509.BasicConstraints
        )
    except x509.ExtensionNotFound:
        return False

    return constraints.value.ca


def _is_current(certificate: x509.Certificate, at: datetime) -> bool:
    if certificate.not_valid_before_utc <= at <= certificate.not_valid_after_utc:
        return True

    logger.debug(
        f"Certificate {certificate.subject.rfc4514_string()} not valid at {at.isoformat()}"
    )
    return False
