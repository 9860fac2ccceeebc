"""
Local root certificate authority.

The issuer is a long-lived, self-signed CA certificate used to sign the
per-hostname authorities. Installing its certificate into the system
trust store makes every authority it signs trusted.
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes

from localhost_ca.identity import Identity

DEFAULT_NAME = "development"


class Issuer(Identity):
    """
    Local root certificate authority used to sign development certificates.

    Attributes:
        name: Common name of the CA, also the file stem
        path: Directory holding ``{name}.crt``/``{name}.key``
    """

    # Private key size
    BITS = 4096

    # Certificate validity period
    VALIDITY = timedelta(days=10 * 365)

    # Backdating of not-before, tolerates clock skew between hosts
    SKEW = timedelta(seconds=10)

    def __init__(self, name: str = DEFAULT_NAME, path: str | Path | None = None):
        """
        Initialize the issuer.

        Args:
            name: Common name to use for the certificate
            path: Directory for loading and saving the certificate and key
        """
        self.name = name
        super().__init__(path)

    def __repr__(self) -> str:
        return f"Issuer(name={self.name!r}, path={str(self.path)!r})"

    @property
    def stem(self) -> str:
        return self.name

    def _build_certificate(self) -> x509.Certificate:
        """Build the self-signed CA certificate."""
        now = datetime.now(UTC)
        public_key = self.key.public_key()

        builder = (
            x509.CertificateBuilder()
            .subject_name(self.subject)
            # Same issuer as subject, which makes this certificate self-signed
            .issuer_name(self.subject)
            .public_key(public_key)
            .serial_number(int(now.timestamp()))
            .not_valid_before(now - self.SKEW)
            .not_valid_after(now + self.VALIDITY)
        )

        builder = builder.add_extension(
            x509.BasicConstraints(ca=True, path_length=None), critical=True
        )

        builder = builder.add_extension(
            x509.KeyUsage(
                digital_signature=False,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=True,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )

        builder = builder.add_extension(
            x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False
        )

        builder = builder.add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(public_key),
            critical=False,
        )

        return builder.sign(private_key=self.key, algorithm=hashes.SHA256())
