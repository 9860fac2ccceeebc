"""Tests for the local root certificate authority."""

import stat
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import NameOID

from localhost_ca.issuer import Issuer


def test_defaults(tmp_path):
    """Test the default name and derived file paths."""
    issuer = Issuer(path=tmp_path)

    assert issuer.name == "development"
    assert issuer.certificate_path == tmp_path / "development.crt"
    assert issuer.key_path == tmp_path / "development.key"
    assert issuer.lockfile_path == tmp_path / "development.lock"


def test_default_path_is_state_directory(isolated_home):
    """Test the path defaults to the state directory."""
    issuer = Issuer()

    assert issuer.path == isolated_home / ".local" / "state" / "localhost.py"
    assert issuer.path.is_dir()


def test_subject(tmp_path):
    """Test the subject is derived from the name."""
    issuer = Issuer("team", path=tmp_path)

    assert issuer.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "team"
    assert (
        issuer.subject.get_attributes_for_oid(NameOID.ORGANIZATION_NAME)[0].value
        == "localhost.py"
    )


def test_subject_can_be_set(tmp_path):
    """Test a custom subject replaces the derived one."""
    issuer = Issuer(path=tmp_path)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "Custom Root")])

    issuer.subject = subject

    assert issuer.subject == subject


def test_generation_has_no_side_effects(tmp_path):
    """Test nothing is written before save."""
    directory = tmp_path / "out"
    directory.mkdir()
    issuer = Issuer(path=directory)

    with patch.object(Issuer, "BITS", 2048):
        issuer.certificate

    assert list(directory.iterdir()) == []


def test_key_size(issuer):
    """Test the issuer key is 4096 bits."""
    assert issuer.key.key_size == 4096


def test_certificate_is_self_signed_ca(issuer):
    """Test the certificate is a self-signed X.509v3 CA certificate."""
    certificate = issuer.certificate

    assert certificate.version == x509.Version.v3
    assert certificate.subject == issuer.subject
    assert certificate.issuer == issuer.subject
    certificate.verify_directly_issued_by(certificate)

    constraints = certificate.extensions.get_extension_for_class(x509.BasicConstraints)
    assert constraints.critical
    assert constraints.value.ca is True


def test_certificate_key_usage(issuer):
    """Test the key usage allows certificate and CRL signing only."""
    key_usage = issuer.certificate.extensions.get_extension_for_class(x509.KeyUsage)

    assert key_usage.critical
    assert key_usage.value.key_cert_sign
    assert key_usage.value.crl_sign
    assert not key_usage.value.digital_signature


def test_certificate_key_identifiers(issuer):
    """Test subject and authority key identifiers match the public key."""
    extensions = issuer.certificate.extensions
    subject_key_id = extensions.get_extension_for_class(x509.SubjectKeyIdentifier)
    authority_key_id = extensions.get_extension_for_class(x509.AuthorityKeyIdentifier)

    assert not authority_key_id.critical
    assert subject_key_id.value == x509.SubjectKeyIdentifier.from_public_key(
        issuer.key.public_key()
    )
    assert authority_key_id.value.key_identifier == subject_key_id.value.digest


def test_certificate_validity(issuer):
    """Test the certificate is backdated and valid for ten years."""
    certificate = issuer.certificate
    validity = certificate.not_valid_after_utc - certificate.not_valid_before_utc

    assert validity == timedelta(days=3650, seconds=10)
    assert certificate.not_valid_before_utc < datetime.now(UTC)


def test_fetch_saves_files(issuer):
    """Test fetch leaves the certificate, key and lockfile on disk."""
    assert issuer.certificate_path.is_file()
    assert issuer.key_path.is_file()
    assert issuer.lockfile_path.is_file()
    assert stat.S_IMODE(issuer.key_path.stat().st_mode) == 0o600


def test_fetch_loads_existing(issuer):
    """Test fetching again returns the stored material."""
    again = Issuer.fetch(path=issuer.path)

    assert again.certificate == issuer.certificate
    assert again.key.private_numbers() == issuer.key.private_numbers()


def test_stored_files_match_memory(issuer):
    """Test the files on disk hold the in-memory certificate and key."""
    stored = x509.load_pem_x509_certificate(issuer.certificate_path.read_bytes())
    key = serialization.load_pem_private_key(
        issuer.key_path.read_bytes(), password=None
    )

    assert stored == issuer.certificate
    assert key.private_numbers() == issuer.key.private_numbers()


def test_load_missing_files(tmp_path):
    """Test load reports missing material without raising."""
    assert Issuer(path=tmp_path).load() is False


def test_load_missing_key(issuer, tmp_path):
    """Test load fails when only the certificate exists."""
    (tmp_path / "development.crt").write_bytes(issuer.certificate_path.read_bytes())

    assert Issuer(path=tmp_path).load() is False


def test_load_from_other_directory(issuer, tmp_path):
    """Test load accepts an explicit directory."""
    loaded = Issuer(path=tmp_path)

    assert loaded.load(issuer.path) is True
    assert loaded.certificate == issuer.certificate


def test_failed_generation_writes_nothing(tmp_path):
    """Test a generation error leaves no key material and releases the lock."""
    issuer = Issuer(path=tmp_path)

    with patch.object(Issuer, "_build_certificate", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            issuer.save()

    assert not issuer.certificate_path.exists()
    assert not issuer.key_path.exists()

    # The lock must have been released: a second save can proceed.
    with patch.object(Issuer, "BITS", 2048):
        assert issuer.save() is True
    assert issuer.certificate_path.exists()
