"""Tests for loading CA material and certificates."""

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from easyca.lib.ca_manager import CAManager
from easyca.lib.ca_store import load_ca, load_certificate, load_private_key
from easyca.lib.cert_utils import serialize_private_key
from easyca.lib.errors import DecodeError, NotFoundError, ParseError
from easyca.lib.pki import PKIRoot

GARBLED_CERTIFICATE = b"-----BEGIN CERTIFICATE-----\nAAAA\n-----END CERTIFICATE-----\n"


class TestLoadCA:
    """Tests for load_ca()."""

    def test_returns_matching_certificate_and_key(self, ca_manager: CAManager) -> None:
        ca_cert, ca_key = load_ca(ca_manager.root)

        assert isinstance(ca_cert, x509.Certificate)
        assert ca_cert.public_key().public_numbers() == ca_key.public_key().public_numbers()  # type: ignore[union-attr]

    def test_rereads_from_disk(self, ca_manager: CAManager) -> None:
        """No caching: a broken file on disk is noticed on the next call."""
        load_ca(ca_manager.root)
        ca_manager.root.ca_cert_path.write_bytes(b"not pem")

        with pytest.raises(DecodeError):
            load_ca(ca_manager.root)

    def test_missing_ca_raises_not_found(self, pki_root: PKIRoot) -> None:
        with pytest.raises(NotFoundError):
            load_ca(pki_root)

    def test_missing_certificate_raises_not_found(self, ca_manager: CAManager) -> None:
        ca_manager.root.ca_cert_path.unlink()

        with pytest.raises(NotFoundError, match="ca.crt"):
            load_ca(ca_manager.root)

    def test_key_without_pem_block_raises_decode_error(self, ca_manager: CAManager) -> None:
        ca_manager.root.ca_key_path.write_bytes(b"garbage")

        with pytest.raises(DecodeError):
            load_ca(ca_manager.root)

    def test_pkcs8_key_raises_decode_error(self, ca_manager: CAManager) -> None:
        """Only the PKCS#1 RSA PRIVATE KEY PEM type is accepted."""
        _, ca_key = load_ca(ca_manager.root)
        ca_manager.root.ca_key_path.write_bytes(
            ca_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )

        with pytest.raises(DecodeError):
            load_ca(ca_manager.root)

    def test_garbled_certificate_raises_parse_error(self, ca_manager: CAManager) -> None:
        ca_manager.root.ca_cert_path.write_bytes(GARBLED_CERTIFICATE)

        with pytest.raises(ParseError):
            load_ca(ca_manager.root)


class TestLoadCertificate:
    """Tests for load_certificate() and load_private_key()."""

    def test_loads_issued_certificate(self, ca_manager: CAManager) -> None:
        cert = load_certificate(ca_manager.root.ca_cert_path)

        assert cert.subject == cert.issuer

    def test_accepts_str_path(self, ca_manager: CAManager) -> None:
        cert = load_certificate(str(ca_manager.root.ca_cert_path))

        assert isinstance(cert, x509.Certificate)

    def test_missing_certificate(self, pki_root: PKIRoot) -> None:
        with pytest.raises(NotFoundError):
            load_certificate(pki_root.cert_path("server"))

    def test_key_roundtrip(self, pki_root: PKIRoot, ca_key: RSAPrivateKey) -> None:
        key_path = pki_root.key_path("server")
        key_path.write_bytes(serialize_private_key(ca_key))

        loaded = load_private_key(key_path)
        assert loaded.private_numbers() == ca_key.private_numbers()
