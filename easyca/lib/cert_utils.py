"""Certificate utility functions for key generation, PEM handling, and serial formatting."""

import re
import secrets

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from easyca.lib.errors import DecodeError, ParseError

RSA_PRIVATE_KEY_LABEL = "RSA PRIVATE KEY"
CERTIFICATE_LABEL = "CERTIFICATE"

CA_SERIAL_LIMIT = 1 << 128


def generate_private_key(key_size: int = 2048) -> RSAPrivateKey:
    """Generate RSA private key with specified size."""
    return rsa.generate_private_key(
        public_exponent=65537,
        key_size=key_size,
    )


def serialize_private_key(key: RSAPrivateKey) -> bytes:
    """Serialize private key to PEM format (PKCS#1 "RSA PRIVATE KEY", no encryption)."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _require_pem_block(pem_data: bytes, label: str) -> None:
    pattern = re.compile(
        rb"-----BEGIN " + label.encode() + rb"-----.+?-----END " + label.encode() + rb"-----",
        re.DOTALL,
    )
    if not pattern.search(pem_data):
        raise DecodeError(f"no PEM encoded {label.lower()} found")


def deserialize_private_key(pem_data: bytes) -> RSAPrivateKey:
    """Deserialize PKCS#1 private key from PEM bytes.

    Raises:
        DecodeError: If there is no RSA PRIVATE KEY PEM block
        ParseError: If the block does not hold an RSA private key
    """
    _require_pem_block(pem_data, RSA_PRIVATE_KEY_LABEL)
    try:
        key = serialization.load_pem_private_key(pem_data, password=None)
    except (ValueError, TypeError) as e:
        raise ParseError(f"parse private key: {e}") from e
    if not isinstance(key, RSAPrivateKey):
        raise ParseError("expected RSA private key")
    return key


def serialize_certificate(cert: x509.Certificate) -> bytes:
    """Serialize certificate to PEM format."""
    return cert.public_bytes(serialization.Encoding.PEM)


def deserialize_certificate(pem_data: bytes) -> x509.Certificate:
    """Deserialize certificate from PEM bytes.

    Raises:
        DecodeError: If there is no CERTIFICATE PEM block
        ParseError: If the block does not hold a DER X.509 certificate
    """
    _require_pem_block(pem_data, CERTIFICATE_LABEL)
    try:
        return x509.load_pem_x509_certificate(pem_data)
    except ValueError as e:
        raise ParseError(f"parse certificate: {e}") from e


def compute_subject_key_identifier(public_key: RSAPublicKey) -> bytes:
    """Return the SHA-1 digest of the DER (PKCS#1) encoded public key."""
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.PKCS1,
    )
    digest = hashes.Hash(hashes.SHA1())
    digest.update(der)
    return digest.finalize()


def generate_ca_serial_number() -> int:
    """Draw a random CA serial number below 2**128.

    Zero is excluded since X.509 serial numbers must be positive.
    """
    return secrets.randbelow(CA_SERIAL_LIMIT - 1) + 1


def format_serial_hex(serial_number: int) -> str:
    """Return serial as uppercase hex zero-padded to an even length (e.g. 01, 0A1F)."""
    serial_hex = f"{serial_number:X}"
    if len(serial_hex) % 2 != 0:
        serial_hex = "0" + serial_hex
    return serial_hex


def get_certificate_common_name(cert: x509.Certificate) -> str:
    """Return the subject CN of a certificate."""
    attributes = cert.subject.get_attributes_for_oid(x509.NameOID.COMMON_NAME)
    if not attributes:
        raise ValueError("certificate subject has no common name")
    cn = attributes[0].value
    if not isinstance(cn, str):
        raise ValueError("CN must be string")
    return cn


def validate_certificate_chain(
    leaf_cert: x509.Certificate,
    ca_cert: x509.Certificate,
) -> bool:
    """Verify that leaf_cert was signed by ca_cert and that ca_cert is self-signed.

    Returns True if chain is valid, False otherwise.
    """
    try:
        leaf_cert.verify_directly_issued_by(ca_cert)
        ca_cert.verify_directly_issued_by(ca_cert)
        return True
    except (ValueError, TypeError, InvalidSignature):
        return False
