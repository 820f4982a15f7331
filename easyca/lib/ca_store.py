"""Loading CA material and certificates from a PKI root."""

from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .cert_utils import deserialize_certificate, deserialize_private_key
from .errors import NotFoundError
from .pki import PKIRoot


def _read(path: Path, what: str) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as e:
        raise NotFoundError(f"{what} not found: {path}") from e


def load_certificate(path: Path | str) -> x509.Certificate:
    """Read and parse a PEM certificate file.

    Raises:
        NotFoundError: If path does not exist
        DecodeError: If the file has no CERTIFICATE PEM block
        ParseError: If the block is not a valid certificate
    """
    return deserialize_certificate(_read(Path(path), "certificate"))


def load_private_key(path: Path | str) -> RSAPrivateKey:
    """Read and parse a PEM (PKCS#1) RSA private key file."""
    return deserialize_private_key(_read(Path(path), "private key"))


def load_ca(root: PKIRoot | Path | str) -> tuple[x509.Certificate, RSAPrivateKey]:
    """Load the CA certificate and private key of a PKI root.

    Re-reads both files on every call.

    Returns:
        Tuple of (ca_certificate, ca_private_key)

    Raises:
        NotFoundError: If private/ca.key or ca.crt is missing
        DecodeError: If either file lacks its PEM block
        ParseError: If either block does not parse
    """
    pki = PKIRoot.of(root)
    ca_key = load_private_key(pki.ca_key_path)
    ca_cert = load_certificate(pki.ca_cert_path)
    return ca_cert, ca_key
