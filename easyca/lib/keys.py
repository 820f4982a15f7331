"""RSA key pair generation and persistence."""

import logging
import os
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .cert_utils import generate_private_key, serialize_private_key
from .errors import AlreadyExistsError

logger = logging.getLogger(__name__)

DEFAULT_KEY_SIZE = 2048
PRIVATE_KEY_MODE = 0o600


def generate_key(path: Path | str, key_size: int = DEFAULT_KEY_SIZE) -> RSAPrivateKey:
    """Generate an RSA key pair and write the private key to path.

    The file is created exclusively, so an existing key is never overwritten.
    If generation or encoding fails after the file was created, the file is
    left on disk for the operator to inspect.

    Args:
        path: Destination of the PEM (PKCS#1) private key
        key_size: RSA modulus size in bits

    Returns:
        The generated private key

    Raises:
        AlreadyExistsError: If a file already exists at path
    """
    key_path = Path(path)
    try:
        fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, PRIVATE_KEY_MODE)
    except FileExistsError as e:
        raise AlreadyExistsError(f"key file {key_path} already exists") from e

    with os.fdopen(fd, "wb") as key_file:
        key = generate_private_key(key_size)
        key_file.write(serialize_private_key(key))

    logger.info("Generated %d-bit RSA key %s", key_size, key_path)
    return key
