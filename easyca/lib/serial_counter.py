"""Serial counter for leaf certificates, stored as hex text in <root>/serial."""

import logging
import re
from pathlib import Path

from .cert_utils import format_serial_hex
from .errors import CorruptStateError, NotFoundError
from .files import atomic_write_bytes
from .pki import PKIRoot

logger = logging.getLogger(__name__)

_SERIAL_PATTERN = re.compile(r"[0-9A-Fa-f]+")


def _read_counter(serial_path: Path) -> int:
    try:
        raw = serial_path.read_text(encoding="ascii")
    except FileNotFoundError as e:
        raise NotFoundError(f"serial file {serial_path} not found") from e
    except UnicodeDecodeError as e:
        raise CorruptStateError(f"serial file {serial_path} is not ASCII") from e

    text = raw.strip()
    if not _SERIAL_PATTERN.fullmatch(text):
        raise CorruptStateError(f"serial file {serial_path} holds invalid hex value {text!r}")

    value = int(text, 16)
    if value <= 0:
        raise CorruptStateError(f"serial file {serial_path} holds non-positive serial {text!r}")
    return value


def peek_serial(root: PKIRoot | Path | str) -> int:
    """Return the serial the next leaf certificate will get, without advancing."""
    return _read_counter(PKIRoot.of(root).serial_path)


def next_serial(root: PKIRoot | Path | str) -> int:
    """Allocate the next leaf serial number.

    Returns the current counter value and persists value + 1 before returning.
    Safe only under single-writer use.

    Raises:
        NotFoundError: If the serial file is missing
        CorruptStateError: If the serial file does not hold a positive hex value
    """
    pki = PKIRoot.of(root)
    serial_number = _read_counter(pki.serial_path)
    following = format_serial_hex(serial_number + 1) + "\n"
    atomic_write_bytes(pki.serial_path, following.encode("ascii"))

    logger.info("Allocated serial %s", format_serial_hex(serial_number))
    return serial_number
