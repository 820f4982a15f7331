"""OpenSSL-compatible certificate ledger (index.txt).

Each line records one issued leaf certificate, tab separated::

    <V|R|E> <expiry yymmddHHMMSSZ> [<revocation yymmddHHMMSSZ>] <serial hex> <filename> <subject DN>

Issuance appends lines; revocation rewrites a single line's status and
revocation columns and replaces the whole file atomically.
"""

import logging
import os
import re
from datetime import UTC, datetime
from pathlib import Path

from cryptography import x509

from .cert_utils import format_serial_hex, get_certificate_common_name
from .config import LEDGER_UNSAFE_CHARS, format_subject_dn
from .errors import AlreadyRevokedError, CorruptStateError, LedgerFormatError, NotFoundError
from .files import atomic_write_bytes
from .models import LedgerRecord, LedgerStatus
from .pki import PKIRoot

logger = logging.getLogger(__name__)

LEDGER_TIME_FORMAT = "%y%m%d%H%M%S"

# Two-digit years only cover the UTCTime window
LEDGER_TIME_MIN = datetime(1950, 1, 1, tzinfo=UTC)
LEDGER_TIME_MAX = datetime(2049, 12, 31, 23, 59, 59, tzinfo=UTC)


class LedgerRecordParser:
    """Parses and formats index.txt lines. Stateless once constructed."""

    __slots__ = ("_pattern",)

    def __init__(self) -> None:
        self._pattern = re.compile(
            r"^(V|R|E)\t([0-9]{12}Z)\t([0-9]{12}Z)?\t([0-9a-fA-F]{2,})\t([^\t]+)\t(.+)$"
        )

    def parse(self, line: str) -> LedgerRecord:
        """Parse one ledger line (without line terminator).

        Raises:
            LedgerFormatError: If the line does not match the record grammar
        """
        match = self._pattern.match(line)
        if match is None:
            raise LedgerFormatError(f"wrong ledger line format: {line!r}")

        status, expiry, revocation, serial_hex, filename, subject = match.groups()
        if len(serial_hex) % 2 != 0:
            raise LedgerFormatError(f"ledger serial {serial_hex!r} has an odd digit count")

        return LedgerRecord(
            status=LedgerStatus(status),
            expires_at=parse_ledger_time(expiry),
            revoked_at=parse_ledger_time(revocation) if revocation else None,
            serial_number=int(serial_hex, 16),
            filename=filename,
            subject=subject,
        )

    def format(self, record: LedgerRecord) -> str:
        """Format a record as a ledger line (without line terminator)."""
        revocation = format_ledger_time(record.revoked_at) if record.revoked_at else ""
        return "\t".join(
            [
                record.status.value,
                format_ledger_time(record.expires_at),
                revocation,
                record.serial_hex,
                record.filename,
                record.subject,
            ]
        )


RECORD_PARSER = LedgerRecordParser()


def parse_ledger_time(value: str) -> datetime:
    """Parse a yymmddHHMMSSZ timestamp into an aware UTC datetime.

    Years 50-99 map to 19xx and 00-49 to 20xx, as in X.509 UTCTime.
    """
    try:
        parsed = datetime.strptime(value.removesuffix("Z"), LEDGER_TIME_FORMAT)
    except ValueError as e:
        raise LedgerFormatError(f"invalid ledger timestamp {value!r}") from e
    if parsed.year >= 2050:
        parsed = parsed.replace(year=parsed.year - 100)
    return parsed.replace(tzinfo=UTC)


def format_ledger_time(value: datetime) -> str:
    """Format a datetime as yymmddHHMMSSZ in UTC.

    Raises:
        ValueError: If value falls outside 1950-2049
    """
    value = value.astimezone(UTC)
    if not LEDGER_TIME_MIN <= value <= LEDGER_TIME_MAX:
        raise ValueError(f"{value.isoformat()} cannot be stored with a two-digit year")
    return value.strftime(LEDGER_TIME_FORMAT) + "Z"


def parse_serial(value: str | int) -> int:
    """Normalize a serial given as int or hex text (case-insensitive, optional 0x or colons)."""
    if isinstance(value, int):
        serial_number = value
    else:
        text = value.strip().replace(":", "")
        if text[:2].lower() == "0x":
            text = text[2:]
        if not text or not re.fullmatch(r"[0-9A-Fa-f]+", text):
            raise ValueError(f"invalid serial number {value!r}")
        serial_number = int(text, 16)
    if serial_number <= 0:
        raise ValueError(f"serial number must be positive, got {value!r}")
    return serial_number


def _read_lines(index_path: Path) -> list[str]:
    try:
        content = index_path.read_bytes().decode("utf-8")
    except FileNotFoundError as e:
        raise NotFoundError(f"ledger {index_path} not found") from e
    except UnicodeDecodeError as e:
        raise LedgerFormatError(f"ledger {index_path} is not valid UTF-8") from e

    # Records end with "\n" only; other Unicode line breaks are record data
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def read_records(root: PKIRoot | Path | str) -> list[LedgerRecord]:
    """Parse every ledger line in file order.

    Raises:
        NotFoundError: If index.txt is missing
        LedgerFormatError: If any line is malformed
    """
    pki = PKIRoot.of(root)
    return [RECORD_PARSER.parse(line) for line in _read_lines(pki.index_path)]


def find_record(root: PKIRoot | Path | str, serial: str | int) -> LedgerRecord | None:
    """Return the first record with the given serial, or None."""
    target = parse_serial(serial)
    for record in read_records(root):
        if record.serial_number == target:
            return record
    return None


def append_record(
    root: PKIRoot | Path | str,
    filename: str,
    certificate: x509.Certificate,
) -> LedgerRecord:
    """Append a Valid record for certificate to index.txt.

    Args:
        root: PKI root
        filename: Artifact filename recorded in the ledger (e.g. server.crt)
        certificate: Issued leaf certificate

    Returns:
        The record that was written

    Raises:
        NotFoundError: If index.txt is missing
        CorruptStateError: If nothing was written
        ValueError: If filename or the subject cannot be stored on one line,
            or the expiry is outside the two-digit-year range
    """
    pki = PKIRoot.of(root)
    if not filename or any(c in LEDGER_UNSAFE_CHARS for c in filename):
        raise ValueError(f"invalid ledger filename {filename!r}")
    common_name = get_certificate_common_name(certificate)
    if not common_name or any(c in LEDGER_UNSAFE_CHARS for c in common_name):
        raise ValueError(f"common name {common_name!r} cannot be stored in the ledger")

    record = LedgerRecord(
        status=LedgerStatus.VALID,
        expires_at=certificate.not_valid_after_utc,
        revoked_at=None,
        serial_number=certificate.serial_number,
        filename=filename,
        subject=format_subject_dn(common_name),
    )
    line = RECORD_PARSER.format(record) + "\n"

    try:
        fd = os.open(pki.index_path, os.O_WRONLY | os.O_APPEND)
    except FileNotFoundError as e:
        raise NotFoundError(f"ledger {pki.index_path} not found") from e

    with os.fdopen(fd, "w", encoding="utf-8") as index_file:
        written = index_file.write(line)
    if written == 0:
        raise CorruptStateError(f"wrote 0 bytes to ledger {pki.index_path}")

    logger.info("Recorded serial %s (%s) in ledger", record.serial_hex, filename)
    return record


def revoke(
    root: PKIRoot | Path | str,
    serial: str | int,
    revoked_at: datetime | None = None,
) -> LedgerRecord:
    """Mark the ledger record with the given serial as revoked.

    Every line is parsed before anything is written, so a malformed ledger is
    never partially rewritten. Serials compare as integers. Only the first
    matching line changes; all other lines are kept verbatim and in order.

    Args:
        root: PKI root
        serial: Serial to revoke, as int or hex text
        revoked_at: Revocation time (defaults to now, UTC)

    Returns:
        The revoked record

    Raises:
        LedgerFormatError: If any ledger line is malformed
        AlreadyRevokedError: If the matching record is already revoked
        NotFoundError: If no record has the serial
    """
    pki = PKIRoot.of(root)
    target = parse_serial(serial)
    revocation_time = (revoked_at or datetime.now(UTC)).replace(microsecond=0)

    lines = _read_lines(pki.index_path)
    records = [RECORD_PARSER.parse(line) for line in lines]

    revoked: LedgerRecord | None = None
    for position, record in enumerate(records):
        if record.serial_number != target:
            continue
        if record.is_revoked:
            raise AlreadyRevokedError(f"certificate {format_serial_hex(target)} already revoked")

        revoked = record.revoke(revocation_time)
        columns = lines[position].split("\t", 5)
        columns[0] = LedgerStatus.REVOKED.value
        columns[2] = format_ledger_time(revocation_time)
        lines[position] = "\t".join(columns)
        break

    if revoked is None:
        logger.warning("Revocation requested for unknown serial %s", format_serial_hex(target))
        raise NotFoundError(f"no ledger record with serial {format_serial_hex(target)}")

    content = "".join(line + "\n" for line in lines)
    atomic_write_bytes(pki.index_path, content.encode("utf-8"))

    logger.info("Revoked serial %s (%s)", revoked.serial_hex, revoked.filename)
    return revoked
