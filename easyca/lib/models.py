"""Record and result models for CA operations."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from pathlib import Path

from .cert_utils import format_serial_hex


class LedgerStatus(str, Enum):
    """Certificate status flag in the first column of index.txt."""

    VALID = "V"
    REVOKED = "R"
    EXPIRED = "E"


@dataclass(frozen=True)
class LedgerRecord:
    """One issued leaf certificate as recorded in index.txt.

    Timestamps are timezone-aware UTC datetimes truncated to seconds.
    """

    status: LedgerStatus
    expires_at: datetime
    revoked_at: datetime | None
    serial_number: int
    filename: str
    subject: str

    @property
    def serial_hex(self) -> str:
        """Serial as uppercase hex zero-padded to an even digit count."""
        return format_serial_hex(self.serial_number)

    @property
    def is_revoked(self) -> bool:
        return self.status is LedgerStatus.REVOKED

    def revoke(self, revoked_at: datetime) -> "LedgerRecord":
        """Return a copy of this record marked revoked at the given time."""
        return replace(self, status=LedgerStatus.REVOKED, revoked_at=revoked_at)


@dataclass
class IssueResult:
    """Result from certificate issuance.

    Contains file paths and serial number of the new certificate artifacts.
    """

    name: str
    key_path: Path
    cert_path: Path
    serial_number: int
    is_ca: bool

    @property
    def serial_hex(self) -> str:
        return format_serial_hex(self.serial_number)
