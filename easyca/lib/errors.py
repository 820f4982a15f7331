"""Exceptions raised by PKI operations."""


class EasyCAError(Exception):
    """Base class for PKI errors."""


class AlreadyExistsError(EasyCAError, FileExistsError):
    """Raised when a key, certificate or PKI root would be overwritten."""


class NotFoundError(EasyCAError, FileNotFoundError):
    """Raised when CA material, a PKI file or a ledger record is missing."""


class DecodeError(EasyCAError):
    """Raised when a file has no PEM block of the expected type."""


class ParseError(EasyCAError):
    """Raised when PEM-decoded bytes are not a valid key or certificate."""


class CorruptStateError(EasyCAError):
    """Raised when the serial counter or ledger content is malformed."""


class LedgerFormatError(CorruptStateError):
    """Raised when an index.txt line does not match the record grammar."""


class AlreadyRevokedError(EasyCAError):
    """Raised when revoking a certificate that is already revoked."""
