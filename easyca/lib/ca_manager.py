"""CA manager for certificate authority operations on a PKI root."""

import logging
import re
from datetime import UTC, datetime, timedelta
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from . import ledger
from .ca_store import load_ca
from .cert_utils import format_serial_hex, generate_ca_serial_number, serialize_certificate
from .certificate_builder import CertificateBuilder
from .config import CA_NAME, CAConfig, CertificateConfig
from .errors import AlreadyExistsError
from .keys import generate_key
from .models import IssueResult, LedgerRecord
from .pki import PKIRoot, bootstrap, require_bootstrapped
from .serial_counter import next_serial

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


class CAManager:
    """Certificate Authority manager for a single PKI root directory.

    Assumes a single writer per root; nothing here locks the serial counter
    or the ledger.
    """

    def __init__(self, root: PKIRoot | Path | str, config: CAConfig | None = None) -> None:
        """Initialize CA manager.

        Args:
            root: PKI root directory
            config: CA defaults for key size and validity periods
        """
        self.root = PKIRoot.of(root)
        self.config = config or CAConfig()

    def bootstrap(self) -> PKIRoot:
        """Create the PKI directory layout and seed files."""
        return bootstrap(self.root)

    def load_ca(self) -> tuple[x509.Certificate, RSAPrivateKey]:
        """Load CA certificate and key from disk."""
        return load_ca(self.root)

    def issue_certificate(self, name: str, cert_config: CertificateConfig) -> IssueResult:
        """Generate a key pair and issue a CA or leaf certificate under name.

        The CA is self-signed and written to ca.crt; leaves are signed by the
        CA, written to issued/<name>.crt and recorded in the ledger. Errors
        propagate without rollback: a key generated before a later failure
        stays on disk.

        Args:
            name: Artifact name ("ca" for the CA profile)
            cert_config: Subject and profile of the certificate

        Returns:
            IssueResult with file paths and serial number

        Raises:
            AlreadyExistsError: If a key or certificate for name already exists
            NotFoundError: If the root is not bootstrapped or CA material is missing
            ValueError: If name or profile are invalid, or a leaf would expire after 2049
        """
        self._validate_name(name, cert_config)
        pki = require_bootstrapped(self.root)

        key_path = pki.key_path(name)
        cert_path = pki.cert_path(name)
        if key_path.exists():
            logger.warning("Refusing to issue %s: key pair already exists", name)
            raise AlreadyExistsError(f"a key pair for {name} already exists")
        if cert_path.exists():
            logger.warning("Refusing to issue %s: certificate already exists", name)
            raise AlreadyExistsError(f"a certificate for {name} already exists")

        not_before = datetime.now(UTC)
        validity_days = cert_config.resolve_validity_days(self.config)
        not_after = not_before + timedelta(days=validity_days)
        if not cert_config.is_ca and not_after > ledger.LEDGER_TIME_MAX:
            raise ValueError(
                f"leaf expiry {not_after:%Y-%m-%d} is past the last ledger date "
                f"{ledger.LEDGER_TIME_MAX:%Y-%m-%d}"
            )

        private_key = generate_key(key_path, self.config.key_size)

        if cert_config.is_ca:
            serial_number = generate_ca_serial_number()
            certificate = CertificateBuilder.build_ca_certificate(
                cert_config=cert_config,
                private_key=private_key,
                serial_number=serial_number,
                not_before=not_before,
                validity_days=validity_days,
            )
        else:
            serial_number = next_serial(pki)
            ca_cert, ca_key = load_ca(pki)
            certificate = CertificateBuilder.build_leaf_certificate(
                cert_config=cert_config,
                private_key=private_key,
                serial_number=serial_number,
                not_before=not_before,
                validity_days=validity_days,
                issuer_cert=ca_cert,
                issuer_key=ca_key,
            )

        try:
            with open(cert_path, "xb") as cert_file:
                cert_file.write(serialize_certificate(certificate))
        except FileExistsError as e:
            raise AlreadyExistsError(f"certificate {cert_path} already exists") from e

        # The self-signed CA is not part of the ledger
        if not cert_config.is_ca:
            ledger.append_record(pki, cert_path.name, certificate)

        logger.info(
            "Issued %s certificate %s (serial %s)",
            "CA" if cert_config.is_ca else "leaf",
            name,
            format_serial_hex(serial_number),
        )
        return IssueResult(
            name=name,
            key_path=key_path,
            cert_path=cert_path,
            serial_number=serial_number,
            is_ca=cert_config.is_ca,
        )

    def revoke_certificate(self, serial: str | int) -> LedgerRecord:
        """Revoke the leaf certificate with the given serial in the ledger."""
        pki = require_bootstrapped(self.root)
        return ledger.revoke(pki, serial)

    def list_certificates(self) -> list[LedgerRecord]:
        """Return every ledger record in issuance order."""
        pki = require_bootstrapped(self.root)
        return ledger.read_records(pki)

    @staticmethod
    def _validate_name(name: str, cert_config: CertificateConfig) -> None:
        if not _NAME_PATTERN.fullmatch(name):
            raise ValueError(f"invalid certificate name {name!r}")
        if cert_config.is_ca and name != CA_NAME:
            raise ValueError(f"CA certificates must be issued under the name {CA_NAME!r}")
        if not cert_config.is_ca and name == CA_NAME:
            raise ValueError(f"the name {CA_NAME!r} is reserved for the CA certificate")
