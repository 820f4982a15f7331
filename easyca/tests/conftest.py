"""Test fixtures for easyca tests."""

import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from easyca.lib.ca_manager import CAManager
from easyca.lib.cert_utils import generate_ca_serial_number, generate_private_key
from easyca.lib.certificate_builder import CertificateBuilder
from easyca.lib.config import CA_NAME, CAConfig, CertificateConfig
from easyca.lib.pki import PKIRoot, bootstrap

LEDGER_LINES = [
    "V\t270101000000Z\t\t01\tserver.crt\t/CN=server.example",
    "R\t270101000000Z\t250601120000Z\t02\tclient.crt\t/CN=client.example",
    "V\t280101000000Z\t\t0A\tweb.crt\t/CN=web.example",
]


@pytest.fixture(autouse=True)
def reset_easyca_logger() -> Iterator[None]:
    """Undo handlers and levels installed by setup_logging() in a test."""
    logger = logging.getLogger("easyca")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def ca_config() -> CAConfig:
    """Return test CA configuration with shorter validity periods."""
    return CAConfig(
        key_size=2048,
        ca_validity_days=365,
        leaf_validity_days=30,
    )


@pytest.fixture
def pki_root(tmp_path: Path) -> PKIRoot:
    """Return a freshly bootstrapped PKI root."""
    return bootstrap(tmp_path / "pki")


@pytest.fixture
def ca_manager(pki_root: PKIRoot, ca_config: CAConfig) -> CAManager:
    """Return a manager on a bootstrapped root that already has its CA."""
    manager = CAManager(pki_root, ca_config)
    manager.issue_certificate(CA_NAME, CertificateConfig(common_name="Test Root CA", is_ca=True))
    return manager


@pytest.fixture
def ca_key() -> RSAPrivateKey:
    """Generate RSA private key for the CA."""
    return generate_private_key(key_size=2048)


@pytest.fixture
def ca_cert(ca_key: RSAPrivateKey) -> x509.Certificate:
    """Generate self-signed CA certificate in memory."""
    return CertificateBuilder.build_ca_certificate(
        cert_config=CertificateConfig(common_name="Test Root CA", is_ca=True),
        private_key=ca_key,
        serial_number=generate_ca_serial_number(),
        not_before=datetime.now(UTC),
        validity_days=365,
    )


@pytest.fixture
def ledger_lines() -> list[str]:
    """Return sample index.txt lines (valid, revoked, valid)."""
    return list(LEDGER_LINES)


@pytest.fixture
def populated_ledger(pki_root: PKIRoot, ledger_lines: list[str]) -> PKIRoot:
    """Return a PKI root whose index.txt holds the sample ledger lines."""
    pki_root.index_path.write_text("".join(line + "\n" for line in ledger_lines))
    return pki_root
