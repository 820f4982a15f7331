"""PKI root directory layout and bootstrap.

Layout of a bootstrapped root::

    <root>/ca.crt
    <root>/crlnumber
    <root>/index.txt
    <root>/index.txt.attr
    <root>/serial
    <root>/issued/<name>.crt
    <root>/private/ca.key
    <root>/private/<name>.key
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from .config import CA_NAME
from .errors import AlreadyExistsError, NotFoundError

logger = logging.getLogger(__name__)

INITIAL_SERIAL = "01\n"
INITIAL_CRL_NUMBER = "01\n"
INDEX_ATTR_CONTENT = "unique_subject = no\n"


@dataclass(frozen=True)
class PKIRoot:
    """Paths of every artifact inside a PKI root directory."""

    path: Path

    @classmethod
    def of(cls, root: "PKIRoot | Path | str") -> "PKIRoot":
        if isinstance(root, PKIRoot):
            return root
        return cls(Path(root))

    @property
    def private_dir(self) -> Path:
        return self.path / "private"

    @property
    def issued_dir(self) -> Path:
        return self.path / "issued"

    @property
    def ca_cert_path(self) -> Path:
        return self.path / f"{CA_NAME}.crt"

    @property
    def ca_key_path(self) -> Path:
        return self.key_path(CA_NAME)

    @property
    def serial_path(self) -> Path:
        return self.path / "serial"

    @property
    def crlnumber_path(self) -> Path:
        return self.path / "crlnumber"

    @property
    def index_path(self) -> Path:
        return self.path / "index.txt"

    @property
    def index_attr_path(self) -> Path:
        return self.path / "index.txt.attr"

    def key_path(self, name: str) -> Path:
        return self.private_dir / f"{name}.key"

    def cert_path(self, name: str) -> Path:
        """Return where the certificate for name lives (ca.crt for the CA)."""
        if name == CA_NAME:
            return self.ca_cert_path
        return self.issued_dir / f"{name}.crt"

    def layout_entries(self) -> list[Path]:
        """Entries created by bootstrap, in creation order."""
        return [
            self.private_dir,
            self.issued_dir,
            self.serial_path,
            self.crlnumber_path,
            self.index_path,
            self.index_attr_path,
        ]


def is_bootstrapped(root: PKIRoot | Path | str) -> bool:
    """Return True if every bootstrap entry exists under root."""
    pki = PKIRoot.of(root)
    return all(entry.exists() for entry in pki.layout_entries())


def require_bootstrapped(root: PKIRoot | Path | str) -> PKIRoot:
    """Return the PKIRoot for root, raising NotFoundError if its layout is incomplete."""
    pki = PKIRoot.of(root)
    missing = [entry.name for entry in pki.layout_entries() if not entry.exists()]
    if missing:
        raise NotFoundError(f"PKI root {pki.path} is not bootstrapped (missing: {', '.join(missing)})")
    return pki


def bootstrap(root: PKIRoot | Path | str) -> PKIRoot:
    """Create the directory layout and seed files of a new PKI root.

    Args:
        root: PKI root directory (created if absent)

    Returns:
        PKIRoot for the initialised directory

    Raises:
        AlreadyExistsError: If any bootstrap entry already exists; nothing is written
    """
    pki = PKIRoot.of(root)
    existing = [entry.name for entry in pki.layout_entries() if entry.exists()]
    if existing:
        raise AlreadyExistsError(
            f"PKI root {pki.path} already initialised (found: {', '.join(existing)})"
        )

    pki.path.mkdir(parents=True, exist_ok=True)
    pki.private_dir.mkdir(mode=0o700)
    pki.issued_dir.mkdir(mode=0o755)

    with open(pki.serial_path, "x", encoding="ascii") as f:
        f.write(INITIAL_SERIAL)
    with open(pki.crlnumber_path, "x", encoding="ascii") as f:
        f.write(INITIAL_CRL_NUMBER)
    with open(pki.index_path, "x", encoding="ascii"):
        pass
    with open(pki.index_attr_path, "x", encoding="ascii") as f:
        f.write(INDEX_ATTR_CONTENT)

    logger.info("Bootstrapped PKI root %s", pki.path)
    return pki
