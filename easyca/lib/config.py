"""CA configuration dataclasses."""

from dataclasses import dataclass, field

from cryptography import x509
from cryptography.x509 import oid

CA_NAME = "ca"

# Every character str.splitlines() breaks on, plus the ledger column separator
LEDGER_UNSAFE_CHARS = "\t\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029"


def format_subject_dn(common_name: str) -> str:
    """Return the slash-separated subject written to the ledger."""
    return f"/CN={common_name}"


@dataclass
class CAConfig:
    """CA-wide defaults applied when a certificate config leaves them unset."""

    key_size: int = 2048
    ca_validity_days: int = 3650
    leaf_validity_days: int = 365


@dataclass
class CertificateConfig:
    """Caller-supplied description of a certificate to issue.

    Independent of cryptography's builder types; the issuer translates it
    into extensions according to the CA or leaf profile.
    """

    common_name: str
    is_ca: bool = False
    validity_days: int | None = None
    dns_names: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.common_name:
            raise ValueError("common name must not be empty")
        if any(c in LEDGER_UNSAFE_CHARS for c in self.common_name):
            raise ValueError("common name must not contain tabs or line breaks")
        if self.validity_days is not None and self.validity_days <= 0:
            raise ValueError("validity days must be positive")
        if self.is_ca and self.dns_names:
            raise ValueError("subject alternative names are only supported on leaf certificates")

    @property
    def key_usage(self) -> frozenset[str]:
        """Key usage bits implied by the profile."""
        if self.is_ca:
            return frozenset({"key_cert_sign", "crl_sign"})
        return frozenset({"digital_signature", "key_encipherment"})

    def resolve_validity_days(self, config: CAConfig) -> int:
        """Return the explicit validity or the profile default from config."""
        if self.validity_days is not None:
            return self.validity_days
        return config.ca_validity_days if self.is_ca else config.leaf_validity_days

    def to_x509_name(self) -> x509.Name:
        """Convert to cryptography x509.Name for certificate generation."""
        return x509.Name([x509.NameAttribute(oid.NameOID.COMMON_NAME, self.common_name)])
