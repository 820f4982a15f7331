"""Certificate builder for X.509 certificate construction."""

from datetime import datetime, timedelta

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .cert_utils import compute_subject_key_identifier
from .config import CertificateConfig

_KEY_USAGE_FLAGS = (
    "digital_signature",
    "content_commitment",
    "key_encipherment",
    "data_encipherment",
    "key_agreement",
    "key_cert_sign",
    "crl_sign",
    "encipher_only",
    "decipher_only",
)


def _key_usage(cert_config: CertificateConfig) -> x509.KeyUsage:
    """Translate the profile's key usage names into a KeyUsage extension."""
    enabled = cert_config.key_usage
    return x509.KeyUsage(**{flag: flag in enabled for flag in _KEY_USAGE_FLAGS})


class CertificateBuilder:
    """Builds the self-signed CA certificate and CA-signed leaf certificates."""

    @staticmethod
    def build_ca_certificate(
        cert_config: CertificateConfig,
        private_key: RSAPrivateKey,
        serial_number: int,
        not_before: datetime,
        validity_days: int,
    ) -> x509.Certificate:
        """Build self-signed CA certificate.

        Issuer equals subject and the authority key identifier equals the
        subject key identifier.

        Args:
            cert_config: Subject and profile of the CA
            private_key: New CA key, used both as subject key and signer
            serial_number: Random CA serial
            not_before: Start of validity
            validity_days: Certificate validity period in days

        Returns:
            Self-signed X.509 certificate with CA extensions
        """
        subject = cert_config.to_x509_name()
        subject_key_id = compute_subject_key_identifier(private_key.public_key())

        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(subject)
            .public_key(private_key.public_key())
            .serial_number(serial_number)
            .not_valid_before(not_before)
            .not_valid_after(not_before + timedelta(days=validity_days))
            .add_extension(
                x509.BasicConstraints(ca=True, path_length=None),
                critical=True,
            )
            .add_extension(_key_usage(cert_config), critical=True)
            .add_extension(x509.SubjectKeyIdentifier(subject_key_id), critical=False)
            .add_extension(
                x509.AuthorityKeyIdentifier(
                    key_identifier=subject_key_id,
                    authority_cert_issuer=None,
                    authority_cert_serial_number=None,
                ),
                critical=False,
            )
        )

        return builder.sign(private_key, hashes.SHA256())

    @staticmethod
    def build_leaf_certificate(
        cert_config: CertificateConfig,
        private_key: RSAPrivateKey,
        serial_number: int,
        not_before: datetime,
        validity_days: int,
        issuer_cert: x509.Certificate,
        issuer_key: RSAPrivateKey,
    ) -> x509.Certificate:
        """Build end-entity certificate signed by the CA.

        Args:
            cert_config: Subject, SAN names and profile of the leaf
            private_key: New leaf key (only its public half is embedded)
            serial_number: Serial allocated from the PKI counter
            not_before: Start of validity
            validity_days: Certificate validity period in days
            issuer_cert: CA certificate (issuer)
            issuer_key: CA private key for signing

        Returns:
            X.509 end-entity certificate signed by the CA
        """
        public_key = private_key.public_key()

        try:
            issuer_ski = issuer_cert.extensions.get_extension_for_class(x509.SubjectKeyIdentifier)
            authority_key_id = x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(
                issuer_ski.value
            )
        except x509.ExtensionNotFound:
            authority_key_id = x509.AuthorityKeyIdentifier.from_issuer_public_key(
                issuer_key.public_key()
            )

        builder = (
            x509.CertificateBuilder()
            .subject_name(cert_config.to_x509_name())
            .issuer_name(issuer_cert.subject)
            .public_key(public_key)
            .serial_number(serial_number)
            .not_valid_before(not_before)
            .not_valid_after(not_before + timedelta(days=validity_days))
            .add_extension(
                x509.BasicConstraints(ca=False, path_length=None),
                critical=True,
            )
            .add_extension(_key_usage(cert_config), critical=True)
            .add_extension(
                x509.SubjectKeyIdentifier(compute_subject_key_identifier(public_key)),
                critical=False,
            )
            .add_extension(authority_key_id, critical=False)
        )

        if cert_config.dns_names:
            builder = builder.add_extension(
                x509.SubjectAlternativeName([x509.DNSName(name) for name in cert_config.dns_names]),
                critical=False,
            )

        return builder.sign(issuer_key, hashes.SHA256())
