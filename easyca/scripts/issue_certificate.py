#!/usr/bin/env python3
"""Issue a leaf certificate signed by the PKI root's CA."""

import argparse
import os
import sys
from pathlib import Path

from easyca.lib.ca_manager import CAManager
from easyca.lib.config import CAConfig, CertificateConfig
from easyca.lib.errors import AlreadyExistsError, EasyCAError, NotFoundError
from easyca.lib.logging_config import LOGGER, add_log_level_argument, setup_logging


def main(argv: list[str] | None = None) -> int:
    """Issue a leaf certificate with the given name and common name.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Issue leaf certificate")
    parser.add_argument(
        "--pki-root",
        type=Path,
        default=Path(os.environ.get("EASYCA_PKI_ROOT", "pki")),
        help="PKI root directory (default: $EASYCA_PKI_ROOT or ./pki)",
    )
    parser.add_argument(
        "--name",
        required=True,
        help="Artifact name (key and certificate file stem)",
    )
    parser.add_argument(
        "--common-name",
        help="Subject common name (default: --name)",
    )
    parser.add_argument(
        "--dns-name",
        action="append",
        default=[],
        dest="dns_names",
        help="Subject alternative DNS name (repeatable)",
    )
    parser.add_argument(
        "--validity-days",
        type=int,
        default=None,
        help="Validity in days (default: 365)",
    )
    add_log_level_argument(parser)
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        ca_manager = CAManager(args.pki_root, CAConfig())

        LOGGER.info("Issuing certificate for: %s", args.name)
        result = ca_manager.issue_certificate(
            args.name,
            CertificateConfig(
                common_name=args.common_name or args.name,
                validity_days=args.validity_days,
                dns_names=args.dns_names,
            ),
        )

        LOGGER.info("Certificate created:")
        LOGGER.info("  Key: %s", result.key_path)
        LOGGER.info("  Cert: %s", result.cert_path)
        LOGGER.info("  Serial: %s", result.serial_hex)
        return 0

    except AlreadyExistsError as e:
        LOGGER.error("Certificate already exists: %s", e)
        return 1
    except NotFoundError as e:
        LOGGER.error("PKI file not found: %s", e)
        return 1
    except (EasyCAError, OSError, ValueError) as e:
        LOGGER.error("Certificate issuance failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
