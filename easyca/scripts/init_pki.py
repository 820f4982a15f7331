#!/usr/bin/env python3
"""Initialise a PKI root and issue its self-signed CA certificate."""

import argparse
import os
import sys
from pathlib import Path

from easyca.lib.ca_manager import CAManager
from easyca.lib.config import CA_NAME, CAConfig, CertificateConfig
from easyca.lib.errors import EasyCAError
from easyca.lib.logging_config import LOGGER, add_log_level_argument, setup_logging


def main(argv: list[str] | None = None) -> int:
    """Bootstrap the PKI layout and create the CA.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Initialise PKI root and CA certificate")
    parser.add_argument(
        "--pki-root",
        type=Path,
        default=Path(os.environ.get("EASYCA_PKI_ROOT", "pki")),
        help="PKI root directory (default: $EASYCA_PKI_ROOT or ./pki)",
    )
    parser.add_argument(
        "--common-name",
        required=True,
        help="Common name of the CA certificate",
    )
    parser.add_argument(
        "--validity-days",
        type=int,
        default=None,
        help="CA validity in days (default: 3650)",
    )
    add_log_level_argument(parser)
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        ca_manager = CAManager(args.pki_root, CAConfig())

        LOGGER.info("Initialising PKI root %s", args.pki_root)
        ca_manager.bootstrap()

        result = ca_manager.issue_certificate(
            CA_NAME,
            CertificateConfig(
                common_name=args.common_name,
                is_ca=True,
                validity_days=args.validity_days,
            ),
        )

        LOGGER.info("CA created:")
        LOGGER.info("  Key: %s", result.key_path)
        LOGGER.info("  Cert: %s", result.cert_path)
        LOGGER.info("  Serial: %s", result.serial_hex)
        return 0

    except (EasyCAError, OSError, ValueError) as e:
        LOGGER.error("PKI initialisation failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
