#!/usr/bin/env python3
"""Revoke an issued certificate by serial number."""

import argparse
import os
import sys
from pathlib import Path

from easyca.lib.ca_manager import CAManager
from easyca.lib.errors import AlreadyRevokedError, EasyCAError
from easyca.lib.logging_config import LOGGER, add_log_level_argument, setup_logging


def main(argv: list[str] | None = None) -> int:
    """Mark the certificate with the given serial as revoked in index.txt.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Revoke certificate")
    parser.add_argument(
        "--pki-root",
        type=Path,
        default=Path(os.environ.get("EASYCA_PKI_ROOT", "pki")),
        help="PKI root directory (default: $EASYCA_PKI_ROOT or ./pki)",
    )
    parser.add_argument(
        "--serial",
        required=True,
        help="Serial number in hex (e.g. 01, 0x1A, 1A:2B)",
    )
    add_log_level_argument(parser)
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        record = CAManager(args.pki_root).revoke_certificate(args.serial)
        LOGGER.info("Revoked %s (serial %s)", record.filename, record.serial_hex)
        return 0

    except AlreadyRevokedError as e:
        LOGGER.error("%s", e)
        return 1
    except (EasyCAError, OSError, ValueError) as e:
        LOGGER.error("Revocation failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
