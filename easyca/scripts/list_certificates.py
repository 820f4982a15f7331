#!/usr/bin/env python3
"""Print the certificates recorded in a PKI root's ledger."""

import argparse
import json
import os
import sys
from pathlib import Path

from easyca.lib.ca_manager import CAManager
from easyca.lib.errors import EasyCAError
from easyca.lib.logging_config import LOGGER, add_log_level_argument, setup_logging


def main(argv: list[str] | None = None) -> int:
    """Print ledger records as JSON lines on stdout.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="List issued certificates")
    parser.add_argument(
        "--pki-root",
        type=Path,
        default=Path(os.environ.get("EASYCA_PKI_ROOT", "pki")),
        help="PKI root directory (default: $EASYCA_PKI_ROOT or ./pki)",
    )
    parser.add_argument(
        "--status",
        choices=["V", "R", "E"],
        default=None,
        help="Only list records with this status",
    )
    add_log_level_argument(parser)
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        records = CAManager(args.pki_root).list_certificates()
    except (EasyCAError, OSError) as e:
        LOGGER.error("Reading ledger failed: %s", e)
        return 1

    for record in records:
        if args.status and record.status.value != args.status:
            continue
        print(
            json.dumps(
                {
                    "serialNumber": record.serial_hex,
                    "status": record.status.value,
                    "expiry": record.expires_at.isoformat(),
                    "revokedAt": record.revoked_at.isoformat() if record.revoked_at else None,
                    "filename": record.filename,
                    "subject": record.subject,
                }
            )
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
