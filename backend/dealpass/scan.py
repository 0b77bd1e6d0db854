"""Command-line scanner for keyboard-wedge QR readers.

Handheld readers type each decoded code followed by Enter, so every line on
stdin is one presentation of a coupon code. Each result is written to stdout
as one JSON object in the scanner payload shape.

    python -m dealpass.scan --customer-name "Front desk"
"""

import argparse
import json
import logging
import sys
import threading
from collections.abc import Callable
from typing import Any, TextIO
from uuid import UUID

from fastapi.encoders import jsonable_encoder

from dealpass.core import database
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID
from dealpass.services.coupon_ledger import get_ledger_backend
from dealpass.services.redemption_service import RedemptionResult, RedemptionService
from dealpass.services.scanner import ScannerSession

logger = logging.getLogger(__name__)


class LineFrameSource:
    """Frame source over a text stream, one code per line.

    An empty frame follows every line, so the same code typed twice in a row
    is scanned twice. ``on_eof`` is called once the stream is exhausted.
    """

    def __init__(self, stream: TextIO, on_eof: Callable[[], None]):
        self.stream = stream
        self.on_eof = on_eof
        self._after_line = False

    def __enter__(self) -> "LineFrameSource":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None

    def read(self) -> str | None:
        if self._after_line:
            self._after_line = False
            return None
        line = self.stream.readline()
        if not line:
            self.on_eof()
            return None
        self._after_line = True
        return line.strip()


def _write_result(stdout: TextIO) -> Callable[[RedemptionResult], None]:
    def write(result: RedemptionResult) -> None:
        stdout.write(json.dumps(jsonable_encoder(result.to_payload())) + "\n")
        stdout.flush()

    return write


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Redeem coupon codes read from a QR scanner")
    parser.add_argument(
        "--organization-id",
        type=UUID,
        default=DEFAULT_ORGANIZATION_ID,
        help="Organization whose coupons are redeemed",
    )
    parser.add_argument("--customer-name", help="Name recorded on successful redemptions")
    return parser


def main(
    argv: list[str] | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    stop = threading.Event()
    db = database.SessionLocal()
    try:
        backend = get_ledger_backend(db, args.organization_id)
        session = ScannerSession(
            LineFrameSource(stdin, stop.set),
            lambda frame: frame,
            RedemptionService(backend.ledger, backend.log),
            interval=0,
            customer_name=args.customer_name,
            on_result=_write_result(stdout),
        )
        session.run(stop)
    except KeyboardInterrupt:
        logger.info("Scanner interrupted")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
