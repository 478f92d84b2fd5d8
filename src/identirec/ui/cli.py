# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from identirec.app import audit_contact_store, identify_contact
from identirec.config import configure_logging
from identirec.ui.schema import IdentifyRequest, IdentifyResponse

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile customer contact identities")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log resolution details at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    identify = subparsers.add_parser("identify", help="Resolve an email and/or phone number")
    identify.add_argument("--email", type=str, help="Email address of the customer")
    identify.add_argument("--phone", type=str, help="Phone number of the customer (digits only)")
    identify.add_argument(
        "--json",
        dest="payload",
        type=str,
        help='Raw request body, e.g. \'{"email": "a@x.com", "phoneNumber": "111"}\'',
    )

    subparsers.add_parser("audit", help="Check stored clusters for invariant violations")

    return parser.parse_args(list(argv))


def _build_request(args: argparse.Namespace) -> IdentifyRequest:
    if args.payload is not None:
        if args.email is not None or args.phone is not None:
            raise ValueError("--json cannot be combined with --email/--phone")
        try:
            body = json.loads(args.payload)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON payload: {exc}") from exc
        return IdentifyRequest.model_validate(body)
    return IdentifyRequest(email=args.email, phone_number=args.phone)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    request: IdentifyRequest | None = None
    try:
        if parsed_args.command == "identify":
            request = _build_request(parsed_args)
    except ValueError:
        log.exception("Invalid identify request")
        sys.exit(2)

    try:
        if parsed_args.command == "identify" and request is not None:
            view = identify_contact(request.to_fragment())
            print(IdentifyResponse.from_view(view).to_json(indent=2))
        elif parsed_args.command == "audit":
            violations = audit_contact_store()
            for violation in violations:
                print(violation)
            if violations:
                sys.exit(1)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
