#!/usr/bin/env python
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from humangate import __version__
from humangate.config.settings import GateConfig
from humangate.errors import GateError, StoreUnavailable, VerificationUnavailable
from humangate.gate.client import VerificationClient
from humangate.gate.ledger import SubmissionStatus, TrustLedger
from humangate.gate.models import Identity
from humangate.key_validator import readiness_notice


def _repo_root() -> Path:
    return Path.cwd().resolve()


def _identity(args: argparse.Namespace) -> Identity:
    return Identity(name=args.name, contact=args.contact, url=args.url or "")


def cmd_status(config: GateConfig, as_json: bool) -> int:
    result = config.validation()
    if as_json:
        payload = result.to_dict()
        payload["verify_url"] = config.verify_url
        payload["db_path"] = str(config.db_path)
        payload["fail_open_when_not_ready"] = config.fail_open_when_not_ready
        print(json.dumps(payload, indent=2))
    else:
        print("=== humangate ===")
        print(f"Site key:   {'✓' if result.site_key_set else '✗'}")
        print(f"Secret key: {'✓' if result.secret_key_set else '✗'}")
        print(f"Ready:      {'✓' if result.is_valid else '✗'}")
        print(f"Endpoint:   {config.verify_url}")
        print(f"Ledger:     {config.db_path}")
        notice = readiness_notice(result)
        if notice:
            print(f"\n{notice}")
    return 0 if result.is_valid else 1


def cmd_check_keys(config: GateConfig) -> int:
    result = config.validation()
    for name in result.missing:
        print(f"{name}: not set")
    for name, problems in result.errors.items():
        for problem in problems:
            print(f"{name}: {problem}")
    if result.is_valid:
        print("Both keys look valid.")
    return 0 if result.is_valid else 1


async def cmd_init_db(config: GateConfig) -> int:
    ledger = TrustLedger(config.db_path)
    try:
        await ledger.initialize()
    finally:
        await ledger.close()
    print(f"Ledger ready at {config.db_path}")
    return 0


async def cmd_approve(config: GateConfig, identity: Identity) -> int:
    ledger = TrustLedger(config.db_path)
    try:
        await ledger.initialize()
        await ledger.record(identity, SubmissionStatus.APPROVED)
    finally:
        await ledger.close()
    print(f"Approved {identity.name} <{identity.contact}>")
    return 0


async def cmd_lookup(config: GateConfig, identity: Identity) -> int:
    ledger = TrustLedger(config.db_path)
    try:
        found = await ledger.lookup(identity)
    finally:
        await ledger.close()
    print("trusted" if found else "untrusted")
    return 0 if found else 1


async def cmd_verify(config: GateConfig, token: str, remote_ip: str) -> int:
    if not config.ready:
        print(readiness_notice(config.validation()))
        return 2
    client = VerificationClient(
        secret_key=config.secret_key,
        verify_url=config.verify_url,
        timeouts=config.timeouts,
    )
    result = await client.verify(client.build_request(token, remote_ip))
    print(json.dumps({"success": result.success, "error-codes": result.error_codes}))
    return 0 if result.success else 1


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)

    parser = argparse.ArgumentParser(
        prog="humangate",
        description="humangate - human verification gate for anonymous submissions",
    )
    parser.add_argument("--env-file", type=Path, default=None, help="Path to .env file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    status_p = subparsers.add_parser("status", help="Show gate readiness")
    status_p.add_argument("--json", action="store_true", help="Output JSON")

    subparsers.add_parser("check-keys", help="Validate site and secret keys")
    subparsers.add_parser("init-db", help="Create the ledger schema")

    for name, help_text in (
        ("approve", "Record an approved submission for an identity"),
        ("lookup", "Check whether an identity was approved before"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("--name", required=True, help="Submitter name")
        p.add_argument("--contact", required=True, help="Submitter contact address")
        p.add_argument("--url", default="", help="Submitter URL")

    verify_p = subparsers.add_parser("verify", help="Verify one proof token")
    verify_p.add_argument("token", help="Proof token from the challenge widget")
    verify_p.add_argument("--remote-ip", default="", help="Caller network address")

    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)
    load_dotenv(args.env_file or _repo_root() / ".env")
    if args.verbose:
        logging.getLogger("humangate").setLevel(logging.DEBUG)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = GateConfig.from_env()
        if args.command == "status":
            return cmd_status(config, args.json)
        elif args.command == "check-keys":
            return cmd_check_keys(config)
        elif args.command == "init-db":
            return asyncio.run(cmd_init_db(config))
        elif args.command == "approve":
            return asyncio.run(cmd_approve(config, _identity(args)))
        elif args.command == "lookup":
            return asyncio.run(cmd_lookup(config, _identity(args)))
        elif args.command == "verify":
            return asyncio.run(cmd_verify(config, args.token, args.remote_ip))
        elif args.command == "version":
            print(f"humangate {__version__}")
            return 0
    except (StoreUnavailable, VerificationUnavailable) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except GateError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
