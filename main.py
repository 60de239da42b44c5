"""
EmailAssist — CLI Entry Point

Usage:
  # Run the HTTP API (donation emails + health)
  python main.py serve --port 4000

  # Poll the support inbox once
  python main.py poll-once

  # Print the donor registry (or a single donor)
  python main.py donors --email someone@example.com
"""

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("emailassist")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="EmailAssist — donation confirmations and donor registry"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    serve_parser.add_argument(
        "--port", type=int, default=None, help="Port (default: PORT env or 4000)"
    )

    subparsers.add_parser("poll-once", help="Poll the support inbox a single time")

    donors_parser = subparsers.add_parser("donors", help="Print the donor registry as JSON")
    donors_parser.add_argument("--email", default=None, help="Only this donor (case-insensitive)")

    return parser.parse_args(argv)


def serve(host: str, port: int):
    import uvicorn
    from main_api import app

    logger.info(f"EmailAssist server running on port {port}")
    uvicorn.run(app, host=host, port=port)


async def poll_once() -> int:
    from emailassist.infrastructure.config import Config
    from emailassist.infrastructure.container import Container

    container = Container(Config.from_env())
    if container.poll_inbox_use_case is None:
        logger.warning("IMAP disabled (ENABLE_IMAP=false). Nothing to poll.")
        return 0

    result = await container.poll_inbox_use_case.execute()
    if not result.success:
        print(f"⚠ Poll failed: {result.error}")
        return 1

    print(f"{result.fetched} new message(s)")
    for message in result.messages:
        print(f"  • #{message.uid} {message.sender}: {message.subject}")
    return 0


async def print_donors(email: str = None) -> int:
    from emailassist.domain.entities.donor import find_donor
    from emailassist.infrastructure.config import registry_path_from_env
    from emailassist.adapters.json_registry_adapter import JsonRegistryAdapter

    # No mail credentials needed to read the registry.
    registry = JsonRegistryAdapter(path=registry_path_from_env())
    donors = await registry.load()

    if email:
        donor = find_donor(donors, email)
        if donor is None:
            print(f"No donor found for {email}")
            return 1
        print(json.dumps(donor.to_dict(), indent=2, ensure_ascii=False))
        return 0

    print(json.dumps([d.to_dict() for d in donors], indent=2, ensure_ascii=False))
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)

    if args.command == "serve":
        from emailassist.infrastructure.config import http_port_from_env

        serve(args.host, args.port or http_port_from_env())
        return 0

    elif args.command == "poll-once":
        return asyncio.run(poll_once())

    elif args.command == "donors":
        return asyncio.run(print_donors(args.email))

    return 2


if __name__ == "__main__":
    sys.exit(main())
