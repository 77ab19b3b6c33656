#!/usr/bin/env python3
"""
adcreds/cli/fetch.py

CLI for resolving credentials and printing what they yield:
  - fetch:  print the access token
  - header: print an 'Authorization: ...' header line
  - info:   print which project the resolved credentials belong to

With --credentials the given file is used instead of the default chain.
With --jwt a self-signed JWT for --audience is produced instead of an OAuth2
access token.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Awaitable, Callable, Dict, List, Optional

from adcreds.errors import AdcError
from adcreds.models.settings import Settings
from adcreds.resolver.chain import find_credentials, jwt_source_from_json
from adcreds.tokens.base import TokenSource


def _prompt_for_code(url: str) -> str:
    """Consent handler for terminals: show the URL, read the code from stdin."""
    print("Go to the following link in your browser:\n", file=sys.stderr)
    print(f"    {url}\n", file=sys.stderr)
    print("Enter verification code: ", end="", file=sys.stderr, flush=True)
    return sys.stdin.readline().strip()


def _build_settings(args: argparse.Namespace) -> Settings:
    credentials_json = ""
    if args.credentials:
        try:
            with open(args.credentials, "r", encoding="utf-8") as f:
                credentials_json = f.read()
        except OSError as exc:
            print(
                f"Error reading credentials file '{args.credentials}': {exc}",
                file=sys.stderr,
            )
            sys.exit(1)
    return Settings(
        scope=" ".join(args.scope),
        audience=args.audience,
        credentials_json=credentials_json,
        oauth_flow_handler=_prompt_for_code,
        state=args.state,
    )


async def _resolve_source(settings: Settings, jwt: bool) -> TokenSource:
    if jwt:
        creds = await find_credentials(settings.model_copy(update={"audience": ""}))
        return jwt_source_from_json(creds.json_data, settings.audience)
    creds = await find_credentials(settings)
    return creds.token_source


async def run_fetch(args: argparse.Namespace, settings: Settings) -> None:
    tok = await (await _resolve_source(settings, args.jwt)).token()
    print(tok.access_token)


async def run_header(args: argparse.Namespace, settings: Settings) -> None:
    tok = await (await _resolve_source(settings, args.jwt)).token()
    print(f"Authorization: {tok.header_value()}")


async def run_info(args: argparse.Namespace, settings: Settings) -> None:
    creds = await find_credentials(settings)
    info = {
        "project_id": creds.project_id,
        "source": "document" if creds.json_data else "platform",
    }
    print(json.dumps(info, indent=2))


COMMANDS: Dict[str, Callable[[argparse.Namespace, Settings], Awaitable[None]]] = {
    "fetch": run_fetch,
    "header": run_header,
    "info": run_info,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adcreds", description="Resolve Application Default Credentials."
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)
    for name in COMMANDS:
        p = sub.add_parser(name)
        p.add_argument(
            "--scope",
            action="append",
            default=[],
            help="OAuth2 scope; may be repeated.",
        )
        p.add_argument("--credentials", help="Path to a credentials JSON document.")
        p.add_argument("--audience", default="", help="Audience for JWT access tokens.")
        p.add_argument("--jwt", action="store_true", help="Emit a self-signed JWT.")
        p.add_argument("--state", default="", help="Anti-forgery state for consent.")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.jwt and not args.audience:
        print("Error: --jwt requires --audience", file=sys.stderr)
        sys.exit(1)
    settings = _build_settings(args)
    try:
        asyncio.run(COMMANDS[args.command](args, settings))
    except AdcError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
