"""Command line interface: inspect, create, install and purge certificates."""

import argparse
import os
import sys
from collections.abc import Mapping, Sequence

from loguru import logger

from localhost_ca import __version__, system
from localhost_ca.authority import Authority
from localhost_ca.config import get_settings
from localhost_ca.core.logging import configure_logger
from localhost_ca.errors import LocalhostError
from localhost_ca.issuer import Issuer
from localhost_ca.state import State


def _list(args: argparse.Namespace, env: Mapping[str, str]) -> int:
    for authority in Authority.list(State.path(env)):
        certificate = authority.certificate
        print(f"{authority.hostname} {certificate.subject.rfc4514_string()}")
        print(f"\tCertificate Path: {authority.certificate_path}")
        print(f"\t        Key Path: {authority.key_path}")
        print(f"\t         Expires: {certificate.not_valid_after_utc.isoformat()}")
        print()
    return 0


def _fetch(args: argparse.Namespace, env: Mapping[str, str]) -> int:
    path = State.path(env)
    issuer = None if args.standalone else Issuer.fetch(args.issuer, path=path)
    authority = Authority.fetch(args.hostname, path=path, issuer=issuer)

    print(f"Certificate Path: {authority.certificate_path}")
    print(f"        Key Path: {authority.key_path}")
    if issuer is not None:
        print(f"     Issuer Path: {issuer.certificate_path}")
    return 0


def _issuer(args: argparse.Namespace, env: Mapping[str, str]) -> int:
    issuer = Issuer.fetch(args.name, path=State.path(env))
    print(issuer.certificate_path)
    return 0


def _install(args: argparse.Namespace, env: Mapping[str, str]) -> int:
    issuer = Issuer.fetch(args.name, path=State.path(env))
    system.current().install(issuer.certificate_path)
    print(f"Installed {issuer.certificate_path}")
    return 0


def _purge(args: argparse.Namespace, env: Mapping[str, str]) -> int:
    State.purge(env)
    return 0


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="localhost-ca",
        description="Locally-trusted TLS certificates for development",
    )
    parser.add_argument("--version", action="version", version=__version__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "list", help="List the certificates in the state directory"
    ).set_defaults(handler=_list)

    fetch = subparsers.add_parser("fetch", help="Load or create a host certificate")
    fetch.add_argument("hostname", nargs="?", default=settings.hostname)
    fetch.add_argument(
        "--standalone", action="store_true", help="Self-sign instead of using the issuer"
    )
    fetch.add_argument("--issuer", default=settings.issuer_name, help="Issuer name")
    fetch.set_defaults(handler=_fetch)

    issuer = subparsers.add_parser("issuer", help="Load or create the root issuer")
    issuer.add_argument("name", nargs="?", default=settings.issuer_name)
    issuer.set_defaults(handler=_issuer)

    install = subparsers.add_parser(
        "install", help="Install the issuer certificate into the system trust store"
    )
    install.add_argument("name", nargs="?", default=settings.issuer_name)
    install.set_defaults(handler=_install)

    subparsers.add_parser("purge", help="Delete the state directory").set_defaults(
        handler=_purge
    )

    return parser


def main(
    argv: Sequence[str] | None = None, env: Mapping[str, str] | None = None
) -> int:
    configure_logger()

    args = build_parser().parse_args(argv)
    env = os.environ if env is None else env

    try:
        return args.handler(args, env)
    except LocalhostError as e:
        logger.debug(f"{args.command} failed: {e!r}")
        print(f"localhost-ca: {e}", file=sys.stderr)
        return 1
