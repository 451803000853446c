"""Command-line entry point for inspecting and toggling gated features."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from . import BiometricGate, BiometricAuthError, ConsoleVerifier, GateSettings


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Biometric feature gate")
    parser.add_argument(
        "--backend",
        choices=["keyring", "file", "memory"],
        help="Override the configured storage backend",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Accept biometric enrollment changes instead of failing",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Confirm challenges on the terminal instead of Touch ID",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log gate events")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("status", help="Report whether biometric auth is available")
    commands.add_parser("list", help="List configured features")
    for name in ("enable", "disable", "request"):
        sub = commands.add_parser(name, help=f"{name.title()} a feature")
        sub.add_argument("feature")
        if name != "enable":
            sub.add_argument("--reason", help="Text shown in the authentication prompt")
    return parser.parse_args(argv)


def build_gate(args: argparse.Namespace) -> BiometricGate:
    overrides = {}
    if args.backend:
        overrides["store_backend"] = args.backend
    if args.lenient:
        overrides["force_fail_on_change"] = False
    settings = GateSettings(**overrides)
    verifier = ConsoleVerifier() if args.console else None
    return BiometricGate(settings, verifier=verifier)


def run(args: argparse.Namespace) -> int:
    gate = build_gate(args)
    if args.command == "status":
        ok = gate.is_available()
        print("available" if ok else "unavailable")
    elif args.command == "list":
        for feature, state in gate.list_features().items():
            print(f"{feature}\t{state.value}")
        ok = True
    elif args.command == "enable":
        ok = gate.enable(args.feature)
        print("enabled" if ok else "unavailable")
    elif args.command == "disable":
        ok = gate.disable(args.feature, args.reason)
        print("disabled" if ok else "denied")
    else:
        ok = gate.request_authentication(args.feature, args.reason)
        print("granted" if ok else "denied")
    return 0 if ok else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING, format="%(message)s"
    )
    try:
        return run(args)
    except BiometricAuthError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
