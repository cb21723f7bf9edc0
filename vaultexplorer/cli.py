"""
Vault Explorer CLI — work with secret values and write plans from the shell.

Usage:
    vaultexplorer version                       # Show version
    vaultexplorer config                        # Show effective configuration
    vaultexplorer aliases                       # List configured vault aliases
    vaultexplorer decode --type T FILE          # Raw vault value → display value
    vaultexplorer encode --type T FILE          # Display value → raw vault value
    vaultexplorer fingerprint --type T FILE     # Md5 of the encoded value
    vaultexplorer plan DESIRED [--prior P] [--existing L]   # Print the WritePlan
    vaultexplorer toggle RECORD [--enable|--disable]       # Plan enable/disable
    vaultexplorer export RECORD [--out DIR]     # Save a fetched secret to a file
    vaultexplorer describe RECORD               # Summarize a certificate secret

FILE may be '-' for stdin. RECORD / DESIRED / P are JSON objects in the
vault record shape; L is a JSON list of records.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="vaultexplorer",
        description="Vault Explorer — typed secrets and safe writes for a remote vault.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log to stderr")

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("version", help="Show version")
    subparsers.add_parser("config", help="Show effective configuration")

    aliases_parser = subparsers.add_parser("aliases", help="List configured vault aliases")
    aliases_parser.add_argument("--file", type=str, help="Aliases JSON (default: from config)")

    for name, help_text in (
        ("decode", "Convert a raw vault value to its display value"),
        ("encode", "Convert a display value to the raw vault value"),
        ("fingerprint", "Print the Md5 fingerprint of the encoded value"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("--type", "-t", default="text/plain", help="Content type label")
        p.add_argument("file", help="Input file, or '-' for stdin")

    plan_parser = subparsers.add_parser("plan", help="Plan the vault writes for an edit")
    plan_parser.add_argument("desired", help="Desired secret (JSON, display value)")
    plan_parser.add_argument("--prior", help="Secret as currently stored (JSON record)")
    plan_parser.add_argument("--existing", help="Vault listing for duplicate check (JSON list)")
    plan_parser.add_argument("--kind", help="Secret kind whose name rule applies")
    plan_parser.add_argument("--alias", help="Vault alias that defines --kind")
    plan_parser.add_argument("--changed-by", help="Override the ChangedBy stamp")

    toggle_parser = subparsers.add_parser("toggle", help="Plan enabling/disabling a secret")
    toggle_parser.add_argument("prior", help="Secret as currently stored (JSON record)")
    toggle_state = toggle_parser.add_mutually_exclusive_group()
    toggle_state.add_argument("--enable", action="store_true", help="Force enabled")
    toggle_state.add_argument("--disable", action="store_true", help="Force disabled")
    toggle_parser.add_argument("--changed-by", help="Override the ChangedBy stamp")

    export_parser = subparsers.add_parser("export", help="Save a secret to a file")
    export_parser.add_argument("record", help="Fetched secret (JSON record)")
    export_parser.add_argument("--out", default=".", help="Output directory")
    export_parser.add_argument(
        "--clipboard", action="store_true", help="Print the clipboard value instead"
    )

    describe_parser = subparsers.add_parser("describe", help="Summarize a certificate secret")
    describe_parser.add_argument("record", help="Fetched secret (JSON record)")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    if args.version or args.command == "version":
        from vaultexplorer import __version__

        print(f"vaultexplorer {__version__}")
        return 0

    from pydantic import ValidationError

    from vaultexplorer.secrets import SecretError

    commands = {
        "config": _cmd_config,
        "aliases": _cmd_aliases,
        "decode": _cmd_codec,
        "encode": _cmd_codec,
        "fingerprint": _cmd_codec,
        "plan": _cmd_plan,
        "toggle": _cmd_toggle,
        "export": _cmd_export,
        "describe": _cmd_describe,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    try:
        return handler(args)
    except (SecretError, ValidationError, ValueError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _read_json(path: str):
    return json.loads(_read_input(path))


def _cmd_config(args: argparse.Namespace) -> int:
    from vaultexplorer import __version__
    from vaultexplorer.config import get_config

    cfg = get_config()
    print(f"Vault Explorer v{__version__}")
    print()
    print(f"  Workspace:     {cfg.workspace}")
    print(f"  Aliases file:  {cfg.aliases_file}")
    print(f"  Changed by:    {cfg.changed_by}")
    print(f"  Max value:     {cfg.max_value_bytes:,} bytes")
    return 0


def _cmd_aliases(args: argparse.Namespace) -> int:
    from vaultexplorer.config import get_config, load_vault_aliases

    aliases = load_vault_aliases(args.file or get_config().aliases_file)
    for alias in aliases:
        print(f"{alias.alias}: {', '.join(alias.vault_names) or '(no vaults)'}")
        for kind in alias.secret_kinds:
            print(f"  - {kind.alias}  {kind.name_regex}")
    return 0


def _cmd_codec(args: argparse.Namespace) -> int:
    from vaultexplorer.config import get_config
    from vaultexplorer.secrets import ContentType, decode, encode, fingerprint

    content_type = ContentType.from_label(args.type)
    text = _read_input(args.file)
    max_size = get_config().max_value_bytes

    if args.command == "decode":
        print(decode(content_type, text))
    elif args.command == "encode":
        print(encode(content_type, text, max_size=max_size))
    else:
        print(fingerprint(encode(content_type, text, max_size=max_size)))
    return 0


def _name_pattern(args: argparse.Namespace) -> str | None:
    if not args.kind:
        return None
    from vaultexplorer.config import get_config, load_vault_aliases

    for alias in load_vault_aliases(get_config().aliases_file):
        if args.alias and alias.alias != args.alias:
            continue
        kind = alias.secret_kind(args.kind)
        if kind is not None:
            return kind.name_regex
    raise ValueError(f"Secret kind {args.kind!r} not found in vault aliases")


def _cmd_plan(args: argparse.Namespace) -> int:
    from vaultexplorer.config import get_config
    from vaultexplorer.secrets import (
        DesiredSecret,
        SecretCatalog,
        SecretRecord,
        describe_collisions,
        plan,
    )

    desired = DesiredSecret.model_validate(_read_json(args.desired)).to_descriptor()
    prior = SecretRecord.model_validate(_read_json(args.prior)).to_prior() if args.prior else None

    write_plan = plan(
        prior,
        desired,
        changed_by=args.changed_by,
        name_pattern=_name_pattern(args),
        max_size=get_config().max_value_bytes,
    )

    output = write_plan.to_dict()
    if args.existing:
        catalog = SecretCatalog.from_records(
            SecretRecord.model_validate(r) for r in _read_json(args.existing)
        )
        collisions = catalog.find_collisions(desired, prior_name=prior.name if prior else None)
        output["duplicates"] = collisions
        if collisions:
            print(
                describe_collisions(desired.name, write_plan.fingerprint or "", collisions),
                file=sys.stderr,
            )
    print(json.dumps(output, indent=2))
    return 0


def _cmd_toggle(args: argparse.Namespace) -> int:
    from vaultexplorer.secrets import SecretRecord, plan_toggle

    record = SecretRecord.model_validate(_read_json(args.prior))
    enabled = True if args.enable else False if args.disable else None
    write_plan = plan_toggle(
        _listing_prior(record),
        enabled=enabled,
        changed_by=args.changed_by,
    )
    print(json.dumps(write_plan.to_dict(), indent=2))
    return 0


def _listing_prior(record):
    # Toggling works from a listing entry; the value is only used when present
    from vaultexplorer.secrets import PriorSecretState

    return PriorSecretState(
        name=record.name,
        raw_value=record.value or "",
        attributes=record.attributes,
        tags=dict(record.tags),
        content_type_label=record.content_type,
    )


def _cmd_export(args: argparse.Namespace) -> int:
    from vaultexplorer.secrets import SecretRecord, clipboard_value, export_bytes, file_name

    descriptor = SecretRecord.model_validate(_read_json(args.record)).to_descriptor()
    if args.clipboard:
        print(clipboard_value(descriptor.content_type, descriptor.value))
        return 0

    out = Path(args.out) / file_name(descriptor.name, descriptor.content_type)
    out.parent.mkdir(parents=True, exist_ok=True)
    contents = export_bytes(descriptor.content_type, descriptor.value)
    out.write_bytes(contents)
    logger.info("Wrote %d bytes to %s", len(contents), out)
    print(f"Saved {descriptor.name} to {out}")
    return 0


def _cmd_describe(args: argparse.Namespace) -> int:
    from vaultexplorer.secrets import CertificateValueObject, SecretRecord

    descriptor = SecretRecord.model_validate(_read_json(args.record)).to_descriptor()
    if not descriptor.content_type.is_certificate:
        print(f"Error: {descriptor.name} is not a certificate ({descriptor.content_type_label!r})")
        return 1
    summary = CertificateValueObject.parse(descriptor.value).describe()
    print(f"  Name:        {descriptor.name}")
    print(f"  Type:        {descriptor.content_type.display_name}")
    print(f"  Subject:     {summary.subject}")
    print(f"  Issuer:      {summary.issuer}")
    print(f"  Thumbprint:  {summary.thumbprint}")
    print(f"  Valid from:  {summary.not_before.isoformat()}")
    print(f"  Valid until: {summary.not_after.isoformat()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
