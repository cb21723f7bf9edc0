"""
Content fingerprints and duplicate detection.

A fingerprint is the MD5 of a secret's raw (already encoded) value. It is
stored on every secret as the ``Md5`` tag, so checking a candidate against the
whole vault only needs the listing, not every secret's value.

Two secrets with different content types but byte-identical raw values are
duplicates: this is a content check, not a type check.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from dataclasses import dataclass

FINGERPRINT_TAG = "Md5"
CHANGED_BY_TAG = "ChangedBy"
RESERVED_TAGS = frozenset({FINGERPRINT_TAG, CHANGED_BY_TAG})


@dataclass(frozen=True)
class SecretDigest:
    """One entry of a listing snapshot: a secret name and its stored fingerprint."""

    name: str
    digest: str


def fingerprint(raw: str | bytes) -> str:
    """128-bit content hash of a raw value, as 32 lowercase hex chars."""
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    return hashlib.md5(raw, usedforsecurity=False).hexdigest()


def find_collisions(
    name: str,
    digest: str,
    existing: Iterable[SecretDigest | tuple[str, str]],
    *,
    prior_name: str | None = None,
) -> list[str]:
    """Names of other secrets whose stored fingerprint equals ``digest``.

    The candidate's own name is never reported, nor is ``prior_name`` (the
    secret being renamed). Order follows ``existing``.
    """
    target = digest.lower()
    # Vault names are case-insensitive
    own = {name.casefold()}
    if prior_name:
        own.add(prior_name.casefold())

    matches: list[str] = []
    for entry in existing:
        other_name, other_digest = (
            (entry.name, entry.digest) if isinstance(entry, SecretDigest) else entry
        )
        if other_name.casefold() in own or not other_digest:
            continue
        if other_digest.lower() == target:
            matches.append(other_name)
    return matches


def describe_collisions(name: str, digest: str, names: list[str]) -> str:
    """Confirmation text shown before writing duplicated secret material."""
    return (
        f"There are {len(names)} other secret(s) in the vault which have the same "
        f"Md5: {digest}.\n"
        f"Here are the name(s) of the other secrets:\n{', '.join(names)}\n"
        f"Are you sure you want to add or update secret {name} and have a "
        f"duplication of secrets?"
    )
