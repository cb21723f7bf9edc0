"""
Secret catalog — an immutable snapshot of a vault listing.

The listing is what duplicate detection scans and what searches filter. After a
plan is executed, ``apply`` returns a new snapshot; the old one is never changed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from vaultexplorer.secrets.executor import PlanResult
from vaultexplorer.secrets.fingerprint import SecretDigest
from vaultexplorer.secrets.models import SecretDescriptor, SecretRecord


@dataclass(frozen=True)
class SecretCatalog:
    records: tuple[SecretRecord, ...] = ()

    @classmethod
    def from_records(cls, records: Iterable[SecretRecord]) -> SecretCatalog:
        return cls(tuple(sorted(records, key=lambda r: r.name.lower())))

    def __len__(self) -> int:
        return len(self.records)

    def get(self, name: str) -> SecretRecord | None:
        return next((r for r in self.records if r.name == name), None)

    def contains(self, name: str) -> bool:
        return self.get(name) is not None

    def digests(self) -> list[SecretDigest]:
        """Fingerprints of every listed secret that has one."""
        return [d for d in (r.digest() for r in self.records) if d is not None]

    def find_collisions(
        self, desired: SecretDescriptor, *, prior_name: str | None = None
    ) -> list[str]:
        return desired.collisions(self.digests(), prior_name=prior_name)

    def search(self, text: str) -> list[SecretRecord]:
        """Secrets whose name, content type, or any tag name/value contains ``text``."""
        if not text:
            return list(self.records)
        needle = text.lower()

        def _matches(record: SecretRecord) -> bool:
            haystack = [record.name, record.content_type]
            for key, value in record.tags.items():
                haystack.extend((key, value))
            return any(needle in (s or "").lower() for s in haystack)

        return [r for r in self.records if _matches(r)]

    def summary(self, text: str = "") -> str:
        total = len(self.records)
        shown = len(self.search(text))
        if shown == total:
            return f"{total} secret(s)"
        return f"{shown} out of {total} secret(s)"

    def apply(self, result: PlanResult) -> SecretCatalog:
        """Snapshot after ``result``'s plan: deleted names gone, written record replaced."""
        removed = set(result.deleted)
        if result.record is not None:
            removed.add(result.record.name)
        kept = [r for r in self.records if r.name not in removed]
        if result.record is not None:
            kept.append(result.record)
        return SecretCatalog.from_records(kept)
