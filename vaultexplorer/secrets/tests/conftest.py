"""
Test fixtures for the secrets core.

- Real certificates generated with cryptography (no checked-in key material)
- An in-memory vault client for plan execution
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime

import pytest

from vaultexplorer.secrets import SecretAttributes, SecretRecord

CERT_NOT_BEFORE = datetime(2026, 1, 1, tzinfo=UTC)
CERT_NOT_AFTER = datetime(2027, 1, 1, tzinfo=UTC)
PFX_PASSWORD = "p@ss-w0rd"


@pytest.fixture(scope="session")
def pfx_password() -> str:
    return PFX_PASSWORD


@pytest.fixture(scope="session")
def certificate():
    """Self-signed EC certificate and its private key."""
    from cryptography import x509
    from cryptography.hazmat.primitives import hashes
    from cryptography.hazmat.primitives.asymmetric import ec
    from cryptography.x509.oid import NameOID

    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "vault-test")])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(CERT_NOT_BEFORE)
        .not_valid_after(CERT_NOT_AFTER)
        .sign(key, hashes.SHA256())
    )
    return cert, key


@pytest.fixture(scope="session")
def cer_bytes(certificate) -> bytes:
    from cryptography.hazmat.primitives import serialization

    cert, _key = certificate
    return cert.public_bytes(serialization.Encoding.DER)


@pytest.fixture(scope="session")
def pfx_bytes(certificate) -> bytes:
    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.serialization import pkcs12

    cert, key = certificate
    return pkcs12.serialize_key_and_certificates(
        b"vault-test",
        key,
        cert,
        None,
        serialization.BestAvailableEncryption(PFX_PASSWORD.encode()),
    )


class FakeVault:
    """In-memory stand-in for the vault client. ``fail_on`` = (kind, name) to raise on."""

    def __init__(self, records: list[SecretRecord] | None = None, fail_on=None):
        self.secrets: dict[str, SecretRecord] = {r.name: r for r in records or []}
        self.calls: list[tuple[str, str]] = []
        self.fail_on = fail_on

    def _check(self, kind: str, name: str) -> None:
        self.calls.append((kind, name))
        if self.fail_on == (kind, name):
            raise ConnectionError(f"vault unavailable during {kind} {name}")

    def set_secret(
        self,
        name: str,
        value: str,
        *,
        tags: Mapping[str, str],
        content_type: str,
        attributes: SecretAttributes,
    ) -> SecretRecord:
        self._check("set", name)
        record = SecretRecord(
            id=f"https://test.vault.local/secrets/{name}",
            name=name,
            value=value,
            content_type=content_type,
            tags=dict(tags),
            enabled=attributes.enabled,
            expires=attributes.expires,
            not_before=attributes.not_before,
        )
        self.secrets[name] = record
        return record

    def update_secret(
        self,
        name: str,
        *,
        tags: Mapping[str, str],
        content_type: str | None,
        attributes: SecretAttributes,
    ) -> SecretRecord:
        self._check("update", name)
        current = self.secrets[name]
        record = current.model_copy(
            update={
                "tags": dict(tags),
                "content_type": current.content_type if content_type is None else content_type,
                "enabled": current.enabled if attributes.enabled is None else attributes.enabled,
                "expires": attributes.expires or current.expires,
                "not_before": attributes.not_before or current.not_before,
            }
        )
        self.secrets[name] = record
        return record

    def delete_secret(self, name: str) -> None:
        self._check("delete", name)
        del self.secrets[name]


@pytest.fixture
def fake_vault() -> FakeVault:
    return FakeVault()


@pytest.fixture
def vault_factory():
    """Build a FakeVault with preloaded records and an optional failure point."""
    return FakeVault
