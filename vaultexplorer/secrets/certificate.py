"""
Certificate payload — binary certificate material plus an optional password,
stored in the vault as a single JSON string.

Raw form (what the vault stores):
    {"data":"MIIKYQIBAzCC...","password":"p@ss"}

Display form is the same object, indented. ``data`` is always base64 in both.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime

from vaultexplorer.secrets.errors import InvalidBase64, MalformedCertificatePayload


@dataclass(frozen=True)
class CertificateSummary:
    """Human-relevant facts about a certificate, for list and property views."""

    subject: str
    issuer: str
    thumbprint: str  # SHA-1, uppercase hex
    not_before: datetime
    not_after: datetime


@dataclass(frozen=True)
class CertificateValueObject:
    data: bytes
    password: str = ""

    def __post_init__(self) -> None:
        # None and "" mean the same thing: no password
        if self.password is None:
            object.__setattr__(self, "password", "")

    @classmethod
    def parse(cls, raw: str) -> CertificateValueObject:
        """Parse a serialized certificate payload.

        Raises:
            MalformedCertificatePayload: raw is not a JSON object with a string ``data`` field.
            InvalidBase64: ``data`` is not valid base64.
        """
        try:
            obj = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedCertificatePayload(f"Certificate payload is not valid JSON: {e}") from e
        if not isinstance(obj, dict):
            raise MalformedCertificatePayload("Certificate payload must be a JSON object")

        data = obj.get("data")
        if not isinstance(data, str):
            raise MalformedCertificatePayload("Certificate payload is missing 'data'")
        password = obj.get("password")
        if password is not None and not isinstance(password, str):
            raise MalformedCertificatePayload("Certificate 'password' must be a string")

        try:
            decoded = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidBase64(f"Certificate 'data' is not valid base64: {e}") from e
        return cls(data=decoded, password=password or "")

    def serialize(self, *, indent: int | None = None) -> str:
        """Deterministic JSON form. Compact unless ``indent`` is given."""
        obj = {
            "data": base64.b64encode(self.data).decode("ascii"),
            "password": self.password,
        }
        if indent is None:
            return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
        return json.dumps(obj, indent=indent, ensure_ascii=False)

    def without_password(self) -> CertificateValueObject:
        return CertificateValueObject(data=self.data)

    def describe(self) -> CertificateSummary:
        """Load the certificate and summarize it.

        Tries X.509 (DER, then PEM) first, then PKCS#12 unlocked with the
        stored password.

        Raises:
            MalformedCertificatePayload: the bytes are not a loadable certificate.
        """
        from cryptography import x509
        from cryptography.hazmat.primitives import hashes
        from cryptography.hazmat.primitives.serialization import pkcs12

        cert = None
        for loader in (x509.load_der_x509_certificate, x509.load_pem_x509_certificate):
            try:
                cert = loader(self.data)
                break
            except ValueError:
                continue

        if cert is None:
            password = self.password.encode("utf-8") if self.password else None
            try:
                _key, cert, _extra = pkcs12.load_key_and_certificates(self.data, password)
            except ValueError as e:
                raise MalformedCertificatePayload(f"Cannot load certificate: {e}") from e
            if cert is None:
                raise MalformedCertificatePayload("PKCS#12 bundle contains no certificate")

        return CertificateSummary(
            subject=cert.subject.rfc4514_string(),
            issuer=cert.issuer.rfc4514_string(),
            thumbprint=cert.fingerprint(hashes.SHA1()).hex().upper(),
            not_before=cert.not_valid_before_utc,
            not_after=cert.not_valid_after_utc,
        )
