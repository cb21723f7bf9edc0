"""
Content types — how a secret's raw vault value maps to what a person sees.

Every content type owns a row in a behaviour table: a decode/encode pair, a file
extension, a display name and whether it carries a certificate. The enum value
is the label persisted alongside the secret so a later read can pick the codec.

Usage:
    from vaultexplorer.secrets.content import ContentType, decode, encode

    ct = ContentType.from_label(record.content_type)
    display = decode(ct, record.value)
    raw = encode(ct, display)
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import PurePath

from vaultexplorer.secrets.certificate import CertificateValueObject
from vaultexplorer.secrets.errors import OversizedValue

MAX_VALUE_SIZE = 1024 * 1024  # bytes, UTF-8 encoded raw value


class ContentType(StrEnum):
    UNKNOWN = ""
    TEXT = "text/plain"
    CSV = "text/csv"
    TSV = "text/tab-separated-values"
    XML = "application/xml"
    JSON = "application/json"
    CONFIG = "text/x-config"
    PKCS12 = "application/x-pkcs12"
    CER = "application/pkix-cert"

    @classmethod
    def from_label(cls, label: str | None) -> ContentType:
        """Match a persisted label. Unrecognised labels decode as opaque text."""
        if not label:
            return cls.UNKNOWN
        normalized = label.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return cls.UNKNOWN

    @property
    def display_name(self) -> str:
        return _BEHAVIOURS[self].display_name

    @property
    def extension(self) -> str:
        return _BEHAVIOURS[self].extension

    @property
    def is_certificate(self) -> bool:
        return _BEHAVIOURS[self].certificate


# ─── Transforms ──────────────────────────────────────────────────────────


def _identity(value: str) -> str:
    return value


def _json_dumps(obj, **kwargs) -> str:
    text = json.dumps(obj, ensure_ascii=False, **kwargs)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates only survive as \u escapes
        return json.dumps(obj, ensure_ascii=True, **kwargs)
    return text


def _json_pretty(raw: str) -> str:
    try:
        obj = json.loads(raw)
    except ValueError:
        return raw
    return _json_dumps(obj, indent=2)


def _json_compact(display: str) -> str:
    try:
        obj = json.loads(display)
    except ValueError:
        return display
    return _json_dumps(obj, separators=(",", ":"))


def _certificate_display(raw: str) -> str:
    return CertificateValueObject.parse(raw).serialize(indent=2)


def _certificate_raw(display: str) -> str:
    return CertificateValueObject.parse(display).serialize()


def _cer_display(raw: str) -> str:
    return CertificateValueObject.parse(raw).without_password().serialize(indent=2)


def _cer_raw(display: str) -> str:
    return CertificateValueObject.parse(display).without_password().serialize()


@dataclass(frozen=True)
class _Behaviour:
    display_name: str
    extension: str
    decode: Callable[[str], str]
    encode: Callable[[str], str]
    certificate: bool = False


_BEHAVIOURS: dict[ContentType, _Behaviour] = {
    ContentType.UNKNOWN: _Behaviour("Unknown", ".txt", _identity, _identity),
    ContentType.TEXT: _Behaviour("Text", ".txt", _identity, _identity),
    ContentType.CSV: _Behaviour("Comma separated values", ".csv", _identity, _identity),
    ContentType.TSV: _Behaviour("Tab separated values", ".tsv", _identity, _identity),
    ContentType.XML: _Behaviour("XML", ".xml", _identity, _identity),
    ContentType.JSON: _Behaviour("JSON", ".json", _json_pretty, _json_compact),
    ContentType.CONFIG: _Behaviour("Configuration file", ".config", _identity, _identity),
    ContentType.PKCS12: _Behaviour(
        "Certificate (PFX)", ".pfx", _certificate_display, _certificate_raw, certificate=True
    ),
    ContentType.CER: _Behaviour(
        "Certificate (CER)", ".cer", _cer_display, _cer_raw, certificate=True
    ),
}

_EXTENSIONS: dict[str, ContentType] = {
    ".pfx": ContentType.PKCS12,
    ".p12": ContentType.PKCS12,
    ".cer": ContentType.CER,
    ".crt": ContentType.CER,
    ".json": ContentType.JSON,
    ".xml": ContentType.XML,
    ".csv": ContentType.CSV,
    ".tsv": ContentType.TSV,
    ".config": ContentType.CONFIG,
}


# ─── Codec ───────────────────────────────────────────────────────────────


def decode(content_type: ContentType, raw: str) -> str:
    """Raw vault value → display value.

    Raises:
        MalformedCertificatePayload: certificate content that does not parse.
    """
    return _BEHAVIOURS[content_type].decode(raw)


def encode(
    content_type: ContentType, display: str, *, max_size: int | None = MAX_VALUE_SIZE
) -> str:
    """Display value → raw vault value.

    Raises:
        MalformedCertificatePayload: certificate content that does not parse.
        OversizedValue: the raw value is larger than ``max_size`` bytes.
    """
    raw = _BEHAVIOURS[content_type].encode(display)
    if max_size is not None:
        size = len(raw.encode("utf-8"))
        if size > max_size:
            raise OversizedValue(size, max_size)
    return raw


def extension(content_type: ContentType) -> str:
    return _BEHAVIOURS[content_type].extension


def is_certificate(content_type: ContentType) -> bool:
    return _BEHAVIOURS[content_type].certificate


def file_name(name: str, content_type: ContentType) -> str:
    """Name used when a secret is saved to (or dragged onto) the file system."""
    return name + extension(content_type)


def clipboard_value(content_type: ContentType, display: str) -> str:
    """What goes on the clipboard: a certificate's password, never its binary payload."""
    if is_certificate(content_type):
        return CertificateValueObject.parse(display).password
    return display


def export_bytes(content_type: ContentType, display: str) -> bytes:
    """File contents for saving a secret to disk."""
    if is_certificate(content_type):
        return CertificateValueObject.parse(display).data
    return display.encode("utf-8")


# ─── File import ─────────────────────────────────────────────────────────


def content_type_for_file(path: str | PurePath) -> ContentType:
    """Guess a content type from a file name's extension."""
    return _EXTENSIONS.get(PurePath(path).suffix.lower(), ContentType.TEXT)


def from_file_bytes(
    content_type: ContentType,
    data: bytes,
    password: str | None = None,
    *,
    max_size: int | None = MAX_VALUE_SIZE,
) -> str:
    """Build a display value from file contents loaded from disk.

    Raises:
        OversizedValue: the file is larger than ``max_size`` bytes.
        UnicodeDecodeError: a text content type whose bytes are not UTF-8.
    """
    if max_size is not None and len(data) > max_size:
        raise OversizedValue(len(data), max_size)
    if is_certificate(content_type):
        if content_type is ContentType.CER:
            password = None
        return CertificateValueObject(data=data, password=password or "").serialize(indent=2)
    return data.decode("utf-8")
