"""
Secret data models.

Wire-shaped records coming from (or typed in for) the vault are Pydantic
models; everything the core passes around internally is a frozen dataclass.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vaultexplorer.secrets.content import ContentType, MAX_VALUE_SIZE, decode, encode
from vaultexplorer.secrets.errors import InvalidTag
from vaultexplorer.secrets.fingerprint import (
    FINGERPRINT_TAG,
    RESERVED_TAGS,
    SecretDigest,
    find_collisions,
    fingerprint,
)


def _as_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes are taken to already be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ─── Attributes & tags ───────────────────────────────────────────────────


@dataclass(frozen=True)
class SecretAttributes:
    """Vault attributes of a secret. ``enabled=None`` means the vault default (enabled)."""

    enabled: bool | None = None
    expires: datetime | None = None
    not_before: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "expires", _as_utc(self.expires))
        object.__setattr__(self, "not_before", _as_utc(self.not_before))

    @property
    def is_enabled(self) -> bool:
        return True if self.enabled is None else self.enabled

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "expires": _isoformat(self.expires),
            "notBefore": _isoformat(self.not_before),
        }


@dataclass(frozen=True)
class TagItem:
    name: str
    value: str = ""


def _normalize_tags(tags: Mapping[str, str] | Iterable[TagItem] | None) -> tuple[TagItem, ...]:
    if tags is None:
        return ()
    items = (
        [TagItem(k, v) for k, v in tags.items()]
        if isinstance(tags, Mapping)
        else [t if isinstance(t, TagItem) else TagItem(*t) for t in tags]
    )
    seen: set[str] = set()
    for item in items:
        if not item.name or not item.name.strip():
            raise InvalidTag("Tag name must not be empty")
        if item.name in RESERVED_TAGS:
            raise InvalidTag(f"Tag {item.name!r} is reserved and set automatically")
        if item.name in seen:
            raise InvalidTag(f"Duplicate tag {item.name!r}")
        seen.add(item.name)
    return tuple(items)


def custom_tags(tags: Mapping[str, str] | None) -> dict[str, str]:
    """Drop the system-owned tags from a stored tag set."""
    return {k: v for k, v in (tags or {}).items() if k not in RESERVED_TAGS}


# ─── Desired / prior state ───────────────────────────────────────────────


@dataclass(frozen=True)
class SecretDescriptor:
    """The state a user (or automation) wants a secret to have after a write."""

    name: str
    value: str
    content_type: ContentType = ContentType.TEXT
    tags: tuple[TagItem, ...] = ()
    attributes: SecretAttributes = field(default_factory=SecretAttributes)
    # Label persisted for UNKNOWN content, so unrecognised types survive an edit
    custom_label: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", _normalize_tags(self.tags))

    @property
    def content_type_label(self) -> str:
        if self.content_type is ContentType.UNKNOWN and self.custom_label:
            return self.custom_label
        return self.content_type.value

    def raw_value(self, *, max_size: int | None = MAX_VALUE_SIZE) -> str:
        return encode(self.content_type, self.value, max_size=max_size)

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.raw_value(max_size=None))

    def tags_dict(self) -> dict[str, str]:
        return {t.name: t.value for t in self.tags}

    def collisions(
        self,
        existing: Iterable[SecretDigest | tuple[str, str]],
        *,
        prior_name: str | None = None,
    ) -> list[str]:
        """Other secrets in ``existing`` that already hold this exact raw value."""
        return find_collisions(self.name, self.fingerprint, existing, prior_name=prior_name)


@dataclass(frozen=True)
class PriorSecretState:
    """Snapshot of a secret as last fetched from the vault, taken right before an edit."""

    name: str
    raw_value: str
    attributes: SecretAttributes = field(default_factory=SecretAttributes)
    tags: Mapping[str, str] = field(default_factory=dict)
    content_type_label: str = ""

    @property
    def content_type(self) -> ContentType:
        return ContentType.from_label(self.content_type_label)


# ─── Wire records ────────────────────────────────────────────────────────


class SecretRecord(BaseModel):
    """A secret as returned by the vault client (value may be absent in listings)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = ""
    name: str
    value: str | None = None
    content_type: str = Field(default="", alias="contentType")
    tags: dict[str, str] = Field(default_factory=dict)
    enabled: bool | None = None
    expires: datetime | None = None
    not_before: datetime | None = Field(default=None, alias="notBefore")

    @field_validator("content_type", mode="before")
    @classmethod
    def _empty_label(cls, v: str | None) -> str:
        return v or ""

    @field_validator("tags", mode="before")
    @classmethod
    def _empty_tags(cls, v: dict | None) -> dict:
        return v or {}

    @property
    def attributes(self) -> SecretAttributes:
        return SecretAttributes(enabled=self.enabled, expires=self.expires, not_before=self.not_before)

    @property
    def is_enabled(self) -> bool:
        return self.attributes.is_enabled

    @property
    def md5(self) -> str | None:
        return self.tags.get(FINGERPRINT_TAG)

    def digest(self) -> SecretDigest | None:
        """Stored fingerprint, or one computed from the value when the tag is missing."""
        if self.md5:
            return SecretDigest(self.name, self.md5)
        if self.value is not None:
            return SecretDigest(self.name, fingerprint(self.value))
        return None

    def _require_value(self) -> str:
        if self.value is None:
            raise ValueError(f"Secret {self.name!r} was fetched without its value")
        return self.value

    def to_prior(self) -> PriorSecretState:
        return PriorSecretState(
            name=self.name,
            raw_value=self._require_value(),
            attributes=self.attributes,
            tags=dict(self.tags),
            content_type_label=self.content_type,
        )

    def to_descriptor(self) -> SecretDescriptor:
        """Editable form of this secret: decoded value, custom tags only.

        Raises:
            MalformedCertificatePayload: certificate content that does not parse.
        """
        content_type = ContentType.from_label(self.content_type)
        return SecretDescriptor(
            name=self.name,
            value=decode(content_type, self._require_value()),
            content_type=content_type,
            tags=custom_tags(self.tags),
            attributes=self.attributes,
            custom_label=self.content_type or None,
        )


class DesiredSecret(BaseModel):
    """Input shape for a new or edited secret, carrying the display value."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    value: str
    content_type: str = Field(default=ContentType.TEXT.value, alias="contentType")
    tags: dict[str, str] = Field(default_factory=dict)
    enabled: bool | None = None
    expires: datetime | None = None
    not_before: datetime | None = Field(default=None, alias="notBefore")

    def to_descriptor(self) -> SecretDescriptor:
        return SecretDescriptor(
            name=self.name,
            value=self.value,
            content_type=ContentType.from_label(self.content_type),
            tags=self.tags,
            attributes=SecretAttributes(
                enabled=self.enabled, expires=self.expires, not_before=self.not_before
            ),
            custom_label=self.content_type or None,
        )


# ─── Write plans ─────────────────────────────────────────────────────────


class OperationKind(StrEnum):
    SET = "set"
    UPDATE = "update"
    DELETE = "delete"


class PlanAction(StrEnum):
    CREATE = "create"
    RENAME = "rename"
    UPDATE = "update"
    UPDATE_ATTRIBUTES = "update_attributes"
    TOGGLE = "toggle"
    DELETE = "delete"


@dataclass(frozen=True)
class SetSecret:
    """Write a full secret version: value, tags, content type and attributes."""

    name: str
    raw_value: str
    tags: Mapping[str, str]
    content_type: str
    attributes: SecretAttributes
    kind: OperationKind = field(default=OperationKind.SET, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.kind.value,
            "name": self.name,
            "value": self.raw_value,
            "tags": dict(self.tags),
            "contentType": self.content_type,
            "attributes": self.attributes.to_dict(),
        }


@dataclass(frozen=True)
class UpdateSecret:
    """Update tags and attributes without rewriting the value.

    ``content_type=None`` and ``None`` attribute fields leave the stored values as they are.
    """

    name: str
    tags: Mapping[str, str]
    content_type: str | None
    attributes: SecretAttributes
    kind: OperationKind = field(default=OperationKind.UPDATE, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.kind.value,
            "name": self.name,
            "tags": dict(self.tags),
            "contentType": self.content_type,
            "attributes": self.attributes.to_dict(),
        }


@dataclass(frozen=True)
class DeleteSecret:
    name: str
    kind: OperationKind = field(default=OperationKind.DELETE, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.kind.value, "name": self.name}


WriteOperation = SetSecret | UpdateSecret | DeleteSecret


@dataclass(frozen=True)
class WritePlan:
    """Ordered vault mutations. Step 2 (if any) must only run after step 1 is acknowledged."""

    action: PlanAction
    operations: tuple[WriteOperation, ...]
    fingerprint: str | None = None

    def __iter__(self):
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    @property
    def primary(self) -> WriteOperation:
        return self.operations[0]

    @property
    def cleanup(self) -> WriteOperation | None:
        return self.operations[1] if len(self.operations) > 1 else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "fingerprint": self.fingerprint,
            "operations": [op.to_dict() for op in self.operations],
        }
