"""
Secret reconciler — decides what a create/edit/toggle turns into at the vault.

    plan(None, desired)                 → create:  [set]
    plan(prior, desired), name changed  → rename:  [set new, delete old]
    plan(prior, desired), same content  → update_attributes: [update]
    plan(prior, desired), new content   → update:  [set]
    plan_toggle(prior)                  → toggle:  [update enabled only]

Planning is pure: nothing here talks to the vault. Every write stamps the
``Md5`` fingerprint and ``ChangedBy`` tags.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from vaultexplorer.secrets.content import decode, encode
from vaultexplorer.secrets.errors import (
    InvalidName,
    MalformedCertificatePayload,
    UndecodableProvenanceValue,
)
from vaultexplorer.secrets.fingerprint import CHANGED_BY_TAG, FINGERPRINT_TAG, fingerprint
from vaultexplorer.secrets.models import (
    DeleteSecret,
    PlanAction,
    PriorSecretState,
    SecretAttributes,
    SecretDescriptor,
    SetSecret,
    UpdateSecret,
    WritePlan,
)

# Vault secret names: 1-127 ASCII letters, digits and dashes
NAME_PATTERN = re.compile(r"^[0-9a-zA-Z-]{1,127}$")

# Stands for "use VAULTEXPLORER_MAX_VALUE_BYTES"
_CONFIGURED: Any = object()


def validate_name(name: str, pattern: str | re.Pattern[str] | None = None) -> str:
    """Check a secret name against the vault naming scheme and an optional narrower pattern.

    Raises:
        InvalidName: empty, illegal characters, too long, or not matching ``pattern``.
    """
    if not name:
        raise InvalidName(name, "name must not be empty")
    if not NAME_PATTERN.fullmatch(name):
        raise InvalidName(name, "only 1-127 letters, digits and dashes are allowed")
    if pattern is not None and not re.fullmatch(pattern, name):
        raise InvalidName(name, f"name must match {getattr(pattern, 'pattern', pattern)}")
    return name


def stamp_changed_by(tags: Mapping[str, str], changed_by: str | None = None) -> dict[str, str]:
    """Copy of ``tags`` with the ChangedBy stamp set."""
    if changed_by is None:
        from vaultexplorer.config import get_config

        changed_by = get_config().changed_by
    result = dict(tags)
    result[CHANGED_BY_TAG] = changed_by
    return result


def _content_unchanged(prior: PriorSecretState, desired: SecretDescriptor, raw: str) -> bool:
    """Same name: does the desired raw value carry the prior's content?

    Byte-equal raw values always do. Otherwise, when the content type is the
    same, the prior value is put through the codec so a representational
    difference (e.g. JSON whitespace) is not treated as new content.
    """
    if raw == prior.raw_value:
        return True
    if prior.content_type is not desired.content_type:
        return False
    try:
        ct = desired.content_type
        canonical = encode(ct, decode(ct, prior.raw_value), max_size=None)
    except MalformedCertificatePayload as e:
        raise UndecodableProvenanceValue(prior.name, e) from e
    return canonical == raw


def plan(
    prior: PriorSecretState | None,
    desired: SecretDescriptor,
    *,
    changed_by: str | None = None,
    name_pattern: str | re.Pattern[str] | None = None,
    max_size: int | None = _CONFIGURED,
) -> WritePlan:
    """Classify a pending write against the secret's prior state.

    Raises:
        InvalidName: ``desired.name`` violates the naming rules.
        MalformedCertificatePayload: the desired certificate value does not parse.
        OversizedValue: the encoded value exceeds ``max_size`` (by default the
            configured ``max_value_bytes``; ``None`` disables the check).
        UndecodableProvenanceValue: a content comparison is needed but the prior value is corrupt.
    """
    validate_name(desired.name, name_pattern)
    if max_size is _CONFIGURED:
        from vaultexplorer.config import get_config

        max_size = get_config().max_value_bytes
    raw = desired.raw_value(max_size=max_size)
    digest = fingerprint(raw)
    tags = desired.tags_dict()

    def _set() -> SetSecret:
        return SetSecret(
            name=desired.name,
            raw_value=raw,
            tags=stamp_changed_by({**tags, FINGERPRINT_TAG: digest}, changed_by),
            content_type=desired.content_type_label,
            attributes=desired.attributes,
        )

    if prior is None:
        return WritePlan(PlanAction.CREATE, (_set(),), digest)

    if prior.name != desired.name:
        return WritePlan(
            PlanAction.RENAME,
            (_set(), DeleteSecret(prior.name)),
            digest,
        )

    if _content_unchanged(prior, desired, raw):
        # Value stays as stored, so the stored value's fingerprint stays too
        stored_digest = fingerprint(prior.raw_value)
        update = UpdateSecret(
            name=desired.name,
            tags=stamp_changed_by({**tags, FINGERPRINT_TAG: stored_digest}, changed_by),
            content_type=desired.content_type_label,
            attributes=desired.attributes,
        )
        return WritePlan(PlanAction.UPDATE_ATTRIBUTES, (update,), stored_digest)

    return WritePlan(PlanAction.UPDATE, (_set(),), digest)


def plan_toggle(
    prior: PriorSecretState,
    *,
    enabled: bool | None = None,
    changed_by: str | None = None,
) -> WritePlan:
    """Enable or disable a secret, touching nothing but the enabled attribute.

    ``enabled=None`` flips the current state (an unset state counts as enabled).
    A prior missing its ``Md5`` tag gets one when its raw value is known.
    """
    target = (not prior.attributes.is_enabled) if enabled is None else enabled
    tags = dict(prior.tags)
    if not tags.get(FINGERPRINT_TAG) and prior.raw_value:
        tags[FINGERPRINT_TAG] = fingerprint(prior.raw_value)
    update = UpdateSecret(
        name=prior.name,
        tags=stamp_changed_by(tags, changed_by),
        content_type=None,
        attributes=SecretAttributes(enabled=target),
    )
    return WritePlan(PlanAction.TOGGLE, (update,), tags.get(FINGERPRINT_TAG))


def plan_delete(name: str) -> WritePlan:
    return WritePlan(PlanAction.DELETE, (DeleteSecret(name),))
