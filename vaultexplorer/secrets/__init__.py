"""
Vault Explorer secrets core — content codec, duplicate detection, write planning.

Public API:
    decode(ct, raw) / encode(ct, display)  → convert between vault and display values
    fingerprint(raw)                       → Md5 digest stored as a tag on every write
    plan(prior, desired)                   → WritePlan (create / rename / update)
    plan_toggle(prior)                     → WritePlan enabling or disabling a secret
    execute_plan(client, plan)             → apply a plan through a vault client
"""

from __future__ import annotations

from vaultexplorer.secrets.catalog import SecretCatalog
from vaultexplorer.secrets.certificate import CertificateSummary, CertificateValueObject
from vaultexplorer.secrets.content import (
    MAX_VALUE_SIZE,
    ContentType,
    clipboard_value,
    content_type_for_file,
    decode,
    encode,
    export_bytes,
    extension,
    file_name,
    from_file_bytes,
    is_certificate,
)
from vaultexplorer.secrets.errors import (
    InvalidBase64,
    InvalidName,
    InvalidTag,
    MalformedCertificatePayload,
    OversizedValue,
    PartialPlanFailure,
    SecretError,
    UndecodableProvenanceValue,
)
from vaultexplorer.secrets.executor import PlanResult, VaultClient, execute_plan
from vaultexplorer.secrets.fingerprint import (
    CHANGED_BY_TAG,
    FINGERPRINT_TAG,
    SecretDigest,
    describe_collisions,
    find_collisions,
    fingerprint,
)
from vaultexplorer.secrets.models import (
    DeleteSecret,
    DesiredSecret,
    PlanAction,
    PriorSecretState,
    SecretAttributes,
    SecretDescriptor,
    SecretRecord,
    SetSecret,
    TagItem,
    UpdateSecret,
    WritePlan,
)
from vaultexplorer.secrets.reconciler import plan, plan_delete, plan_toggle, validate_name

__all__ = [
    "CHANGED_BY_TAG",
    "FINGERPRINT_TAG",
    "MAX_VALUE_SIZE",
    "CertificateSummary",
    "CertificateValueObject",
    "ContentType",
    "DeleteSecret",
    "DesiredSecret",
    "InvalidBase64",
    "InvalidName",
    "InvalidTag",
    "MalformedCertificatePayload",
    "OversizedValue",
    "PartialPlanFailure",
    "PlanAction",
    "PlanResult",
    "PriorSecretState",
    "SecretAttributes",
    "SecretCatalog",
    "SecretDescriptor",
    "SecretDigest",
    "SecretError",
    "SecretRecord",
    "SetSecret",
    "TagItem",
    "UndecodableProvenanceValue",
    "UpdateSecret",
    "VaultClient",
    "WritePlan",
    "clipboard_value",
    "content_type_for_file",
    "decode",
    "describe_collisions",
    "encode",
    "execute_plan",
    "export_bytes",
    "extension",
    "file_name",
    "find_collisions",
    "fingerprint",
    "from_file_bytes",
    "is_certificate",
    "plan",
    "plan_delete",
    "plan_toggle",
    "validate_name",
]
