"""Exceptions raised by the secrets core."""

from __future__ import annotations


class SecretError(Exception):
    """Base class for every failure raised by vaultexplorer.secrets."""


class MalformedCertificatePayload(SecretError):
    pass


class InvalidBase64(MalformedCertificatePayload):
    pass


class InvalidName(SecretError):
    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Invalid secret name {name!r}: {reason}")
        self.name = name
        self.reason = reason


class InvalidTag(SecretError):
    pass


class UndecodableProvenanceValue(SecretError):
    def __init__(self, name: str, cause: Exception) -> None:
        super().__init__(
            f"Stored value of secret {name!r} cannot be decoded, "
            f"unable to compare content: {cause}"
        )
        self.name = name


class OversizedValue(SecretError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"Secret value is {size:,} bytes. "
            f"Maximum size allowed for a secret value is {limit:,} bytes."
        )
        self.size = size
        self.limit = limit


class PartialPlanFailure(SecretError):
    """A multi-step plan failed after at least one step was applied.

    ``completed`` lists the operations the vault acknowledged, ``failed`` is the
    operation that raised and ``record`` is the secret written by the first step.
    """

    def __init__(self, completed, failed, record, cause: Exception) -> None:
        super().__init__(
            f"{failed.kind} of {failed.name!r} failed after "
            f"{len(completed)} step(s) succeeded: {cause}"
        )
        self.completed = completed
        self.failed = failed
        self.record = record
        self.cause = cause
